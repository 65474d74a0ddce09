"""Template loading and rendering helpers."""

from importlib import resources

TEMPLATE_NAMES: tuple[str, ...] = (
    "gitignore",
    "dvcignore",
    "Dockerfile.tmpl",
    "docker-compose.yml",
    "README.md.tmpl",
    "requirements.txt",
    "report.qmd",
    "template.yml.tmpl",
    "custom.css.tmpl",
)


class TemplateReadError(RuntimeError):
    """Raised when a bundled template cannot be read."""

    def __init__(self, *, template: str, detail: str) -> None:
        self.template = template
        super().__init__(f"template_read_failed[{template}]: {detail}")


def read_template(*parts: str) -> str:
    """Read a bundled template file from the package.

    Args:
        *parts: Path components under ``thoth/templates``.

    Returns:
        Template text.

    Example:
        >>> "data/raw" in read_template("gitignore")
        True
    """
    name = "/".join(parts)
    try:
        return (
            resources.files("thoth")
            .joinpath("templates")
            .joinpath(*parts)
            .read_text(encoding="utf-8")
        )
    except (FileNotFoundError, OSError) as exc:
        raise TemplateReadError(template=name, detail=str(exc)) from exc


def render_template(template: str, /, **values: str) -> str:
    """Render a bundled ``str.format`` template.

    Example:
        >>> render_template("README.md.tmpl", project_name="churn").splitlines()[0]
        '# churn'
    """
    return read_template(template).format(**values)
