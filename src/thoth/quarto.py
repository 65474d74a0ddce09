"""Custom Quarto report templates."""

from __future__ import annotations

import os
import re
from pathlib import Path

import yaml

from . import log, paths, templates
from .errors import ValidationFailedError

_TEMPLATE_NAME_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]*$")
_COLOR_RE = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
_FRONT_MATTER_RE = re.compile(
    r"\A---[ \t]*\n(.*?)^---[ \t]*$\n?", re.DOTALL | re.MULTILINE
)

DEFAULT_PRIMARY_COLOR = "#C471ED"
DEFAULT_FONT = "Source Sans Pro"
DEFAULT_THEME = "cosmo"


def _validate(name: str, primary_color: str) -> None:
    if not _TEMPLATE_NAME_RE.match(name):
        raise ValidationFailedError(
            f"invalid template name: {name!r}",
            recovery_hint="use letters, digits, dashes, and underscores",
        )
    if not _COLOR_RE.match(primary_color):
        raise ValidationFailedError(
            f"invalid color: {primary_color!r}", recovery_hint="use a hex color like #1f77b4"
        )


def create_template_yaml(
    *,
    primary_color: str = DEFAULT_PRIMARY_COLOR,
    font: str = DEFAULT_FONT,
    theme: str = DEFAULT_THEME,
) -> str:
    """Render the template's Quarto format options.

    Example:
        >>> "theme: flatly" in create_template_yaml(theme="flatly")
        True
    """
    return templates.render_template(
        "template.yml.tmpl", primary_color=primary_color, font=font, theme=theme
    )


def create_custom_css(
    name: str,
    *,
    primary_color: str = DEFAULT_PRIMARY_COLOR,
    font: str = DEFAULT_FONT,
) -> str:
    """Render the template stylesheet.

    Example:
        >>> "--thoth-primary: #1f77b4;" in create_custom_css("corporate", primary_color="#1f77b4")
        True
    """
    return templates.render_template(
        "custom.css.tmpl", name=name, primary_color=primary_color, font=font
    )


def template_dir(project_dir: Path, name: str) -> Path:
    return project_dir / paths.REPORT_TEMPLATES_DIR / name


def create_quarto_template(
    name: str,
    *,
    project_dir: Path | None = None,
    primary_color: str = DEFAULT_PRIMARY_COLOR,
    font: str = DEFAULT_FONT,
    theme: str = DEFAULT_THEME,
    overwrite: bool = False,
) -> Path:
    """Write ``reports/templates/<name>/`` with ``_template.yml`` and ``custom.css``.

    Returns:
        The template directory.
    """
    _validate(name, primary_color)
    target = template_dir(project_dir or Path.cwd(), name)
    if target.exists() and not overwrite:
        raise ValidationFailedError(
            f"template already exists: {target}",
            recovery_hint="pass --overwrite to replace it",
        )
    paths.ensure_dir(target)
    (target / "_template.yml").write_text(
        create_template_yaml(primary_color=primary_color, font=font, theme=theme),
        encoding="utf-8",
    )
    (target / "custom.css").write_text(
        create_custom_css(name, primary_color=primary_color, font=font),
        encoding="utf-8",
    )
    log.success(f"Created Quarto template {name} at {target}")
    return target


def split_front_matter(text: str) -> tuple[dict, str]:
    """Split a Quarto document into its YAML header and body.

    Example:
        >>> split_front_matter("---\\ntitle: x\\n---\\nBody\\n")
        ({'title': 'x'}, 'Body\\n')
    """
    match = _FRONT_MATTER_RE.match(text)
    if match is None:
        return {}, text
    header = _load_mapping(match.group(1), "report front matter")
    return header, text[match.end() :]


def _load_mapping(text: str, what: str) -> dict:
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise ValidationFailedError(
            f"{what} is not valid YAML: {exc}",
            recovery_hint="fix the YAML and try again",
        ) from exc
    if not isinstance(data, dict):
        raise ValidationFailedError(f"{what} must be a YAML mapping")
    return data


def apply_template_to_report(
    report: Path,
    template: str,
    *,
    project_dir: Path | None = None,
) -> Path:
    """Point a report's ``format.html`` options at a custom template.

    The template's format options are merged over the report's own, and the
    stylesheet path is rewritten relative to the report.
    """
    if not report.exists():
        raise ValidationFailedError(f"report not found: {report}")
    source_dir = template_dir(project_dir or Path.cwd(), template)
    options_path = source_dir / "_template.yml"
    if not options_path.exists():
        raise ValidationFailedError(
            f"template not found: {template}",
            recovery_hint="create it with 'thoth quarto template'",
        )
    options = _load_mapping(
        options_path.read_text(encoding="utf-8"), f"template {template} options"
    )

    header, body = split_front_matter(report.read_text(encoding="utf-8"))
    template_html = dict(options.get("format", {}).get("html", {}))
    css_path = Path(
        _relative_to(source_dir / "custom.css", report.resolve().parent)
    ).as_posix()
    template_html["css"] = css_path

    formats = header.get("format")
    if not isinstance(formats, dict):
        formats = {}
    report_html = formats.get("html")
    if not isinstance(report_html, dict):
        report_html = {}
    formats["html"] = {**report_html, **template_html}
    header["format"] = formats
    for key, value in options.items():
        if key != "format":
            header[key] = value

    rendered_header = yaml.safe_dump(header, sort_keys=False, allow_unicode=True)
    report.write_text(f"---\n{rendered_header}---\n{body}", encoding="utf-8")
    log.success(f"Applied template {template} to {report}")
    return report


def _relative_to(target: Path, start: Path) -> str:
    return os.path.relpath(target.resolve(), start)
