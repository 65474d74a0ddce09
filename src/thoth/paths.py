"""Path helpers for Thoth configuration files and project layout."""

import os
from pathlib import Path

from platformdirs import user_config_dir

THOTH_APP_NAME = "thoth"
USER_CONFIG_FILENAME = "config.json"
PROJECT_CONFIG_FILENAME = ".thoth.json"
CONFIG_ENV_VAR = "THOTH_CONFIG"

DATA_RAW_DIR = Path("data") / "raw"
DATA_PROCESSED_DIR = Path("data") / "processed"
SCRIPTS_DIR = Path("scripts")
REPORTS_DIR = Path("reports")
DOCKER_DIR = Path("docker")
REPORT_TEMPLATES_DIR = REPORTS_DIR / "templates"

PROJECT_DIRS: tuple[Path, ...] = (
    DATA_RAW_DIR,
    DATA_PROCESSED_DIR,
    SCRIPTS_DIR,
    REPORTS_DIR,
    DOCKER_DIR,
)

DEFAULT_DECISION_TREE = Path("decisions") / "decision_tree.yaml"


def thoth_config_dir() -> Path:
    """Return the per-user Thoth configuration directory.

    Returns:
        Path to the user config directory for Thoth.

    Example:
        >>> isinstance(thoth_config_dir(), Path)
        True
    """
    return Path(user_config_dir(THOTH_APP_NAME))


def user_config_path() -> Path:
    """Return the user config file, honoring ``THOTH_CONFIG``.

    Example:
        >>> user_config_path().suffix
        '.json'
    """
    override = os.environ.get(CONFIG_ENV_VAR, "").strip()
    if override:
        return Path(override).expanduser()
    return thoth_config_dir() / USER_CONFIG_FILENAME


def project_config_path(project_dir: Path) -> Path:
    """Return the project-level config file path.

    Example:
        >>> project_config_path(Path("/tmp/analysis")).name
        '.thoth.json'
    """
    return project_dir / PROJECT_CONFIG_FILENAME


def ensure_dir(path: Path) -> None:
    """Create a directory (and parents) when missing."""
    path.mkdir(parents=True, exist_ok=True)


def gitkeep_paths(project_dir: Path) -> tuple[Path, Path]:
    return (
        project_dir / DATA_RAW_DIR / ".gitkeep",
        project_dir / DATA_PROCESSED_DIR / ".gitkeep",
    )
