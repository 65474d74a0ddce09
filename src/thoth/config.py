"""Layered configuration.

Settings resolve in increasing precedence: built-in defaults, the user
``config.json`` (or the file named by ``THOTH_CONFIG``), then ``.thoth.json``
in the project directory. Each file may hold any subset of the ``tools``,
``project``, and ``decisions`` sections.
"""

import datetime as dt
import json
from pathlib import Path

from pydantic import ValidationError

from . import log, paths
from .errors import ValidationFailedError
from .models import ThothConfig


def utc_now() -> str:
    """UTC timestamp with second precision and a ``Z`` suffix.

    Example:
        >>> utc_now().endswith("Z")
        True
    """
    now = dt.datetime.now(tz=dt.timezone.utc).replace(microsecond=0)
    return now.isoformat().replace("+00:00", "Z")


def load_json(path: Path) -> dict | None:
    """Read a JSON object, or return ``None`` when ``path`` is absent.

    Raises:
        ValidationFailedError: The file is not valid JSON or not an object.
    """
    if not path.exists():
        return None
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValidationFailedError(
            f"invalid JSON in {path}: {exc}",
            recovery_hint="fix or remove the config file",
        ) from exc
    if not isinstance(payload, dict):
        raise ValidationFailedError(f"config must be a JSON object: {path}")
    return payload


def merge_payloads(base: dict, override: dict) -> dict:
    """Merge config payloads section by section.

    Example:
        >>> merge_payloads({"tools": {"git": "git", "dvc": "dvc"}}, {"tools": {"dvc": "/opt/dvc"}})
        {'tools': {'git': 'git', 'dvc': '/opt/dvc'}}
    """
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = {**current, **value}
        else:
            merged[key] = value
    return merged


def parse_config(payload: dict, *, source: str = "config") -> ThothConfig:
    try:
        return ThothConfig.model_validate(payload)
    except ValidationError as exc:
        raise ValidationFailedError(
            f"invalid {source}: {exc}",
            recovery_hint="check the keys under tools, project, and decisions",
        ) from exc


def config_sources(project_dir: Path | None = None) -> list[Path]:
    """Return config files in increasing precedence order."""
    sources = [paths.user_config_path()]
    if project_dir is not None:
        sources.append(paths.project_config_path(project_dir))
    return sources


def load_config(project_dir: Path | None = None) -> ThothConfig:
    """Resolve the effective config for a project directory.

    Args:
        project_dir: Directory holding an optional ``.thoth.json``; defaults
            to the current working directory.

    Returns:
        Validated ``ThothConfig``.
    """
    if project_dir is None:
        project_dir = Path.cwd()
    payload: dict = {}
    for source in config_sources(project_dir):
        data = load_json(source)
        if data is None:
            continue
        log.debug(f"loaded config: {source}")
        payload = merge_payloads(payload, data)
    return parse_config(payload)


def decision_tree_path(config: ThothConfig, project_dir: Path | None = None) -> Path:
    """Resolve the configured decision tree path against a project directory."""
    candidate = Path(config.decisions.path).expanduser()
    if candidate.is_absolute():
        return candidate
    return (project_dir or Path.cwd()) / candidate
