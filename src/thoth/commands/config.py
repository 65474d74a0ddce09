"""Implementation for the ``thoth config`` command."""

from __future__ import annotations

import json
from pathlib import Path

from .. import config
from ..io import say


def show_config(args: object) -> dict:
    """Print the resolved config (or the files it was read from) as JSON."""
    project_dir = Path.cwd()
    if bool(getattr(args, "sources", False)):
        payload: dict = {
            "sources": [
                {"path": str(source), "exists": source.exists()}
                for source in config.config_sources(project_dir)
            ]
        }
    else:
        payload = config.load_config(project_dir).model_dump()
    say(json.dumps(payload, indent=2))
    return payload

