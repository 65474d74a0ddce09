"""Command implementations exposed by the Thoth CLI."""

from .config import show_config
from .create import create_project
from .decision import export, init_tree, methods, record

__all__ = [
    "create_project",
    "export",
    "init_tree",
    "methods",
    "record",
    "show_config",
]
