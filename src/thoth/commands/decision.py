"""Implementation for the ``thoth decision`` commands."""

from __future__ import annotations

from pathlib import Path

from .. import config, decisions
from ..io import confirm, say
from ..models import Decision, DecisionTree


def _tree_path(args: object) -> Path:
    explicit = getattr(args, "file", None)
    if explicit:
        return Path(str(explicit))
    return config.decision_tree_path(config.load_config())


def init_tree(args: object) -> DecisionTree:
    """Start a decision tree, confirming before replacing an existing one."""
    path = _tree_path(args)
    overwrite = bool(getattr(args, "overwrite", False))
    if path.exists() and not overwrite:
        overwrite = confirm(f"Replace existing decision tree at {path}?", default=False)
    return decisions.initialize_decision_tree(
        str(getattr(args, "analysis_id")),
        str(getattr(args, "analyst")),
        getattr(args, "description", None),
        path=path,
        overwrite=overwrite,
    )


def record(args: object) -> Decision:
    return decisions.record_decision(
        str(getattr(args, "check")),
        str(getattr(args, "observation")),
        str(getattr(args, "decision")),
        str(getattr(args, "reasoning")),
        getattr(args, "evidence", None),
        path=_tree_path(args),
    )


def methods(args: object) -> str:
    text = decisions.generate_methods_section(
        _tree_path(args),
        include_evidence=not bool(getattr(args, "no_evidence", False)),
    )
    say(text)
    return text


def export(args: object) -> str:
    """Render the tree; print it unless an output file was given."""
    output = getattr(args, "output", None)
    output_path = Path(str(output)) if output else None
    rendered = decisions.export_decision_tree(
        _tree_path(args),
        output=output_path,
        export_format=str(getattr(args, "format", "md") or "md"),
    )
    if output_path is None:
        say(rendered.rstrip("\n"))
    return rendered
