"""Decision tree: a YAML log of the human judgement calls in an analysis.

Entries are appended in order and never rewritten. Each one records the
check that was made, what was observed, the decision taken, why, and
optional supporting evidence. The log renders into a prose methods section
or a standalone report.
"""

from __future__ import annotations

import html
import json
from pathlib import Path
from typing import Literal

import yaml
from pydantic import ValidationError

from . import log, paths
from .config import utc_now
from .errors import DecisionLogError, ValidationFailedError
from .models import Decision, DecisionTree

ExportFormat = Literal["md", "html", "yaml", "json"]
EXPORT_FORMATS: tuple[str, ...] = ("md", "html", "yaml", "json")

_INIT_HINT = "run 'thoth decision init' to start a decision tree"


def _write_tree(tree: DecisionTree, path: Path) -> None:
    paths.ensure_dir(path.parent)
    payload = tree.model_dump(mode="json")
    with path.open("w", encoding="utf-8") as fh:
        yaml.safe_dump(payload, fh, sort_keys=False, allow_unicode=True)


def load_decision_tree(path: Path = paths.DEFAULT_DECISION_TREE) -> DecisionTree:
    """Read and validate a decision tree file.

    Raises:
        DecisionLogError: The file is missing, unreadable, or malformed.
    """
    if not path.exists():
        raise DecisionLogError(
            f"decision tree not found: {path}", recovery_hint=_INIT_HINT
        )
    try:
        with path.open("r", encoding="utf-8") as fh:
            payload = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as exc:
        raise DecisionLogError(f"failed to read decision tree {path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise DecisionLogError(f"decision tree must be a YAML mapping: {path}")
    try:
        return DecisionTree.model_validate(payload)
    except ValidationError as exc:
        raise DecisionLogError(f"invalid decision tree {path}: {exc}") from exc


def initialize_decision_tree(
    analysis_id: str,
    analyst: str,
    description: str | None = None,
    *,
    path: Path = paths.DEFAULT_DECISION_TREE,
    overwrite: bool = False,
) -> DecisionTree:
    """Create an empty decision tree for an analysis.

    Args:
        analysis_id: Identifier for the analysis.
        analyst: Person responsible for the decisions.
        description: Optional free-text description.
        path: YAML file to create.
        overwrite: Replace an existing tree instead of failing.

    Returns:
        The new tree.

    Raises:
        ValidationFailedError: Missing identifiers, or the file exists and
            ``overwrite`` is false.
    """
    if not analysis_id.strip():
        raise ValidationFailedError("analysis id is required")
    if not analyst.strip():
        raise ValidationFailedError("analyst is required")
    if path.exists() and not overwrite:
        raise ValidationFailedError(
            f"decision tree already exists: {path}",
            recovery_hint="pass --overwrite to start over",
        )
    tree = DecisionTree(
        analysis_id=analysis_id.strip(),
        analyst=analyst.strip(),
        description=(description or "").strip() or None,
        created_at=utc_now(),
    )
    _write_tree(tree, path)
    log.success(f"Initialized decision tree for {tree.analysis_id} at {path}")
    return tree


def record_decision(
    check: str,
    observation: str,
    decision: str,
    reasoning: str,
    evidence: str | None = None,
    *,
    path: Path = paths.DEFAULT_DECISION_TREE,
) -> Decision:
    """Append a decision to the tree at ``path``.

    Returns:
        The recorded entry, with its sequential id and UTC timestamp.
    """
    fields = {
        "check": check,
        "observation": observation,
        "decision": decision,
        "reasoning": reasoning,
    }
    missing = [name for name, value in fields.items() if not value or not value.strip()]
    if missing:
        raise ValidationFailedError(f"missing decision fields: {', '.join(missing)}")

    tree = load_decision_tree(path)
    entry = Decision(
        id=tree.next_id(),
        evidence=evidence,
        timestamp=utc_now(),
        **fields,
    )
    tree.decisions.append(entry)
    _write_tree(tree, path)
    log.success(f"Recorded decision {entry.id}: {entry.check}")
    return entry


def _sentence(text: str) -> str:
    stripped = text.strip()
    if not stripped:
        return stripped
    if stripped[-1] in ".!?":
        stripped = stripped[:-1]
    # acronyms and the pronoun "I" keep their case
    if len(stripped) > 1 and stripped[1].isupper():
        return stripped
    if stripped == "I" or stripped.startswith(("I ", "I'")):
        return stripped
    return stripped[0].lower() + stripped[1:]


def describe_decision(entry: Decision, *, include_evidence: bool = True) -> str:
    """Render one entry as prose.

    Example:
        >>> entry = Decision(
        ...     id=1,
        ...     check="Outliers in revenue",
        ...     observation="Three accounts exceed 10x the median.",
        ...     decision="Winsorize at the 99th percentile",
        ...     reasoning="They are billing errors confirmed by finance",
        ...     timestamp="2026-01-18T12:34:56Z",
        ... )
        >>> describe_decision(entry)
        'When checking outliers in revenue, we observed that three accounts exceed 10x the median. We decided to winsorize at the 99th percentile because they are billing errors confirmed by finance.'
    """
    text = (
        f"When checking {_sentence(entry.check)}, we observed that "
        f"{_sentence(entry.observation)}. We decided to "
        f"{_sentence(entry.decision)} because {_sentence(entry.reasoning)}."
    )
    if include_evidence and entry.evidence:
        text = f"{text} Supporting evidence: {entry.evidence.strip().rstrip('.')}."
    return text


def generate_methods_section(
    path: Path = paths.DEFAULT_DECISION_TREE, *, include_evidence: bool = True
) -> str:
    """Render the tree as a methods-section paragraph."""
    tree = load_decision_tree(path)
    return render_methods(tree, include_evidence=include_evidence)


def render_methods(tree: DecisionTree, *, include_evidence: bool = True) -> str:
    intro = (
        f"Analytical decisions for {tree.analysis_id} were recorded by "
        f"{tree.analyst} during the analysis."
    )
    if not tree.decisions:
        return f"{intro} No decisions were recorded."
    count = len(tree.decisions)
    noun = "decision" if count == 1 else "decisions"
    body = " ".join(
        describe_decision(entry, include_evidence=include_evidence)
        for entry in tree.decisions
    )
    return f"{intro} {count} {noun} shaped the results. {body}"


def render_markdown(tree: DecisionTree) -> str:
    lines = [f"# Decision Tree: {tree.analysis_id}", ""]
    lines.append(f"- **Analyst:** {tree.analyst}")
    lines.append(f"- **Created:** {tree.created_at}")
    if tree.description:
        lines.append(f"- **Description:** {tree.description}")
    lines.append("")
    lines.append("## Methods")
    lines.append("")
    lines.append(render_methods(tree))
    lines.append("")
    lines.append("## Decisions")
    lines.append("")
    if not tree.decisions:
        lines.append("No decisions were recorded.")
        lines.append("")
    for entry in tree.decisions:
        lines.append(f"### {entry.id}. {entry.check}")
        lines.append("")
        lines.append(f"- **Observation:** {entry.observation}")
        lines.append(f"- **Decision:** {entry.decision}")
        lines.append(f"- **Reasoning:** {entry.reasoning}")
        if entry.evidence:
            lines.append(f"- **Evidence:** {entry.evidence}")
        lines.append(f"- **Recorded:** {entry.timestamp}")
        lines.append("")
    return "\n".join(lines)


def render_html(tree: DecisionTree) -> str:
    esc = html.escape
    parts = [
        "<!DOCTYPE html>",
        '<html lang="en">',
        "<head>",
        '<meta charset="utf-8">',
        f"<title>Decision Tree: {esc(tree.analysis_id)}</title>",
        "<style>",
        "body { font-family: sans-serif; max-width: 48rem; margin: 2rem auto; }",
        ".decision { border-left: 4px solid #C471ED; padding-left: 1rem; margin: 1.5rem 0; }",
        "dt { font-weight: bold; }",
        "</style>",
        "</head>",
        "<body>",
        f"<h1>Decision Tree: {esc(tree.analysis_id)}</h1>",
        f"<p><strong>Analyst:</strong> {esc(tree.analyst)}<br>",
        f"<strong>Created:</strong> {esc(tree.created_at)}</p>",
    ]
    if tree.description:
        parts.append(f"<p>{esc(tree.description)}</p>")
    parts.append("<h2>Methods</h2>")
    parts.append(f"<p>{esc(render_methods(tree))}</p>")
    parts.append("<h2>Decisions</h2>")
    if not tree.decisions:
        parts.append("<p>No decisions were recorded.</p>")
    for entry in tree.decisions:
        parts.append('<div class="decision">')
        parts.append(f"<h3>{entry.id}. {esc(entry.check)}</h3>")
        parts.append("<dl>")
        rows = [
            ("Observation", entry.observation),
            ("Decision", entry.decision),
            ("Reasoning", entry.reasoning),
            ("Evidence", entry.evidence),
            ("Recorded", entry.timestamp),
        ]
        for label, value in rows:
            if value:
                parts.append(f"<dt>{label}</dt><dd>{esc(value)}</dd>")
        parts.append("</dl>")
        parts.append("</div>")
    parts.extend(["</body>", "</html>", ""])
    return "\n".join(parts)


def render_tree(tree: DecisionTree, export_format: str) -> str:
    """Render a tree in one of ``EXPORT_FORMATS``."""
    if export_format == "md":
        return render_markdown(tree)
    if export_format == "html":
        return render_html(tree)
    payload = tree.model_dump(mode="json")
    if export_format == "yaml":
        return yaml.safe_dump(payload, sort_keys=False, allow_unicode=True)
    if export_format == "json":
        return json.dumps(payload, indent=2) + "\n"
    raise ValidationFailedError(
        f"unsupported export format: {export_format}",
        recovery_hint=f"use one of: {', '.join(EXPORT_FORMATS)}",
    )


def export_decision_tree(
    path: Path = paths.DEFAULT_DECISION_TREE,
    *,
    output: Path | None = None,
    export_format: ExportFormat = "md",
) -> str:
    """Render the decision tree and optionally write it to ``output``.

    Returns:
        The rendered report text.
    """
    tree = load_decision_tree(path)
    rendered = render_tree(tree, export_format)
    if output is not None:
        paths.ensure_dir(output.parent)
        output.write_text(rendered, encoding="utf-8")
        log.success(f"Exported decision tree to {output}")
    return rendered
