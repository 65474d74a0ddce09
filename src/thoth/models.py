"""Pydantic models for Thoth configuration and decision-tree data."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _normalize_text(value: object, default: str) -> object:
    if value is None:
        return default
    if isinstance(value, str):
        normalized = value.strip()
        return normalized or default
    return value


class ToolsSection(BaseModel):
    """Executable paths for the wrapped tools.

    Attributes:
        git: Git executable (default ``git``).
        dvc: DVC executable (default ``dvc``).
        docker: Docker executable (default ``docker``).
        python: Interpreter used to freeze the dependency lock.

    Example:
        >>> ToolsSection(git=" /usr/bin/git ").git
        '/usr/bin/git'
        >>> ToolsSection(dvc=None).dvc
        'dvc'
    """

    model_config = ConfigDict(extra="allow")

    git: str = "git"
    dvc: str = "dvc"
    docker: str = "docker"
    python: str | None = None

    @field_validator("git", mode="before")
    @classmethod
    def normalize_git(cls, value: object) -> object:
        return _normalize_text(value, "git")

    @field_validator("dvc", mode="before")
    @classmethod
    def normalize_dvc(cls, value: object) -> object:
        return _normalize_text(value, "dvc")

    @field_validator("docker", mode="before")
    @classmethod
    def normalize_docker(cls, value: object) -> object:
        return _normalize_text(value, "docker")


class ProjectDefaults(BaseModel):
    """Defaults for ``thoth create``.

    Attributes:
        git_init: Initialize a git repository and commit each step.
        use_dvc: Initialize DVC data tracking.
        use_docker: Write Docker configuration.
        use_lock: Write and freeze the dependency lock.
        python_version: Base image version for the Dockerfile.
    """

    model_config = ConfigDict(extra="allow")

    git_init: bool = True
    use_dvc: bool = True
    use_docker: bool = True
    use_lock: bool = True
    python_version: str | None = None


class DecisionsSection(BaseModel):
    """Decision tree location.

    Example:
        >>> DecisionsSection().path
        'decisions/decision_tree.yaml'
    """

    model_config = ConfigDict(extra="allow")

    path: str = "decisions/decision_tree.yaml"

    @field_validator("path", mode="before")
    @classmethod
    def normalize_path(cls, value: object) -> object:
        return _normalize_text(value, "decisions/decision_tree.yaml")


class ThothConfig(BaseModel):
    """Resolved Thoth configuration.

    Example:
        >>> ThothConfig().tools.git
        'git'
    """

    model_config = ConfigDict(extra="allow")

    tools: ToolsSection = Field(default_factory=ToolsSection)
    project: ProjectDefaults = Field(default_factory=ProjectDefaults)
    decisions: DecisionsSection = Field(default_factory=DecisionsSection)


class Decision(BaseModel):
    """One recorded analytical decision."""

    id: int
    check: str
    observation: str
    decision: str
    reasoning: str
    evidence: str | None = None
    timestamp: str

    @field_validator("check", "observation", "decision", "reasoning", mode="before")
    @classmethod
    def strip_text(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("evidence", mode="before")
    @classmethod
    def normalize_evidence(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip() or None
        return value


class DecisionTree(BaseModel):
    """Ordered decision log for one analysis.

    Example:
        >>> tree = DecisionTree(
        ...     analysis_id="churn-q3",
        ...     analyst="Sam",
        ...     created_at="2026-01-18T12:34:56Z",
        ... )
        >>> tree.next_id()
        1
    """

    analysis_id: str
    analyst: str
    description: str | None = None
    created_at: str
    decisions: list[Decision] = Field(default_factory=list)

    def next_id(self) -> int:
        if not self.decisions:
            return 1
        return max(entry.id for entry in self.decisions) + 1
