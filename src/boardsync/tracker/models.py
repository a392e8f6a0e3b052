"""Data models for the Tracker Gateway."""

from __future__ import annotations

from dataclasses import dataclass

# Node id prefixes of GitHub Projects (v2 and classic)
PROJECT_ID_PREFIXES = ("PVT_", "PN_")


@dataclass(frozen=True)
class ProjectSelector:
    """How the destination project was named by the user: durable id or title."""

    project_id: str | None = None
    title: str | None = None

    def __post_init__(self) -> None:
        if (self.project_id is None) == (self.title is None):
            raise ValueError("Exactly one of project_id or title must be given")

    @classmethod
    def parse(cls, value: str) -> ProjectSelector:
        """Build a selector from a bare value, treating project node ids as ids."""
        value = value.strip()
        if value.startswith(PROJECT_ID_PREFIXES):
            return cls(project_id=value)
        return cls(title=value)

    def __str__(self) -> str:
        if self.project_id is not None:
            return f"id {self.project_id}"
        return f"title '{self.title}'"


@dataclass(frozen=True)
class ProjectTarget:
    """A resolved project board.

    Attributes:
        project_id: Durable project node id.
        title: Project title, when known.
        number: Project number, when known.
    """

    project_id: str
    title: str | None = None
    number: int | None = None


@dataclass(frozen=True)
class CreatedIssue:
    """An issue created on the tracker."""

    issue_id: str  # durable node id
    url: str
    number: int
