"""Data models for the Issue Synthesizer."""

from dataclasses import dataclass


@dataclass(frozen=True)
class IssuePayload:
    """Canonical issue content derived from one task record.

    Attributes:
        title: Issue title.
        body: Formatted issue body.
        labels: Label names to apply.
        assignee: Tracker handle to assign, empty for unassigned.
    """

    title: str
    body: str
    labels: tuple[str, ...] = ()
    assignee: str = ""
