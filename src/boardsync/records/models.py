"""Data models for the Record Loader."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

# Structured kanban columns rendered at the top of an issue body, in this order
BODY_FIELD_ORDER = (
    "Type",
    "Status",
    "Swimlane",
    "Priority",
    "Product Lead",
    "Estimate",
    "Dependencies",
    "Created",
    "Blocked Reason",
    "Release Version",
)

# Free-text columns, rendered as headed sections after the structured fields
TEXT_FIELDS = ("Description", "Acceptance Criteria", "Checklist")


@dataclass(frozen=True)
class TaskRecord:
    """One row of the kanban table.

    Attributes:
        row_number: 1-based index of the data row in the kanban table.
        title: Issue title (fallback title if the row had none).
        labels: Label names in first-seen order, without duplicates.
        assignee_label: Free-text assignee as written in the kanban table.
        body_fields: Structured (name, value) pairs in BODY_FIELD_ORDER.
        description: Description text.
        acceptance_criteria: Acceptance criteria text.
        checklist: Checklist text.
    """

    row_number: int
    title: str
    labels: tuple[str, ...] = ()
    assignee_label: str = ""
    body_fields: tuple[tuple[str, str], ...] = ()
    description: str = ""
    acceptance_criteria: str = ""
    checklist: str = ""


@dataclass(frozen=True)
class AssigneeMap:
    """Mapping from kanban assignee labels to tracker user handles."""

    entries: Mapping[str, str] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "entries", MappingProxyType(dict(self.entries)))

    def resolve(self, label: str) -> str:
        """Look up the handle for a label; empty string when unmapped."""
        return self.entries.get(label.strip(), "")

    def __contains__(self, label: object) -> bool:
        return isinstance(label, str) and label.strip() in self.entries

    def __len__(self) -> int:
        return len(self.entries)
