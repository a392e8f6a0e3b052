"""Issue Synthesizer - Renders a task record into an issue payload."""

from __future__ import annotations

from boardsync.records.models import TEXT_FIELDS, TaskRecord
from boardsync.synthesizer.models import IssuePayload


def render_body(record: TaskRecord) -> str:
    """Render the issue body for a record.

    Structured fields come first as ``Name: value`` lines (only those with a
    value), followed by the Description, Acceptance Criteria and Checklist
    sections, separated by blank lines.
    """
    blocks: list[str] = []

    field_lines = [f"{name}: {value}" for name, value in record.body_fields if value]
    if field_lines:
        blocks.append("\n".join(field_lines))

    texts = (record.description, record.acceptance_criteria, record.checklist)
    # Text sections keep their header even when empty
    for header, text in zip(TEXT_FIELDS, texts):
        blocks.append(f"{header}:\n{text.rstrip()}")

    return "\n\n".join(blocks)


def synthesize(record: TaskRecord, handle: str) -> IssuePayload:
    """Build the issue payload for a record.

    Args:
        record: The task record.
        handle: Resolved tracker handle, empty for unassigned.

    Returns:
        The IssuePayload. Same inputs always give an equal payload.
    """
    return IssuePayload(
        title=record.title,
        body=render_body(record),
        labels=record.labels,
        assignee=handle.strip(),
    )
