"""Record Loader - Reads the kanban and assignee CSV tables."""

from __future__ import annotations

import csv
import logging
from collections.abc import Iterable, Sequence
from pathlib import Path

from boardsync.records.exceptions import MalformedInputError
from boardsync.records.models import BODY_FIELD_ORDER, TEXT_FIELDS, AssigneeMap, TaskRecord

logger = logging.getLogger("boardsync.records")

FALLBACK_TITLE = "Untitled"

# Header row marker and comment prefix in the assignee table
ASSIGNEE_HEADER = "csv_label"
COMMENT_PREFIX = "#"

KANBAN_COLUMNS = ("Title", "Name", "Labels", "Assignee", *BODY_FIELD_ORDER, *TEXT_FIELDS)

_CANONICAL = {name.lower(): name for name in KANBAN_COLUMNS}


def _canonical_header(header: Sequence[str]) -> list[str | None]:
    """Map raw header cells to recognized column names (None if unknown)."""
    return [_CANONICAL.get(cell.strip().lower()) for cell in header]


def _split_labels(raw: str) -> tuple[str, ...]:
    labels: list[str] = []
    for part in raw.split(","):
        label = part.strip()
        if label and label not in labels:
            labels.append(label)
    return tuple(labels)


def _build_record(row_number: int, values: dict[str, str]) -> TaskRecord:
    title = values.get("Title") or values.get("Name")
    if not title:
        logger.warning("Row %d has no Title or Name, using '%s'", row_number, FALLBACK_TITLE)
        title = FALLBACK_TITLE

    return TaskRecord(
        row_number=row_number,
        title=title,
        labels=_split_labels(values.get("Labels", "")),
        assignee_label=values.get("Assignee", ""),
        body_fields=tuple((name, values.get(name, "")) for name in BODY_FIELD_ORDER),
        description=values.get("Description", ""),
        acceptance_criteria=values.get("Acceptance Criteria", ""),
        checklist=values.get("Checklist", ""),
    )


def parse_kanban(rows: Iterable[Sequence[str]]) -> list[TaskRecord]:
    """Parse kanban table rows into task records.

    The first row is the header. Unknown columns are ignored, blank rows are
    skipped, and every other row yields exactly one record in input order.

    Args:
        rows: Table rows, header first.

    Returns:
        Task records in row order.

    Raises:
        MalformedInputError: If the header row is missing.
    """
    iterator = iter(rows)
    header = next(iterator, None)
    if header is None:
        raise MalformedInputError("Kanban table is empty: header row missing")

    columns = _canonical_header(header)
    if not any(columns):
        raise MalformedInputError(
            f"Kanban table header has no recognized column (got {list(header)}); "
            f"expected some of: {', '.join(KANBAN_COLUMNS)}"
        )

    records: list[TaskRecord] = []
    for row_number, row in enumerate(iterator, start=1):
        if not any(cell.strip() for cell in row):
            continue

        values: dict[str, str] = {}
        for column, cell in zip(columns, row):
            # First occurrence of a duplicated column wins
            if column is not None and column not in values:
                values[column] = cell.strip()

        records.append(_build_record(row_number, values))

    logger.info("Parsed %d task record(s)", len(records))
    return records


def parse_assignees(rows: Iterable[Sequence[str]]) -> AssigneeMap:
    """Parse assignee table rows into an AssigneeMap.

    Rows with a blank first cell, a leading '#', or the literal 'csv_label'
    header are skipped.
    """
    entries: dict[str, str] = {}
    for row in rows:
        if not row:
            continue
        label = row[0].strip()
        if not label or label.startswith(COMMENT_PREFIX) or label == ASSIGNEE_HEADER:
            continue

        handle = row[1].strip() if len(row) > 1 else ""
        if label in entries and entries[label] != handle:
            logger.warning(
                "Assignee label '%s' mapped twice ('%s', '%s'); using the last one",
                label,
                entries[label],
                handle,
            )
        entries[label] = handle

    logger.info("Loaded %d assignee mapping(s)", len(entries))
    return AssigneeMap(entries)


def _read_rows(path: Path, kind: str) -> list[list[str]]:
    if not path.is_file():
        raise MalformedInputError(f"{kind} CSV not found: {path}")
    try:
        with open(path, newline="", encoding="utf-8-sig") as f:
            return list(csv.reader(f))
    except (OSError, UnicodeDecodeError, csv.Error) as e:
        raise MalformedInputError(f"Could not read {kind} CSV {path}: {e}") from e


def load_kanban(path: Path | str) -> list[TaskRecord]:
    """Load task records from a kanban CSV file."""
    path = Path(path)
    logger.debug("Loading kanban table from %s", path)
    return parse_kanban(_read_rows(path, "Kanban"))


def load_assignees(path: Path | str) -> AssigneeMap:
    """Load the assignee map from a CSV file."""
    path = Path(path)
    logger.debug("Loading assignee map from %s", path)
    return parse_assignees(_read_rows(path, "Assignees map"))


def load(
    kanban_path: Path | str, assignees_path: Path | str
) -> tuple[list[TaskRecord], AssigneeMap]:
    """Load both input tables.

    Args:
        kanban_path: Path to the kanban CSV export.
        assignees_path: Path to the assignee map CSV.

    Returns:
        Tuple of (task records in row order, assignee map).

    Raises:
        MalformedInputError: If either table is missing or malformed.
    """
    records = load_kanban(kanban_path)
    assignees = load_assignees(assignees_path)
    return records, assignees
