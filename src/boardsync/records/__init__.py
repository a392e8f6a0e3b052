"""Record Loader - Parses the kanban and assignee tables into records."""

from boardsync.records.exceptions import MalformedInputError, RecordError
from boardsync.records.loader import (
    FALLBACK_TITLE,
    load,
    load_assignees,
    load_kanban,
    parse_assignees,
    parse_kanban,
)
from boardsync.records.models import BODY_FIELD_ORDER, TEXT_FIELDS, AssigneeMap, TaskRecord
from boardsync.records.resolver import AssignmentResolver

__all__ = [
    "BODY_FIELD_ORDER",
    "FALLBACK_TITLE",
    "TEXT_FIELDS",
    "AssigneeMap",
    "AssignmentResolver",
    "MalformedInputError",
    "RecordError",
    "TaskRecord",
    "load",
    "load_assignees",
    "load_kanban",
    "parse_assignees",
    "parse_kanban",
]
