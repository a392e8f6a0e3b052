"""Custom exceptions for the Record Loader."""


class RecordError(Exception):
    """Base exception for record loading errors."""


class MalformedInputError(RecordError):
    """An input table is missing or lacks a required structural element."""
