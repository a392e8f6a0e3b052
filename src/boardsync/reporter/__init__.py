"""Run Reporter - Summarizes sync outcomes."""

from boardsync.reporter.models import RunSummary
from boardsync.reporter.reporter import RunReporter

__all__ = [
    "RunReporter",
    "RunSummary",
]
