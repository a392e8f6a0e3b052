"""RunReporter - Turns sync results into report lines and an exit status."""

from __future__ import annotations

from collections.abc import Callable, Iterable

from boardsync.reporter.models import RunSummary
from boardsync.sync.models import SyncResult, SyncState


class RunReporter:
    """Formats per-record outcomes and the final run summary."""

    def __init__(self, echo: Callable[[str], None] = print) -> None:
        self.echo = echo

    @staticmethod
    def summarize(results: Iterable[SyncResult]) -> RunSummary:
        """Count results by outcome."""
        total = created = linked = create_failed = link_failed = 0
        for result in results:
            total += 1
            match result.state:
                case SyncState.LINKED:
                    created += 1
                    linked += 1
                case SyncState.LINK_FAILED:
                    created += 1
                    link_failed += 1
                case SyncState.CREATE_FAILED:
                    create_failed += 1
                case SyncState.CREATED:
                    created += 1
        return RunSummary(
            total=total,
            created=created,
            linked=linked,
            create_failed=create_failed,
            link_failed=link_failed,
        )

    @staticmethod
    def format_result(result: SyncResult) -> str:
        """One human-readable line for a record outcome."""
        line = f"[{result.state}] row {result.record.row_number}: {result.record.title}"
        if result.issue_url:
            line += f" -> {result.issue_url}"
        if result.error:
            line += f" ({result.error})"
        return line

    @staticmethod
    def format_summary(summary: RunSummary) -> str:
        return (
            f"{summary.total} record(s): {summary.created} created, {summary.linked} linked, "
            f"{summary.create_failed} create failed, {summary.link_failed} link failed"
        )

    def report_result(self, result: SyncResult) -> None:
        self.echo(self.format_result(result))

    def report(self, results: list[SyncResult], per_record: bool = True) -> RunSummary:
        """Emit report lines in processing order followed by the summary.

        Args:
            results: Sync results in processing order.
            per_record: Whether to emit a line per record (off when they were
                already streamed through report_result).

        Returns:
            The RunSummary; its exit_code is the process exit status.
        """
        if per_record:
            for result in results:
                self.report_result(result)
        summary = self.summarize(results)
        self.echo(self.format_summary(summary))
        return summary
