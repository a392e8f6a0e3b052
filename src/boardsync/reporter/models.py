"""Data models for the Run Reporter."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RunSummary:
    """Aggregate counts over one run.

    Attributes:
        total: Number of records processed.
        created: Records whose issue was created (linked or not).
        linked: Records that reached the project board.
        create_failed: Records whose issue could not be created.
        link_failed: Records created but not linked.
    """

    total: int = 0
    created: int = 0
    linked: int = 0
    create_failed: int = 0
    link_failed: int = 0

    @property
    def failed(self) -> int:
        return self.create_failed + self.link_failed

    @property
    def exit_code(self) -> int:
        """Process exit status: 0 only when every record is linked."""
        return 1 if self.failed or self.linked != self.total else 0
