"""Assignment Resolver - Maps kanban assignee labels to tracker handles."""

from __future__ import annotations

import logging

from boardsync.records.models import AssigneeMap

logger = logging.getLogger("boardsync.records")


class AssignmentResolver:
    """Resolves free-text assignee labels using an AssigneeMap.

    Unknown or empty labels resolve to an empty handle (unassigned); a missing
    mapping never blocks issue creation.
    """

    def __init__(self, assignee_map: AssigneeMap) -> None:
        self.assignee_map = assignee_map
        self._reported: set[str] = set()

    def resolve(self, label: str) -> str:
        """Resolve a label to a tracker handle.

        Args:
            label: Assignee label from the kanban table.

        Returns:
            The mapped handle, or "" when the label is empty or unmapped.
        """
        label = label.strip()
        if not label:
            return ""

        handle = self.assignee_map.resolve(label)
        if not handle and label not in self._reported:
            self._reported.add(label)
            logger.warning("No tracker handle mapped for assignee '%s'; leaving unassigned", label)
        return handle
