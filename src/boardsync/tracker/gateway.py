"""Tracker Gateway interface consumed by the Sync Engine."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from boardsync.synthesizer import IssuePayload
    from boardsync.tracker.models import CreatedIssue, ProjectSelector, ProjectTarget


class TrackerGateway(Protocol):
    """The only boundary through which boardsync talks to the tracker."""

    def resolve_project(self, selector: ProjectSelector | str) -> ProjectTarget:
        """Resolve a project id or title to a ProjectTarget.

        Raises:
            ProjectNotFoundError: If no project has the title.
            AmbiguousProjectError: If several projects share the title.
        """
        ...

    def create_issue(self, repo: str, payload: IssuePayload) -> CreatedIssue:
        """Create one issue.

        Raises:
            CreateFailedError: On any transport, authentication or validation error.
        """
        ...

    def add_to_project(self, target: ProjectTarget, issue_id: str) -> None:
        """Link an existing issue to the project.

        Raises:
            LinkFailedError: If the tracker rejects or never answers the request.
        """
        ...
