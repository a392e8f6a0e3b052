"""GitHubTracker - Creates issues and links them to GitHub Projects (ProjectsV2)."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from boardsync.tracker.exceptions import (
    AmbiguousProjectError,
    CreateFailedError,
    LinkFailedError,
    ProjectNotFoundError,
    TrackerError,
    TransportError,
)
from boardsync.tracker.models import CreatedIssue, ProjectSelector, ProjectTarget

if TYPE_CHECKING:
    from boardsync.synthesizer import IssuePayload
    from boardsync.tracker.transport import Transport

logger = logging.getLogger("boardsync.tracker")

PROJECTS_PAGE_SIZE = 100

PROJECTS_QUERY = """
query($owner: String!, $repo: String!, $first: Int!, $after: String) {
    repository(owner: $owner, name: $repo) {
        projectsV2(first: $first, after: $after) {
            nodes {
                id
                title
                number
            }
            pageInfo {
                hasNextPage
                endCursor
            }
        }
    }
}
"""

ADD_ITEM_MUTATION = """
mutation($projectId: ID!, $contentId: ID!) {
    addProjectV2ItemByContent(input: { projectId: $projectId, contentId: $contentId }) {
        item {
            id
        }
    }
}
"""


def split_repo(repo: str) -> tuple[str, str]:
    """Split an "owner/name" repository identifier.

    Raises:
        ValueError: If the identifier is not of the form owner/name.
    """
    owner, sep, name = repo.strip().partition("/")
    if not sep or not owner or not name or "/" in name:
        raise ValueError(f"Repository must be in 'owner/name' format, got '{repo}'")
    return owner, name


class GitHubTracker:
    """Tracker Gateway for GitHub issues and ProjectsV2 boards.

    Issues are created through the REST API, which hands back the durable
    node id and URL in one response. Project lookup and linking go through
    GraphQL.
    """

    def __init__(self, repo: str, transport: Transport) -> None:
        """Initialize the tracker.

        Args:
            repo: GitHub repo in "owner/repo" format, used for project lookup.
            transport: Carrier for REST and GraphQL requests.
        """
        self.repo = repo
        self.owner, self.repo_name = split_repo(repo)
        self.transport = transport

    def close(self) -> None:
        """Close the underlying transport."""
        self.transport.close()

    def list_projects(self) -> list[dict[str, Any]]:
        """List every ProjectV2 linked to the repository.

        Returns:
            Project nodes with id, title and number.

        Raises:
            TrackerError: If the query fails or the repository is not found.
        """
        projects: list[dict[str, Any]] = []
        after: str | None = None

        while True:
            variables: dict[str, Any] = {
                "owner": self.owner,
                "repo": self.repo_name,
                "first": PROJECTS_PAGE_SIZE,
            }
            if after:
                variables["after"] = after

            try:
                data = self.transport.graphql(PROJECTS_QUERY, variables)
            except TransportError as e:
                raise TrackerError(f"Could not list projects of {self.repo}: {e}") from e

            repository = data.get("repository")
            if not repository:
                raise TrackerError(f"Repository {self.repo} not found")

            connection = repository.get("projectsV2") or {}
            projects.extend(node for node in connection.get("nodes") or [] if node)

            page_info = connection.get("pageInfo") or {}
            cursor = page_info.get("endCursor")
            if not page_info.get("hasNextPage") or not cursor or cursor == after:
                break
            after = cursor

        logger.debug("Found %d project(s) in %s", len(projects), self.repo)
        return projects

    def resolve_project(self, selector: ProjectSelector | str) -> ProjectTarget:
        """Resolve a project selector to a ProjectTarget.

        Durable ids are returned unchanged without any request. Titles must
        match exactly one project of the repository.

        Args:
            selector: ProjectSelector, or a bare id/title string.

        Returns:
            The resolved ProjectTarget.

        Raises:
            ProjectNotFoundError: If no project has the title.
            AmbiguousProjectError: If more than one project has the title.
        """
        if isinstance(selector, str):
            selector = ProjectSelector.parse(selector)

        if selector.project_id is not None:
            return ProjectTarget(project_id=selector.project_id)

        logger.info("Resolving project id for title: %s", selector.title)
        matches = [p for p in self.list_projects() if p.get("title") == selector.title]

        if not matches:
            raise ProjectNotFoundError(
                f"Could not find a project with title '{selector.title}' in {self.repo}. "
                "Provide a project id instead or create the project first."
            )
        if len(matches) > 1:
            numbers = ", ".join(f"#{p.get('number')}" for p in matches)
            raise AmbiguousProjectError(
                f"{len(matches)} projects titled '{selector.title}' in {self.repo} "
                f"({numbers}); provide a project id instead"
            )

        project = matches[0]
        target = ProjectTarget(
            project_id=str(project["id"]),
            title=project.get("title"),
            number=project.get("number"),
        )
        logger.info("Found project id: %s", target.project_id)
        return target

    def create_issue(self, repo: str, payload: IssuePayload) -> CreatedIssue:
        """Create an issue.

        Args:
            repo: Target repo in "owner/repo" format.
            payload: Issue content.

        Returns:
            CreatedIssue with node id, URL and number.

        Raises:
            CreateFailedError: If the tracker rejects or never answers the request.
        """
        body: dict[str, Any] = {"title": payload.title, "body": payload.body}
        if payload.labels:
            body["labels"] = list(payload.labels)
        if payload.assignee:
            body["assignees"] = [payload.assignee]

        logger.info("Creating issue: %s", payload.title)
        try:
            data = self.transport.rest("POST", f"/repos/{repo}/issues", body)
        except TransportError as e:
            raise CreateFailedError(str(e), retryable=e.retryable) from e

        try:
            issue = CreatedIssue(
                issue_id=str(data["node_id"]),
                url=str(data["html_url"]),
                number=int(data["number"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise CreateFailedError(f"Unexpected issue response: missing {e}") from e

        logger.info("Created issue #%d: %s", issue.number, issue.url)
        return issue

    def add_to_project(self, target: ProjectTarget, issue_id: str) -> None:
        """Add an issue to a project board.

        Adding an issue that is already on the board returns the existing
        item, so the call is safe to repeat.

        Raises:
            LinkFailedError: If the mutation fails.
        """
        logger.info("Adding %s to project %s", issue_id, target.project_id)
        try:
            data = self.transport.graphql(
                ADD_ITEM_MUTATION,
                {"projectId": target.project_id, "contentId": issue_id},
            )
        except TransportError as e:
            raise LinkFailedError(str(e), retryable=e.retryable) from e

        item = (data.get("addProjectV2ItemByContent") or {}).get("item")
        if not item:
            raise LinkFailedError(f"Project {target.project_id} returned no item for {issue_id}")
        logger.debug("Project item %s created", item.get("id"))
