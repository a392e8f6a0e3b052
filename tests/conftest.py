"""Shared pytest fixtures and configuration."""

from __future__ import annotations

from pathlib import Path
from textwrap import dedent

import pytest

from boardsync.synthesizer import IssuePayload
from boardsync.tracker import (
    CreatedIssue,
    CreateFailedError,
    LinkFailedError,
    ProjectNotFoundError,
    ProjectSelector,
    ProjectTarget,
)


# Register custom markers
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: fast tests with no external dependencies")
    config.addinivalue_line("markers", "integration: component interaction tests")
    config.addinivalue_line("markers", "real: talks to the real GitHub API (local only)")


class FakeGateway:
    """In-memory Tracker Gateway recording every call.

    Failures are scripted per issue title: ``create_errors[title]`` and
    ``link_errors[title]`` hold lists of exceptions raised on successive calls
    (one per call, then success).
    """

    def __init__(self) -> None:
        self.projects: dict[str, str] = {"Kanban - v1": "PVT_kanban"}
        self.created: list[IssuePayload] = []
        self.linked: list[tuple[str, str]] = []
        self.resolve_calls = 0
        self.create_errors: dict[str, list[Exception]] = {}
        self.link_errors: dict[str, list[Exception]] = {}
        self._titles_by_id: dict[str, str] = {}
        self.closed = False

    def resolve_project(self, selector: ProjectSelector | str) -> ProjectTarget:
        self.resolve_calls += 1
        if isinstance(selector, str):
            selector = ProjectSelector.parse(selector)
        if selector.project_id is not None:
            return ProjectTarget(project_id=selector.project_id)
        if selector.title not in self.projects:
            raise ProjectNotFoundError(f"No project titled '{selector.title}'")
        return ProjectTarget(project_id=self.projects[selector.title], title=selector.title)

    def create_issue(self, repo: str, payload: IssuePayload) -> CreatedIssue:
        errors = self.create_errors.get(payload.title)
        if errors:
            raise errors.pop(0)
        self.created.append(payload)
        number = len(self.created)
        issue_id = f"I_{number}"
        self._titles_by_id[issue_id] = payload.title
        return CreatedIssue(
            issue_id=issue_id,
            url=f"https://github.com/{repo}/issues/{number}",
            number=number,
        )

    def add_to_project(self, target: ProjectTarget, issue_id: str) -> None:
        errors = self.link_errors.get(self._titles_by_id[issue_id])
        if errors:
            raise errors.pop(0)
        self.linked.append((target.project_id, issue_id))

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_gateway() -> FakeGateway:
    """Tracker Gateway double with scripted failures."""
    return FakeGateway()


@pytest.fixture
def create_failure() -> CreateFailedError:
    return CreateFailedError("422 - Validation Failed")


@pytest.fixture
def link_failure() -> LinkFailedError:
    return LinkFailedError("GraphQL errors: Could not resolve to a node")


@pytest.fixture
def kanban_csv(tmp_path: Path) -> Path:
    """A small kanban export."""
    path = tmp_path / "kanban.csv"
    path.write_text(
        dedent("""\
            Title,Labels,Assignee,Type,Priority,Description,Acceptance Criteria,Checklist
            Fix login bug,"bug,urgent",alice,Bug,High,Login fails on Safari,User can log in,- [ ] repro
            Add dark mode,feature,bob,Feature,Low,Theme toggle,,
            Write docs,,carol,,,,,
        """),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def assignees_csv(tmp_path: Path) -> Path:
    """Assignee map with a comment and the header row."""
    path = tmp_path / "assignees_map.csv"
    path.write_text(
        dedent("""\
            # kanban label -> GitHub user
            csv_label,github_user
            alice,alice-gh
            bob, bob-gh
        """),
        encoding="utf-8",
    )
    return path
