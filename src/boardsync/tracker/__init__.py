"""Tracker Gateway - Interfaces with GitHub issues and Projects."""

from boardsync.tracker.exceptions import (
    AmbiguousProjectError,
    CreateFailedError,
    LinkFailedError,
    ProjectNotFoundError,
    TrackerError,
    TransportError,
)
from boardsync.tracker.gateway import TrackerGateway
from boardsync.tracker.github import GitHubTracker, split_repo
from boardsync.tracker.models import CreatedIssue, ProjectSelector, ProjectTarget
from boardsync.tracker.transport import GhCliTransport, HttpTransport, Transport

__all__ = [
    "AmbiguousProjectError",
    "CreateFailedError",
    "CreatedIssue",
    "GhCliTransport",
    "GitHubTracker",
    "HttpTransport",
    "LinkFailedError",
    "ProjectNotFoundError",
    "ProjectSelector",
    "ProjectTarget",
    "TrackerError",
    "TrackerGateway",
    "Transport",
    "TransportError",
    "split_repo",
]
