"""Issue Synthesizer - Builds issue payloads from task records."""

from boardsync.synthesizer.models import IssuePayload
from boardsync.synthesizer.synthesizer import render_body, synthesize

__all__ = [
    "IssuePayload",
    "render_body",
    "synthesize",
]
