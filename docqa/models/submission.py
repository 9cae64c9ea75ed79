"""Request-scoped values passed between pipeline stages.

Nothing here outlives a single submission.
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UploadedDocument:
    """A fully materialised upload: the buffer is in memory before validation."""

    filename: str
    media_type: str | None
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class Submission:
    """Raw, unvalidated input as received from the HTTP form or the CLI."""

    question: str | None
    document: UploadedDocument | None
    model: str | None = None


@dataclass(frozen=True)
class ValidatedSubmission:
    question: str
    document: UploadedDocument
    model: str


@dataclass(frozen=True)
class CompletionResult:
    answer: str
