"""
docqa/errors.py

Error taxonomy for the ask pipeline and the normalizer that turns any
failure into the single client-facing envelope.

Taxonomy
--------
  SubmissionValidationError  missing/blank submission fields      → 400
  UploadError                media type or size violation          → 400
  UpstreamError              provider unreachable / rejected /
                             returned nothing usable               → 500
  DocumentIOError            local read/write or UTF-8 decoding    → 500

MissingCredentialError is deliberately outside the taxonomy: it is a
startup condition and never reaches a request handler.
"""
from __future__ import annotations

from dataclasses import dataclass

from fastapi import status


class DocQAError(Exception):
    """Base class for every failure the pipeline reports to a caller."""

    kind: str = "internal_error"
    client_fault: bool = False

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class SubmissionValidationError(DocQAError):
    kind = "validation_error"
    client_fault = True


class UploadError(DocQAError):
    kind = "upload_error"
    client_fault = True


class UpstreamError(DocQAError):
    """The completion provider failed or returned no usable content."""

    kind = "upstream_error"

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.retryable = retryable


class DocumentIOError(DocQAError):
    kind = "io_error"


class MissingCredentialError(RuntimeError):
    """Raised at process start when no provider credential is configured."""


@dataclass(frozen=True)
class ErrorResult:
    kind: str
    message: str
    status_code: int

    @property
    def client_fault(self) -> bool:
        return self.status_code < 500

    def to_body(self) -> dict[str, str]:
        return {"error": self.message}


_GENERIC_MESSAGE = "An unexpected error occurred."


def normalize_error(exc: BaseException, debug: bool = False) -> ErrorResult:
    """Map any exception to an ErrorResult.

    Only the message text of a known error is exposed.  Unknown exceptions
    are reported as a generic server fault unless *debug* is set, in which
    case ``str(exc)`` is returned instead.
    """
    if isinstance(exc, DocQAError):
        code = (
            status.HTTP_400_BAD_REQUEST
            if exc.client_fault
            else status.HTTP_500_INTERNAL_SERVER_ERROR
        )
        return ErrorResult(kind=exc.kind, message=exc.message, status_code=code)

    return ErrorResult(
        kind="internal_error",
        message=str(exc) if debug and str(exc) else _GENERIC_MESSAGE,
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
