"""
docqa/pipeline/validator.py

Upload Validator: first pipeline stage.

Rules are applied in a fixed order and the first violation wins:

  1. question present and non-blank       → SubmissionValidationError
  2. document present                      → SubmissionValidationError
  3. declared media type on the allow-list → UploadError
  4. byte length within the ceiling        → UploadError

The media type is the one declared by the caller; file contents are not
sniffed.
"""
from __future__ import annotations

from docqa.errors import SubmissionValidationError, UploadError
from docqa.models.submission import Submission, ValidatedSubmission

ALLOWED_MEDIA_TYPES: frozenset[str] = frozenset({"text/markdown", "text/plain"})


def validate_submission(
    submission: Submission,
    *,
    max_bytes: int,
    default_model: str,
) -> ValidatedSubmission:
    """Check *submission* and return the validated triple.

    Args:
        submission:    Raw question, document, and optional model.
        max_bytes:     Inclusive upper bound on the document size.
        default_model: Model used when none (or a blank one) was given.

    Raises:
        SubmissionValidationError: question or document missing.
        UploadError:               unsupported media type or oversized file.
    """
    question = (submission.question or "").strip()
    if not question:
        raise SubmissionValidationError("missing question")

    document = submission.document
    if document is None:
        raise SubmissionValidationError("missing document")

    if document.media_type not in ALLOWED_MEDIA_TYPES:
        raise UploadError(
            f"unsupported media type: {document.media_type or 'unknown'}"
        )

    if document.size > max_bytes:
        raise UploadError("file too large")

    model = (submission.model or "").strip() or default_model
    return ValidatedSubmission(question=question, document=document, model=model)
