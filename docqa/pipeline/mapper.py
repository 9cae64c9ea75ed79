"""Response Mapper: provider body → CompletionResult."""
from __future__ import annotations

from typing import Any

from docqa.errors import UpstreamError
from docqa.models.submission import CompletionResult


def _first_message_content(raw: dict[str, Any]) -> str | None:
    choices = raw.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None
    message = first.get("message")
    if not isinstance(message, dict):
        return None
    content = message.get("content")
    return content if isinstance(content, str) else None


def extract_answer(raw: dict[str, Any]) -> CompletionResult:
    """Return the trimmed text of the first choice.

    Raises:
        UpstreamError: no choice, or the text is empty after trimming.
    """
    answer = (_first_message_content(raw) or "").strip()
    if not answer:
        raise UpstreamError("empty response")
    return CompletionResult(answer=answer)
