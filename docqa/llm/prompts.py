"""Prompt templates and composition for document question answering."""
from __future__ import annotations

from docqa.errors import DocumentIOError

# ── System instruction ───────────────────────────────────

SYSTEM_INSTRUCTION = (
    "You are a helpful assistant designed to answer questions "
    "using only the provided text context."
)


# ── Document question ────────────────────────────────────

DOCUMENT_QUESTION = """Answer the following question based on the provided document.

--- DOCUMENT START ---
{document}
--- DOCUMENT END ---

Question: {question}
"""


def decode_document(content: bytes) -> str:
    """Decode an uploaded buffer as strict UTF-8."""
    try:
        return content.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DocumentIOError("document is not valid UTF-8 text") from exc


def compose_prompt(content: bytes, question: str) -> str:
    """Render the user message embedding the whole document and the question.

    The document is inserted verbatim; it is never truncated.
    """
    return DOCUMENT_QUESTION.format(document=decode_document(content), question=question)


def build_messages(prompt: str) -> list[dict[str, str]]:
    """Return the two chat messages sent for every completion."""
    return [
        {"role": "system", "content": SYSTEM_INSTRUCTION},
        {"role": "user", "content": prompt},
    ]
