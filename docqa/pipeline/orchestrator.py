"""
docqa/pipeline/orchestrator.py

The ask pipeline, shared by the HTTP route and the CLI.

Pipeline
--------
  Submission
      │
      ├─► validate_submission()   → ValidatedSubmission
      ├─► compose_prompt()        → str
      ├─► client.complete()       → raw provider body
      └─► extract_answer()        → CompletionResult

Each stage raises a DocQAError on failure and nothing after it runs.
The completion client is injected at construction so callers (and tests)
decide which provider implementation is used.
"""
from __future__ import annotations

import structlog

from docqa.config import settings
from docqa.llm.client import CompletionClient
from docqa.llm.prompts import compose_prompt
from docqa.models.submission import CompletionResult, Submission
from docqa.pipeline.mapper import extract_answer
from docqa.pipeline.validator import validate_submission

logger = structlog.get_logger(__name__)


class AskPipeline:
    """Validate → Compose → Call → Map for one submission at a time.

    Holds no per-request state, so one instance serves concurrent requests.
    """

    def __init__(
        self,
        client: CompletionClient,
        max_upload_bytes: int = settings.max_upload_bytes,
        default_model: str = settings.default_model,
    ) -> None:
        self._client = client
        self._max_upload_bytes = max_upload_bytes
        self._default_model = default_model

    async def run(self, submission: Submission) -> CompletionResult:
        # ── Stage 1: validate ──────────────────────────────────────────────
        validated = validate_submission(
            submission,
            max_bytes=self._max_upload_bytes,
            default_model=self._default_model,
        )
        logger.info(
            "ask_received",
            question_preview=validated.question[:50],
            filename=validated.document.filename,
            size_bytes=validated.document.size,
            model=validated.model,
        )

        # ── Stage 2: compose ───────────────────────────────────────────────
        prompt = compose_prompt(validated.document.content, validated.question)
        logger.info("prompt_composed", prompt_chars=len(prompt))

        # ── Stage 3: call provider ─────────────────────────────────────────
        logger.info("completion_requested", model=validated.model)
        raw = await self._client.complete(prompt, validated.model)
        choices = raw.get("choices")
        logger.info(
            "completion_received",
            choices=len(choices) if isinstance(choices, list) else 0,
        )

        # ── Stage 4: map ───────────────────────────────────────────────────
        result = extract_answer(raw)
        logger.info("ask_answered", model=validated.model, answer_chars=len(result.answer))
        return result
