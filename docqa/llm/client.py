"""
docqa/llm/client.py

Async client for an OpenAI-compatible Chat Completions API.

One instance is created per process (at startup) and shared by every
request; it holds the credential and a pooled httpx.AsyncClient and is
never mutated after construction.

Every failure at request time (transport error, auth rejection, any
non-2xx status, undecodable body) is raised as UpstreamError.  By default
a single attempt is made; ``max_retries`` opts into tenacity-driven
retries of transport errors and 429/5xx responses.
"""
from __future__ import annotations

from typing import Any, Protocol

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from docqa.config import Settings, settings
from docqa.errors import MissingCredentialError, UpstreamError
from docqa.llm.prompts import build_messages

logger = structlog.get_logger(__name__)

_RETRYABLE_STATUS: frozenset[int] = frozenset({429, 500, 502, 503, 504})


class CompletionClient(Protocol):
    async def complete(self, prompt: str, model: str) -> dict[str, Any]: ...

    async def aclose(self) -> None: ...


def _is_retryable(exc: BaseException) -> bool:
    return isinstance(exc, UpstreamError) and exc.retryable


def _provider_message(response: httpx.Response) -> str:
    """Pull ``error.message`` out of a provider error body when present."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
    return f"provider returned HTTP {response.status_code} {response.reason_phrase}".strip()


class OpenAIChatClient:
    """Chat Completions client over httpx."""

    def __init__(
        self,
        api_key: str,
        base_url: str = settings.openai_base_url,
        timeout: float = settings.completion_timeout,
        max_retries: int = settings.completion_max_retries,
        retry_backoff: float = 1.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not api_key:
            raise MissingCredentialError("OPENAI_API_KEY environment variable is not set.")
        self._max_retries = max(0, max_retries)
        self._retry_backoff = retry_backoff
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=httpx.Timeout(timeout, connect=10.0),
            headers={"Authorization": f"Bearer {api_key}"},
            transport=transport,
        )

    # ── Chat completion ──────────────────────────────────
    async def complete(self, prompt: str, model: str) -> dict[str, Any]:
        """Send the system + user messages and return the raw response body."""
        payload: dict[str, Any] = {
            "model": model,
            "messages": build_messages(prompt),
        }
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._max_retries + 1),
            wait=wait_exponential(multiplier=self._retry_backoff, max=10),
            retry=retry_if_exception(_is_retryable),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                data = await self._post(payload)
        logger.debug("completion_raw_received", model=model, prompt_len=len(prompt))
        return data

    async def _post(self, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            response = await self._http.post("/chat/completions", json=payload)
        except httpx.HTTPError as exc:
            logger.warning("completion_transport_failed", error=str(exc))
            raise UpstreamError(str(exc) or exc.__class__.__name__, retryable=True) from exc

        if response.is_error:
            message = _provider_message(response)
            logger.warning(
                "completion_rejected",
                status_code=response.status_code,
                error=message,
            )
            raise UpstreamError(
                message,
                status_code=response.status_code,
                retryable=response.status_code in _RETRYABLE_STATUS,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamError("provider returned a non-JSON response") from exc
        if not isinstance(data, dict):
            raise UpstreamError("provider returned an unexpected response shape")
        return data

    async def aclose(self) -> None:
        await self._http.aclose()


def build_completion_client(config: Settings = settings) -> OpenAIChatClient:
    """Construct the process-wide client; fails fast without a credential."""
    return OpenAIChatClient(
        api_key=config.openai_api_key,
        base_url=config.openai_base_url,
        timeout=config.completion_timeout,
        max_retries=config.completion_max_retries,
    )
