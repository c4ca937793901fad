"""HTTP client for the remote scoring service (start, question, answer, metrics)."""

from __future__ import annotations

import logging
from typing import Any, cast

import httpx

from .errors import FetchFailure, StartFailure, SubmitFailure, TransportError
from .models import (
    AnswerResponseWire,
    AnswerResult,
    BKTParameters,
    MetricsSnapshot,
    MetricsWire,
    Mode,
    QuestionId,
    QuestionPayload,
    QuestionResponseWire,
)

logger = logging.getLogger(__name__)


def _error_message(response: httpx.Response, fallback: str) -> str:
    """Prefer the service's own ``{"error": ...}`` text over a generic message."""
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return fallback


class ScoringClient:
    """Async wrapper around the four remote operations.

    Every failure is raised as the TransportError subclass that matches the
    operation, so callers can decide how to recover without inspecting httpx.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    async def __aenter__(self) -> ScoringClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        failure: type[TransportError],
        fallback: str,
        **kwargs: Any,
    ) -> dict[str, Any]:
        logger.debug("%s %s", method, path)
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise failure(f"{fallback}: {exc}") from exc

        if response.is_error:
            message = _error_message(response, fallback)
            logger.warning("%s %s returned %s: %s", method, path, response.status_code, message)
            raise failure(message, status_code=response.status_code)

        try:
            body = response.json()
        except ValueError as exc:
            raise failure(f"{fallback}: response was not JSON", status_code=response.status_code) from exc
        if not isinstance(body, dict):
            raise failure(f"{fallback}: unexpected response", status_code=response.status_code)
        return body

    async def start_session(self, mode: Mode, parameters: BKTParameters | None = None) -> str:
        payload: dict[str, Any] = {"mode": mode}
        if parameters is not None:
            payload.update(parameters.to_wire())
        body = await self._request(
            "POST", "/session/start", StartFailure, "Failed to start session", json=payload
        )
        session_id = body.get("session_id")
        if not session_id:
            raise StartFailure("Failed to start session: no session id returned")
        return str(session_id)

    async def fetch_question(self, session_id: str) -> QuestionPayload:
        body = await self._request(
            "GET",
            "/session/question",
            FetchFailure,
            "Failed to load question",
            params={"session_id": session_id},
        )
        try:
            return QuestionPayload.from_wire(cast(QuestionResponseWire, body))
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise FetchFailure(f"Failed to load question: malformed payload ({exc})") from exc

    async def submit_answer(self, session_id: str, question_id: QuestionId, user_answer: str) -> AnswerResult:
        body = await self._request(
            "POST",
            "/session/answer",
            SubmitFailure,
            "Failed to submit answer",
            json={"session_id": session_id, "question_id": question_id, "user_answer": user_answer},
        )
        try:
            return AnswerResult.from_wire(cast(AnswerResponseWire, body))
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise SubmitFailure(f"Failed to submit answer: malformed payload ({exc})") from exc

    async def fetch_metrics(self, session_id: str, *, mode: Mode) -> MetricsSnapshot:
        body = await self._request(
            "GET",
            "/session/metrics",
            FetchFailure,
            "Failed to load metrics",
            params={"session_id": session_id},
        )
        try:
            return MetricsSnapshot.from_wire(cast(MetricsWire, body), mode=mode)
        except (AttributeError, TypeError, ValueError) as exc:
            raise FetchFailure(f"Failed to load metrics: malformed payload ({exc})") from exc


__all__ = ["ScoringClient"]
