"""Shared fixtures: an in-memory scoring service behind httpx.MockTransport."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

import httpx
import pytest

from adaptive_quiz.controller import SessionController
from adaptive_quiz.transport import ScoringClient

BASE_URL = "http://scoring.test"


@dataclass
class FakeScoringService:
    """Serves ten two-option questions; 'A' is always the right answer."""

    session_id: str = "s1"
    session_length: int = 10
    fail: set[str] = field(default_factory=set)
    metrics: dict[str, Any] = field(default_factory=dict)
    calls: list[tuple[str, str]] = field(default_factory=list)
    start_bodies: list[dict[str, Any]] = field(default_factory=list)
    answered: int = 0
    served: int = 0

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.calls.append((request.method, path))

        if path in self.fail:
            if "network" in self.fail:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(500, json={"error": f"boom on {path}"})

        if path == "/session/start":
            body = json.loads(request.content)
            self.start_bodies.append(body)
            return httpx.Response(200, json={"session_id": self.session_id, "mode": body["mode"]})

        if path == "/session/question":
            if request.url.params.get("session_id") != self.session_id:
                return httpx.Response(404, json={"error": "Session not found"})
            self.served += 1
            return httpx.Response(200, json={
                "question": {"ID": f"q{self.served}", "Text": f"Question {self.served}?", "Options": ["A", "B"]},
                "current_knowledge": 0.01,
                "selection_reasoning": "Picked an easy one to start.",
            })

        if path == "/session/answer":
            body = json.loads(request.content)
            self.answered += 1
            correct = body["user_answer"] == "A"
            return httpx.Response(200, json={
                "correct": correct,
                "correct_answer": "A",
                "feedback": "Nice work." if correct else "Review this topic.",
                "current_knowledge": 0.4,
                "session_complete": self.answered >= self.session_length,
            })

        if path == "/session/metrics":
            return httpx.Response(200, json=self.metrics)

        return httpx.Response(404, json={"error": "not found"})

    def remote_calls(self) -> int:
        return len(self.calls)


@pytest.fixture
def service() -> FakeScoringService:
    return FakeScoringService()


@pytest.fixture
def client(service: FakeScoringService) -> ScoringClient:
    return ScoringClient(BASE_URL, transport=httpx.MockTransport(service.handler))


@pytest.fixture
def controller(client: ScoringClient) -> SessionController:
    return SessionController(client)
