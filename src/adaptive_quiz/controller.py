"""Session state machine: lifecycle, question presentation and answer submission."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from enum import Enum
from typing import Iterator

from .config import DEFAULT_SESSION_LENGTH
from .errors import InvalidTransition, SubmitFailure
from .metrics import MetricsView, build_metrics_view
from .models import AnswerResult, BKTParameters, Question, Session, parse_mode
from .transport import ScoringClient

logger = logging.getLogger(__name__)


class QuizState(str, Enum):
    IDLE = "idle"
    AWAITING_QUESTION = "awaiting_question"
    QUESTION_ACTIVE = "question_active"
    AWAITING_FEEDBACK = "awaiting_feedback"
    COMPLETE = "complete"


class AdvanceAction(str, Enum):
    """What the advance button does once feedback is on screen."""

    LOAD_NEXT = "load_next"
    SHOW_RESULTS = "show_results"


class SessionController:
    """Owns the Session and the current Question and drives every transition.

    At most one intent talks to the service at a time: a second intent issued
    while a call is outstanding raises InvalidTransition instead of racing the
    first. Answer submission also disables the option controls; they are
    re-enabled only when the submission fails.
    """

    def __init__(
        self,
        client: ScoringClient,
        *,
        session_length: int = DEFAULT_SESSION_LENGTH,
        bkt_parameters: BKTParameters | None = None,
    ) -> None:
        self.client = client
        self.session_length = session_length
        self.bkt_parameters = bkt_parameters
        # Survives restart: a call issued before it still has to resolve.
        self._in_flight = False
        self._reset()

    def _reset(self) -> None:
        self.state = QuizState.IDLE
        self.session: Session | None = None
        self.current_question: Question | None = None
        self.next_action: AdvanceAction | None = None
        self.options_enabled = False
        self.last_answer: str | None = None
        self.last_result: AnswerResult | None = None
        self.llm_feedback: str | None = None
        self.selection_reasoning: str | None = None
        self.current_knowledge: float | None = None

    def _transition(self, state: QuizState) -> None:
        logger.info("Quiz state %s -> %s", self.state.value, state.value)
        self.state = state

    @contextmanager
    def _remote_call(self) -> Iterator[None]:
        """Hold the single remote-call slot for the duration of one intent."""
        if self._in_flight:
            raise InvalidTransition("Another request is still in progress.")
        self._in_flight = True
        try:
            yield
        finally:
            self._in_flight = False

    @property
    def busy(self) -> bool:
        return self._in_flight

    def _require_session(self) -> Session:
        if self.session is None:
            raise InvalidTransition("No active session. Start a new quiz first.")
        return self.session

    # ── Derived values ───────────────────────────────────────────────────────

    @property
    def answered_count(self) -> int:
        return self.session.answered_count if self.session else 0

    @property
    def correct_count(self) -> int:
        return self.session.correct_count if self.session else 0

    @property
    def progress(self) -> float:
        """Share of the assumed session length answered so far (display only)."""
        return self.answered_count / self.session_length

    @property
    def question_number(self) -> int:
        return self.answered_count + 1

    # ── Intents ──────────────────────────────────────────────────────────────

    async def start_session(self, mode: str) -> None:
        quiz_mode = parse_mode(mode)
        if self.state is not QuizState.IDLE:
            raise InvalidTransition("A quiz is already running. Restart it first.")

        with self._remote_call():
            session_id = await self.client.start_session(
                quiz_mode, self.bkt_parameters if quiz_mode == "bkt" else None
            )
            self.session = Session(id=session_id, mode=quiz_mode)
            logger.info("Started %s session %s", quiz_mode, session_id)
            self.next_action = AdvanceAction.LOAD_NEXT
            self._transition(QuizState.AWAITING_QUESTION)
            await self._fetch_next_question(self.session)

    def _check_can_load(self) -> Session:
        session = self._require_session()
        if self.state is QuizState.AWAITING_FEEDBACK:
            if self.next_action is not AdvanceAction.LOAD_NEXT:
                raise InvalidTransition("The session is complete; there are no more questions.")
        elif self.state is not QuizState.AWAITING_QUESTION:
            raise InvalidTransition(f"Cannot load a question while {self.state.value}.")
        return session

    async def _fetch_next_question(self, session: Session) -> Question:
        payload = await self.client.fetch_question(session.id)

        self.current_question = payload.question
        self.last_answer = None
        self.last_result = None
        self.llm_feedback = None
        self.next_action = None
        if session.mode == "llm" and payload.selection_reasoning:
            self.selection_reasoning = payload.selection_reasoning
        if session.mode == "bkt" and payload.current_knowledge is not None:
            self.current_knowledge = payload.current_knowledge
        self.options_enabled = True
        self._transition(QuizState.QUESTION_ACTIVE)
        return payload.question

    async def load_next_question(self) -> Question:
        session = self._check_can_load()
        with self._remote_call():
            return await self._fetch_next_question(session)

    async def select_answer(self, option_text: str) -> AnswerResult:
        session = self._require_session()
        if self.state is not QuizState.QUESTION_ACTIVE or self.current_question is None:
            raise InvalidTransition("There is no question waiting for an answer.")
        if not self.options_enabled:
            raise InvalidTransition("An answer is already being submitted.")

        with self._remote_call():
            self.options_enabled = False
            try:
                result = await self.client.submit_answer(session.id, self.current_question.id, option_text)
            except SubmitFailure:
                self.options_enabled = True
                raise

        session.record_answer(result.correct)
        self.last_answer = option_text
        self.last_result = result
        if session.mode == "llm" and result.feedback:
            self.llm_feedback = result.feedback
        if session.mode == "bkt" and result.current_knowledge is not None:
            self.current_knowledge = result.current_knowledge
        self.next_action = AdvanceAction.SHOW_RESULTS if result.session_complete else AdvanceAction.LOAD_NEXT
        self._transition(QuizState.AWAITING_FEEDBACK)
        return result

    async def advance(self) -> None:
        if self.next_action is None:
            raise InvalidTransition("Nothing to advance to.")
        if self._in_flight:
            raise InvalidTransition("Another request is still in progress.")
        if self.next_action is AdvanceAction.SHOW_RESULTS:
            self.next_action = None
            self._transition(QuizState.COMPLETE)
            return
        await self.load_next_question()

    def restart(self) -> None:
        """Drop the session locally; the server is not told."""
        if self.session is not None:
            logger.info("Discarding session %s", self.session.id)
        self._reset()

    async def refresh_metrics(self) -> MetricsView:
        session = self._require_session()
        with self._remote_call():
            snapshot = await self.client.fetch_metrics(session.id, mode=session.mode)
        return build_metrics_view(snapshot)


__all__ = ["AdvanceAction", "QuizState", "SessionController"]
