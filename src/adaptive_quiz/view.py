"""Immutable view models built from controller state.

The renderer only ever reads these; the only thing flowing back from the
page is the learner's intent (start, chosen option, advance, restart).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from .controller import AdvanceAction, QuizState, SessionController
from .metrics import Accuracy, accuracy_from_counts, to_percent
from .models import Mode

Screen = Literal["start", "question", "complete"]
KnowledgeTier = Literal["low", "medium", "high"]
OptionMark = Literal["", "correct-answer", "incorrect-answer"]

ADVANCE_LABELS: dict[AdvanceAction, str] = {
    AdvanceAction.LOAD_NEXT: "Next Question",
    AdvanceAction.SHOW_RESULTS: "View Results",
}


def knowledge_tier(percent: int) -> KnowledgeTier:
    if percent < 30:
        return "low"
    if percent < 70:
        return "medium"
    return "high"


@dataclass(frozen=True, slots=True)
class KnowledgeView:
    percent: int
    tier: KnowledgeTier

    @property
    def label(self) -> str:
        return f"{self.percent}%"


@dataclass(frozen=True, slots=True)
class OptionView:
    text: str
    enabled: bool
    mark: OptionMark = ""


@dataclass(frozen=True, slots=True)
class FeedbackView:
    correct: bool
    headline: str
    correct_answer_line: str


@dataclass(frozen=True, slots=True)
class CompletionView:
    correct_count: int
    accuracy: Accuracy
    final_knowledge: KnowledgeView | None


@dataclass(frozen=True, slots=True)
class QuizView:
    screen: Screen
    mode: Mode | None = None
    question_number: int = 1
    progress_pct: float = 0.0
    question_text: str = ""
    options: tuple[OptionView, ...] = field(default_factory=tuple)
    feedback: FeedbackView | None = None
    advance_label: str | None = None
    retry_label: str | None = None
    knowledge: KnowledgeView | None = None
    llm_feedback: str | None = None
    selection_reasoning: str | None = None
    show_loading: bool = False
    completion: CompletionView | None = None
    notice: str | None = None


def knowledge_view(value: float | None) -> KnowledgeView | None:
    if value is None:
        return None
    percent = to_percent(value)
    return KnowledgeView(percent=percent, tier=knowledge_tier(percent))


def _feedback_view(correct: bool, correct_answer: str) -> FeedbackView:
    if correct:
        return FeedbackView(correct=True, headline="✓ Correct!", correct_answer_line="")
    return FeedbackView(
        correct=False,
        headline="✗ Incorrect",
        correct_answer_line=f"The correct answer is: {correct_answer}",
    )


def _option_views(controller: SessionController) -> tuple[OptionView, ...]:
    question = controller.current_question
    if question is None:
        return ()
    result = controller.last_result
    views: list[OptionView] = []
    for option in question.options:
        mark: OptionMark = ""
        if result is not None:
            if option == result.correct_answer:
                mark = "correct-answer"
            elif option == controller.last_answer and not result.correct:
                mark = "incorrect-answer"
        views.append(OptionView(text=option, enabled=controller.options_enabled, mark=mark))
    return tuple(views)


def build_view(controller: SessionController, *, notice: str | None = None) -> QuizView:
    """Map the controller's current state onto the screen the learner sees."""
    session = controller.session
    if controller.state is QuizState.IDLE or session is None:
        return QuizView(screen="start", notice=notice)

    is_bkt = session.mode == "bkt"
    knowledge = knowledge_view(controller.current_knowledge) if is_bkt else None

    if controller.state is QuizState.COMPLETE:
        completion = CompletionView(
            correct_count=session.correct_count,
            accuracy=accuracy_from_counts(session.correct_count, session.answered_count),
            final_knowledge=knowledge,
        )
        return QuizView(screen="complete", mode=session.mode, completion=completion, notice=notice)

    result = controller.last_result
    # Shown before the first question arrives, so the learner can retry the fetch.
    retry_label = "Retry" if controller.state is QuizState.AWAITING_QUESTION else None
    advance_label = None
    question_number = controller.question_number
    if controller.state is QuizState.AWAITING_FEEDBACK:
        # Still numbering the question whose feedback is on screen.
        question_number -= 1
        if controller.next_action is not None:
            advance_label = ADVANCE_LABELS[controller.next_action]

    return QuizView(
        screen="question",
        mode=session.mode,
        question_number=question_number,
        progress_pct=controller.progress * 100,
        question_text=controller.current_question.text if controller.current_question else "",
        options=_option_views(controller),
        feedback=_feedback_view(result.correct, result.correct_answer) if result else None,
        advance_label=advance_label,
        retry_label=retry_label,
        knowledge=knowledge,
        llm_feedback=controller.llm_feedback if not is_bkt else None,
        selection_reasoning=controller.selection_reasoning if not is_bkt else None,
        show_loading=not is_bkt,
        notice=notice,
    )


__all__ = [
    "ADVANCE_LABELS",
    "CompletionView",
    "FeedbackView",
    "KnowledgeView",
    "OptionView",
    "QuizView",
    "build_view",
    "knowledge_tier",
    "knowledge_view",
]
