"""Metrics transform engine: raw per-question history -> display-ready series.

Every function here is a pure mapping. Nothing is clamped: values outside
[0, 1] are an upstream contract violation and simply produce odd-looking
output instead of an exception, so one bad field never blocks the rest.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Literal, Sequence

from .models import BKTParameters, MetricsSnapshot, Mode, UserModel

# Synthetic prior point (percent) shown before any evidence.
PRIOR_POINT_PCT = 1
RECENT_WINDOW = 5
DIFFICULTY_SCALE = 9

AGREEMENT_MARGIN_PCT = 5
LOW_CONFIDENCE = 0.7
LOW_CONSISTENCY = 0.6
POSITIVE_TREND = 0.6
PLATEAU_TREND = 0.4
STABLE_CONSISTENCY = 0.8
ERRATIC_CONSISTENCY = 0.5

CORRECT_GLYPH = "✓"
INCORRECT_GLYPH = "✗"
NO_STREAK = "-"

Outcome = Literal["correct", "incorrect"]


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positives, like a browser's Math.round."""
    return int(math.floor(value + 0.5))


def to_percent(value: float) -> int:
    return round_half_up(value * 100)


@dataclass(frozen=True, slots=True)
class KnowledgeSeries:
    labels: tuple[int, ...]
    values: tuple[int, ...]


@dataclass(frozen=True, slots=True)
class Streak:
    length: int
    outcome: Outcome | None

    @property
    def display(self) -> str:
        return str(self.length) if self.outcome is not None else NO_STREAK


@dataclass(frozen=True, slots=True)
class Accuracy:
    percent: int
    correct: int
    total: int

    @property
    def label(self) -> str:
        return f"{self.correct}/{self.total}"


@dataclass(frozen=True, slots=True)
class DifficultyBar:
    height_pct: float
    level: int


@dataclass(frozen=True, slots=True)
class UserModelView:
    knowledge_pct: int
    confidence_pct: int
    learning_rate_pct: int
    consistency_pct: int
    difficulty_tolerance: float


@dataclass(frozen=True, slots=True)
class MetricsView:
    mode: Mode
    current_knowledge_pct: int | None
    knowledge_series: KnowledgeSeries
    streak: Streak
    accuracy: Accuracy
    recent: tuple[str, ...]
    difficulty: tuple[DifficultyBar, ...]
    parameters: BKTParameters | None = None
    user_model: UserModelView | None = None
    insight: str | None = None


def to_knowledge_series(history: Sequence[float]) -> KnowledgeSeries:
    """Prepend the prior point and convert each sample to an integer percent."""
    values = (PRIOR_POINT_PCT, *(to_percent(v) for v in history))
    return KnowledgeSeries(labels=tuple(range(len(values))), values=values)


def compute_streak(answer_history: Sequence[bool]) -> Streak:
    """Length of the trailing run of outcomes equal to the most recent one."""
    if not answer_history:
        return Streak(length=0, outcome=None)
    last = answer_history[-1]
    length = 0
    for answer in reversed(answer_history):
        if answer != last:
            break
        length += 1
    return Streak(length=length, outcome="correct" if last else "incorrect")


def accuracy_from_counts(correct: int, total: int) -> Accuracy:
    percent = round_half_up(correct / total * 100) if total else 0
    return Accuracy(percent=percent, correct=correct, total=total)


def compute_accuracy(answer_history: Sequence[bool]) -> Accuracy:
    return accuracy_from_counts(sum(1 for answer in answer_history if answer), len(answer_history))


def recent_answers(answer_history: Sequence[bool], k: int = RECENT_WINDOW) -> tuple[str, ...]:
    """Glyphs for the last ``k`` answers, oldest first."""
    if k <= 0:
        return ()
    window = answer_history[max(0, len(answer_history) - k):]
    return tuple(CORRECT_GLYPH if answer else INCORRECT_GLYPH for answer in window)


def difficulty_bars(difficulty_history: Sequence[float]) -> tuple[DifficultyBar, ...]:
    return tuple(
        DifficultyBar(height_pct=value * 100, level=round_half_up(value * DIFFICULTY_SCALE))
        for value in difficulty_history
    )


def build_comparison_insight(bkt_knowledge: float | None, user_model: UserModel | None) -> str:
    """Short narrative contrasting the BKT estimate with the LLM user model.

    Clause order is fixed: agreement/disagreement, trend, then stability.
    """
    if bkt_knowledge is None or user_model is None:
        return "Need more data to compare the two models."

    bkt_pct = to_percent(bkt_knowledge)
    llm_pct = to_percent(user_model.knowledge_level)
    parts: list[str] = []

    if abs(user_model.knowledge_level * 100 - bkt_knowledge * 100) < AGREEMENT_MARGIN_PCT:
        parts.append(f"Both models agree: estimated mastery is around {bkt_pct}%.")
    elif user_model.knowledge_level > bkt_knowledge:
        parts.append(f"The LLM estimates higher knowledge ({llm_pct}%) than BKT ({bkt_pct}%).")
        if user_model.confidence < LOW_CONFIDENCE:
            parts.append("The LLM has low confidence in this estimate, so treat it with caution.")
    else:
        parts.append(f"BKT estimates higher knowledge ({bkt_pct}%) than the LLM ({llm_pct}%).")
        if user_model.pattern_consistency < LOW_CONSISTENCY:
            parts.append("The LLM may be reacting to an inconsistent answer pattern.")

    if user_model.learning_rate > POSITIVE_TREND:
        parts.append("The learner shows a positive trajectory.")
    elif user_model.learning_rate < PLATEAU_TREND:
        parts.append("Progress appears to have plateaued.")

    if user_model.pattern_consistency > STABLE_CONSISTENCY:
        parts.append("Performance has been stable.")
    elif user_model.pattern_consistency < ERRATIC_CONSISTENCY:
        parts.append("Performance has been erratic.")

    return " ".join(parts).strip()


def _user_model_view(user_model: UserModel) -> UserModelView:
    return UserModelView(
        knowledge_pct=to_percent(user_model.knowledge_level),
        confidence_pct=to_percent(user_model.confidence),
        learning_rate_pct=to_percent(user_model.learning_rate),
        consistency_pct=to_percent(user_model.pattern_consistency),
        difficulty_tolerance=user_model.difficulty_tolerance,
    )


def build_metrics_view(snapshot: MetricsSnapshot) -> MetricsView:
    """Assemble the full metrics panel for a freshly fetched snapshot."""
    is_llm = snapshot.mode == "llm"
    return MetricsView(
        mode=snapshot.mode,
        current_knowledge_pct=None if snapshot.current_knowledge is None else to_percent(snapshot.current_knowledge),
        knowledge_series=to_knowledge_series(snapshot.knowledge_history),
        streak=compute_streak(snapshot.answer_history),
        accuracy=compute_accuracy(snapshot.answer_history),
        recent=recent_answers(snapshot.answer_history),
        difficulty=difficulty_bars(snapshot.difficulty_history),
        parameters=None if is_llm else snapshot.parameters,
        user_model=_user_model_view(snapshot.user_model) if is_llm and snapshot.user_model else None,
        insight=build_comparison_insight(snapshot.current_knowledge, snapshot.user_model) if is_llm else None,
    )


__all__ = [
    "Accuracy",
    "DifficultyBar",
    "KnowledgeSeries",
    "MetricsView",
    "Streak",
    "UserModelView",
    "accuracy_from_counts",
    "build_comparison_insight",
    "build_metrics_view",
    "compute_accuracy",
    "compute_streak",
    "difficulty_bars",
    "recent_answers",
    "round_half_up",
    "to_knowledge_series",
    "to_percent",
]
