from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Mapping, NotRequired, TypedDict, cast

Mode = Literal["bkt", "llm"]

MODES: tuple[Mode, ...] = ("bkt", "llm")

QuestionId = str | int


class QuestionWire(TypedDict):
    ID: QuestionId
    Text: str
    Options: list[str]


class QuestionResponseWire(TypedDict):
    question: QuestionWire
    current_knowledge: NotRequired[float]
    selection_reasoning: NotRequired[str]
    feedback: NotRequired[str]


class AnswerResponseWire(TypedDict):
    correct: bool
    correct_answer: str
    session_complete: bool
    feedback: NotRequired[str]
    current_knowledge: NotRequired[float]


class UserModelWire(TypedDict, total=False):
    knowledge_level: float
    confidence: float
    learning_rate: float
    pattern_consistency: float
    difficulty_tolerance: float


class MetricsWire(TypedDict, total=False):
    mode: str
    current_knowledge: float
    knowledge_history: list[float]
    answer_history: list[bool]
    difficulty_history: list[float]
    parameters: dict[str, float]
    user_model: UserModelWire


def parse_mode(value: str) -> Mode:
    """Normalise a user-supplied mode string, rejecting anything unknown."""
    mode = (value or "").strip().lower()
    if mode not in MODES:
        raise ValueError(f"Unknown quiz mode: {value!r} (expected one of {', '.join(MODES)})")
    return cast(Mode, mode)


def _optional_float(value: Any) -> float | None:
    if value is None:
        return None
    return float(value)


def _optional_text(value: Any) -> str | None:
    if not value:
        return None
    return str(value)


def _mapping(name: str, value: Any) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise TypeError(f"{name} must be an object, got {type(value).__name__}")
    return value


@dataclass(slots=True)
class Session:
    """One bounded attempt at the quiz, owned by the session controller."""

    id: str
    mode: Mode
    answered_count: int = 0
    correct_count: int = 0

    def record_answer(self, correct: bool) -> None:
        self.answered_count += 1
        if correct:
            self.correct_count += 1


@dataclass(frozen=True, slots=True)
class Question:
    id: QuestionId
    text: str
    options: tuple[str, ...]

    @classmethod
    def from_wire(cls, data: QuestionWire) -> Question:
        return cls(
            id=data["ID"],
            text=str(data.get("Text", "")),
            options=tuple(str(option) for option in data.get("Options") or ()),
        )


@dataclass(frozen=True, slots=True)
class QuestionPayload:
    question: Question
    current_knowledge: float | None = None
    selection_reasoning: str | None = None

    @classmethod
    def from_wire(cls, data: QuestionResponseWire) -> QuestionPayload:
        return cls(
            question=Question.from_wire(data["question"]),
            current_knowledge=_optional_float(data.get("current_knowledge")),
            selection_reasoning=_optional_text(data.get("selection_reasoning")),
        )


@dataclass(frozen=True, slots=True)
class AnswerResult:
    correct: bool
    correct_answer: str
    feedback: str | None = None
    session_complete: bool = False
    current_knowledge: float | None = None

    @classmethod
    def from_wire(cls, data: AnswerResponseWire) -> AnswerResult:
        return cls(
            correct=bool(data["correct"]),
            correct_answer=str(data.get("correct_answer", "")),
            feedback=_optional_text(data.get("feedback")),
            session_complete=bool(data.get("session_complete", False)),
            current_knowledge=_optional_float(data.get("current_knowledge")),
        )


@dataclass(frozen=True, slots=True)
class BKTParameters:
    """Prior, transfer, slip and guess probabilities of the tracing model."""

    l0: float
    t: float
    s: float
    g: float

    def to_wire(self) -> dict[str, float]:
        return {"l0": self.l0, "t": self.t, "s": self.s, "g": self.g}

    @classmethod
    def from_wire(cls, data: Mapping[str, Any]) -> BKTParameters:
        return cls(
            l0=float(data.get("l0", 0.0)),
            t=float(data.get("t", 0.0)),
            s=float(data.get("s", 0.0)),
            g=float(data.get("g", 0.0)),
        )


@dataclass(frozen=True, slots=True)
class UserModel:
    knowledge_level: float
    confidence: float
    learning_rate: float
    pattern_consistency: float
    difficulty_tolerance: float = 0.0

    @classmethod
    def from_wire(cls, data: UserModelWire) -> UserModel:
        return cls(
            knowledge_level=float(data.get("knowledge_level", 0.0)),
            confidence=float(data.get("confidence", 0.0)),
            learning_rate=float(data.get("learning_rate", 0.0)),
            pattern_consistency=float(data.get("pattern_consistency", 0.0)),
            difficulty_tolerance=float(data.get("difficulty_tolerance", 0.0)),
        )


@dataclass(frozen=True, slots=True)
class MetricsSnapshot:
    """Full metrics payload for a session; always replaced, never patched."""

    mode: Mode
    current_knowledge: float | None = None
    knowledge_history: tuple[float, ...] = field(default_factory=tuple)
    answer_history: tuple[bool, ...] = field(default_factory=tuple)
    difficulty_history: tuple[float, ...] = field(default_factory=tuple)
    parameters: BKTParameters | None = None
    user_model: UserModel | None = None

    @classmethod
    def from_wire(cls, data: MetricsWire, *, mode: Mode) -> MetricsSnapshot:
        """Parse a metrics body; BKT fields the server leaves out stay unset."""
        raw_mode = data.get("mode")
        snapshot_mode = parse_mode(raw_mode) if raw_mode else mode
        parameters = data.get("parameters")
        user_model = data.get("user_model")
        return cls(
            mode=snapshot_mode,
            current_knowledge=_optional_float(data.get("current_knowledge")),
            knowledge_history=tuple(float(v) for v in data.get("knowledge_history") or ()),
            answer_history=tuple(bool(v) for v in data.get("answer_history") or ()),
            difficulty_history=tuple(float(v) for v in data.get("difficulty_history") or ()),
            parameters=BKTParameters.from_wire(_mapping("parameters", parameters)) if parameters else None,
            user_model=UserModel.from_wire(cast(UserModelWire, _mapping("user_model", user_model))) if user_model else None,
        )


__all__ = [
    "AnswerResponseWire",
    "AnswerResult",
    "BKTParameters",
    "MODES",
    "MetricsSnapshot",
    "MetricsWire",
    "Mode",
    "Question",
    "QuestionId",
    "QuestionPayload",
    "QuestionResponseWire",
    "QuestionWire",
    "Session",
    "UserModel",
    "UserModelWire",
    "parse_mode",
]
