"""Adaptive quiz client: session controller, metrics engine and FastAPI front end."""

from .controller import AdvanceAction, QuizState, SessionController
from .errors import (
    FetchFailure,
    InvalidTransition,
    QuizError,
    StartFailure,
    SubmitFailure,
    TransportError,
)
from .transport import ScoringClient

__all__ = [
    "AdvanceAction",
    "FetchFailure",
    "InvalidTransition",
    "QuizError",
    "QuizState",
    "ScoringClient",
    "SessionController",
    "StartFailure",
    "SubmitFailure",
    "TransportError",
]
