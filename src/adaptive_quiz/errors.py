"""Failure taxonomy shared by the transport client and the session controller."""

from __future__ import annotations


class QuizError(Exception):
    """Base class for every failure surfaced to the learner."""


class TransportError(QuizError):
    """A remote call failed: non-2xx status or a network error."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class StartFailure(TransportError):
    """The session could not be created; the learner has to start again."""


class FetchFailure(TransportError):
    """A question or metrics fetch failed; the screen is left as it was."""


class SubmitFailure(TransportError):
    """The answer was not accepted; the options are re-enabled for a retry."""


class InvalidTransition(QuizError):
    """An intent arrived in a state that does not accept it."""


__all__ = [
    "FetchFailure",
    "InvalidTransition",
    "QuizError",
    "StartFailure",
    "SubmitFailure",
    "TransportError",
]
