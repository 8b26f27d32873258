"""Errors raised at the engine boundary.

Scoring, classification and analytics never raise on stored data; these
exceptions are reserved for quiz lookup, submission gating and definition
writes, and the API layer maps each one to an HTTP status.
"""

from __future__ import annotations

from typing import List, Optional

from .types import ValidationIssue


class QuizError(Exception):
    """Base class for engine boundary errors."""


class NotFound(QuizError):
    def __init__(self, entity: str, entity_id: str) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} '{entity_id}' not found")


class ValidationFailed(QuizError):
    """A definition failed validation.

    ``reason`` is the code of the first error (``invalid-dimension-reference``,
    ``dimension-mismatch``, ``missing-grading-criteria`` ...) so callers can
    branch on it without walking ``errors``.
    """

    def __init__(self, reason: str, errors: Optional[List[ValidationIssue]] = None, message: str = "") -> None:
        self.reason = reason
        self.errors = list(errors or [])
        super().__init__(message or f"quiz definition is invalid: {reason}")


class Unavailable(QuizError):
    def __init__(self, quiz_id: str) -> None:
        self.quiz_id = quiz_id
        super().__init__(f"quiz '{quiz_id}' is not available")
