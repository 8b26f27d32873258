# quiz_core/engine.py
from __future__ import annotations
import dataclasses
import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

from . import config
from .analytics import aggregate
from .classify import evaluate
from .definition import validate_definition
from .errors import NotFound, Unavailable, ValidationFailed
from .integrity import inspect_quiz, repair_quiz
from .repository import QuizRepository
from .types import (
    IntegrityReport,
    Quiz,
    QuizAnalytics,
    QuizResult,
    RepairReport,
    Submission,
    ValidationIssue,
)

log = logging.getLogger(__name__)

_STAT_FIELDS = ("total_attempts", "completed_attempts", "average_score", "average_completion_time")


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _raise_invalid(errors: List[ValidationIssue]) -> None:
    if errors:
        raise ValidationFailed(errors[0].code, errors)


class QuizEngine:
    """Gatekeeper between callers and the scoring core.

    Looks quizzes up, enforces availability and definition validity, persists
    results and keeps per-quiz counters.  Submissions and repairs against the
    same quiz are serialised on a per-quiz lock, so counters are updated by a
    single writer and no submission sees a half-repaired definition.
    """

    def __init__(self, repo: QuizRepository) -> None:
        self.repo = repo
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock(self, quiz_id: str) -> threading.Lock:
        # only quizzes that exist get a lock; unknown ids raise NotFound
        with self._locks_guard:
            lock = self._locks.get(quiz_id)
            if lock is None:
                self._require(quiz_id)
                lock = self._locks[quiz_id] = threading.Lock()
            return lock

    def _require(self, quiz_id: str) -> Quiz:
        quiz = self.repo.get_quiz(quiz_id)
        if quiz is None:
            raise NotFound("quiz", quiz_id)
        return quiz

    # ---- definitions ----
    def get_quiz(self, quiz_id: str) -> Quiz:
        return self._require(quiz_id)

    def create_quiz(self, quiz: Quiz, created_by: Optional[str] = None) -> Quiz:
        _raise_invalid(validate_definition(quiz).errors)
        if created_by:
            quiz.created_by = created_by
        quiz.total_attempts = quiz.completed_attempts = 0
        quiz.average_score = quiz.average_completion_time = 0.0
        # the guard also keeps a concurrent submit from locking a half-created id
        with self._locks_guard:
            if self.repo.get_quiz(quiz.id) is not None:
                raise ValidationFailed(
                    "duplicate-quiz-id",
                    [ValidationIssue("duplicate-quiz-id", "id", f"A quiz with id {quiz.id!r} already exists")],
                )
            self.repo.save_quiz(quiz)
        log.info("quiz created id=%s type=%s questions=%d", quiz.id, quiz.quiz_type, len(quiz.questions))
        return quiz

    def update_quiz(self, quiz_id: str, draft: Quiz) -> Quiz:
        with self._lock(quiz_id):
            current = self._require(quiz_id)
            if draft.quiz_type != current.quiz_type:
                raise ValidationFailed(
                    "quiz-type-change",
                    [ValidationIssue("quiz-type-change", "quizType", "A quiz cannot change between SIMPLE and COMPLEX")],
                )
            _raise_invalid(validate_definition(draft).errors)
            updated = dataclasses.replace(
                draft,
                id=current.id,
                created_by=current.created_by,
                **{name: getattr(current, name) for name in _STAT_FIELDS},
            )
            self.repo.save_quiz(updated)
        log.info("quiz updated id=%s", quiz_id)
        return updated

    # ---- submissions ----
    def submit(self, submission: Submission, user_id: Optional[str] = None) -> QuizResult:
        if not 0 <= submission.time_spent <= config.MAX_TIME_SPENT:
            raise ValidationFailed(
                "invalid-time-spent",
                [ValidationIssue("invalid-time-spent", "timeSpent", f"timeSpent must be between 0 and {config.MAX_TIME_SPENT:g}")],
            )
        with self._lock(submission.quiz_id):
            quiz = self._require(submission.quiz_id)
            if not quiz.is_public or quiz.status != "ACTIVE":
                raise Unavailable(quiz.id)

            outcome = evaluate(quiz, submission.answers)
            now = utcnow_iso()
            result = QuizResult(
                id=str(uuid.uuid4()),
                quiz_id=quiz.id,
                user_id=user_id,
                time_spent=float(submission.time_spent),
                answers=tuple(submission.answers),
                outcome=outcome,
                completed_at=now,
                created_at=now,
            )
            self.repo.save_result(result)
            self._record_stats(quiz, result)
        log.info(
            "submission quiz=%s result=%s classification=%s degraded=%s",
            quiz.id, result.id, outcome.classification, outcome.degraded,
        )
        return result

    def _record_stats(self, quiz: Quiz, result: QuizResult) -> None:
        # running means instead of re-reading every historical result
        quiz.total_attempts += 1
        quiz.completed_attempts += 1
        n = quiz.completed_attempts
        score = float(result.outcome.score or 0) if not quiz.is_complex else 0.0
        quiz.average_score += (score - quiz.average_score) / n
        quiz.average_completion_time += (result.time_spent - quiz.average_completion_time) / n
        self.repo.save_quiz(quiz)

    def get_result(self, result_id: str) -> QuizResult:
        result = self.repo.get_result(result_id)
        if result is None:
            raise NotFound("result", result_id)
        return result

    # ---- reporting / maintenance ----
    def analytics(self, quiz_id: str) -> QuizAnalytics:
        quiz = self._require(quiz_id)
        return aggregate(quiz, self.repo.list_results(quiz_id))

    def inspect(self, quiz_id: str) -> IntegrityReport:
        return inspect_quiz(self._require(quiz_id))

    def repair(self, quiz_id: str) -> RepairReport:
        with self._lock(quiz_id):
            quiz = self._require(quiz_id)
            fixed, report = repair_quiz(quiz)
            if report.issues_found:
                self.repo.save_quiz(fixed)
                log.info("quiz repaired id=%s issues=%d", quiz_id, len(report.issues_found))
        return report
