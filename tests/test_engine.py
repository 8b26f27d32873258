from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from quiz_core.engine import QuizEngine
from quiz_core.errors import NotFound, Unavailable, ValidationFailed
from quiz_core.types import Submission
from tests.conftest import (
    ISTJ_PICKS,
    MemoryRepository,
    answer_values,
    build_mbti_quiz,
    build_simple_quiz,
    mbti_answers,
)


def _submission(quiz, picks, minutes=10.0):
    return Submission(quiz_id=quiz.id, answers=answer_values(quiz, picks), time_spent=minutes)


def test_create_rejects_invalid_definition(memory_repo):
    engine = QuizEngine(memory_repo)
    quiz = build_mbti_quiz()
    quiz.questions[4].dimension_id = "elsewhere"
    with pytest.raises(ValidationFailed) as err:
        engine.create_quiz(quiz)
    assert err.value.reason == "invalid-dimension-reference"
    assert err.value.errors[0].field == "questions[4].dimensionId"
    assert memory_repo.get_quiz(quiz.id) is None


def test_create_resets_counters_and_records_author(memory_repo, simple_quiz):
    simple_quiz.total_attempts = 99
    saved = QuizEngine(memory_repo).create_quiz(simple_quiz, created_by="author-1")
    assert saved.total_attempts == 0
    assert memory_repo.get_quiz(simple_quiz.id).created_by == "author-1"


def test_create_refuses_existing_id(simple_quiz):
    repo = MemoryRepository()
    engine = QuizEngine(repo)
    engine.create_quiz(simple_quiz, created_by="author-1")
    engine.submit(_submission(simple_quiz, [4, 4, 4, 4, 4]), "u1")

    clash = build_simple_quiz()
    clash.title = "Hijacked"
    with pytest.raises(ValidationFailed) as err:
        engine.create_quiz(clash, created_by="author-2")
    assert err.value.reason == "duplicate-quiz-id"
    assert err.value.errors[0].field == "id"

    stored = repo.get_quiz(simple_quiz.id)
    assert stored.title == "Focus habits"
    assert stored.created_by == "author-1"
    assert stored.total_attempts == 1


def test_unknown_ids_leave_no_locks_behind(memory_repo, simple_quiz):
    engine = QuizEngine(memory_repo)
    for i in range(5):
        with pytest.raises(NotFound):
            engine.submit(Submission(quiz_id=f"missing-{i}", answers=[]), "u1")
        with pytest.raises(NotFound):
            engine.repair(f"missing-{i}")
        with pytest.raises(NotFound):
            engine.update_quiz(f"missing-{i}", build_simple_quiz())
    assert engine._locks == {}

    engine.create_quiz(simple_quiz)
    engine.submit(_submission(simple_quiz, [1, 1, 1, 1, 1]), "u1")
    assert list(engine._locks) == [simple_quiz.id]


def test_submit_unknown_quiz(memory_repo):
    engine = QuizEngine(memory_repo)
    with pytest.raises(NotFound):
        engine.submit(Submission(quiz_id="missing", answers=[]), "u1")


@pytest.mark.parametrize("status, public", [("DRAFT", True), ("ARCHIVED", True), ("ACTIVE", False)])
def test_submit_requires_public_active_quiz(status, public):
    quiz = build_simple_quiz()
    quiz.status = status
    quiz.is_public = public
    engine = QuizEngine(MemoryRepository([quiz]))
    with pytest.raises(Unavailable):
        engine.submit(_submission(quiz, [4, 4, 4, 4, 4]), "u1")


def test_submit_rejects_out_of_range_time(simple_quiz):
    engine = QuizEngine(MemoryRepository([simple_quiz]))
    with pytest.raises(ValidationFailed) as err:
        engine.submit(_submission(simple_quiz, [1], minutes=2000), "u1")
    assert err.value.reason == "invalid-time-spent"


def test_submit_persists_result_and_updates_counters(simple_quiz):
    repo = MemoryRepository([simple_quiz])
    engine = QuizEngine(repo)

    first = engine.submit(_submission(simple_quiz, [4, 4, 3, 2, 0], minutes=10), "u1")
    engine.submit(_submission(simple_quiz, [2, 2, 1, 1, 1], minutes=20), "u2")

    assert first.user_id == "u1"
    assert first.outcome.score == 13
    assert first.outcome.classification == "Intermediate"
    assert first.completed_at is not None
    assert engine.get_result(first.id) == first

    stored = repo.get_quiz(simple_quiz.id)
    assert stored.total_attempts == 2
    assert stored.completed_attempts == 2
    assert stored.average_score == pytest.approx(10.0)
    assert stored.average_completion_time == pytest.approx(15.0)

    stats = engine.analytics(simple_quiz.id)
    assert stats.total_attempts == 2
    assert stats.average_score == pytest.approx(10.0)


def test_get_result_missing(memory_repo):
    with pytest.raises(NotFound):
        QuizEngine(memory_repo).get_result("nope")


def test_concurrent_submissions_keep_every_attempt(simple_quiz):
    repo = MemoryRepository([simple_quiz])
    engine = QuizEngine(repo)
    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(lambda i: engine.submit(_submission(simple_quiz, [4, 4, 4, 4, 4]), f"u{i}"), range(40)))
    stored = repo.get_quiz(simple_quiz.id)
    assert stored.total_attempts == 40
    assert stored.average_score == pytest.approx(20.0)
    assert len(repo.list_results(simple_quiz.id)) == 40


def test_update_keeps_identity_and_counters(simple_quiz):
    repo = MemoryRepository([simple_quiz])
    engine = QuizEngine(repo)
    engine.submit(_submission(simple_quiz, [4, 4, 4, 4, 4]), "u1")

    draft = build_simple_quiz(quiz_id="ignored")
    draft.title = "Deep focus"
    updated = engine.update_quiz(simple_quiz.id, draft)

    assert updated.id == simple_quiz.id
    assert updated.title == "Deep focus"
    assert repo.get_quiz(simple_quiz.id).total_attempts == 1


def test_update_cannot_change_quiz_type(simple_quiz):
    engine = QuizEngine(MemoryRepository([simple_quiz]))
    with pytest.raises(ValidationFailed) as err:
        engine.update_quiz(simple_quiz.id, build_mbti_quiz())
    assert err.value.reason == "quiz-type-change"
    with pytest.raises(NotFound):
        engine.update_quiz("missing", build_simple_quiz())


def test_repair_stops_degraded_scoring():
    quiz = build_mbti_quiz(linked=False)
    repo = MemoryRepository([quiz])
    engine = QuizEngine(repo)

    before = engine.submit(Submission(quiz.id, mbti_answers(quiz, ISTJ_PICKS), 5), "u1")
    assert before.outcome.degraded is True
    assert before.outcome.classification == "ISTJ"
    assert not engine.inspect(quiz.id).is_valid

    report = engine.repair(quiz.id)
    assert report.success and report.issues_found
    assert engine.inspect(quiz.id).is_valid
    assert engine.repair(quiz.id).issues_found == []

    after = engine.submit(Submission(quiz.id, mbti_answers(quiz, ISTJ_PICKS), 5), "u1")
    assert after.outcome.degraded is False
    assert after.outcome.dimension_scores == before.outcome.dimension_scores
