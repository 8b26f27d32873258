from __future__ import annotations
import logging
import math
from typing import Dict, Iterable, Mapping, Optional, Tuple

from . import config
from .integrity import bucket_assignment, is_corrupted
from .types import Option, Question, Quiz, ScoringOutcome, SubmissionAnswer

log = logging.getLogger(__name__)


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def _selected(quiz: Quiz, answer: SubmissionAnswer) -> Tuple[Optional[Question], Optional[Option]]:
    question = quiz.question(answer.question_id)
    if question is None:
        return None, None
    return question, question.option(answer.option_id)


def max_possible(quiz: Quiz) -> int:
    """Sum over all questions of the best option value, answered or not."""
    return sum(q.max_value() for q in quiz.questions)


def score_simple(quiz: Quiz, answers: Iterable[SubmissionAnswer]) -> ScoringOutcome:
    total = 0
    for ans in answers:
        question, option = _selected(quiz, ans)
        if option is None:
            log.debug("quiz=%s skip answer %s/%s (unknown id)", quiz.id, ans.question_id, ans.option_id)
            continue
        # repeated answers to one question all count
        total += option.value

    max_score = max_possible(quiz)
    if max_score > 0:
        score = min(total, max_score)
        percentage = max(0, min(100, _round_half_up(total / max_score * 100)))
    else:
        score, percentage = total, 0
    return ScoringOutcome(score=score, max_score=max_score, percentage=percentage)


def dimension_totals(
    quiz: Quiz,
    answers: Iterable[SubmissionAnswer],
    links: Optional[Mapping[str, str]] = None,
) -> Dict[str, float]:
    """Per-dimension point totals keyed by short name.

    ``links`` overrides question -> dimension linkage (question_id -> dimension_id);
    without it each question's own ``dimension_id`` is used.
    """
    scores: Dict[str, float] = {d.short_name: 0 for d in quiz.ordered_dimensions()}
    for ans in answers:
        question, option = _selected(quiz, ans)
        if question is None:
            continue
        dim_id = links.get(question.id) if links is not None else question.dimension_id
        dimension = quiz.dimension(dim_id)
        if dimension is None or option is None:
            log.debug("quiz=%s answer on question %s has no dimension/option", quiz.id, ans.question_id)
            continue
        scores[dimension.short_name] += option.value
    return scores


def score_complex(quiz: Quiz, answers: Iterable[SubmissionAnswer]) -> ScoringOutcome:
    answers = list(answers)
    if config.INLINE_REPAIR_ENABLED and is_corrupted(quiz):
        log.warning(
            "quiz=%s has no question linked to a dimension; scoring with order buckets",
            quiz.id,
        )
        scores = dimension_totals(quiz, answers, links=bucket_assignment(quiz))
        return ScoringOutcome(dimension_scores=scores, degraded=True)
    return ScoringOutcome(dimension_scores=dimension_totals(quiz, answers))


def score(quiz: Quiz, answers: Iterable[SubmissionAnswer]) -> ScoringOutcome:
    """Score a submission; classification fields are left empty."""
    if quiz.is_complex:
        return score_complex(quiz, answers)
    return score_simple(quiz, answers)
