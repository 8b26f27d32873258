"""Detection and repair of lost question -> dimension links.

A COMPLEX quiz whose questions all lost their ``dimension_id`` (definition and
question sets desynchronised by an old migration) scores every dimension as 0.
The reconciliation below rebuilds a link set from ordering alone: questions
sorted by ``order`` are cut into ``ceil(questions / dimensions)``-sized
contiguous buckets, one per dimension in dimension order.  It is a heuristic,
never an authoritative linkage; the scorer uses it only to salvage a
submission, and the repair job persists it so the quiz stops degrading.
"""
from __future__ import annotations

import copy
import logging
import math
from typing import Dict, List, Tuple

from .types import IntegrityReport, Quiz, RepairReport

log = logging.getLogger(__name__)


def linked_count(quiz: Quiz) -> int:
    known = {d.id for d in quiz.dimensions}
    return sum(1 for q in quiz.questions if q.dimension_id in known)


def is_corrupted(quiz: Quiz) -> bool:
    return (
        quiz.is_complex
        and bool(quiz.questions)
        and bool(quiz.dimensions)
        and linked_count(quiz) == 0
    )


def bucket_indices(question_count: int, dimension_count: int) -> List[int]:
    """Dimension index for each question position, in question order."""
    if question_count <= 0 or dimension_count <= 0:
        return []
    size = math.ceil(question_count / dimension_count)
    return [min(i // size, dimension_count - 1) for i in range(question_count)]


def bucket_assignment(quiz: Quiz) -> Dict[str, str]:
    """question_id -> dimension_id from the order-bucket heuristic."""
    questions = quiz.ordered_questions()
    dimensions = quiz.ordered_dimensions()
    idx = bucket_indices(len(questions), len(dimensions))
    return {q.id: dimensions[i].id for q, i in zip(questions, idx)}


def inspect_quiz(quiz: Quiz) -> IntegrityReport:
    """Read-only health check of a persisted quiz."""
    report = IntegrityReport()
    issues, warnings = report.issues, report.warnings

    if not quiz.questions:
        issues.append("No questions found")
    known = {d.id for d in quiz.dimensions}
    for q in quiz.ordered_questions():
        label = f"Question {q.order + 1}"
        if not q.options:
            issues.append(f"{label} has no options")
        elif len(q.options) < 2:
            issues.append(f"{label} has insufficient options")
        if not quiz.is_complex:
            continue
        if not q.dimension_id:
            issues.append(f"{label} missing dimensionId")
        elif q.dimension_id not in known:
            issues.append(f"{label} references invalid dimensionId: {q.dimension_id}")

    if quiz.is_complex:
        if not quiz.dimensions:
            issues.append("Complex quiz missing dimensions")
        for dim in quiz.ordered_dimensions():
            if dim.min_score is None or dim.max_score is None:
                issues.append(f"Dimension {dim.short_name} missing score range")
            if dim.threshold is None:
                warnings.append(f"Dimension {dim.short_name} missing threshold (may affect scoring)")
        if not quiz.rule_criteria:
            issues.append("Complex quiz missing grading criteria")
        for crit in quiz.rule_criteria:
            if crit.scoring_logic is None:
                issues.append(f"Complex grading criteria {crit.name} missing scoring logic")
    elif not quiz.range_criteria:
        warnings.append("Simple quiz missing grading criteria (will use fallback logic)")
    return report


def repair_quiz(quiz: Quiz) -> Tuple[Quiz, RepairReport]:
    """Return a repaired copy of ``quiz`` and what was changed.

    Questions without a resolvable dimension link get the bucket assignment;
    dimensions without score bounds get the sum of their questions' minimum
    and maximum option values.  Running it on its own output changes nothing.
    """
    fixed = copy.deepcopy(quiz)
    issues: List[str] = []
    if not fixed.is_complex:
        return fixed, RepairReport(True, "Quiz data repair completed. 0 issues found and addressed.", issues)

    known = {d.id for d in fixed.dimensions}
    unlinked = [q for q in fixed.questions if q.dimension_id not in known]
    if unlinked and fixed.dimensions:
        issues.append(f"{len(unlinked)} questions missing dimensionId")
        plan = bucket_assignment(fixed)
        by_id = {d.id: d for d in fixed.dimensions}
        for q in unlinked:
            target = plan[q.id]
            q.dimension_id = target
            issues.append(f"Fixed question {q.id} - assigned to dimension {by_id[target].short_name}")
            log.info("repair quiz=%s question=%s -> dimension=%s", fixed.id, q.id, target)

    for dim in fixed.dimensions:
        if dim.min_score is not None and dim.max_score is not None:
            continue
        members = [q for q in fixed.questions if q.dimension_id == dim.id and q.options]
        if not members:
            continue
        issues.append(f"Dimension {dim.short_name} missing minScore or maxScore")
        dim.min_score = sum(q.min_value() for q in members)
        dim.max_score = sum(q.max_value() for q in members)
        issues.append(f"Fixed dimension {dim.short_name} - set minScore: {dim.min_score}, maxScore: {dim.max_score}")

    message = f"Quiz data repair completed. {len(issues)} issues found and addressed."
    return fixed, RepairReport(True, message, issues)
