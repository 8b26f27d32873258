"""Consistency checks for quiz drafts before they are persisted.

Every check returns a :class:`ValidationReport` and never raises on the draft
it inspects.  ``validate_definition`` covers a whole quiz; the three
``validate_*`` helpers cover the steps of progressive authoring (top-level
fields, then dimensions, then questions against a known dimension set).
"""
from __future__ import annotations

from collections import Counter
from typing import Iterable, List, Optional, Sequence

from . import config
from .types import (
    Dimension,
    HighestLogic,
    Question,
    Quiz,
    QuizType,
    ThresholdLogic,
    TopNLogic,
    ValidationReport,
)


def _blank(text: Optional[str]) -> bool:
    return not (text or "").strip()


def validate_basic_info(quiz: Quiz) -> ValidationReport:
    report = ValidationReport()
    if _blank(quiz.title):
        report.add("missing-title", "title", "Title is required")
    if _blank(quiz.description):
        report.add("missing-description", "description", "Description is required")
    if _blank(quiz.category):
        report.add("missing-category", "category", "Category is required")
    if quiz.quiz_type not in ("SIMPLE", "COMPLEX"):
        report.add("invalid-quiz-type", "quizType", f"Unknown quiz type {quiz.quiz_type!r}")
    return report


def validate_dimensions(dimensions: Sequence[Dimension]) -> ValidationReport:
    report = ValidationReport()
    if not dimensions:
        report.add("no-dimensions", "dimensions", "COMPLEX quiz needs at least one dimension")
        return report
    if len(dimensions) > config.MAX_DIMENSIONS:
        report.add("too-many-dimensions", "dimensions", f"At most {config.MAX_DIMENSIONS} dimensions are allowed")

    for idx, dim in enumerate(dimensions):
        where = f"dimensions[{idx}]"
        if _blank(dim.name):
            report.add("missing-dimension-name", f"{where}.name", "Dimension name is required")
        if _blank(dim.short_name):
            report.add("missing-short-name", f"{where}.shortName", "Dimension short name is required")
        missing = [
            key
            for key, val in (("minScore", dim.min_score), ("maxScore", dim.max_score), ("threshold", dim.threshold))
            if val is None
        ]
        if missing:
            report.add(
                "dimension-missing-bounds",
                where,
                f"Dimension {dim.short_name or idx} is missing {', '.join(missing)}",
            )
        elif dim.min_score > dim.max_score:  # type: ignore[operator]
            report.add("dimension-bounds-inverted", where, f"Dimension {dim.short_name} has minScore above maxScore")

    dupes = [name for name, n in Counter(d.short_name for d in dimensions if d.short_name).items() if n > 1]
    for name in dupes:
        report.add("duplicate-short-name", "dimensions", f"Short name {name!r} is used by more than one dimension")
    return report


def validate_questions(
    questions: Sequence[Question],
    dimensions: Iterable[Dimension] = (),
    quiz_type: QuizType = "SIMPLE",
) -> ValidationReport:
    report = ValidationReport()
    if not questions:
        report.add("no-questions", "questions", "Quiz must have at least one question")
        return report
    if len(questions) > config.MAX_QUESTIONS:
        report.add("too-many-questions", "questions", f"At most {config.MAX_QUESTIONS} questions are allowed")

    known = {d.id for d in dimensions}
    for idx, q in enumerate(questions):
        where = f"questions[{idx}]"
        if _blank(q.text):
            report.add("missing-question-text", f"{where}.text", "Question text is required")
        if len(q.options) < config.MIN_OPTIONS:
            report.add("insufficient-options", f"{where}.options", f"Question {idx + 1} needs at least {config.MIN_OPTIONS} options")
        elif len(q.options) > config.MAX_OPTIONS:
            report.add("too-many-options", f"{where}.options", f"Question {idx + 1} has more than {config.MAX_OPTIONS} options")
        if any(o.value < 0 for o in q.options):
            report.add("negative-option-value", f"{where}.options", f"Question {idx + 1} has a negative option value")

        if quiz_type != "COMPLEX":
            continue
        if not q.dimension_id:
            report.add("missing-dimension-reference", f"{where}.dimensionId", f"Question {idx + 1} is not linked to a dimension")
        elif q.dimension_id not in known:
            report.add(
                "invalid-dimension-reference",
                f"{where}.dimensionId",
                f"Question {idx + 1} references dimension {q.dimension_id!r} which is not part of this quiz",
            )
    return report


def _logic_dimensions(logic) -> List[str]:
    if isinstance(logic, ThresholdLogic):
        return [c.dimension for c in logic.conditions]
    if isinstance(logic, HighestLogic):
        return [logic.dimension]
    if isinstance(logic, TopNLogic):
        return list(logic.dimensions)
    return []


def _check_rule_criteria(quiz: Quiz, report: ValidationReport) -> None:
    if not quiz.rule_criteria:
        report.add("missing-grading-criteria", "complexGradingCriteria", "COMPLEX quiz needs at least one grading rule")
        return
    if len(quiz.rule_criteria) > config.MAX_RULE_CRITERIA:
        report.add("too-many-criteria", "complexGradingCriteria", f"At most {config.MAX_RULE_CRITERIA} rules are allowed")

    short_names = {d.short_name for d in quiz.dimensions}
    seen = {}
    for idx, crit in enumerate(quiz.rule_criteria):
        where = f"complexGradingCriteria[{idx}]"
        logic = crit.scoring_logic
        if logic is None:
            report.add("missing-scoring-logic", f"{where}.scoringLogic", f"Rule {crit.name or idx} has no scoring logic")
            continue
        for name in _logic_dimensions(logic):
            if name not in short_names:
                report.add(
                    "unknown-rule-dimension",
                    f"{where}.scoringLogic",
                    f"Rule {crit.name or idx} uses dimension {name!r} which this quiz does not define",
                )
        if isinstance(logic, TopNLogic) and (logic.n < 1 or logic.n != len(logic.dimensions)):
            report.add("invalid-top-n", f"{where}.scoringLogic", f"Rule {crit.name or idx} must list exactly n dimensions")
        if logic in seen:
            report.warnings.append(
                f"Rule {crit.name or idx} repeats the logic of {seen[logic]} and can never be reached"
            )
        else:
            seen[logic] = crit.name or str(idx)


def _check_range_criteria(quiz: Quiz, report: ValidationReport) -> None:
    if not quiz.range_criteria:
        report.add("missing-grading-criteria", "gradingCriteria", "SIMPLE quiz needs at least one score range")
        return
    if len(quiz.range_criteria) > config.MAX_RANGE_CRITERIA:
        report.add("too-many-criteria", "gradingCriteria", f"At most {config.MAX_RANGE_CRITERIA} ranges are allowed")
    for idx, crit in enumerate(quiz.range_criteria):
        if crit.min_score > crit.max_score:
            report.add("range-inverted", f"gradingCriteria[{idx}]", f"Range {crit.label or idx} has minScore above maxScore")
        for prev in quiz.range_criteria[:idx]:
            if crit.min_score <= prev.max_score and prev.min_score <= crit.max_score:
                report.warnings.append(
                    f"Range {crit.label or idx} overlaps {prev.label}; scores in the overlap match {prev.label}"
                )


def validate_definition(quiz: Quiz) -> ValidationReport:
    report = validate_basic_info(quiz)
    if quiz.is_complex:
        report.extend(validate_dimensions(quiz.dimensions))
        report.extend(validate_questions(quiz.questions, quiz.dimensions, "COMPLEX"))
        _check_rule_criteria(quiz, report)
        if quiz.range_criteria:
            report.add("dimension-mismatch", "gradingCriteria", "COMPLEX quizzes use rule criteria, not score ranges")
    else:
        report.extend(validate_questions(quiz.questions, (), "SIMPLE"))
        if quiz.dimensions or quiz.rule_criteria:
            report.add(
                "dimension-mismatch",
                "quizType",
                "SIMPLE quizzes cannot define dimensions or rule criteria",
            )
        _check_range_criteria(quiz, report)
    return report
