"""Convert camelCase quiz payloads to and from the dataclass model.

Payloads follow the shape the web client and the JSON store use
(``quizType``, ``dimensionId``, ``gradingCriteria``, ``complexGradingCriteria``,
``scoringLogic: {"type": "threshold" | "highest" | "topN", ...}``).
Structurally broken input (a list where an object belongs, a non-numeric
option value) raises ``ValueError``; semantic problems are left for the
definition validator.
"""
from __future__ import annotations

import uuid
from typing import Any, Dict, List, Mapping, Optional

from .types import (
    Dimension,
    HighestLogic,
    Option,
    Question,
    Quiz,
    QuizResult,
    RangeCriterion,
    RuleCriterion,
    ScoringLogic,
    ScoringOutcome,
    Submission,
    SubmissionAnswer,
    ThresholdCondition,
    ThresholdLogic,
    TopNLogic,
)

# legacy type names stored by older clients
LEGACY_QUIZ_TYPES = {"DEFAULT": "SIMPLE", "ONBOARDING": "SIMPLE"}

_GUIDANCE_KEYS = (
    ("label", "label"),
    ("color", "color"),
    ("recommendations", "recommendations"),
    ("areas_of_improvement", "areasOfImprovement"),
    ("support_needed", "supportNeeded"),
    ("proposed_courses", "proposedCourses"),
    ("proposed_products", "proposedProducts"),
    ("proposed_streaks", "proposedStreaks"),
    ("proposed_blog_posts", "proposedBlogPosts"),
    ("description", "description"),
)


def _new_id() -> str:
    return str(uuid.uuid4())


def _obj(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValueError(f"{what} must be an object")
    return data


def _list(data: Any, what: str) -> List[Any]:
    if data is None:
        return []
    if not isinstance(data, (list, tuple)):
        raise ValueError(f"{what} must be a list")
    return list(data)


def _opt_number(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        num = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"expected a number, got {value!r}") from None
    return int(num) if num.is_integer() else num


def _opt_int(value: Any) -> Optional[int]:
    num = _opt_number(value)
    return None if num is None else int(num)


def _str_or_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value)
    return text if text.strip() else None


# ---- scoring logic ----
def logic_from_dict(data: Any) -> Optional[ScoringLogic]:
    """Parse ``scoringLogic``; unknown or missing types yield ``None``."""
    if not isinstance(data, Mapping):
        return None
    kind = str(data.get("type") or "").strip()
    if kind == "threshold":
        conditions = []
        for raw in _list(data.get("dimensions"), "scoringLogic.dimensions"):
            raw = _obj(raw, "threshold condition")
            side = str(raw.get("value") or raw.get("side") or "").lower()
            if side not in ("low", "high"):
                raise ValueError(f"threshold side must be 'low' or 'high', got {side!r}")
            conditions.append(
                ThresholdCondition(
                    dimension=str(raw.get("name") or raw.get("dimension") or ""),
                    side=side,  # type: ignore[arg-type]
                    threshold=_opt_number(raw.get("threshold")),
                )
            )
        return ThresholdLogic(conditions=tuple(conditions))
    if kind == "highest":
        return HighestLogic(
            dimension=str(data.get("dimension") or ""),
            min_score=_opt_number(data.get("minScore")),
            max_score=_opt_number(data.get("maxScore")),
        )
    if kind == "topN":
        names = []
        for raw in _list(data.get("dimensions"), "scoringLogic.dimensions"):
            names.append(str(raw.get("name")) if isinstance(raw, Mapping) else str(raw))
        n = _opt_int(data.get("n"))
        return TopNLogic(n=n if n is not None else len(names), dimensions=tuple(names))
    return None


def logic_to_dict(logic: Optional[ScoringLogic]) -> Optional[Dict[str, Any]]:
    if isinstance(logic, ThresholdLogic):
        return {
            "type": "threshold",
            "dimensions": [
                {"name": c.dimension, "value": c.side, **({"threshold": c.threshold} if c.threshold is not None else {})}
                for c in logic.conditions
            ],
        }
    if isinstance(logic, HighestLogic):
        return {"type": "highest", "dimension": logic.dimension, "minScore": logic.min_score, "maxScore": logic.max_score}
    if isinstance(logic, TopNLogic):
        return {"type": "topN", "n": logic.n, "dimensions": list(logic.dimensions)}
    return None


# ---- definition pieces ----
def _guidance_kwargs(data: Mapping[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for attr, key in _GUIDANCE_KEYS:
        if attr in ("label", "color"):
            out[attr] = str(data.get(key) or "")
        elif attr == "description":
            out[attr] = _str_or_none(data.get(key))
        elif attr.startswith("proposed_"):
            out[attr] = [dict(x) for x in _list(data.get(key), key) if isinstance(x, Mapping)]
        else:
            out[attr] = [str(x) for x in _list(data.get(key), key)]
    return out


def _guidance_dict(obj: Any) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for attr, key in _GUIDANCE_KEYS:
        val = getattr(obj, attr)
        out[key] = list(val) if isinstance(val, list) else val
    return out


def option_from_dict(data: Any, index: int = 0) -> Option:
    data = _obj(data, "option")
    value = _opt_number(data.get("value"))
    if value is None or int(value) != value:
        raise ValueError(f"option value must be an integer, got {data.get('value')!r}")
    return Option(
        id=str(data.get("id") or _new_id()),
        text=str(data.get("text") or ""),
        value=int(value),
        order=_opt_int(data.get("order")) if data.get("order") is not None else index,
    )


def dimension_from_dict(data: Any, index: int = 0) -> Dimension:
    data = _obj(data, "dimension")
    return Dimension(
        id=str(data.get("id") or _new_id()),
        name=str(data.get("name") or ""),
        short_name=str(data.get("shortName") or ""),
        order=_opt_int(data.get("order")) if data.get("order") is not None else index,
        min_score=_opt_int(data.get("minScore")),
        max_score=_opt_int(data.get("maxScore")),
        threshold=_opt_number(data.get("threshold")),
        low_label=_str_or_none(data.get("lowLabel")),
        high_label=_str_or_none(data.get("highLabel")),
    )


def question_from_dict(data: Any, index: int = 0) -> Question:
    data = _obj(data, "question")
    options = [option_from_dict(o, i) for i, o in enumerate(_list(data.get("options"), "options"))]
    return Question(
        id=str(data.get("id") or _new_id()),
        text=str(data.get("text") or ""),
        order=_opt_int(data.get("order")) if data.get("order") is not None else index,
        dimension_id=_str_or_none(data.get("dimensionId")),
        options=options,
    )


def range_criterion_from_dict(data: Any) -> RangeCriterion:
    data = _obj(data, "grading criterion")
    return RangeCriterion(
        min_score=_opt_int(data.get("minScore")) or 0,
        max_score=_opt_int(data.get("maxScore")) or 0,
        name=str(data.get("name") or ""),
        **_guidance_kwargs(data),
    )


def rule_criterion_from_dict(data: Any) -> RuleCriterion:
    data = _obj(data, "complex grading criterion")
    return RuleCriterion(
        name=str(data.get("name") or ""),
        scoring_logic=logic_from_dict(data.get("scoringLogic")),
        **_guidance_kwargs(data),
    )


def quiz_from_dict(data: Any, quiz_id: Optional[str] = None) -> Quiz:
    data = _obj(data, "quiz")
    raw_type = str(data.get("quizType") or "SIMPLE").upper()
    quiz_type = LEGACY_QUIZ_TYPES.get(raw_type, raw_type)
    if quiz_type not in ("SIMPLE", "COMPLEX"):
        raise ValueError(f"unknown quizType {raw_type!r}")
    return Quiz(
        id=str(quiz_id or data.get("id") or _new_id()),
        quiz_type=quiz_type,  # type: ignore[arg-type]
        title=str(data.get("title") or ""),
        description=str(data.get("description") or ""),
        category=str(data.get("category") or ""),
        subtitle=_str_or_none(data.get("subtitle")),
        status=str(data.get("status") or "ACTIVE").upper(),  # type: ignore[arg-type]
        is_public=bool(data.get("isPublic", True)),
        tags=[str(t) for t in _list(data.get("tags"), "tags")],
        created_by=_str_or_none(data.get("createdBy")),
        dimensions=[dimension_from_dict(d, i) for i, d in enumerate(_list(data.get("dimensions"), "dimensions"))],
        questions=[question_from_dict(q, i) for i, q in enumerate(_list(data.get("questions"), "questions"))],
        range_criteria=[range_criterion_from_dict(c) for c in _list(data.get("gradingCriteria"), "gradingCriteria")],
        rule_criteria=[
            rule_criterion_from_dict(c) for c in _list(data.get("complexGradingCriteria"), "complexGradingCriteria")
        ],
        total_attempts=_opt_int(data.get("totalAttempts")) or 0,
        completed_attempts=_opt_int(data.get("completedAttempts")) or 0,
        average_score=float(data.get("averageScore") or 0.0),
        average_completion_time=float(data.get("averageCompletionTime") or 0.0),
    )


def quiz_to_dict(quiz: Quiz) -> Dict[str, Any]:
    return {
        "id": quiz.id,
        "quizType": quiz.quiz_type,
        "title": quiz.title,
        "subtitle": quiz.subtitle,
        "description": quiz.description,
        "category": quiz.category,
        "status": quiz.status,
        "isPublic": quiz.is_public,
        "tags": list(quiz.tags),
        "createdBy": quiz.created_by,
        "totalAttempts": quiz.total_attempts,
        "completedAttempts": quiz.completed_attempts,
        "averageScore": quiz.average_score,
        "averageCompletionTime": quiz.average_completion_time,
        "dimensions": [
            {
                "id": d.id,
                "name": d.name,
                "shortName": d.short_name,
                "order": d.order,
                "minScore": d.min_score,
                "maxScore": d.max_score,
                "threshold": d.threshold,
                "lowLabel": d.low_label,
                "highLabel": d.high_label,
            }
            for d in quiz.dimensions
        ],
        "questions": [
            {
                "id": q.id,
                "text": q.text,
                "order": q.order,
                "dimensionId": q.dimension_id,
                "options": [{"id": o.id, "text": o.text, "value": o.value, "order": o.order} for o in q.options],
            }
            for q in quiz.questions
        ],
        "gradingCriteria": [
            {"name": c.name, "minScore": c.min_score, "maxScore": c.max_score, **_guidance_dict(c)}
            for c in quiz.range_criteria
        ],
        "complexGradingCriteria": [
            {"name": c.name, "scoringLogic": logic_to_dict(c.scoring_logic), **_guidance_dict(c)}
            for c in quiz.rule_criteria
        ],
    }


# ---- submissions and results ----
def answers_from_list(data: Any) -> List[SubmissionAnswer]:
    out = []
    for raw in _list(data, "answers"):
        raw = _obj(raw, "answer")
        out.append(SubmissionAnswer(question_id=str(raw.get("questionId") or ""), option_id=str(raw.get("optionId") or "")))
    return out


def submission_from_dict(data: Any, quiz_id: Optional[str] = None) -> Submission:
    data = _obj(data, "submission")
    return Submission(
        quiz_id=str(quiz_id or data.get("quizId") or ""),
        answers=answers_from_list(data.get("answers")),
        time_spent=float(_opt_number(data.get("timeSpent")) or 0.0),
    )


def outcome_from_dict(data: Mapping[str, Any]) -> ScoringOutcome:
    dims = data.get("dimensionScores")
    return ScoringOutcome(
        score=_opt_int(data.get("score")),
        max_score=_opt_int(data.get("maxScore")),
        percentage=_opt_int(data.get("percentage")),
        dimension_scores={str(k): float(v) for k, v in dims.items()} if isinstance(dims, Mapping) else None,
        level=data.get("level"),
        classification=str(data.get("classification") or ""),
        label=str(data.get("label") or ""),
        feedback=str(data.get("feedback") or ""),
        recommendations=[str(x) for x in _list(data.get("recommendations"), "recommendations")],
        areas_of_improvement=[str(x) for x in _list(data.get("areasOfImprovement"), "areasOfImprovement")],
        support_needed=[str(x) for x in _list(data.get("supportNeeded"), "supportNeeded")],
        proposed_courses=list(_list(data.get("proposedCourses"), "proposedCourses")),
        proposed_products=list(_list(data.get("proposedProducts"), "proposedProducts")),
        proposed_streaks=list(_list(data.get("proposedStreaks"), "proposedStreaks")),
        proposed_blog_posts=list(_list(data.get("proposedBlogPosts"), "proposedBlogPosts")),
        color=_str_or_none(data.get("color")),
        partial=bool(data.get("partial", False)),
        degraded=bool(data.get("degraded", False)),
    )


def result_from_dict(data: Any) -> QuizResult:
    data = _obj(data, "result")
    return QuizResult(
        id=str(data.get("id") or _new_id()),
        quiz_id=str(data.get("quizId") or ""),
        user_id=_str_or_none(data.get("userId")),
        time_spent=float(_opt_number(data.get("timeSpent")) or 0.0),
        answers=tuple(answers_from_list(data.get("answers"))),
        outcome=outcome_from_dict(data),
        completed_at=_str_or_none(data.get("completedAt")),
        created_at=_str_or_none(data.get("createdAt")),
    )
