"""Map a scored submission to a classification.

Criteria are scanned in authoring order and the first match wins: for range
criteria and for rule criteria alike, the author's ordering is the priority
ordering.  Rule logic is a closed union (threshold / highest / top-N) and is
dispatched on its type.
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from . import config
from .scoring import score
from .types import (
    Classification,
    Dimension,
    Guidance,
    HighestLogic,
    Level,
    Quiz,
    RuleCriterion,
    ScoringLogic,
    ScoringOutcome,
    SubmissionAnswer,
    ThresholdLogic,
    TopNLogic,
)

log = logging.getLogger(__name__)


def ladder_level(percentage: float) -> Level:
    p = float(percentage)
    for cutoff, level in config.LADDER:
        if p >= cutoff:
            return level  # type: ignore[return-value]
    return config.LADDER_FLOOR  # type: ignore[return-value]


def _guidance(src: Guidance) -> dict:
    return {
        "label": src.label,
        "color": src.color,
        "recommendations": list(src.recommendations),
        "areas_of_improvement": list(src.areas_of_improvement),
        "support_needed": list(src.support_needed),
        "proposed_courses": list(src.proposed_courses),
        "proposed_products": list(src.proposed_products),
        "proposed_streaks": list(src.proposed_streaks),
        "proposed_blog_posts": list(src.proposed_blog_posts),
        "description": src.description,
    }


# ---- SIMPLE ----
def classify_simple(quiz: Quiz, outcome: ScoringOutcome) -> Classification:
    total = outcome.score or 0
    level = ladder_level(outcome.percentage or 0)
    for crit in quiz.range_criteria:
        if crit.contains(total):
            return Classification(
                classification=crit.label,
                feedback=crit.description or f"You scored in the {crit.label} range.",
                level=level,
                **_guidance(crit),
            )
    return Classification(
        classification=level,
        label=level,
        feedback=config.LADDER_FEEDBACK[level],
        level=level,
    )


# ---- COMPLEX ----
def dimension_threshold(dim: Dimension) -> float:
    """Decision boundary; falls back to the midpoint of the bounds, then 0."""
    if dim.threshold is not None:
        return float(dim.threshold)
    if dim.min_score is not None and dim.max_score is not None:
        return (dim.min_score + dim.max_score) / 2.0
    return 0.0


def top_dimensions(scores: Dict[str, float], n: int) -> List[str]:
    # sorted() is stable: equal scores keep dimension order
    ranked = sorted(scores.items(), key=lambda kv: kv[1], reverse=True)
    return [name for name, _ in ranked[: max(n, 0)]]


def matches(logic: Optional[ScoringLogic], scores: Dict[str, float], dims: Dict[str, Dimension]) -> bool:
    if isinstance(logic, ThresholdLogic):
        if not logic.conditions:
            return False
        for cond in logic.conditions:
            value = scores.get(cond.dimension)
            dim = dims.get(cond.dimension)
            if value is None or dim is None:
                return False
            threshold = cond.threshold if cond.threshold is not None else dimension_threshold(dim)
            is_low = value <= threshold
            if (cond.side == "low") != is_low:
                return False
        return True
    if isinstance(logic, HighestLogic):
        value = scores.get(logic.dimension)
        if value is None:
            return False
        if logic.min_score is not None and value < logic.min_score:
            return False
        if logic.max_score is not None and value > logic.max_score:
            return False
        return True
    if isinstance(logic, TopNLogic):
        if logic.n < 1:
            return False
        return top_dimensions(scores, logic.n) == list(logic.dimensions)
    return False


def _letters(dim: Dimension) -> Optional[tuple]:
    low, high = dim.low_label or "", dim.high_label or ""
    if len(low.strip()) == 1 and len(high.strip()) == 1:
        return low.strip(), high.strip()
    return config.LETTER_SCHEMES.get(dim.short_name)


def partial_type(quiz: Quiz, scores: Dict[str, float]) -> Optional[str]:
    """One letter per dimension, or None when the quiz has no letter scheme."""
    dims = quiz.ordered_dimensions()
    if not dims:
        return None
    pairs = [_letters(d) for d in dims]
    if any(p is None for p in pairs):
        return None
    out = []
    for dim, (low, high) in zip(dims, pairs):  # type: ignore[misc]
        value = scores.get(dim.short_name)
        if value is None:
            out.append("?")
        else:
            out.append(low if value <= dimension_threshold(dim) else high)
    return "".join(out)


def _from_rule(crit: RuleCriterion) -> Classification:
    return Classification(
        classification=crit.name or crit.label,
        feedback=crit.description or f"Your answers match the {crit.label or crit.name} profile.",
        **_guidance(crit),
    )


def classify_complex(quiz: Quiz, outcome: ScoringOutcome) -> Classification:
    scores = dict(outcome.dimension_scores or {})
    dims = {d.short_name: d for d in quiz.dimensions}
    for crit in quiz.rule_criteria:
        if matches(crit.scoring_logic, scores, dims):
            return _from_rule(crit)

    letters = partial_type(quiz, scores)
    if letters and set(letters) != {"?"}:
        log.info("quiz=%s no rule matched; partial type %s", quiz.id, letters)
        known = next((c for c in quiz.rule_criteria if c.name == letters), None)
        result = _from_rule(known) if known else Classification(
            classification=letters,
            label=letters,
            feedback=f"No profile matched every rule; your closest type by dimension is {letters}.",
            recommendations=list(config.PARTIAL_RECOMMENDATIONS),
        )
        result.partial = True
        return result

    log.info("quiz=%s no rule matched; classification unknown", quiz.id)
    return Classification(
        classification=config.UNKNOWN_CLASSIFICATION,
        label=config.UNKNOWN_CLASSIFICATION,
        feedback=config.UNKNOWN_FEEDBACK,
        recommendations=list(config.UNKNOWN_RECOMMENDATIONS),
    )


def classify(quiz: Quiz, outcome: ScoringOutcome) -> Classification:
    if quiz.is_complex:
        return classify_complex(quiz, outcome)
    return classify_simple(quiz, outcome)


def evaluate(quiz: Quiz, answers: Iterable[SubmissionAnswer]) -> ScoringOutcome:
    """Score and classify one submission."""
    outcome = score(quiz, answers)
    return outcome.apply(classify(quiz, outcome))
