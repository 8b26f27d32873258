from __future__ import annotations
from collections import Counter
from statistics import mean
from typing import Dict, List, Sequence

from . import config
from .classify import ladder_level
from .types import Quiz, QuizAnalytics, QuizResult

_LEVEL_KEYS = {
    "EXCELLENT": "excellent",
    "GOOD": "good",
    "FAIR": "fair",
    "NEEDS_IMPROVEMENT": "needsImprovement",
}


def _level_of(result: QuizResult) -> str:
    out = result.outcome
    return out.level or ladder_level(out.percentage or 0)


def _time_bucket(minutes: float) -> str:
    if minutes < config.TIME_FAST_MAX:
        return "fast"
    if minutes > config.TIME_SLOW_MIN:
        return "slow"
    return "normal"


def dropoff_estimates(total_attempts: int) -> List[Dict[str, float]]:
    """Fixed-rate estimates; there is no per-question abandonment data yet."""
    return [
        {"questionNumber": q, "dropoffCount": int(total_attempts * rate / 100.0), "dropoffRate": rate}
        for q, rate in config.DROPOFF_PLACEHOLDER
    ]


def aggregate(quiz: Quiz, results: Sequence[QuizResult]) -> QuizAnalytics:
    completed = [r for r in results if r.completed_at]
    total = max(int(quiz.total_attempts or 0), len(results))
    n = len(completed)
    rate = n / total if total > 0 else 0.0

    analytics = QuizAnalytics(
        total_attempts=total,
        completed_attempts=n,
        completion_rate=rate,
        average_score=0.0,
        average_time_spent=0.0,
    )
    if quiz.is_complex:
        analytics.dimension_distribution = {
            d.short_name: {"average": 0.0, "min": d.min_score or 0, "max": d.max_score or 0}
            for d in quiz.ordered_dimensions()
        }
    else:
        analytics.level_distribution = {key: 0 for key in _LEVEL_KEYS.values()}
    if not completed:
        return analytics

    analytics.average_time_spent = mean(r.time_spent for r in completed)
    if quiz.is_complex:
        for name, row in analytics.dimension_distribution.items():  # type: ignore[union-attr]
            # untouched dimensions would drag the mean to zero
            values = [
                (r.outcome.dimension_scores or {}).get(name, 0)
                for r in completed
            ]
            non_zero = [v for v in values if v]
            row["average"] = mean(non_zero) if non_zero else 0.0
    else:
        analytics.average_score = mean(float(r.outcome.score or 0) for r in completed)
        for r in completed:
            analytics.level_distribution[_LEVEL_KEYS[_level_of(r)]] += 1  # type: ignore[index]

    counts = Counter(r.outcome.classification for r in completed)
    # Counter.most_common keeps first-seen order among equal counts
    analytics.popular_classifications = [
        {"classification": name, "count": count, "percentage": count / n * 100.0}
        for name, count in counts.most_common()
    ]

    buckets = Counter(_time_bucket(r.time_spent) for r in completed)
    analytics.time_distribution = {k: buckets.get(k, 0) for k in ("fast", "normal", "slow")}
    analytics.dropoff_points = dropoff_estimates(total)
    return analytics
