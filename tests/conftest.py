from __future__ import annotations

import copy

import pytest

from quiz_core.types import (
    Dimension,
    Option,
    Question,
    Quiz,
    QuizResult,
    RangeCriterion,
    RuleCriterion,
    SubmissionAnswer,
    ThresholdCondition,
    ThresholdLogic,
)

MBTI_DIMENSIONS = (
    # short name, low letter, high letter
    ("E/I", "I", "E"),
    ("S/N", "N", "S"),
    ("T/F", "F", "T"),
    ("J/P", "P", "J"),
)
MBTI_THRESHOLDS = {"E/I": 15, "S/N": 20, "T/F": 5, "J/P": 5}


def _options(qid: str, values) -> list[Option]:
    return [Option(id=f"{qid}-o{v}", text=f"Option {v}", value=v, order=i) for i, v in enumerate(values)]


def build_simple_quiz(
    *,
    quiz_id: str = "simple-quiz",
    questions: int = 5,
    values: tuple[int, ...] = (0, 1, 2, 3, 4),
    ranges: list[tuple[int, int, str]] | None = None,
) -> Quiz:
    """SIMPLE quiz; with the defaults the maximum score is 20."""

    qs = [
        Question(id=f"q{i}", text=f"Question {i}", order=i, options=_options(f"q{i}", values))
        for i in range(questions)
    ]
    if ranges is None:
        ranges = [(0, 9, "Beginner"), (10, 15, "Intermediate"), (16, 20, "Advanced")]
    criteria = [
        RangeCriterion(
            min_score=lo,
            max_score=hi,
            name=label,
            label=label,
            color="#00aa00",
            recommendations=[f"Keep working on {label.lower()} habits"],
            proposed_courses=[{"id": f"course-{label.lower()}", "name": label, "slug": label.lower()}],
        )
        for lo, hi, label in ranges
    ]
    return Quiz(
        id=quiz_id,
        quiz_type="SIMPLE",
        title="Focus habits",
        description="How well do you protect your attention?",
        category="productivity",
        questions=qs,
        range_criteria=criteria,
    )


def threshold_rule(name: str, sides: tuple[str, ...], **kwargs) -> RuleCriterion:
    conditions = tuple(
        ThresholdCondition(dimension=short, side=side)  # type: ignore[arg-type]
        for (short, _, _), side in zip(MBTI_DIMENSIONS, sides)
    )
    return RuleCriterion(name=name, label=kwargs.pop("label", f"The {name}"), scoring_logic=ThresholdLogic(conditions), **kwargs)


def build_mbti_quiz(
    *,
    quiz_id: str = "mbti-quiz",
    per_dimension: int = 5,
    rules: list[RuleCriterion] | None = None,
    linked: bool = True,
) -> Quiz:
    """Four-dimension COMPLEX quiz; options are worth 0-5, so each dimension spans 0-25."""

    dims = [
        Dimension(
            id=f"dim-{i}",
            name=short,
            short_name=short,
            order=i,
            min_score=0,
            max_score=5 * per_dimension,
            threshold=MBTI_THRESHOLDS[short],
            low_label=low,
            high_label=high,
        )
        for i, (short, low, high) in enumerate(MBTI_DIMENSIONS)
    ]
    qs = []
    for d_idx, dim in enumerate(dims):
        for j in range(per_dimension):
            n = d_idx * per_dimension + j
            qs.append(
                Question(
                    id=f"q{n}",
                    text=f"{dim.name} statement {j}",
                    order=n,
                    dimension_id=dim.id if linked else None,
                    options=_options(f"q{n}", range(6)),
                )
            )
    if rules is None:
        rules = [
            threshold_rule("ENFP", ("high", "low", "low", "low"), recommendations=["Channel ideas into one project"]),
            threshold_rule("ISTJ", ("low", "high", "high", "high"), recommendations=["Schedule time for reflection"]),
        ]
    return Quiz(
        id=quiz_id,
        quiz_type="COMPLEX",
        title="Personality type",
        description="Find your four-letter type",
        category="personality",
        dimensions=dims,
        questions=qs,
        rule_criteria=rules,
    )


def answer_values(quiz: Quiz, picks: list[int]) -> list[SubmissionAnswer]:
    """Answer questions in order, choosing the option worth ``picks[i]``."""

    out = []
    for q, value in zip(quiz.ordered_questions(), picks):
        opt = next(o for o in q.options if o.value == value)
        out.append(SubmissionAnswer(question_id=q.id, option_id=opt.id))
    return out


def mbti_answers(quiz: Quiz, per_question: dict[str, int]) -> list[SubmissionAnswer]:
    """Same option value for every question of a dimension."""

    per_dim = len(quiz.questions) // len(quiz.dimensions)
    picks = [per_question[MBTI_DIMENSIONS[idx // per_dim][0]] for idx in range(len(quiz.questions))]
    return answer_values(quiz, picks)


# E/I 10, S/N 25, T/F 10, J/P 10 with five questions per dimension
ISTJ_PICKS = {"E/I": 2, "S/N": 5, "T/F": 2, "J/P": 2}


class MemoryRepository:
    """In-memory repository; stores copies so callers cannot mutate saved state."""

    def __init__(self, quizzes: list[Quiz] | None = None) -> None:
        self.quizzes: dict[str, Quiz] = {}
        self.results: dict[str, QuizResult] = {}
        for quiz in quizzes or []:
            self.save_quiz(quiz)

    def get_quiz(self, quiz_id: str) -> Quiz | None:
        quiz = self.quizzes.get(quiz_id)
        return copy.deepcopy(quiz) if quiz is not None else None

    def list_quizzes(self) -> list[Quiz]:
        return [copy.deepcopy(q) for q in self.quizzes.values()]

    def save_quiz(self, quiz: Quiz) -> None:
        self.quizzes[quiz.id] = copy.deepcopy(quiz)

    def list_results(self, quiz_id: str) -> list[QuizResult]:
        return [r for r in self.results.values() if r.quiz_id == quiz_id]

    def get_result(self, result_id: str) -> QuizResult | None:
        return self.results.get(result_id)

    def save_result(self, result: QuizResult) -> None:
        self.results[result.id] = result


@pytest.fixture
def simple_quiz() -> Quiz:
    return build_simple_quiz()


@pytest.fixture
def mbti_quiz() -> Quiz:
    return build_mbti_quiz()


@pytest.fixture
def memory_repo() -> MemoryRepository:
    return MemoryRepository()
