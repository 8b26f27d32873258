from __future__ import annotations

import pytest
from pydantic import ValidationError

from api.schemas import QuizIn, RuleCriterionIn
from quiz_core.definition import validate_definition
from quiz_core.payloads import quiz_to_dict
from quiz_core.types import HighestLogic, ThresholdLogic, TopNLogic
from tests.conftest import build_mbti_quiz, build_simple_quiz


def test_stored_shape_converts_back_to_the_same_quiz():
    quiz = build_mbti_quiz()
    parsed = QuizIn.model_validate(quiz_to_dict(quiz)).to_quiz()
    assert parsed.questions == quiz.questions
    assert parsed.dimensions == quiz.dimensions
    assert [r.scoring_logic for r in parsed.rule_criteria] == [r.scoring_logic for r in quiz.rule_criteria]
    assert validate_definition(parsed).valid


def test_missing_ids_and_orders_are_filled_in():
    body = {
        "quizType": "onboarding",
        "title": "Warm-up",
        "questions": [{"text": "Ready?", "options": [{"text": "No", "value": 0}, {"text": "Yes", "value": 1}]}],
    }
    quiz = QuizIn.model_validate(body).to_quiz("fixed-id")
    assert quiz.id == "fixed-id"
    assert quiz.quiz_type == "SIMPLE"
    assert [o.order for o in quiz.questions[0].options] == [0, 1]
    assert quiz.questions[0].id and quiz.questions[0].options[1].id


def test_scoring_logic_is_picked_by_type():
    base = {"name": "R", "label": "R", "recommendations": ["r"]}
    rule = RuleCriterionIn.model_validate({**base, "scoringLogic": {"type": "topN", "dimensions": ["A", "B"]}})
    assert rule.to_criterion().scoring_logic == TopNLogic(2, ("A", "B"))

    rule = RuleCriterionIn.model_validate({**base, "scoringLogic": {"type": "highest", "dimension": "A", "minScore": 3}})
    assert rule.to_criterion().scoring_logic == HighestLogic("A", 3, None)

    rule = RuleCriterionIn.model_validate(
        {**base, "scoringLogic": {"type": "threshold", "dimensions": [{"name": "A", "value": "low"}]}}
    )
    logic = rule.to_criterion().scoring_logic
    assert isinstance(logic, ThresholdLogic) and logic.conditions[0].side == "low"

    assert RuleCriterionIn.model_validate(base).to_criterion().scoring_logic is None


@pytest.mark.parametrize(
    "path, value",
    [
        (("questions", 0, "options", 0, "value"), -1),
        (("questions", 0, "options", 0, "value"), 11),
        (("questions", 0, "options", 0, "text"), ""),
        (("gradingCriteria", 0, "color"), "green"),
        (("gradingCriteria", 0, "name"), ""),
        (("tags",), [""]),
        (("status",), "PUBLISHED"),
    ],
)
def test_field_constraints(path, value):
    body = quiz_to_dict(build_simple_quiz())
    target = body
    for key in path[:-1]:
        target = target[key]
    target[path[-1]] = value
    with pytest.raises(ValidationError):
        QuizIn.model_validate(body)
