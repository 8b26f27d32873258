from __future__ import annotations

import pytest

from quiz_core.payloads import (
    logic_from_dict,
    quiz_from_dict,
    quiz_to_dict,
    result_from_dict,
    submission_from_dict,
)
from quiz_core.types import HighestLogic, ThresholdCondition, ThresholdLogic, TopNLogic


def test_legacy_quiz_types_load_as_simple():
    quiz = quiz_from_dict({"title": "Old", "quizType": "ONBOARDING"})
    assert quiz.quiz_type == "SIMPLE"
    assert quiz.id
    with pytest.raises(ValueError):
        quiz_from_dict({"quizType": "SURVEY"})


def test_option_values_must_be_integers():
    base = {"quizType": "SIMPLE", "questions": [{"text": "q", "options": [{"text": "a", "value": 1.5}]}]}
    with pytest.raises(ValueError):
        quiz_from_dict(base)
    base["questions"][0]["options"][0]["value"] = "two"
    with pytest.raises(ValueError):
        quiz_from_dict(base)


def test_scoring_logic_variants():
    threshold = logic_from_dict(
        {"type": "threshold", "dimensions": [{"name": "E/I", "value": "low"}, {"name": "S/N", "value": "high", "threshold": 12}]}
    )
    assert threshold == ThresholdLogic(
        (ThresholdCondition("E/I", "low"), ThresholdCondition("S/N", "high", 12))
    )
    assert logic_from_dict({"type": "highest", "dimension": "T/F", "minScore": 3}) == HighestLogic("T/F", 3, None)
    assert logic_from_dict({"type": "topN", "n": 2, "dimensions": ["E/I", {"name": "J/P"}]}) == TopNLogic(2, ("E/I", "J/P"))
    assert logic_from_dict({"type": "mystery"}) is None
    assert logic_from_dict(None) is None
    with pytest.raises(ValueError):
        logic_from_dict({"type": "threshold", "dimensions": [{"name": "E/I", "value": "middle"}]})


def test_quiz_payload_keeps_definition(mbti_quiz):
    payload = quiz_to_dict(mbti_quiz)
    assert payload["complexGradingCriteria"][1]["scoringLogic"]["dimensions"][0] == {"name": "E/I", "value": "low"}
    assert payload["questions"][0]["dimensionId"] == "dim-0"
    assert quiz_from_dict(payload) == mbti_quiz


def test_submission_payload():
    sub = submission_from_dict({"answers": [{"questionId": "q1", "optionId": "o2"}], "timeSpent": 7}, quiz_id="quiz-1")
    assert sub.quiz_id == "quiz-1"
    assert sub.answers[0].option_id == "o2"
    assert sub.time_spent == 7.0
    with pytest.raises(ValueError):
        submission_from_dict({"answers": {"questionId": "q1"}})


def test_result_payload_reads_outcome_fields():
    result = result_from_dict(
        {
            "id": "r1",
            "quizId": "quiz-1",
            "userId": "u1",
            "timeSpent": 4,
            "dimensionScores": {"E/I": 10},
            "classification": "ISTJ",
            "partial": True,
        }
    )
    assert result.outcome.dimension_scores == {"E/I": 10.0}
    assert result.outcome.partial is True
    assert result.to_dict()["classification"] == "ISTJ"
