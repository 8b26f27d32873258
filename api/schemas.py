"""Request bodies for the quiz-definition endpoints.

The models enforce field shapes, lengths and value ranges.  Rules that carry
a machine-readable code in ``quiz_core.definition`` (missing title, option
counts, dimension links, quiz type ...) are left to that validator so the
progressive endpoints can report them as ``{valid, errors}``.
"""

from __future__ import annotations

import uuid
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from quiz_core import config
from quiz_core.payloads import LEGACY_QUIZ_TYPES
from quiz_core.types import (
    Dimension,
    HighestLogic,
    Option,
    Question,
    Quiz,
    RangeCriterion,
    RuleCriterion,
    ThresholdCondition,
    ThresholdLogic,
    TopNLogic,
)

ListText = Annotated[str, Field(min_length=1, max_length=200)]
Tag = Annotated[str, Field(min_length=1, max_length=50)]


def _new_id() -> str:
    return str(uuid.uuid4())


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---- definition pieces ----
class OptionIn(CamelModel):
    id: Optional[str] = None
    text: str = Field(min_length=1, max_length=500)
    value: int = Field(ge=0, le=config.MAX_OPTION_VALUE)
    order: Optional[int] = Field(default=None, ge=0)

    def to_option(self, index: int) -> Option:
        order = self.order if self.order is not None else index
        return Option(id=self.id or _new_id(), text=self.text, value=self.value, order=order)


class DimensionIn(CamelModel):
    id: Optional[str] = None
    name: str = Field(default="", max_length=100)
    short_name: str = Field(default="", max_length=50)
    order: Optional[int] = Field(default=None, ge=0)
    min_score: Optional[int] = Field(default=None, ge=0)
    max_score: Optional[int] = Field(default=None, ge=0)
    threshold: Optional[float] = None
    low_label: Optional[str] = Field(default=None, max_length=50)
    high_label: Optional[str] = Field(default=None, max_length=50)

    def to_dimension(self, index: int) -> Dimension:
        return Dimension(
            id=self.id or _new_id(),
            name=self.name,
            short_name=self.short_name,
            order=self.order if self.order is not None else index,
            min_score=self.min_score,
            max_score=self.max_score,
            threshold=self.threshold,
            low_label=self.low_label or None,
            high_label=self.high_label or None,
        )


class QuestionIn(CamelModel):
    id: Optional[str] = None
    text: str = Field(default="", max_length=1000)
    order: Optional[int] = Field(default=None, ge=0)
    dimension_id: Optional[str] = None
    options: list[OptionIn] = []

    def to_question(self, index: int) -> Question:
        return Question(
            id=self.id or _new_id(),
            text=self.text,
            order=self.order if self.order is not None else index,
            dimension_id=self.dimension_id or None,
            options=[o.to_option(i) for i, o in enumerate(self.options)],
        )


class CatalogRef(CamelModel):
    """Course, product or streak reference; extra keys are passed through."""

    model_config = ConfigDict(extra="allow")

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    slug: str = Field(min_length=1)


class BlogPostRef(CamelModel):
    model_config = ConfigDict(extra="allow")

    id: str = Field(min_length=1)
    title: str = Field(min_length=1)
    slug: str = Field(min_length=1)


class GuidanceIn(CamelModel):
    label: str = Field(min_length=1, max_length=100)
    color: str = Field(default="", pattern=r"^(#[0-9A-Fa-f]{6})?$")
    recommendations: list[ListText] = Field(min_length=1)
    areas_of_improvement: list[ListText] = []
    support_needed: list[ListText] = []
    proposed_courses: list[CatalogRef] = []
    proposed_products: list[CatalogRef] = []
    proposed_streaks: list[CatalogRef] = []
    proposed_blog_posts: list[BlogPostRef] = []
    description: Optional[str] = Field(default=None, max_length=500)

    def guidance_kwargs(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "color": self.color,
            "recommendations": list(self.recommendations),
            "areas_of_improvement": list(self.areas_of_improvement),
            "support_needed": list(self.support_needed),
            "proposed_courses": [r.model_dump() for r in self.proposed_courses],
            "proposed_products": [r.model_dump() for r in self.proposed_products],
            "proposed_streaks": [r.model_dump() for r in self.proposed_streaks],
            "proposed_blog_posts": [r.model_dump() for r in self.proposed_blog_posts],
            "description": self.description or None,
        }


class RangeCriterionIn(GuidanceIn):
    name: str = Field(min_length=1, max_length=100)
    min_score: int = Field(ge=0)
    max_score: int = Field(ge=0)

    def to_criterion(self) -> RangeCriterion:
        return RangeCriterion(
            min_score=self.min_score, max_score=self.max_score, name=self.name, **self.guidance_kwargs()
        )


# ---- scoring logic, discriminated on "type" ----
class ThresholdConditionIn(CamelModel):
    name: str = Field(min_length=1)
    value: Literal["low", "high"]
    threshold: Optional[float] = None


class ThresholdLogicIn(CamelModel):
    type: Literal["threshold"]
    dimensions: list[ThresholdConditionIn] = []

    def to_logic(self) -> ThresholdLogic:
        return ThresholdLogic(tuple(ThresholdCondition(c.name, c.value, c.threshold) for c in self.dimensions))


class HighestLogicIn(CamelModel):
    type: Literal["highest"]
    dimension: str = Field(min_length=1)
    min_score: Optional[float] = None
    max_score: Optional[float] = None

    def to_logic(self) -> HighestLogic:
        return HighestLogic(self.dimension, self.min_score, self.max_score)


class TopNLogicIn(CamelModel):
    type: Literal["topN"]
    n: Optional[int] = None
    dimensions: list[str] = []

    def to_logic(self) -> TopNLogic:
        n = self.n if self.n is not None else len(self.dimensions)
        return TopNLogic(n, tuple(self.dimensions))


ScoringLogicIn = Annotated[Union[ThresholdLogicIn, HighestLogicIn, TopNLogicIn], Field(discriminator="type")]


class RuleCriterionIn(GuidanceIn):
    name: str = Field(min_length=1, max_length=100)
    scoring_logic: Optional[ScoringLogicIn] = None

    def to_criterion(self) -> RuleCriterion:
        logic = self.scoring_logic.to_logic() if self.scoring_logic is not None else None
        return RuleCriterion(name=self.name, scoring_logic=logic, **self.guidance_kwargs())


# ---- request bodies ----
class QuizIn(CamelModel):
    id: Optional[str] = None
    quiz_type: str = Field(default="SIMPLE", max_length=20)
    title: str = Field(default="", max_length=200)
    subtitle: Optional[str] = Field(default=None, max_length=200)
    description: str = Field(default="", max_length=1000)
    category: str = Field(default="", max_length=100)
    status: Literal["DRAFT", "ACTIVE", "ARCHIVED"] = "ACTIVE"
    is_public: bool = True
    tags: list[Tag] = []
    dimensions: list[DimensionIn] = []
    questions: list[QuestionIn] = []
    grading_criteria: list[RangeCriterionIn] = []
    complex_grading_criteria: list[RuleCriterionIn] = []

    def to_quiz(self, quiz_id: Optional[str] = None) -> Quiz:
        raw_type = self.quiz_type.strip().upper()
        return Quiz(
            id=quiz_id or self.id or _new_id(),
            # unknown types are kept so the validator reports invalid-quiz-type
            quiz_type=LEGACY_QUIZ_TYPES.get(raw_type, raw_type),  # type: ignore[arg-type]
            title=self.title,
            description=self.description,
            category=self.category,
            subtitle=self.subtitle or None,
            status=self.status,
            is_public=self.is_public,
            tags=list(self.tags),
            dimensions=[d.to_dimension(i) for i, d in enumerate(self.dimensions)],
            questions=[q.to_question(i) for i, q in enumerate(self.questions)],
            range_criteria=[c.to_criterion() for c in self.grading_criteria],
            rule_criteria=[c.to_criterion() for c in self.complex_grading_criteria],
        )


class DimensionsReq(CamelModel):
    dimensions: list[DimensionIn] = []


class QuestionsReq(CamelModel):
    quiz_type: str = "SIMPLE"
    questions: list[QuestionIn] = []
    dimensions: list[DimensionIn] = []


class AnswerIn(CamelModel):
    question_id: str
    option_id: str


class SubmitReq(CamelModel):
    quiz_id: Optional[str] = None
    answers: list[AnswerIn] = []
    time_spent: float = Field(default=0.0, ge=0, le=config.MAX_TIME_SPENT)
