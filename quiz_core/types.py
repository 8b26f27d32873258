from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Tuple, Union

QuizType = Literal["SIMPLE", "COMPLEX"]
QuizStatus = Literal["DRAFT", "ACTIVE", "ARCHIVED"]
Side = Literal["low", "high"]
Level = Literal["EXCELLENT", "GOOD", "FAIR", "NEEDS_IMPROVEMENT"]
CrossRef = Dict[str, Any]


@dataclass
class Option:
    id: str; text: str; value: int
    order: int = 0


@dataclass
class Dimension:
    id: str; name: str; short_name: str
    order: int = 0
    min_score: Optional[int] = None
    max_score: Optional[int] = None
    threshold: Optional[float] = None
    low_label: Optional[str] = None
    high_label: Optional[str] = None


@dataclass
class Question:
    id: str; text: str
    order: int = 0
    dimension_id: Optional[str] = None
    options: List[Option] = field(default_factory=list)

    def option(self, option_id: str) -> Optional[Option]:
        return next((o for o in self.options if o.id == option_id), None)

    def max_value(self) -> int:
        return max((o.value for o in self.options), default=0)

    def min_value(self) -> int:
        return min((o.value for o in self.options), default=0)


@dataclass
class Guidance:
    """Fields shared by both criterion kinds and copied into an outcome."""

    label: str = ""
    color: str = ""
    recommendations: List[str] = field(default_factory=list)
    areas_of_improvement: List[str] = field(default_factory=list)
    support_needed: List[str] = field(default_factory=list)
    proposed_courses: List[CrossRef] = field(default_factory=list)
    proposed_products: List[CrossRef] = field(default_factory=list)
    proposed_streaks: List[CrossRef] = field(default_factory=list)
    proposed_blog_posts: List[CrossRef] = field(default_factory=list)
    description: Optional[str] = None


@dataclass
class RangeCriterion(Guidance):
    min_score: int = 0
    max_score: int = 0
    name: str = ""

    def contains(self, score: float) -> bool:
        return self.min_score <= score <= self.max_score


@dataclass(frozen=True)
class ThresholdCondition:
    dimension: str
    side: Side
    threshold: Optional[float] = None


@dataclass(frozen=True)
class ThresholdLogic:
    conditions: Tuple[ThresholdCondition, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "conditions", tuple(self.conditions))


@dataclass(frozen=True)
class HighestLogic:
    dimension: str
    min_score: Optional[float] = None
    max_score: Optional[float] = None


@dataclass(frozen=True)
class TopNLogic:
    n: int
    dimensions: Tuple[str, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "dimensions", tuple(self.dimensions))


ScoringLogic = Union[ThresholdLogic, HighestLogic, TopNLogic]


@dataclass
class RuleCriterion(Guidance):
    name: str = ""
    scoring_logic: Optional[ScoringLogic] = None


@dataclass
class Quiz:
    id: str
    quiz_type: QuizType
    title: str = ""
    description: str = ""
    category: str = ""
    subtitle: Optional[str] = None
    status: QuizStatus = "ACTIVE"
    is_public: bool = True
    tags: List[str] = field(default_factory=list)
    created_by: Optional[str] = None
    dimensions: List[Dimension] = field(default_factory=list)
    questions: List[Question] = field(default_factory=list)
    range_criteria: List[RangeCriterion] = field(default_factory=list)
    rule_criteria: List[RuleCriterion] = field(default_factory=list)
    total_attempts: int = 0
    completed_attempts: int = 0
    average_score: float = 0.0
    average_completion_time: float = 0.0

    @property
    def is_complex(self) -> bool:
        return self.quiz_type == "COMPLEX"

    def question(self, question_id: str) -> Optional[Question]:
        return next((q for q in self.questions if q.id == question_id), None)

    def dimension(self, dimension_id: Optional[str]) -> Optional[Dimension]:
        if not dimension_id:
            return None
        return next((d for d in self.dimensions if d.id == dimension_id), None)

    def ordered_dimensions(self) -> List[Dimension]:
        return sorted(self.dimensions, key=lambda d: d.order)

    def ordered_questions(self) -> List[Question]:
        return sorted(self.questions, key=lambda q: q.order)


@dataclass
class SubmissionAnswer:
    question_id: str; option_id: str


@dataclass
class Submission:
    quiz_id: str
    answers: List[SubmissionAnswer]
    time_spent: float = 0.0


@dataclass
class Classification(Guidance):
    classification: str = ""
    feedback: str = ""
    level: Optional[Level] = None
    partial: bool = False


@dataclass
class ScoringOutcome:
    score: Optional[int] = None
    max_score: Optional[int] = None
    percentage: Optional[int] = None
    dimension_scores: Optional[Dict[str, float]] = None
    level: Optional[Level] = None
    classification: str = ""
    label: str = ""
    feedback: str = ""
    recommendations: List[str] = field(default_factory=list)
    areas_of_improvement: List[str] = field(default_factory=list)
    support_needed: List[str] = field(default_factory=list)
    proposed_courses: List[CrossRef] = field(default_factory=list)
    proposed_products: List[CrossRef] = field(default_factory=list)
    proposed_streaks: List[CrossRef] = field(default_factory=list)
    proposed_blog_posts: List[CrossRef] = field(default_factory=list)
    color: Optional[str] = None
    partial: bool = False
    degraded: bool = False

    def apply(self, result: Classification) -> "ScoringOutcome":
        self.classification = result.classification
        self.label = result.label
        self.feedback = result.feedback
        self.recommendations = list(result.recommendations)
        self.areas_of_improvement = list(result.areas_of_improvement)
        self.support_needed = list(result.support_needed)
        self.proposed_courses = list(result.proposed_courses)
        self.proposed_products = list(result.proposed_products)
        self.proposed_streaks = list(result.proposed_streaks)
        self.proposed_blog_posts = list(result.proposed_blog_posts)
        self.color = result.color or None
        self.partial = result.partial
        if result.level is not None:
            self.level = result.level
        return self

    def to_dict(self) -> Dict[str, object]:
        out: Dict[str, object] = {}
        if self.dimension_scores is None:
            out.update({
                "score": self.score,
                "maxScore": self.max_score,
                "percentage": self.percentage,
                "level": self.level,
            })
        else:
            out["dimensionScores"] = dict(self.dimension_scores)
        out.update({
            "classification": self.classification,
            "label": self.label,
            "feedback": self.feedback,
            "recommendations": list(self.recommendations),
            "areasOfImprovement": list(self.areas_of_improvement),
            "supportNeeded": list(self.support_needed),
            "proposedCourses": list(self.proposed_courses),
            "proposedProducts": list(self.proposed_products),
            "proposedStreaks": list(self.proposed_streaks),
            "proposedBlogPosts": list(self.proposed_blog_posts),
            "color": self.color,
            "partial": self.partial,
            "degraded": self.degraded,
        })
        return out


@dataclass(frozen=True)
class QuizResult:
    id: str
    quiz_id: str
    user_id: Optional[str]
    time_spent: float
    answers: Tuple[SubmissionAnswer, ...]
    outcome: ScoringOutcome
    completed_at: Optional[str] = None
    created_at: Optional[str] = None

    def to_dict(self) -> Dict[str, object]:
        out: Dict[str, object] = {
            "id": self.id,
            "quizId": self.quiz_id,
            "userId": self.user_id,
            "timeSpent": self.time_spent,
            "answers": [{"questionId": a.question_id, "optionId": a.option_id} for a in self.answers],
            "completedAt": self.completed_at,
            "createdAt": self.created_at,
        }
        out.update(self.outcome.to_dict())
        return out


@dataclass
class ValidationIssue:
    code: str; field: str; message: str

    def to_dict(self) -> Dict[str, str]:
        return {"code": self.code, "field": self.field, "message": self.message}


@dataclass
class ValidationReport:
    errors: List[ValidationIssue] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def add(self, code: str, field_name: str, message: str) -> None:
        self.errors.append(ValidationIssue(code, field_name, message))

    def extend(self, other: "ValidationReport") -> "ValidationReport":
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        return self

    def codes(self) -> List[str]:
        return [e.code for e in self.errors]

    def to_dict(self) -> Dict[str, object]:
        return {
            "valid": self.valid,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": list(self.warnings),
        }


@dataclass
class IntegrityReport:
    issues: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.issues

    def to_dict(self) -> Dict[str, object]:
        return {"isValid": self.is_valid, "issues": list(self.issues), "warnings": list(self.warnings)}


@dataclass
class RepairReport:
    success: bool
    message: str
    issues_found: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, object]:
        return {"success": self.success, "message": self.message, "issuesFound": list(self.issues_found)}


@dataclass
class QuizAnalytics:
    total_attempts: int
    completed_attempts: int
    completion_rate: float
    average_score: float
    average_time_spent: float
    level_distribution: Optional[Dict[str, int]] = None
    dimension_distribution: Optional[Dict[str, Dict[str, float]]] = None
    dropoff_points: List[Dict[str, float]] = field(default_factory=list)
    popular_classifications: List[Dict[str, object]] = field(default_factory=list)
    time_distribution: Dict[str, int] = field(default_factory=lambda: {"fast": 0, "normal": 0, "slow": 0})

    def to_dict(self) -> Dict[str, object]:
        out: Dict[str, object] = {
            "totalAttempts": self.total_attempts,
            "completedAttempts": self.completed_attempts,
            "completionRate": self.completion_rate,
            "averageScore": self.average_score,
            "averageTimeSpent": self.average_time_spent,
            "dropoffPoints": [dict(p) for p in self.dropoff_points],
            "popularClassifications": [dict(p) for p in self.popular_classifications],
            "timeDistribution": dict(self.time_distribution),
        }
        if self.level_distribution is not None:
            out["levelDistribution"] = dict(self.level_distribution)
        if self.dimension_distribution is not None:
            out["dimensionDistribution"] = {k: dict(v) for k, v in self.dimension_distribution.items()}
        return out
