"""
Data models shared by the pool, the samplers and the quiz generator.

Questions, groups and compositions are static inputs; requests and results
are transient and built once per quiz generation call.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional, Tuple


# Ordinal difficulty levels used by the question banks
DIFFICULTY_LEVELS = {
    "beginner": 1,
    "intermediate": 3,
    "advanced": 5,
}

DEFAULT_DIFFICULTY = DIFFICULTY_LEVELS["intermediate"]


def parse_difficulty(value: Any, default: int = DEFAULT_DIFFICULTY) -> int:
    """
    Convert a difficulty label or level into its ordinal value.

    Args:
        value: Label ("beginner", "intermediate", "advanced"), integer level,
            numeric string, or None
        default: Level used when value is missing

    Returns:
        Integer difficulty level

    Raises:
        ValueError: If value is neither a known label nor a positive integer
    """
    if value is None or value == "":
        return default

    if isinstance(value, bool):
        raise ValueError(f"Invalid difficulty: {value!r}")

    if isinstance(value, int):
        if value <= 0:
            raise ValueError(f"Difficulty level must be positive, got {value}")
        return value

    text = str(value).strip().lower()
    if text in DIFFICULTY_LEVELS:
        return DIFFICULTY_LEVELS[text]

    if text.isdigit() and int(text) > 0:
        return int(text)

    valid = ", ".join(DIFFICULTY_LEVELS.keys())
    raise ValueError(f"Invalid difficulty: {value!r}. Must be a positive level or one of: {valid}")


@dataclass(frozen=True)
class Question:
    """
    An immutable unit of assessable content.

    Attributes:
        id: Stable unique identifier
        group_key: Primary stratification group (section/domain id)
        content: Question text
        options: Answer options, at least two
        correct_option_index: Index of the correct option
        explanation: Optional explanation shown on review
        difficulty: Ordinal difficulty level
        topic: Name of the question bank the question came from
        source_url: Documentation page the question was written from
        tags: Free-form tags
        cross_listed: Other groups whose topic list includes this question's
            bank; display only, never used for allocation
    """

    id: str
    group_key: str
    content: str
    options: Tuple[str, ...]
    correct_option_index: int
    explanation: Optional[str] = None
    difficulty: int = DEFAULT_DIFFICULTY
    topic: str = ""
    source_url: str = ""
    tags: Tuple[str, ...] = ()
    cross_listed: Tuple[str, ...] = ()

    @property
    def correct_option(self) -> str:
        """Text of the correct option."""
        return self.options[self.correct_option_index]

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the quiz file representation."""
        return {
            "id": self.id,
            "group": self.group_key,
            "question": self.content,
            "options": list(self.options),
            "correct_answer": self.correct_option_index,
            "explanation": self.explanation,
            "difficulty": self.difficulty,
            "topic": self.topic,
            "source_url": self.source_url,
            "tags": list(self.tags),
            "cross_listed": list(self.cross_listed),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Question":
        """Rebuild a question from its quiz file representation."""
        return cls(
            id=str(data["id"]),
            group_key=data.get("group", ""),
            content=data["question"],
            options=tuple(data["options"]),
            correct_option_index=int(data["correct_answer"]),
            explanation=data.get("explanation"),
            difficulty=parse_difficulty(data.get("difficulty")),
            topic=data.get("topic", ""),
            source_url=data.get("source_url", ""),
            tags=tuple(data.get("tags", [])),
            cross_listed=tuple(data.get("cross_listed", [])),
        )


@dataclass
class Group:
    """
    A named stratification bucket, e.g. one exam domain.

    Attributes:
        id: Group identifier
        display_name: Human readable name
        target_weight_percent: Share of the exam (0-100)
        description: Optional description
        topics: Question bank names that feed this group
        members: Ids of questions whose primary group is this one
    """

    id: str
    display_name: str
    target_weight_percent: float = 0.0
    description: str = ""
    topics: List[str] = field(default_factory=list)
    members: FrozenSet[str] = frozenset()

    def __post_init__(self):
        if not 0 <= self.target_weight_percent <= 100:
            raise ValueError(
                f"Group '{self.id}' weight must be between 0 and 100, "
                f"got {self.target_weight_percent}"
            )


@dataclass
class Composition:
    """
    Target distribution for one certification exam.

    Attributes:
        id: Registry key, e.g. "tableau-consultant"
        exam_name: Display name of the exam
        groups: Ordered groups with their weights
        total_questions: Question count of the real exam
        passing_score: Passing score out of 1000
        time_limit: Time limit in minutes
    """

    id: str
    exam_name: str
    groups: List[Group]
    total_questions: int
    passing_score: int = 700
    time_limit: int = 0

    def group_ids(self) -> List[str]:
        return [group.id for group in self.groups]

    def get_group(self, group_id: str) -> Optional[Group]:
        for group in self.groups:
            if group.id == group_id:
                return group
        return None

    def weights(self) -> Dict[str, float]:
        return {group.id: group.target_weight_percent for group in self.groups}

    def topics(self) -> List[str]:
        """Question bank names listed by any group, first listing wins."""
        return list(dict.fromkeys(topic for group in self.groups for topic in group.topics))


@dataclass(frozen=True)
class QuestionFilter:
    """
    Explicit restriction applied to a pool before sampling.

    Every field left as None means "no restriction on this dimension".

    Attributes:
        group_ids: Keep only questions whose primary group is listed
        topic_ids: Keep only questions from the listed banks
        exclude_topics: Drop questions from the listed banks
        difficulties: Keep only questions at the listed levels
    """

    group_ids: Optional[FrozenSet[str]] = None
    topic_ids: Optional[FrozenSet[str]] = None
    exclude_topics: Optional[FrozenSet[str]] = None
    difficulties: Optional[FrozenSet[int]] = None

    def matches(self, question: Question) -> bool:
        """Check whether a question passes every restriction."""
        if self.group_ids is not None and question.group_key not in self.group_ids:
            return False
        if self.topic_ids is not None and question.topic not in self.topic_ids:
            return False
        if self.exclude_topics and question.topic in self.exclude_topics:
            return False
        if self.difficulties is not None and question.difficulty not in self.difficulties:
            return False
        return True

    def is_empty(self) -> bool:
        return (
            self.group_ids is None
            and self.topic_ids is None
            and not self.exclude_topics
            and self.difficulties is None
        )


@dataclass
class SamplingRequest:
    """
    Parameters of one quiz generation call.

    Attributes:
        total_requested: Number of questions wanted, must be positive
        group_ids: Restrict sampling to these groups; None means all groups
        weights: Explicit per-group weights overriding the composition; must
            sum to 100 over the selected groups
        difficulties: Optional difficulty levels to keep
        exclude_topics: Question banks to leave out
        equal_weights: Ignore configured weights and split evenly
        fallback_to_all_groups: Let a group-restricted request make up its
            shortfall from groups outside the restriction
    """

    total_requested: int
    group_ids: Optional[List[str]] = None
    weights: Optional[Dict[str, float]] = None
    difficulties: Optional[List[int]] = None
    exclude_topics: Optional[List[str]] = None
    equal_weights: bool = False
    fallback_to_all_groups: bool = False

    @property
    def is_restricted(self) -> bool:
        return self.group_ids is not None

    def to_filter(self) -> QuestionFilter:
        """Translate the non-group restrictions into a pool filter."""
        return QuestionFilter(
            difficulties=frozenset(self.difficulties) if self.difficulties else None,
            exclude_topics=frozenset(self.exclude_topics) if self.exclude_topics else None,
        )


@dataclass
class SamplingResult:
    """
    Outcome of one sampling call.

    Attributes:
        questions: Selected questions in final (shuffled) order
        total_requested: Requested question count
        allocation: Target count per group after apportionment
        breakdown: Actual count per group in the selection
        partial_supply: True when fewer questions than requested were returned
        shortfall: Number of requested questions that could not be supplied
    """

    questions: List[Question]
    total_requested: int
    allocation: Dict[str, int] = field(default_factory=dict)
    breakdown: Dict[str, int] = field(default_factory=dict)
    partial_supply: bool = False
    shortfall: int = 0

    @property
    def question_ids(self) -> List[str]:
        return [question.id for question in self.questions]

    def __len__(self) -> int:
        return len(self.questions)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "question_ids": self.question_ids,
            "total_requested": self.total_requested,
            "allocation": dict(self.allocation),
            "breakdown": dict(self.breakdown),
            "partial_supply": self.partial_supply,
            "shortfall": self.shortfall,
        }


@dataclass
class Quiz:
    """A generated quiz ready to be taken."""

    title: str
    description: str
    questions: List[Question]
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class DomainScore:
    """Score of an attempt restricted to one group."""

    domain_id: str
    domain_name: str
    score: int
    total_questions: int
    percentage: int
    weight: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "domain_id": self.domain_id,
            "domain_name": self.domain_name,
            "score": self.score,
            "total_questions": self.total_questions,
            "percentage": self.percentage,
            "weight": self.weight,
        }


@dataclass
class QuizResult:
    """
    Scored attempt.

    Attributes:
        score: Number of correct answers
        total_questions: Number of questions answered
        percentage: Rounded percentage of correct answers
        weighted_score: Score scaled to 1000
        passed: Whether weighted_score reaches the passing score
        domain_scores: Per-group breakdown
        responses: Per-question outcome dictionaries
        time_taken: Optional time taken in seconds
        topic_performance: correct/total/percentage per question bank
        difficulty_performance: correct/total/percentage per difficulty
            level, keyed by the level as a string
        performance_level: Excellent, Good, Average or Needs Improvement
        recommendations: Study advice for the performance level
    """

    score: int
    total_questions: int
    percentage: int
    weighted_score: int
    passed: bool
    domain_scores: List[DomainScore] = field(default_factory=list)
    responses: List[Dict[str, Any]] = field(default_factory=list)
    time_taken: Optional[int] = None
    topic_performance: Dict[str, Dict[str, int]] = field(default_factory=dict)
    difficulty_performance: Dict[str, Dict[str, int]] = field(default_factory=dict)
    performance_level: str = ""
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "total_questions": self.total_questions,
            "percentage": self.percentage,
            "weighted_score": self.weighted_score,
            "passed": self.passed,
            "domain_scores": [d.to_dict() for d in self.domain_scores],
            "time_taken": self.time_taken,
            "topic_performance": self.topic_performance,
            "difficulty_performance": self.difficulty_performance,
            "performance_level": self.performance_level,
            "recommendations": list(self.recommendations),
        }
