"""
Runtime configuration and value objects for the interview pipeline.

Questions and analyses are immutable once built; `to_dict()` renders the
camelCase shape the UI layer consumes.
"""
from __future__ import annotations
import enum
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple


MCQ_LABELS: Tuple[str, ...] = ("A", "B", "C", "D")


class QuestionType(str, enum.Enum):
    SUBJECTIVE = "subjective"
    CODING = "coding"
    MCQ = "mcq"

    @classmethod
    def parse(cls, value: Any) -> "QuestionType":
        if isinstance(value, cls):
            return value
        label = str(value or "").strip().lower()
        for member in cls:
            if member.value == label:
                return member
        raise ValueError(f"Unknown question type: {value!r}")


class Difficulty(str, enum.Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"

    @property
    def tier(self) -> int:
        return _DIFFICULTY_TIERS[self]

    @classmethod
    def parse(cls, value: Any) -> "Difficulty":
        if isinstance(value, cls):
            return value
        label = str(value or "").strip().lower()
        for member in cls:
            if member.value.lower() == label:
                return member
        raise ValueError(f"Unknown difficulty: {value!r}")


_DIFFICULTY_TIERS = {
    Difficulty.EASY: 1,
    Difficulty.MEDIUM: 2,
    Difficulty.HARD: 3,
}


@dataclass(frozen=True)
class ModelAnswer:
    """Reference answer; which fields are set depends on the question type."""
    content: str = ""
    is_code: bool = False
    language: Optional[str] = None
    options: Mapping[str, str] = field(default_factory=dict)
    correct_option: Optional[str] = None
    explanation: str = ""

    def to_dict(self, question_type: QuestionType) -> Dict[str, Any]:
        if question_type is QuestionType.MCQ:
            return {
                "options": {label: self.options[label] for label in MCQ_LABELS if label in self.options},
                "correctOption": self.correct_option,
                "explanation": self.explanation,
            }
        data: Dict[str, Any] = {"isCode": self.is_code, "content": self.content}
        if self.language:
            data["language"] = self.language
        return data


@dataclass(frozen=True)
class Question:
    text: str
    expected_topics: Tuple[str, ...]
    difficulty_tier: int
    type: QuestionType
    model_answer: ModelAnswer

    def to_dict(self) -> Dict[str, Any]:
        return {
            "question": self.text,
            "expectedTopics": list(self.expected_topics),
            "difficulty": self.difficulty_tier,
            "type": self.type.value,
            "modelAnswer": self.model_answer.to_dict(self.type),
        }


@dataclass(frozen=True)
class Analysis:
    score: float
    feedback: str
    covered_topics: Tuple[str, ...] = ()
    missing_topics: Tuple[str, ...] = ()
    improvement: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "score": self.score,
            "feedback": self.feedback,
            "coveredTopics": list(self.covered_topics),
            "missingTopics": list(self.missing_topics),
        }
        if self.improvement:
            data["improvement"] = self.improvement
        return data


@dataclass
class FeedbackRules:
    """Rating thresholds used by the results report (percent of max score)."""
    excellent_threshold: int = 70
    good_threshold: int = 50
    max_weak_areas_to_mention: int = 3


@dataclass
class PipelineConfig:
    """Settings for the outbound model call and its throttle.

    Loaded from the environment by default; `from_dict` accepts the same keys
    in snake_case for tests and management commands.
    """
    api_key: Optional[str] = None
    api_url: str = "https://api.groq.com"
    model: str = "llama-3.3-70b-versatile"
    temperature: float = 0.7
    max_tokens: int = 1000
    top_p: float = 0.95
    timeout_s: float = 30.0
    min_request_interval_s: float = 3.0
    mode: str = "mock"

    @classmethod
    def from_env(cls) -> PipelineConfig:
        return cls(
            api_key=os.environ.get("GROQ_API_KEY") or None,
            api_url=os.environ.get("GROQ_API_URL", "https://api.groq.com"),
            model=os.environ.get("GROQ_MODEL", "llama-3.3-70b-versatile"),
            temperature=float(os.environ.get("GROQ_TEMP", 0.7)),
            max_tokens=int(os.environ.get("GROQ_MAX_TOKENS", 1000)),
            top_p=float(os.environ.get("GROQ_TOP_P", 0.95)),
            timeout_s=float(os.environ.get("GROQ_TIMEOUT_S", 30)),
            min_request_interval_s=int(os.environ.get("LLM_MIN_REQUEST_INTERVAL_MS", 3000)) / 1000.0,
            mode=os.environ.get("AI_MODE", "mock").lower(),
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> PipelineConfig:
        defaults = cls()
        return cls(
            api_key=data.get("api_key", defaults.api_key),
            api_url=data.get("api_url", defaults.api_url),
            model=data.get("model", defaults.model),
            temperature=float(data.get("temperature", defaults.temperature)),
            max_tokens=int(data.get("max_tokens", defaults.max_tokens)),
            top_p=float(data.get("top_p", defaults.top_p)),
            timeout_s=float(data.get("timeout_s", defaults.timeout_s)),
            min_request_interval_s=float(data.get("min_request_interval_s", defaults.min_request_interval_s)),
            mode=str(data.get("mode", defaults.mode)).lower(),
        )


def question_type_for_ordinal(types: List[str], ordinal: int) -> QuestionType:
    """Rotate through the interview's selected question types by ordinal."""
    if not types:
        raise ValueError("At least one question type is required")
    if ordinal < 1:
        raise ValueError(f"Question ordinal must be positive, got {ordinal}")
    return QuestionType.parse(types[(ordinal - 1) % len(types)])
