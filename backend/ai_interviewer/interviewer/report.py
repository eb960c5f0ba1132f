"""
Results report for a finished interview. Deterministic, no model calls.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .config import Analysis, FeedbackRules

MAX_SCORE_PER_QUESTION = 10


@dataclass(frozen=True)
class ReportItem:
    question: str
    candidate_answer: str
    analysis: Analysis


@dataclass(frozen=True)
class InterviewReport:
    items: Tuple[ReportItem, ...]
    total_score: float
    max_score: int
    percentage: float
    rating: str
    weak_areas: Tuple[str, ...]

    def summary_text(self, rules: Optional[FeedbackRules] = None) -> str:
        rules = rules or FeedbackRules()
        weak_mention = ""
        if self.weak_areas:
            limited = self.weak_areas[:rules.max_weak_areas_to_mention]
            weak_mention = " Focus areas to improve: " + "; ".join(limited) + "."
        return (
            f"Your total score is {round(self.total_score)} out of {self.max_score} "
            f"({round(self.percentage)}%). Overall: {self.rating}.{weak_mention}"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalScore": self.total_score,
            "maxScore": self.max_score,
            "percentage": self.percentage,
            "rating": self.rating,
            "weakAreas": list(self.weak_areas),
            "summary": self.summary_text(),
            "items": [
                {
                    "question": item.question,
                    "response": item.candidate_answer,
                    "analysis": item.analysis.to_dict(),
                }
                for item in self.items
            ],
        }


def rating_for(percentage: float, rules: Optional[FeedbackRules] = None) -> str:
    rules = rules or FeedbackRules()
    if percentage >= rules.excellent_threshold:
        return "Excellent"
    if percentage >= rules.good_threshold:
        return "Good"
    return "Needs Improvement"


def build_report(items: Iterable[ReportItem], rules: Optional[FeedbackRules] = None) -> InterviewReport:
    items = tuple(items)
    total = sum(item.analysis.score for item in items)
    max_score = len(items) * MAX_SCORE_PER_QUESTION
    percentage = (total / max_score) * 100 if max_score else 0.0

    weak_areas: List[str] = []
    for item in items:
        for topic in item.analysis.missing_topics:
            if topic not in weak_areas:
                weak_areas.append(topic)

    return InterviewReport(
        items=items,
        total_score=total,
        max_score=max_score,
        percentage=percentage,
        rating=rating_for(percentage, rules),
        weak_areas=tuple(weak_areas),
    )
