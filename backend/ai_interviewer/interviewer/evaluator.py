from __future__ import annotations
import logging
import math
import numbers
from typing import Any, List, Optional

from ..interfaces import LLMProvider
from ..exceptions import SchemaError
from .config import MCQ_LABELS, Analysis, Question, QuestionType
from .prompt_generator import SCORING_SYSTEM_PROMPT, QuestionPromptGenerator
from .response_parser import parse_json_response

logger = logging.getLogger(__name__)

MAX_SCORE = 10.0
ANALYSIS_FIELDS = ["score", "feedback", "coveredTopics", "missingTopics"]

# Multiple-choice answers are graded locally; everything else goes to the LLM


def score_mcq(question: Question, candidate_answer: str) -> Analysis:
    """Deterministic, network-free grading of a multiple-choice selection."""
    correct = (question.model_answer.correct_option or "").strip().upper()
    if correct not in MCQ_LABELS:
        raise SchemaError(
            f"MCQ question has no valid correctOption: {question.model_answer.correct_option!r}",
            missing_fields=["correctOption"],
        )
    chosen = (candidate_answer or "").strip().upper()
    explanation = question.model_answer.explanation or ""

    if chosen == correct:
        return Analysis(
            score=MAX_SCORE,
            feedback=f"Correct! {explanation}".strip(),
            covered_topics=tuple(question.expected_topics),
            missing_topics=(),
        )
    return Analysis(
        score=0.0,
        feedback=f"Incorrect. The correct answer is {correct}. {explanation}".strip(),
        covered_topics=(),
        missing_topics=tuple(question.expected_topics),
    )


def normalize_score(value: Any) -> float:
    """Map a model-returned score onto 0..10.

    Values above 10 are taken to be percentages and divided by 10 first;
    NaN and infinities score 0.
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return 0.0
    score = float(value)
    if not math.isfinite(score):
        return 0.0
    if score > MAX_SCORE:
        score = score / 10
    return max(0.0, min(MAX_SCORE, score))


def _topic_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [topic for topic in value if isinstance(topic, str)]


class AnswerEvaluator:
    """Scores one candidate answer against its question."""

    def __init__(self, llm: LLMProvider, prompt_gen: Optional[QuestionPromptGenerator] = None):
        self.llm = llm
        self.prompt_gen = prompt_gen or QuestionPromptGenerator()

    async def score(
        self,
        question: Question,
        candidate_answer: str,
        question_type: QuestionType | str | None = None,
    ) -> Analysis:
        question_type = QuestionType.parse(question_type) if question_type is not None else question.type

        if question_type is QuestionType.MCQ:
            analysis = score_mcq(question, candidate_answer)
            logger.info(f"MCQ graded: score={analysis.score:.0f}")
            return analysis

        prompt = self.prompt_gen.build_scoring_prompt(
            question.text, candidate_answer, question.expected_topics
        )
        try:
            raw = await self.llm.complete(prompt, system_prompt=SCORING_SYSTEM_PROMPT)
            result = parse_json_response(raw, ANALYSIS_FIELDS)
        except Exception as e:
            logger.error(f"❌ Scoring failed for {question_type.value} answer: {e}")
            raise

        improvement = result.get("improvement")
        analysis = Analysis(
            score=normalize_score(result.get("score")),
            feedback=str(result.get("feedback") or ""),
            covered_topics=tuple(_topic_list(result.get("coveredTopics"))),
            missing_topics=tuple(_topic_list(result.get("missingTopics"))),
            improvement=improvement if isinstance(improvement, str) and improvement else None,
        )
        logger.info(
            f"✅ Scored {question_type.value} answer: {analysis.score:.1f}/10, "
            f"{len(analysis.covered_topics)} covered, {len(analysis.missing_topics)} missing"
        )
        return analysis
