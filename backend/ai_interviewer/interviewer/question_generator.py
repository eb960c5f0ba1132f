"""
LLM-backed question generation.

Pipeline: prompt -> rate-limited completion -> JSON extraction/repair ->
shape validation. Nothing is retried and nothing falls back to a canned
question; every failure reaches the caller, which decides whether to ask again.
"""
from __future__ import annotations
import logging
from dataclasses import replace
from typing import Optional

from ..interfaces import LLMProvider
from .config import Difficulty, Question, QuestionType
from .prompt_generator import QUESTION_SYSTEM_PROMPT, QuestionPromptGenerator, sanitize_technology
from .response_parser import parse_json_response
from .validator import REQUIRED_QUESTION_FIELDS, validate_question

logger = logging.getLogger(__name__)


class QuestionGenerator:
    """Generates one interview question per ordinal through the model."""

    def __init__(self, llm: LLMProvider, prompt_gen: Optional[QuestionPromptGenerator] = None):
        self.llm = llm
        self.prompt_gen = prompt_gen or QuestionPromptGenerator()

    async def generate_question(
        self,
        technology: str,
        difficulty: Difficulty | str,
        ordinal: int,
        question_type: QuestionType | str,
    ) -> Question:
        """
        Generate and validate a single question.

        Args:
            technology: Technology the question is about, e.g. "Python"
            difficulty: Easy / Medium / Hard (case-insensitive)
            ordinal: 1-based position in the interview, used to vary content
            question_type: subjective / coding / mcq

        Returns:
            The validated, immutable Question
        """
        difficulty = Difficulty.parse(difficulty)
        question_type = QuestionType.parse(question_type)
        tag = f"{sanitize_technology(technology)}/{difficulty.value}/{question_type.value}#{ordinal}"

        prompt = self.prompt_gen.build_question_prompt(technology, difficulty, ordinal, question_type)
        try:
            raw = await self.llm.complete(prompt, system_prompt=QUESTION_SYSTEM_PROMPT)
            logger.debug(f"Raw completion for {tag}: {raw[:100]!r}")
            parsed = parse_json_response(raw, REQUIRED_QUESTION_FIELDS)
            question = validate_question(parsed, question_type, difficulty)
        except Exception as e:
            logger.error(f"❌ Question generation failed for {tag}: {type(e).__name__}: {e}")
            raise

        if question.model_answer.is_code and not question.model_answer.language:
            question = _with_language(question, sanitize_technology(technology).lower())

        logger.info(f"✅ Generated question {tag} with {len(question.expected_topics)} expected topics")
        return question


def _with_language(question: Question, language: str) -> Question:
    return replace(question, model_answer=replace(question.model_answer, language=language))
