"""
Prompt construction for question generation and answer scoring.
Every prompt names the exact JSON schema the model must return, since the
response parser and validator reject anything else.
"""
from __future__ import annotations
import re
from typing import Iterable

from .config import Difficulty, QuestionType


QUESTION_SYSTEM_PROMPT = (
    "You are a technical interviewer. Your responses must be in valid JSON format. "
    "Always wrap property names in double quotes. "
    "Do not include any text before or after the JSON object."
)

SCORING_SYSTEM_PROMPT = (
    "You are a technical interviewer generating interview analysis. "
    "Always respond with valid JSON only."
)

_TECHNOLOGY_SLUGS = {
    "c++": "cpp",
    "c#": "csharp",
    ".net": "dotnet",
    "node.js": "nodejs",
    "react.js": "react",
    "vue.js": "vue",
}


def sanitize_technology(technology: str) -> str:
    """Slug for a technology label: known special cases, else alphanumerics only."""
    special = _TECHNOLOGY_SLUGS.get(technology.strip().lower())
    if special:
        return special
    return re.sub(r"[^a-zA-Z0-9]", "", technology)


class QuestionPromptGenerator:
    """Builds the user prompts sent to the model.

    Stateless; the same inputs always produce the same prompt text.
    """

    def build_question_prompt(
        self,
        technology: str,
        difficulty: Difficulty | str,
        ordinal: int,
        question_type: QuestionType | str,
    ) -> str:
        difficulty = Difficulty.parse(difficulty)
        question_type = QuestionType.parse(question_type)
        if ordinal < 1:
            raise ValueError(f"Question ordinal must be positive, got {ordinal}")

        if question_type is QuestionType.MCQ:
            return self._mcq_prompt(technology, difficulty, ordinal)
        if question_type is QuestionType.CODING:
            return self._coding_prompt(technology, difficulty, ordinal)
        return self._subjective_prompt(technology, difficulty, ordinal)

    def _mcq_prompt(self, technology: str, difficulty: Difficulty, ordinal: int) -> str:
        return f"""You are a technical interviewer specializing in {technology}. Generate a multiple choice question (MCQ) that tests knowledge of {technology}.

The question should:
1. Test specific knowledge in {technology}
2. Be appropriate for {difficulty.value} difficulty level (tier {difficulty.tier})
3. Have exactly 4 options (A, B, C, D)
4. Have only one correct answer
5. Question number {ordinal} in the sequence - ensure it's completely different from previous questions
6. Include clear explanations for why each option is correct or incorrect

IMPORTANT: Return ONLY a valid JSON object with the following fields:
{{
  "question": "The MCQ question text - must be specific to {technology}",
  "expectedTopics": [
    "List of concepts being tested",
    "Key {technology} knowledge points covered"
  ],
  "difficulty": {difficulty.tier},
  "modelAnswer": {{
    "options": {{
      "A": "First option",
      "B": "Second option",
      "C": "Third option",
      "D": "Fourth option"
    }},
    "correctOption": "The correct option letter (A, B, C, or D)",
    "explanation": "Detailed explanation of why the correct answer is right and why others are wrong"
  }}
}}

{self._escaping_rules()}"""

    def _subjective_prompt(self, technology: str, difficulty: Difficulty, ordinal: int) -> str:
        return f"""You are a technical interviewer specializing in {technology}. Generate a logical reasoning and analytical thinking question that is relevant to {technology} development scenarios.

The question should:
1. Test critical thinking and problem-solving abilities in the context of {technology} projects
2. Focus on real-world scenarios a {technology} developer might face
3. Be appropriate for {difficulty.value} difficulty level (tier {difficulty.tier})
4. Test decision-making and analytical skills specific to {technology} development
5. Question number {ordinal} in the sequence - ensure it's different from previous questions

IMPORTANT: Return ONLY a valid JSON object with the following fields:
{{
  "question": "The question text - must be specific to {technology}",
  "expectedTopics": [
    "List of 4-5 key points that should be covered in the answer",
    "Each point should be relevant to {technology}"
  ],
  "difficulty": {difficulty.tier},
  "modelAnswer": {{
    "isCode": false,
    "content": "A detailed explanation of what a good answer should include, specific to {technology}"
  }}
}}

{self._escaping_rules()}"""

    def _coding_prompt(self, technology: str, difficulty: Difficulty, ordinal: int) -> str:
        return f"""You are a technical interviewer specializing in {technology}. Generate a coding question that tests practical {technology} implementation skills.

The question should:
1. Test coding ability in {technology}
2. Be appropriate for {difficulty.value} difficulty level (tier {difficulty.tier})
3. Focus on real-world scenarios
4. Be clear and unambiguous
5. Question number {ordinal} in the sequence - ensure it's different from previous questions

IMPORTANT: Return ONLY a valid JSON object with the following fields. Ensure all code in the content field is properly escaped:
{{
  "question": "The coding problem statement with clear requirements and examples",
  "expectedTopics": [
    "List of concepts and skills being tested",
    "Important considerations for the implementation"
  ],
  "difficulty": {difficulty.tier},
  "modelAnswer": {{
    "isCode": true,
    "content": "// Your code solution here\\n// Use double backslashes for newlines\\n// Escape all quotes"
  }}
}}

RULES for the content field:
1. Use double backslashes for newlines (\\n)
2. Escape all quotes (\\" for double quotes)
3. Avoid using backticks
4. Keep indentation using spaces (no tabs)
5. Escape any special characters

{self._escaping_rules()}"""

    def _escaping_rules(self) -> str:
        return (
            "Return ONLY the JSON object, no additional text before or after it. "
            "Ensure all strings are properly escaped: quotes as \\\" and newlines as \\n."
        )

    def build_scoring_prompt(
        self,
        question_text: str,
        candidate_answer: str,
        expected_topics: Iterable[str],
    ) -> str:
        topics = "\n".join(f"- {topic}" for topic in expected_topics)
        return f"""Analyze this response to the following interview question. Provide feedback and a score out of 10.

Question: {question_text}

Response: {candidate_answer}

Expected topics to be covered:
{topics}

Return your analysis in this JSON format:
{{
  "score": 8,
  "feedback": "Detailed feedback about the response",
  "coveredTopics": ["Topics that were covered well in the response"],
  "missingTopics": ["Expected topics that were not covered"],
  "improvement": "Suggestions for improvement"
}}

Make sure to:
1. Score between 0 and 10 points only
2. Include every topic from the expected topics list in exactly one of coveredTopics or missingTopics
3. Provide specific, actionable feedback
4. Return ONLY the JSON object with all strings properly escaped"""
