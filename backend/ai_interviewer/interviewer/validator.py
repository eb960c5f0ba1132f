"""
Shape validation for generated questions.

Rules are small jsonschema fragments checked in a fixed order so the error
always names the first violation rather than an arbitrary one.
"""
from __future__ import annotations
import logging
import math
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import jsonschema

from ..exceptions import SchemaError
from .config import MCQ_LABELS, Difficulty, ModelAnswer, Question, QuestionType

logger = logging.getLogger(__name__)

REQUIRED_QUESTION_FIELDS = ["question", "expectedTopics", "difficulty", "modelAnswer"]

# (schema fragment, error message or callable building it from the instance)
Rule = Tuple[Dict[str, Any], Union[str, Callable[[Any], str]]]


def _missing_options_message(options: Dict[str, Any]) -> str:
    missing = [label for label in MCQ_LABELS if label not in options]
    return f"Missing MCQ options: {', '.join(missing)}"


COMMON_RULES: List[Rule] = [
    (
        {"type": "array", "items": {"type": "string"}},
        "expectedTopics must be an array of strings",
    ),
    ({"type": "number"}, "difficulty must be a number"),
    ({"type": "object"}, "modelAnswer must be an object"),
]
_COMMON_FIELDS = ["expectedTopics", "difficulty", "modelAnswer"]

MCQ_RULES: List[Rule] = [
    (
        {"required": ["options"], "properties": {"options": {"type": "object"}}},
        "MCQ response must include options object",
    ),
    (
        {"properties": {"options": {"required": list(MCQ_LABELS)}}},
        lambda answer: _missing_options_message(answer["options"]),
    ),
    (
        {"required": ["correctOption"], "properties": {"correctOption": {"enum": list(MCQ_LABELS)}}},
        "MCQ response must include a valid correctOption (A, B, C, or D)",
    ),
    (
        {"required": ["explanation"], "properties": {"explanation": {"type": "string", "minLength": 1}}},
        "MCQ response must include an explanation",
    ),
]

CODING_RULES: List[Rule] = [
    (
        {
            "required": ["isCode", "content"],
            "properties": {
                "isCode": {"not": {"enum": [False, None, 0, ""]}},
                "content": {"type": "string"},
            },
        },
        "Coding response must include isCode flag and content",
    ),
]

SUBJECTIVE_RULES: List[Rule] = [
    (
        {"required": ["content"], "properties": {"content": {"type": "string"}}},
        "Model answer must include content string",
    ),
]

_TYPE_RULES = {
    QuestionType.MCQ: MCQ_RULES,
    QuestionType.CODING: CODING_RULES,
    QuestionType.SUBJECTIVE: SUBJECTIVE_RULES,
}


def _check(instance: Any, rule: Rule) -> None:
    schema, message = rule
    if not jsonschema.Draft7Validator(schema).is_valid(instance):
        raise SchemaError(message(instance) if callable(message) else message)


def validate_question(
    parsed: Any,
    question_type: QuestionType | str,
    difficulty: Optional[Difficulty | str] = None,
) -> Question:
    """Check a parsed model payload and build a `Question` from it.

    `difficulty` is the label the caller asked for; when given it decides the
    tier, otherwise the payload's numeric difficulty is used (clamped to 1..3).
    """
    question_type = QuestionType.parse(question_type)
    if not isinstance(parsed, dict):
        raise SchemaError("Response must be a JSON object", missing_fields=REQUIRED_QUESTION_FIELDS)

    missing = [name for name in REQUIRED_QUESTION_FIELDS if name not in parsed]
    if missing:
        raise SchemaError(f"Missing required fields: {', '.join(missing)}", missing_fields=missing)

    for name, rule in zip(_COMMON_FIELDS, COMMON_RULES):
        _check(parsed[name], rule)

    model_answer = parsed["modelAnswer"]
    for rule in _TYPE_RULES[question_type]:
        _check(model_answer, rule)

    if difficulty is not None:
        tier = Difficulty.parse(difficulty).tier
    elif isinstance(parsed["difficulty"], float) and not math.isfinite(parsed["difficulty"]):
        raise SchemaError("difficulty must be a finite number")
    else:
        # Clamp before rounding so huge integers never go through float
        tier = int(round(min(3, max(1, parsed["difficulty"]))))

    return Question(
        text=str(parsed["question"]),
        expected_topics=tuple(parsed["expectedTopics"]),
        difficulty_tier=tier,
        type=question_type,
        model_answer=_build_model_answer(model_answer, question_type),
    )


def _build_model_answer(data: Dict[str, Any], question_type: QuestionType) -> ModelAnswer:
    if question_type is QuestionType.MCQ:
        return ModelAnswer(
            options={label: str(data["options"][label]) for label in MCQ_LABELS},
            correct_option=data["correctOption"],
            explanation=data["explanation"],
        )
    return ModelAnswer(
        content=data["content"],
        is_code=question_type is QuestionType.CODING,
        language=data.get("language") if isinstance(data.get("language"), str) else None,
    )
