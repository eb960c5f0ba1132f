"""
Best-effort extraction of a JSON object from model output.

The model is not guaranteed to emit strictly valid JSON or to omit prose
around it, so parsing is two-phase: locate the outermost brace span and parse
it directly; if that fails, run the ordered textual repairs in `REPAIRS` and
parse exactly once more. Each repair is a plain `str -> str` function.
"""
from __future__ import annotations
import json
import logging
import re
from typing import Any, Callable, Iterable, List, Tuple

from ..exceptions import MalformedJsonError, NoJsonFoundError, SchemaError

logger = logging.getLogger(__name__)

# A double-quoted JSON string literal, escapes included
_STRING_LITERAL = re.compile(r'"(?:[^"\\]|\\.)*"', re.S)
_ZERO_WIDTH = re.compile("[\u200b-\u200d\ufeff]")
_TRAILING_COMMA = re.compile(r",(\s*[}\]])")
_UNQUOTED_KEY = re.compile(r"([{,]\s*)(\w+)(\s*:)")
_SINGLE_QUOTED_VALUE = re.compile(r":\s*'([^']*)'")
_ESCAPE = re.compile(r"\\(.)", re.S)
_VALID_ESCAPES = set('"\\/bfnrtu')


def extract_json_candidate(text: Any) -> str:
    """Greedy span from the first '{' to the last '}'."""
    if not isinstance(text, str) or not text:
        raise NoJsonFoundError("Response must be a non-empty string")
    start = text.find('{')
    end = text.rfind('}')
    if start < 0 or end < start:
        raise NoJsonFoundError("No JSON object found in response")
    return text[start:end + 1]


def _split_string_literals(text: str) -> List[Tuple[bool, str]]:
    """Split text into (is_string_literal, segment) pieces, in order."""
    pieces: List[Tuple[bool, str]] = []
    pos = 0
    for match in _STRING_LITERAL.finditer(text):
        if match.start() > pos:
            pieces.append((False, text[pos:match.start()]))
        pieces.append((True, match.group(0)))
        pos = match.end()
    if pos < len(text):
        pieces.append((False, text[pos:]))
    return pieces


def _outside_strings(text: str, fn: Callable[[str], str]) -> str:
    return "".join(seg if is_str else fn(seg) for is_str, seg in _split_string_literals(text))


def _inside_strings(text: str, fn: Callable[[str], str]) -> str:
    return "".join(fn(seg) if is_str else seg for is_str, seg in _split_string_literals(text))


def strip_whitespace(text: str) -> str:
    return text.strip()


def strip_zero_width(text: str) -> str:
    return _ZERO_WIDTH.sub("", text)


def remove_trailing_commas(text: str) -> str:
    return _outside_strings(text, lambda seg: _TRAILING_COMMA.sub(r"\1", seg))


def quote_unquoted_keys(text: str) -> str:
    return _outside_strings(text, lambda seg: _UNQUOTED_KEY.sub(r'\1"\2"\3', seg))


def single_to_double_quotes(text: str) -> str:
    # Only quoted values (":'...'"); apostrophes inside string literals stay
    return _outside_strings(text, lambda seg: _SINGLE_QUOTED_VALUE.sub(r':"\1"', seg))


def drop_invalid_escapes(text: str) -> str:
    def _fix(match: re.Match) -> str:
        char = match.group(1)
        return match.group(0) if char in _VALID_ESCAPES else char
    return _ESCAPE.sub(_fix, text)


def escape_control_whitespace(text: str) -> str:
    def _escape(seg: str) -> str:
        return seg.replace("\n", "\\n").replace("\r", "\\r").replace("\t", "\\t")
    return _inside_strings(text, _escape)


REPAIRS: Tuple[Callable[[str], str], ...] = (
    strip_whitespace,
    strip_zero_width,
    remove_trailing_commas,
    quote_unquoted_keys,
    single_to_double_quotes,
    drop_invalid_escapes,
    escape_control_whitespace,
)


def repair_json_text(text: str) -> str:
    for repair in REPAIRS:
        text = repair(text)
    return text


def check_required_fields(parsed: Any, required_fields: Iterable[str]) -> None:
    required = list(required_fields)
    if not isinstance(parsed, dict):
        raise SchemaError("Top-level JSON value is not an object", missing_fields=required)
    missing = [name for name in required if name not in parsed]
    if missing:
        raise SchemaError(f"Missing required fields: {', '.join(missing)}", missing_fields=missing)


def parse_json_response(raw_text: Any, required_fields: Iterable[str] = ()) -> Any:
    """Extract, (optionally) repair, parse, and check top-level fields.

    Raises:
        NoJsonFoundError: no brace-delimited span in the text
        MalformedJsonError: the span does not parse even after repair
        SchemaError: a required top-level field is absent
    """
    candidate = extract_json_candidate(raw_text)
    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError as first_error:
        logger.warning(f"⚠️ Initial JSON parse failed ({first_error}); preview: {candidate[:100]!r}")
        repaired = repair_json_text(candidate)
        try:
            parsed = json.loads(repaired)
        except json.JSONDecodeError as e:
            logger.error(f"❌ JSON still malformed after repair: {e}")
            raise MalformedJsonError(
                f"Failed to parse response as JSON: {e}\nResponse: {repaired}",
                text=repaired,
            ) from e
        logger.info("✅ Parsed model output after repair pass")

    check_required_fields(parsed, required_fields)
    return parsed
