"""
Turn a raw model reply into a ConversionResult.

Three independent stages, each with its own failure:

    strip_fences     -> EmptyReplyError
    parse_json       -> MalformedReplyError
    validate_result  -> SchemaError

parse_reply() chains them.
"""

import json
import re
from typing import Any, Dict

from ..models import ConversionResult
from ..utils.errors import EmptyReplyError, MalformedReplyError, SchemaError

# ``` or ```json anywhere in the reply
FENCE_PATTERN = re.compile(r"```(?:json)?", re.IGNORECASE)

# Outer math-mode delimiters, longest first so $$ is not read as $
MATH_DELIMITERS = [
    ("$$", "$$"),
    ("\\[", "\\]"),
    ("\\(", "\\)"),
    ("$", "$"),
]

REQUIRED_FIELDS = ("latex", "explanation")


def strip_fences(text: str) -> str:
    """
    Remove Markdown code-fence markers and surrounding whitespace.

    Raises:
        EmptyReplyError: nothing is left after stripping
    """
    cleaned = FENCE_PATTERN.sub("", text or "").strip()
    if not cleaned:
        raise EmptyReplyError("Reply contained no text", reply=text or "")
    return cleaned


def parse_json(text: str) -> Dict[str, Any]:
    """
    Parse reply text strictly as a JSON object.

    Raises:
        MalformedReplyError: text is not JSON, or is JSON but not an object
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedReplyError(f"Reply is not valid JSON: {e}", reply=text) from e

    if not isinstance(data, dict):
        raise MalformedReplyError(
            f"Expected a JSON object, got {type(data).__name__}", reply=text
        )
    return data


def strip_math_delimiters(latex: str) -> str:
    """
    Remove one pair of math-mode delimiters wrapping the whole string.

    "$a$ + $b$" is two spans, not one, and is left alone.
    """
    stripped = latex.strip()
    for opening, closing in MATH_DELIMITERS:
        if len(stripped) <= len(opening) + len(closing):
            continue
        if not (stripped.startswith(opening) and stripped.endswith(closing)):
            continue
        inner = stripped[len(opening) : -len(closing)]
        if opening in inner or closing in inner:
            continue
        return inner.strip()
    return stripped


def validate_result(data: Dict[str, Any]) -> ConversionResult:
    """
    Check the parsed object and build a ConversionResult.

    Raises:
        SchemaError: a field is missing, not a string, or latex is blank
    """
    for name in REQUIRED_FIELDS:
        if name not in data:
            raise SchemaError(f"Reply is missing the '{name}' field", reply=json.dumps(data))
        if not isinstance(data[name], str):
            raise SchemaError(
                f"Field '{name}' must be a string, got {type(data[name]).__name__}",
                reply=json.dumps(data),
            )

    latex = strip_math_delimiters(data["latex"])
    if not latex:
        raise SchemaError("Field 'latex' is empty", reply=json.dumps(data))

    return ConversionResult(latex=latex, explanation=data["explanation"].strip())


def parse_reply(text: str) -> ConversionResult:
    """Run all three stages on a raw reply."""
    return validate_result(parse_json(strip_fences(text)))
