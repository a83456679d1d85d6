"""Parsing of free-form model output into a list of propositions.

The chunking model is asked to answer with a single fenced ``json`` block
holding an array of strings.  Models do not always comply, so
:func:`extract` never raises: it returns a tagged result, either
:class:`Parsed` with the items or :class:`Failed` with a reason, and the
caller treats ``Failed`` as "this document contributes nothing".

Reasoning models (deepseek-r1 and friends) prefix their answer with a
``<think>`` section; :func:`strip_reasoning` drops it.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field

import structlog

logger = structlog.get_logger(logger_name=__name__)

# First fenced block tagged json; non-greedy so a later block is never merged in.
_FENCED_JSON = re.compile(r"```json\s*\n([\s\S]*?)\n```")

REASONING_DELIMITER = "</think>"


@dataclass(frozen=True)
class Parsed:
    """Model output that yielded an array (possibly empty) of propositions."""

    items: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class Failed:
    """Model output that could not be turned into an array of strings."""

    reason: str


ExtractionResult = Parsed | Failed


def strip_reasoning(text: str) -> str:
    """Return the text after the first reasoning delimiter, or *text* unchanged.

    The result is whitespace-trimmed only when a delimiter was found.
    """
    if REASONING_DELIMITER not in text:
        return text
    return text.split(REASONING_DELIMITER, 1)[1].strip()


def parse_structured_output(raw: str) -> ExtractionResult:
    """Locate the first fenced json block in *raw* and decode it as a string array."""
    match = _FENCED_JSON.search(raw or "")
    if match is None:
        return Failed(reason="no fenced json block found")

    try:
        data = json.loads(match.group(1))
    except json.JSONDecodeError as exc:
        return Failed(reason=f"invalid JSON: {exc.msg} at line {exc.lineno}")

    if not isinstance(data, list):
        return Failed(reason=f"expected a JSON array, got {type(data).__name__}")

    items = [item.strip() for item in data if isinstance(item, str) and item.strip()]
    dropped = len(data) - len(items)
    if dropped:
        logger.warning("structured_output_items_dropped", dropped=dropped, kept=len(items))
    return Parsed(items=items)


def extract(raw: str, context_label: str) -> ExtractionResult:
    """Parse *raw* and log a failure tagged with *context_label*."""
    result = parse_structured_output(raw)
    if isinstance(result, Failed):
        logger.warning(
            "structured_output_parse_failed",
            context=context_label,
            reason=result.reason,
            response_preview=(raw or "")[:200],
        )
    return result


def extract_propositions(raw: str, context_label: str) -> list[str]:
    """Return the extracted strings, or an empty list on any failure."""
    result = extract(raw, context_label)
    return result.items if isinstance(result, Parsed) else []
