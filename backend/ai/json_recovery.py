from __future__ import annotations

import json
import logging
import re
from typing import Any, Callable

from ai.parser_config import DEFAULT_CONFIG, ParserConfig
from features.segment_models import StrategyOutcome
from features.segment_validation import is_valid_segment, validate_and_normalize_segments

LOGGER = logging.getLogger(__name__)

_CODE_FENCE_PATTERN = re.compile(r"```(?:json|javascript|js)?[ \t]*", re.IGNORECASE)
_SEGMENT_BLOCK_PATTERN = re.compile(r"\{\s*[\"']start_time[\"'][\s\S]*?\}")
_TRAILING_COMMA_PATTERN = re.compile(r",\s*([}\]])")
_CLOSERS = {"{": "}", "[": "]"}


def strip_code_fences(text: str) -> str:
    return _CODE_FENCE_PATTERN.sub("", text).strip()


def find_json_span(text: str) -> tuple[int, int] | None:
    """Greedy span from the first ``{``/``[`` to the last matching closer."""
    openers = [index for index in (text.find("{"), text.find("[")) if index != -1]
    if not openers:
        return None
    start = min(openers)
    end = text.rfind(_CLOSERS[text[start]])
    if end <= start:
        return None
    return start, end + 1


def _decode_span(text: str, span: tuple[int, int]) -> Any:
    start, end = span
    try:
        return json.loads(text[start:end])
    except json.JSONDecodeError:
        # Trailing prose may contain its own closer; decode the leading value only.
        parsed, _ = json.JSONDecoder().raw_decode(text, start)
        return parsed


def _segment_list_from(parsed: Any) -> list[Any] | None:
    if isinstance(parsed, list):
        return parsed
    if isinstance(parsed, dict):
        for key in ("segments", "data"):
            if isinstance(parsed.get(key), list):
                return parsed[key]
    return None


def extract_clean_json(text: str, max_segments: int, *, config: ParserConfig = DEFAULT_CONFIG) -> StrategyOutcome:
    cleaned = strip_code_fences(text)
    span = find_json_span(cleaned)
    if span is None:
        return StrategyOutcome.failed("No valid JSON structure found")

    try:
        parsed = _decode_span(cleaned, span)
    except json.JSONDecodeError as exc:
        return StrategyOutcome.failed(f"JSON decode failed: {exc}")

    raw_segments = _segment_list_from(parsed)
    if raw_segments is None:
        return StrategyOutcome.failed("JSON has no segment array (expected list, 'segments' or 'data')")
    if not raw_segments:
        return StrategyOutcome.failed("JSON segment array is empty")

    if len(raw_segments) > max_segments:
        LOGGER.info("Limiting %s parsed segments to %s", len(raw_segments), max_segments)
        raw_segments = raw_segments[:max_segments]

    segments = validate_and_normalize_segments(
        raw_segments,
        templates=config.templates,
        lexicon=config.lexicon,
        max_line_chars=config.max_line_chars,
    )
    if not segments:
        return StrategyOutcome.failed("Parsed JSON segments all failed validation")
    return StrategyOutcome(segments=segments)


def _remove_trailing_commas(block: str) -> str:
    return _TRAILING_COMMA_PATTERN.sub(r"\1", block)


def _close_truncated_string(block: str) -> str:
    unescaped_quotes = len(re.findall(r'(?<!\\)"', block))
    if unescaped_quotes % 2 == 0:
        return block
    body = block[:-1] if block.endswith("}") else block
    return body.rstrip() + '"}'


def _normalize_single_quotes(block: str) -> str:
    return block.replace("'", '"')


_REPAIRS: tuple[Callable[[str], str], ...] = (
    _remove_trailing_commas,
    _close_truncated_string,
    _normalize_single_quotes,
)


def repair_segment_block(block: str) -> dict[str, Any] | None:
    """Parse one object block, applying the local repairs cumulatively until one works."""
    candidate = block
    attempts = [candidate]
    for repair in _REPAIRS:
        candidate = repair(candidate)
        attempts.append(candidate)

    last_error: Exception | None = None
    for attempt in attempts:
        try:
            parsed = json.loads(attempt)
        except json.JSONDecodeError as exc:
            last_error = exc
            continue
        return parsed if isinstance(parsed, dict) else None

    LOGGER.debug("Segment block could not be repaired: %s", last_error)
    return None


def extract_valid_segments_from_broken_json(
    text: str,
    max_segments: int,
    *,
    config: ParserConfig = DEFAULT_CONFIG,
) -> StrategyOutcome:
    blocks = _SEGMENT_BLOCK_PATTERN.findall(text)
    LOGGER.info("Found %s potential segment blocks", len(blocks))
    if not blocks:
        return StrategyOutcome.failed("No segment blocks anchored on start_time found")

    accepted: list[dict[str, Any]] = []
    for index, block in enumerate(blocks, start=1):
        if len(accepted) >= max_segments:
            break
        parsed = repair_segment_block(block)
        if parsed is None:
            LOGGER.warning("Failed to parse segment block %s", index)
            continue
        if not is_valid_segment(parsed):
            LOGGER.warning("Segment block %s parsed but is not a valid segment", index)
            continue
        accepted.append(parsed)

    if not accepted:
        return StrategyOutcome.failed("No valid segments found in broken JSON")

    segments = validate_and_normalize_segments(
        accepted,
        templates=config.templates,
        lexicon=config.lexicon,
        max_line_chars=config.max_line_chars,
    )
    if not segments:
        return StrategyOutcome.failed("Recovered segment blocks all failed validation")
    return StrategyOutcome(segments=segments)
