"""Turn a raw Gemini music-placement answer into validated music segments.

Strategies run in a fixed order and the first one that yields at least one
validated segment wins:

1. ``clean_json_direct``: the response is (or wraps) a JSON document.
2. ``valid_segment_extraction``: salvage individual segment objects from
   broken or truncated JSON.
3. ``regex_extraction``: ``M:SS to M:SS`` ranges in free prose.
4. ``emergency_fallback``: canned archetypes, so the result is never empty.

``extract_segments_from_response`` never raises.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Callable

from ai.emergency_fallback import create_emergency_fallback_segments
from ai.json_recovery import extract_clean_json, extract_valid_segments_from_broken_json
from ai.parser_config import DEFAULT_CONFIG, ParserConfig, resolve_max_segments
from ai.text_extraction import extract_segments_with_regex
from features.segment_models import (
    STRATEGY_BROKEN_JSON,
    STRATEGY_CLEAN_JSON,
    STRATEGY_EMERGENCY,
    STRATEGY_REGEX,
    ParseResult,
    StrategyOutcome,
)
from features.segment_validation import find_overlapping_segments
from features.time_codec import format_seconds_to_time

LOGGER = logging.getLogger(__name__)

Strategy = Callable[..., StrategyOutcome]

STRATEGY_CHAIN: tuple[tuple[str, Strategy], ...] = (
    (STRATEGY_CLEAN_JSON, extract_clean_json),
    (STRATEGY_BROKEN_JSON, extract_valid_segments_from_broken_json),
    (STRATEGY_REGEX, extract_segments_with_regex),
)

ALL_STRATEGIES_FAILED = "All parsing strategies failed - using emergency fallback"


def _run_strategy(tag: str, strategy: Strategy, text: str, max_segments: int, config: ParserConfig) -> StrategyOutcome:
    try:
        return strategy(text, max_segments, config=config)
    except Exception as exc:
        LOGGER.exception("Strategy %s crashed", tag)
        return StrategyOutcome.failed(f"{tag} raised {type(exc).__name__}: {exc}")


def extract_segments_from_response(
    response_text: Any,
    max_segments: Any = None,
    config: ParserConfig = DEFAULT_CONFIG,
) -> ParseResult:
    text = response_text if isinstance(response_text, str) else ""
    limit = resolve_max_segments(max_segments, config)
    LOGGER.info("Parsing model response (%s chars, max %s segments)", len(text), limit)

    first_failure: str | None = None
    for tag, strategy in STRATEGY_CHAIN:
        outcome = _run_strategy(tag, strategy, text, limit, config)
        if outcome.succeeded:
            LOGGER.info("Strategy %s succeeded with %s segments", tag, len(outcome.segments))
            parse_error = None if tag == STRATEGY_CLEAN_JSON else first_failure
            return ParseResult(segments=outcome.segments[:limit], parse_error=parse_error, strategy=tag)
        LOGGER.info("Strategy %s failed: %s", tag, outcome.failure)
        if first_failure is None:
            first_failure = outcome.failure

    LOGGER.warning("All extraction strategies failed; using emergency fallback")
    segments = create_emergency_fallback_segments(text, limit, config=config)
    return ParseResult(
        segments=segments,
        parse_error=first_failure or ALL_STRATEGIES_FAILED,
        strategy=STRATEGY_EMERGENCY,
    )


def log_parse_summary(result: ParseResult) -> None:
    LOGGER.info("Parsed %s music segments via %s", len(result.segments), result.strategy)
    if result.parse_error:
        LOGGER.info("Parse error: %s", result.parse_error)

    for index, segment in enumerate(result.segments, start=1):
        LOGGER.info(
            "Segment %s: %s - %s | %s/%s | volume %s%% | fade %s (%ss in, %ss out)",
            index,
            format_seconds_to_time(segment.start_time),
            format_seconds_to_time(segment.end_time),
            segment.type,
            segment.intensity,
            segment.volume,
            segment.fade_algorithm,
            segment.fadein_duration,
            segment.fadeout_duration,
        )
        for line in segment.detailed_description.split("\n"):
            LOGGER.info("    %s", line)

    overlaps = find_overlapping_segments(result.segments)
    if overlaps:
        LOGGER.warning("Segments overlap at index pairs %s", overlaps)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Parse a saved Gemini music-segment response.")
    parser.add_argument("response_file", type=Path, help="File holding the raw model response")
    parser.add_argument("--max-segments", type=int, default=None)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    config = ParserConfig.from_env()
    response_text = args.response_file.read_text(encoding="utf-8")
    result = extract_segments_from_response(response_text, args.max_segments, config)
    log_parse_summary(result)
    json.dump(result.to_dict(), sys.stdout, indent=2, ensure_ascii=False)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
