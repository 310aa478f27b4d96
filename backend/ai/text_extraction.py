from __future__ import annotations

import logging
import re

from ai.parser_config import DEFAULT_CONFIG, ParserConfig
from features.description_repair import (
    create_dual_output_description,
    create_music_style_from_type,
    create_prompt_from_context,
)
from features.lexicon import DEFAULT_LEXICON, KeywordLexicon
from features.segment_models import StrategyOutcome
from features.segment_validation import validate_and_normalize_segments
from features.time_codec import parse_time_to_seconds

LOGGER = logging.getLogger(__name__)

TIME_RANGE_PATTERN = re.compile(
    r"(?<![\d:])(\d{1,2}:\d{2})(?!\d|:\d)\s*(?:to|-|–)\s*(?<![\d:])(\d{1,2}:\d{2})(?!\d|:\d)",
    re.IGNORECASE,
)


def detect_intensity(text: str, lexicon: KeywordLexicon = DEFAULT_LEXICON) -> str:
    return lexicon.intensity_for(text or "")


def detect_type(text: str, lexicon: KeywordLexicon = DEFAULT_LEXICON) -> str:
    return lexicon.type_for(text or "")


def _context_after(text: str, match_end: int, next_start: int | None, limit: int) -> str:
    stop = match_end + limit
    if next_start is not None:
        stop = min(stop, next_start)
    context = text[match_end:stop]
    return context.strip(" \t\r\n:;,.-–)(").strip()


def extract_segments_with_regex(
    text: str,
    max_segments: int,
    *,
    config: ParserConfig = DEFAULT_CONFIG,
) -> StrategyOutcome:
    matches = list(TIME_RANGE_PATTERN.finditer(text))
    if not matches:
        return StrategyOutcome.failed("No M:SS time ranges found in text")

    segments = []
    for position, match in enumerate(matches):
        if len(segments) >= max_segments:
            break

        next_start = matches[position + 1].start() if position + 1 < len(matches) else None
        context = _context_after(text, match.end(), next_start, config.context_chars)
        start_seconds = parse_time_to_seconds(match.group(1))
        end_seconds = parse_time_to_seconds(match.group(2))
        intensity = detect_intensity(context, config.lexicon)
        segment_type = detect_type(context, config.lexicon)
        number = len(segments) + 1

        prompt = create_prompt_from_context(
            context,
            segment_type,
            intensity,
            templates=config.templates,
            lexicon=config.lexicon,
            max_line_chars=config.max_line_chars,
        )
        music_style = create_music_style_from_type(
            segment_type,
            intensity,
            start_seconds,
            end_seconds,
            templates=config.templates,
        )
        candidate = {
            "start_time": start_seconds,
            "end_time": end_seconds,
            "reason": f"Segment {number} from text extraction: {context[:50]}" if context else f"Segment {number} from text extraction",
            "intensity": intensity,
            "type": segment_type,
            "music_summary": f"{segment_type} background music for segment {number}",
            "detailed_description": create_dual_output_description(prompt, music_style, config.max_line_chars),
        }
        normalized = validate_and_normalize_segments(
            [candidate],
            templates=config.templates,
            lexicon=config.lexicon,
            max_line_chars=config.max_line_chars,
        )
        if not normalized:
            LOGGER.warning("Skipping time range %s-%s: invalid range", match.group(1), match.group(2))
            continue
        segments.extend(normalized)

    if not segments:
        return StrategyOutcome.failed("Time ranges found but none formed a valid segment")
    return StrategyOutcome(segments=segments)
