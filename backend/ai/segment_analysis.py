from __future__ import annotations

import logging
from typing import Any

from ai.ai import generate_with_instruction
from ai.parser_config import DEFAULT_CONFIG, ParserConfig, resolve_max_segments
from ai.segment_parser import extract_segments_from_response
from ai.segment_prompts import build_segment_system_instruction
from features.segment_models import ParseResult

LOGGER = logging.getLogger(__name__)


def analyze_description_for_segments(
    description: str,
    max_segments: Any = None,
    config: ParserConfig = DEFAULT_CONFIG,
) -> tuple[ParseResult, str]:
    """Ask Gemini for music placement and parse whatever comes back.

    AIServiceError from the model call propagates; parsing itself cannot fail.
    """
    limit = resolve_max_segments(max_segments, config)
    raw_text = generate_with_instruction(
        prompt=description,
        system_instruction=build_segment_system_instruction(limit),
        response_mime_type="application/json",
    )
    result = extract_segments_from_response(raw_text, limit, config)
    if not result.is_trustworthy:
        LOGGER.warning("Gemini response was unusable; returned emergency fallback segments")
    return result, raw_text
