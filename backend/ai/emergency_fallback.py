"""Last-resort segment synthesis when nothing in the model response is usable.

Output does not depend on the model beyond bare time pairs, and the function
never raises: callers always get at least ``min(2, max_segments)`` segments.
"""

from __future__ import annotations

import logging
import math
import re

from ai.parser_config import DEFAULT_CONFIG, ParserConfig
from features.archetypes import CANONICAL_SLOT_SECONDS, SegmentArchetype
from features.segment_models import MusicSegment
from features.segment_validation import MIN_SEGMENT_SECONDS
from features.time_codec import parse_time_to_seconds

LOGGER = logging.getLogger(__name__)

LOOSE_TIME_PAIR_PATTERN = re.compile(
    r"(?<![\d:])(\d{1,2}:\d{2})(?!\d|:\d)\s*(?:to|-|–)?\s*(?<![\d:])(\d{1,2}:\d{2})(?!\d|:\d)",
    re.IGNORECASE,
)


def _archetype_segment(
    archetype: SegmentArchetype,
    start_seconds: float,
    end_seconds: float,
    reason: str,
) -> MusicSegment:
    return MusicSegment(
        start_time=float(start_seconds),
        end_time=float(end_seconds),
        reason=reason,
        intensity=archetype.intensity,
        type=archetype.type,
        music_summary=f"{archetype.type} background music for video segment",
        detailed_description=archetype.detailed_description,
    )


def _segments_from_time_pairs(text: str, max_segments: int, archetypes: tuple[SegmentArchetype, ...]) -> list[MusicSegment]:
    segments: list[MusicSegment] = []
    for match in LOOSE_TIME_PAIR_PATTERN.finditer(text):
        if len(segments) >= max_segments:
            break
        start_seconds = parse_time_to_seconds(match.group(1))
        end_seconds = parse_time_to_seconds(match.group(2))
        if start_seconds < 0 or end_seconds - start_seconds < MIN_SEGMENT_SECONDS:
            continue
        archetype = archetypes[len(segments) % len(archetypes)]
        number = len(segments) + 1
        segments.append(
            _archetype_segment(
                archetype,
                start_seconds,
                end_seconds,
                f"Emergency segment {number} - extracted from time pattern {match.group(1)} to {match.group(2)}",
            )
        )
    return segments


def _canonical_segments(
    count: int,
    archetypes: tuple[SegmentArchetype, ...],
    *,
    offset_seconds: float = 0.0,
    first_index: int = 0,
) -> list[MusicSegment]:
    segments = []
    for slot in range(count):
        archetype = archetypes[(first_index + slot) % len(archetypes)]
        start_seconds = offset_seconds + slot * CANONICAL_SLOT_SECONDS
        segments.append(
            _archetype_segment(
                archetype,
                start_seconds,
                start_seconds + CANONICAL_SLOT_SECONDS,
                f"Emergency fallback segment {first_index + slot + 1} - default timing",
            )
        )
    return segments


def create_emergency_fallback_segments(
    text: str,
    max_segments: int,
    *,
    config: ParserConfig = DEFAULT_CONFIG,
) -> list[MusicSegment]:
    archetypes = config.archetypes
    max_segments = max(1, int(max_segments))

    segments = _segments_from_time_pairs(text or "", max_segments, archetypes)
    if segments:
        LOGGER.info("Emergency fallback paired %s time patterns with archetypes", len(segments))
        minimum = min(2, max_segments)
        if len(segments) < minimum:
            offset = math.ceil(max(segment.end_time for segment in segments))
            segments.extend(
                _canonical_segments(
                    minimum - len(segments),
                    archetypes,
                    offset_seconds=offset,
                    first_index=len(segments),
                )
            )
    else:
        LOGGER.info("No time patterns found, using default segment timing")
        segments = _canonical_segments(min(max_segments, max(2, len(archetypes))), archetypes)

    LOGGER.warning("Created %s emergency fallback segments", len(segments))
    return segments
