from __future__ import annotations

import logging
import math
from typing import Any, Iterable, Mapping, Sequence

from features.description_repair import MAX_LINE_CHARS, repair_detailed_description
from features.lexicon import DEFAULT_LEXICON, SEGMENT_TYPES, KeywordLexicon
from features.music_templates import DEFAULT_TEMPLATES, MusicTemplates
from features.segment_models import MusicSegment
from features.time_codec import format_seconds_to_time, parse_time_to_seconds

LOGGER = logging.getLogger(__name__)

MIN_SEGMENT_SECONDS = 1.0
DEFAULT_VOLUME = 60
DEFAULT_FADE_ALGORITHM = "linear"
DEFAULT_FADE_DURATION = "2.0"
DEFAULT_END_SECONDS = 30


def _first_present(candidate: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = candidate.get(key)
        if value is not None and value != "":
            return value
    return None


def _coerce_int(value: Any, default: int) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def _decode_times(candidate: Mapping[str, Any]) -> tuple[float, float]:
    start = _first_present(candidate, "start_time", "start")
    end = _first_present(candidate, "end_time", "end")
    start_seconds = parse_time_to_seconds(start) if start is not None else 0.0
    end_seconds = parse_time_to_seconds(end) if end is not None else float(DEFAULT_END_SECONDS)
    return start_seconds, end_seconds


def is_valid_segment(candidate: Any) -> bool:
    """Cheap structural filter applied before full normalization."""
    if not isinstance(candidate, Mapping):
        return False
    start = _first_present(candidate, "start_time", "start")
    end = _first_present(candidate, "end_time", "end")
    if start is None or end is None:
        return False
    start_seconds = parse_time_to_seconds(start)
    end_seconds = parse_time_to_seconds(end)
    if not (math.isfinite(start_seconds) and math.isfinite(end_seconds)):
        return False
    if start_seconds < 0 or end_seconds <= start_seconds:
        return False
    return all(candidate.get(key) for key in ("reason", "intensity", "type"))


def normalize_intensity(value: Any, lexicon: KeywordLexicon = DEFAULT_LEXICON) -> str:
    if not value:
        return "medium"
    return lexicon.intensity_for(str(value))


def normalize_type(value: Any, lexicon: KeywordLexicon = DEFAULT_LEXICON) -> str:
    if not value:
        return "ambient"
    text = str(value).strip().lower()
    if text in SEGMENT_TYPES:
        return text
    return lexicon.type_for(text)


def normalize_fade_algorithm(value: Any, lexicon: KeywordLexicon = DEFAULT_LEXICON) -> str:
    if not value:
        return DEFAULT_FADE_ALGORITHM
    return lexicon.fade_aliases.get(str(value).strip().lower(), DEFAULT_FADE_ALGORITHM)


def normalize_fade_duration(value: Any) -> str:
    if value is None or value == "":
        return DEFAULT_FADE_DURATION
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        return DEFAULT_FADE_DURATION
    if not math.isfinite(seconds) or seconds < 0:
        return DEFAULT_FADE_DURATION
    return str(seconds)


def validate_and_normalize_segments(
    raw_segments: Iterable[Any],
    *,
    templates: MusicTemplates = DEFAULT_TEMPLATES,
    lexicon: KeywordLexicon = DEFAULT_LEXICON,
    max_line_chars: int = MAX_LINE_CHARS,
) -> list[MusicSegment]:
    normalized_segments: list[MusicSegment] = []

    for index, candidate in enumerate(raw_segments, start=1):
        if not isinstance(candidate, Mapping):
            LOGGER.warning("Dropping segment %s: expected an object, got %s", index, type(candidate).__name__)
            continue

        start_seconds, end_seconds = _decode_times(candidate)
        if not (math.isfinite(start_seconds) and math.isfinite(end_seconds)):
            LOGGER.warning("Dropping segment %s: non-finite time range", index)
            continue
        if start_seconds < 0 or end_seconds - start_seconds < MIN_SEGMENT_SECONDS:
            LOGGER.warning(
                "Dropping segment %s: invalid range %ss-%ss",
                index,
                start_seconds,
                end_seconds,
            )
            continue

        reason = str(_first_present(candidate, "reason", "description") or f"Segment {index}")
        fields = {
            "start_time": start_seconds,
            "end_time": end_seconds,
            "reason": reason,
            "intensity": normalize_intensity(candidate.get("intensity"), lexicon),
            "type": normalize_type(candidate.get("type"), lexicon),
            "music_summary": str(_first_present(candidate, "music_summary") or reason),
        }
        fields["detailed_description"] = repair_detailed_description(
            candidate.get("detailed_description"),
            fields,
            templates=templates,
            lexicon=lexicon,
            max_line_chars=max_line_chars,
        )

        segment = MusicSegment(
            **fields,
            volume=_clamp(_coerce_int(candidate.get("volume"), DEFAULT_VOLUME), 0, 100),
            fade_algorithm=normalize_fade_algorithm(candidate.get("fade_algorithm"), lexicon),
            fadein_duration=normalize_fade_duration(candidate.get("fadein_duration")),
            fadeout_duration=normalize_fade_duration(candidate.get("fadeout_duration")),
        )
        normalized_segments.append(segment)
        LOGGER.info(
            "Processed segment %s: %s - %s (%s/%s)",
            index,
            format_seconds_to_time(segment.start_time),
            format_seconds_to_time(segment.end_time),
            segment.type,
            segment.intensity,
        )

    return normalized_segments


def find_overlapping_segments(segments: Sequence[MusicSegment]) -> list[tuple[int, int]]:
    """Index pairs (i < j) whose time ranges overlap; touching ranges do not count."""
    overlaps: list[tuple[int, int]] = []
    for i, first in enumerate(segments):
        for j in range(i + 1, len(segments)):
            second = segments[j]
            if first.start_time < second.end_time and second.start_time < first.end_time:
                overlaps.append((i, j))
    return overlaps
