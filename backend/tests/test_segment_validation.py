from __future__ import annotations

from features.description_repair import validate_dual_output_description
from features.segment_models import MusicSegment
from features.segment_validation import (
    find_overlapping_segments,
    is_valid_segment,
    normalize_fade_algorithm,
    normalize_intensity,
    normalize_type,
    validate_and_normalize_segments,
)


def _raw(start="0:10", end="0:40", **overrides):
    candidate = {
        "start_time": start,
        "end_time": end,
        "reason": "Sunrise over the harbour",
        "intensity": "low",
        "type": "ambient",
    }
    candidate.update(overrides)
    return candidate


def test_is_valid_segment_decodes_clock_strings():
    assert is_valid_segment(_raw())
    assert is_valid_segment(_raw(start=5, end=12.5))


def test_is_valid_segment_rejects_bad_ranges_and_missing_fields():
    assert not is_valid_segment(_raw(start="0:40", end="0:10"))
    assert not is_valid_segment(_raw(start=-5, end=10))
    assert not is_valid_segment(_raw(reason=""))
    assert not is_valid_segment({"start_time": "0:10", "end_time": "0:20"})
    assert not is_valid_segment(["0:10", "0:20"])


def test_normalize_intensity_synonyms():
    assert normalize_intensity("Soft and gentle") == "low"
    assert normalize_intensity("PEACEFUL") == "low"
    assert normalize_intensity("very intense") == "high"
    assert normalize_intensity("powerful") == "high"
    assert normalize_intensity("moderate") == "medium"
    assert normalize_intensity(None) == "medium"


def test_normalize_type_keyword_map():
    assert normalize_type("beat-driven") == "rhythmic"
    assert normalize_type("Emotional") == "emotional"
    assert normalize_type("drama") == "dramatic"
    assert normalize_type("action sequence") == "energetic"
    assert normalize_type("energetic") == "energetic"
    assert normalize_type("mystery") == "suspenseful"
    assert normalize_type("lounge") == "ambient"
    assert normalize_type("") == "ambient"


def test_normalize_fade_algorithm_aliases():
    assert normalize_fade_algorithm("EXP") == "exponential"
    assert normalize_fade_algorithm("s-curve") == "sigmoid"
    assert normalize_fade_algorithm("wobble") == "linear"
    assert normalize_fade_algorithm(None) == "linear"


def test_validate_fills_defaults_and_repairs_description():
    segments = validate_and_normalize_segments([_raw(intensity="quiet", type="emotion")])

    assert len(segments) == 1
    segment = segments[0]
    assert segment.start_time == 10
    assert segment.end_time == 40
    assert segment.intensity == "low"
    assert segment.type == "emotional"
    assert segment.music_summary == "Sunrise over the harbour"
    assert segment.volume == 60
    assert segment.fade_algorithm == "linear"
    assert segment.fadein_duration == "2.0"
    assert segment.fadeout_duration == "2.0"
    assert validate_dual_output_description(segment.detailed_description)


def test_validate_keeps_supplied_fields_and_clamps_volume():
    segments = validate_and_normalize_segments(
        [_raw(volume="140", fade_algorithm="cos", fadein_duration=1.5, fadeout_duration="-3")]
    )

    segment = segments[0]
    assert segment.volume == 100
    assert segment.fade_algorithm == "cosine"
    assert segment.fadein_duration == "1.5"
    assert segment.fadeout_duration == "2.0"


def test_validate_drops_invalid_segments_and_preserves_order():
    raw = [
        _raw(start="1:00", end="1:30", reason="third in time, first in list"),
        _raw(start="0:20", end="0:20", reason="zero length"),
        _raw(start="0:05", end="0:05.5", reason="unparseable end"),
        "not a segment",
        _raw(start="0:00", end="0:15", reason="earliest"),
    ]

    segments = validate_and_normalize_segments(raw)

    assert [segment.reason for segment in segments] == ["third in time, first in list", "earliest"]


def test_validate_drops_segments_shorter_than_one_second():
    assert validate_and_normalize_segments([_raw(start=3, end=3.5)]) == []


def test_validate_uses_start_end_aliases_and_default_end():
    segments = validate_and_normalize_segments([{"start": 2, "reason": "Intro"}])

    assert segments[0].start_time == 2
    assert segments[0].end_time == 30


def test_find_overlapping_segments():
    def _segment(start, end):
        return MusicSegment(start, end, "r", "low", "ambient", "s", "Prompt: a\nMusic Style: b")

    segments = [_segment(0, 30), _segment(20, 40), _segment(40, 60), _segment(100, 110)]

    assert find_overlapping_segments(segments) == [(0, 1)]
