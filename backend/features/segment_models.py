from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

STRATEGY_CLEAN_JSON = "clean_json_direct"
STRATEGY_BROKEN_JSON = "valid_segment_extraction"
STRATEGY_REGEX = "regex_extraction"
STRATEGY_EMERGENCY = "emergency_fallback"

STRATEGY_TAGS = (STRATEGY_CLEAN_JSON, STRATEGY_BROKEN_JSON, STRATEGY_REGEX, STRATEGY_EMERGENCY)


@dataclass
class MusicSegment:
    start_time: float
    end_time: float
    reason: str
    intensity: str
    type: str
    music_summary: str
    detailed_description: str
    volume: int = 60
    fade_algorithm: str = "linear"
    fadein_duration: str = "2.0"
    fadeout_duration: str = "2.0"

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class StrategyOutcome:
    """Result of a single extraction strategy; empty segments means failure."""

    segments: list[MusicSegment] = field(default_factory=list)
    failure: str | None = None

    @property
    def succeeded(self) -> bool:
        return bool(self.segments)

    @classmethod
    def failed(cls, reason: str) -> "StrategyOutcome":
        return cls(segments=[], failure=reason)


@dataclass
class ParseResult:
    segments: list[MusicSegment]
    parse_error: str | None
    strategy: str

    @property
    def is_trustworthy(self) -> bool:
        return self.strategy != STRATEGY_EMERGENCY

    def to_dict(self) -> dict[str, Any]:
        return {
            "segments": [segment.to_dict() for segment in self.segments],
            "parseError": self.parse_error,
            "strategy": self.strategy,
        }
