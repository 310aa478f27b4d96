"""Deterministic template tables for synthesizing segment descriptions."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True)
class GenreTemplate:
    bpm_low: int
    bpm_medium: int
    bpm_high: int
    key: str
    instruments: str
    visual_prompt: str

    def bpm_for(self, intensity: str) -> int:
        if intensity == "high":
            return self.bpm_high
        if intensity == "low":
            return self.bpm_low
        return self.bpm_medium


@dataclass(frozen=True)
class MusicTemplates:
    genres: Mapping[str, GenreTemplate]
    fallback_genre: GenreTemplate
    dynamics: Mapping[str, str]
    # (max duration in seconds, progression); the last entry has no upper bound.
    progressions: tuple[tuple[float | None, str], ...]

    def genre_for(self, segment_type: str) -> GenreTemplate:
        return self.genres.get(segment_type, self.fallback_genre)

    def dynamics_for(self, intensity: str) -> str:
        return self.dynamics.get(intensity, self.dynamics["medium"])

    def progression_for(self, duration_seconds: float) -> str:
        for upper_bound, progression in self.progressions:
            if upper_bound is None or duration_seconds <= upper_bound:
                return progression
        return self.progressions[-1][1]


DEFAULT_TEMPLATES = MusicTemplates(
    genres=MappingProxyType(
        {
            "ambient": GenreTemplate(
                60,
                70,
                85,
                "C major",
                "soft piano and strings",
                "Peaceful scene with calm atmosphere, gentle pacing, serene visuals, creating a relaxing mood for viewers",
            ),
            "emotional": GenreTemplate(
                75,
                85,
                95,
                "G major",
                "acoustic guitar and light strings",
                "Meaningful moment with personal connections, heartfelt interactions, touching scenes, evoking warm feelings",
            ),
            "rhythmic": GenreTemplate(
                90,
                100,
                110,
                "F major",
                "guitar and percussion",
                "Active segment with movement and energy, dynamic visuals, engaging activities, maintaining viewer interest",
            ),
            "dramatic": GenreTemplate(
                80,
                95,
                105,
                "B minor",
                "orchestral strings and brass",
                "Intense moment with heightened emotions, significant events, tension building, compelling narrative elements",
            ),
            "energetic": GenreTemplate(
                100,
                110,
                120,
                "D major",
                "electric guitar and full band",
                "High-energy scene with excitement and enthusiasm, upbeat activities, positive interactions, vibrant atmosphere",
            ),
            "suspenseful": GenreTemplate(
                70,
                85,
                95,
                "D minor",
                "low strings and pulsing synth",
                "Uncertain moment with lingering shadows, slow reveals, watchful characters, an air of quiet unease",
            ),
        }
    ),
    fallback_genre=GenreTemplate(
        75,
        80,
        90,
        "C major",
        "acoustic instruments",
        "Video segment with moderate pacing, clear visual storytelling, steady camera work and a balanced mood",
    ),
    dynamics=MappingProxyType(
        {
            "low": "piano to mezzo-piano",
            "medium": "mezzo-forte",
            "high": "forte to fortissimo",
        }
    ),
    progressions=(
        (20.0, "intro → sustain → fade"),
        (45.0, "intro → build → resolution"),
        (None, "intro → build → climax → outro"),
    ),
)
