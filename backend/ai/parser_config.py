from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Any

from features.archetypes import DEFAULT_ARCHETYPES, SegmentArchetype
from features.lexicon import DEFAULT_LEXICON, KeywordLexicon
from features.music_templates import DEFAULT_TEMPLATES, MusicTemplates

DEFAULT_MAX_SEGMENTS = 10
MAX_SEGMENTS_CEILING = 50


def _int_env(name: str, default: int, minimum: int, maximum: int) -> int:
    raw_value = os.environ.get(name)
    if raw_value is None:
        return default
    try:
        parsed = int(raw_value)
    except (TypeError, ValueError):
        return default
    return max(minimum, min(maximum, parsed))


@dataclass(frozen=True)
class ParserConfig:
    templates: MusicTemplates = DEFAULT_TEMPLATES
    lexicon: KeywordLexicon = DEFAULT_LEXICON
    archetypes: tuple[SegmentArchetype, ...] = DEFAULT_ARCHETYPES
    default_max_segments: int = DEFAULT_MAX_SEGMENTS
    context_chars: int = 100
    max_line_chars: int = 280

    def __post_init__(self) -> None:
        if not self.archetypes:
            raise ValueError("ParserConfig requires at least one fallback archetype")

    @classmethod
    def from_env(cls, base: "ParserConfig | None" = None) -> "ParserConfig":
        base = base or cls()
        return replace(
            base,
            default_max_segments=_int_env(
                "MUSIC_SEGMENTS_DEFAULT_MAX", base.default_max_segments, 1, MAX_SEGMENTS_CEILING
            ),
            context_chars=_int_env("MUSIC_SEGMENTS_CONTEXT_CHARS", base.context_chars, 20, 500),
        )


DEFAULT_CONFIG = ParserConfig()


def resolve_max_segments(value: Any, config: ParserConfig = DEFAULT_CONFIG) -> int:
    if value is None or isinstance(value, bool):
        return config.default_max_segments
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return config.default_max_segments
    return max(1, parsed)
