"""Keyword lexicons used to classify free text and loosely-typed model fields.

The lexicon is versioned data: bump ``version`` whenever a keyword list
changes so parse results can be traced back to the vocabulary that produced
them.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Mapping

INTENSITIES = ("low", "medium", "high")
SEGMENT_TYPES = ("ambient", "rhythmic", "emotional", "dramatic", "energetic", "suspenseful")
FADE_ALGORITHMS = ("linear", "exponential", "logarithmic", "cosine", "sigmoid", "step")


@lru_cache(maxsize=256)
def _keyword_pattern(keyword: str) -> re.Pattern[str]:
    return re.compile(r"\b" + re.escape(keyword), re.IGNORECASE)


@dataclass(frozen=True)
class KeywordLexicon:
    version: str
    low_intensity_words: tuple[str, ...]
    high_intensity_words: tuple[str, ...]
    # Ordered: the first keyword found decides the type.
    type_keywords: tuple[tuple[str, str], ...]
    fade_aliases: Mapping[str, str]
    musical_terms: tuple[str, ...]

    def contains(self, text: str, keyword: str) -> bool:
        """Word-prefix match, so ``soft`` hits ``softly`` but ``low`` misses ``follow``."""
        return bool(_keyword_pattern(keyword).search(text))

    def intensity_for(self, text: str) -> str:
        if any(self.contains(text, word) for word in self.low_intensity_words):
            return "low"
        if any(self.contains(text, word) for word in self.high_intensity_words):
            return "high"
        return "medium"

    def type_for(self, text: str, default: str = "ambient") -> str:
        for keyword, segment_type in self.type_keywords:
            if self.contains(text, keyword):
                return segment_type
        return default


DEFAULT_LEXICON = KeywordLexicon(
    version="2024.06-1",
    low_intensity_words=("low", "soft", "quiet", "gentle", "calm", "peaceful"),
    high_intensity_words=("high", "loud", "intense", "dramatic", "powerful", "energetic"),
    type_keywords=(
        ("rhythm", "rhythmic"),
        ("beat", "rhythmic"),
        ("dance", "rhythmic"),
        ("emotion", "emotional"),
        ("feel", "emotional"),
        ("drama", "dramatic"),
        ("tension", "dramatic"),
        ("energy", "energetic"),
        ("energetic", "energetic"),
        ("action", "energetic"),
        ("suspense", "suspenseful"),
        ("mystery", "suspenseful"),
        ("ambient", "ambient"),
    ),
    fade_aliases=MappingProxyType(
        {
            "linear": "linear",
            "lin": "linear",
            "exponential": "exponential",
            "exp": "exponential",
            "logarithmic": "logarithmic",
            "log": "logarithmic",
            "cosine": "cosine",
            "cos": "cosine",
            "sigmoid": "sigmoid",
            "s-curve": "sigmoid",
            "step": "step",
        }
    ),
    musical_terms=(
        "music",
        "musical",
        "song",
        "soundtrack",
        "score",
        "melody",
        "melodic",
        "tempo",
        "bpm",
        "beat",
        "rhythm",
        "chord",
        "harmony",
        "instrument",
        "orchestra",
        "piano",
        "guitar",
        "drum",
        "percussion",
        "strings",
        "synth",
        "bass",
        "major",
        "minor",
    ),
)
