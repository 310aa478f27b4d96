"""Dual-line ``detailed_description`` contract.

Every segment description handed to the audio generator is exactly two
lines::

    Prompt: <what the viewer sees and feels, no musical vocabulary>
    Music Style: <tempo, key, instrumentation, progression, dynamics>

Model output frequently breaks this (one line missing, literal ``\\n`` escapes,
overlong text), so the helpers here extract whatever is usable and rebuild
the rest from the lookup tables in ``features.music_templates``.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Mapping

from features.lexicon import DEFAULT_LEXICON, KeywordLexicon
from features.music_templates import DEFAULT_TEMPLATES, MusicTemplates

LOGGER = logging.getLogger(__name__)

PROMPT_LABEL = "Prompt:"
MUSIC_STYLE_LABEL = "Music Style:"
LINE_SEPARATOR = "\n"
MAX_LINE_CHARS = 280

_PROMPT_PATTERN = re.compile(r"Prompt:\s*(.*?)(?=\\n|\n|Music Style:|$)", re.DOTALL)
_MUSIC_STYLE_PATTERN = re.compile(r"Music Style:\s*(.*?)(?=\\n|\n|Prompt:|$)", re.DOTALL)
_WORD_PATTERN = re.compile(r"[A-Za-z][A-Za-z'-]*")


def _truncate(text: str, limit: int = MAX_LINE_CHARS) -> str:
    text = " ".join(text.split())
    if len(text) <= limit:
        return text
    return text[: limit - 3].rstrip() + "..."


def validate_dual_output_description(description: Any, max_line_chars: int = MAX_LINE_CHARS) -> bool:
    if not isinstance(description, str) or not description:
        return False
    lines = description.split(LINE_SEPARATOR)
    if len(lines) != 2:
        return False
    prompt_line, style_line = lines
    if not prompt_line.startswith(PROMPT_LABEL) or not style_line.startswith(MUSIC_STYLE_LABEL):
        return False
    prompt = prompt_line[len(PROMPT_LABEL):].strip()
    style = style_line[len(MUSIC_STYLE_LABEL):].strip()
    if not prompt or not style:
        return False
    return len(prompt) <= max_line_chars and len(style) <= max_line_chars


def extract_dual_output_from_description(description: Any) -> tuple[str, str]:
    """Return the (prompt, music style) bodies; missing parts come back empty."""
    if not isinstance(description, str) or not description:
        return "", ""
    prompt_match = _PROMPT_PATTERN.search(description)
    style_match = _MUSIC_STYLE_PATTERN.search(description)
    prompt = prompt_match.group(1).strip() if prompt_match else ""
    style = style_match.group(1).strip() if style_match else ""
    return prompt, style


def create_dual_output_description(prompt: str, music_style: str, max_line_chars: int = MAX_LINE_CHARS) -> str:
    return (
        f"{PROMPT_LABEL} {_truncate(prompt, max_line_chars)}"
        f"{LINE_SEPARATOR}{MUSIC_STYLE_LABEL} {_truncate(music_style, max_line_chars)}"
    )


def _strip_musical_terms(text: str, lexicon: KeywordLexicon) -> str:
    kept = [
        word
        for word in _WORD_PATTERN.findall(text)
        if not any(word.lower().startswith(term) for term in lexicon.musical_terms)
    ]
    return " ".join(kept)


def create_prompt_from_context(
    context: str,
    segment_type: str,
    intensity: str,
    *,
    templates: MusicTemplates = DEFAULT_TEMPLATES,
    lexicon: KeywordLexicon = DEFAULT_LEXICON,
    max_line_chars: int = MAX_LINE_CHARS,
) -> str:
    prompt = templates.genre_for(segment_type).visual_prompt

    if intensity == "high":
        prompt = prompt.replace("calm atmosphere", "dynamic atmosphere").replace("gentle pacing", "quick pacing")
    elif intensity == "low":
        prompt = prompt.replace("dynamic", "subtle").replace("Active", "Quiet")

    context_words = _strip_musical_terms(context or "", lexicon).split()
    if len(context_words) >= 3:
        lead = " ".join(context_words[:8])
        prompt = f"{lead[0].upper()}{lead[1:]} scene, {prompt[0].lower()}{prompt[1:]}"

    return _truncate(prompt, max_line_chars - 10)


def create_music_style_from_type(
    segment_type: str,
    intensity: str,
    start_seconds: float,
    end_seconds: float,
    *,
    templates: MusicTemplates = DEFAULT_TEMPLATES,
) -> str:
    genre = templates.genre_for(segment_type)
    progression = templates.progression_for(end_seconds - start_seconds)
    return (
        f"{genre.bpm_for(intensity)} BPM, {genre.key}, {segment_type} instrumental, {genre.instruments}, "
        f"{progression}, {templates.dynamics_for(intensity)} dynamics"
    )


def repair_detailed_description(
    description: Any,
    segment: Mapping[str, Any],
    *,
    templates: MusicTemplates = DEFAULT_TEMPLATES,
    lexicon: KeywordLexicon = DEFAULT_LEXICON,
    max_line_chars: int = MAX_LINE_CHARS,
) -> str:
    """Return a contract-valid description for ``segment``.

    ``segment`` must already carry normalized ``type``, ``intensity``,
    ``start_time`` and ``end_time``; ``reason``/``music_summary`` feed the
    synthesized prompt when the model did not supply one.
    """
    if validate_dual_output_description(description, max_line_chars):
        return description

    segment_type = segment.get("type", "ambient")
    intensity = segment.get("intensity", "medium")
    prompt, music_style = extract_dual_output_from_description(description)

    if not prompt:
        context = str(segment.get("reason") or segment.get("music_summary") or "")
        prompt = create_prompt_from_context(
            context,
            segment_type,
            intensity,
            templates=templates,
            lexicon=lexicon,
            max_line_chars=max_line_chars,
        )
    if not music_style:
        music_style = create_music_style_from_type(
            segment_type,
            intensity,
            float(segment.get("start_time", 0.0)),
            float(segment.get("end_time", 0.0)),
            templates=templates,
        )

    repaired = create_dual_output_description(prompt, music_style, max_line_chars)
    LOGGER.debug("Repaired detailed_description for %s segment", segment_type)
    return repaired
