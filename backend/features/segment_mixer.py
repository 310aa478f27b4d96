from __future__ import annotations

import logging
import math
from typing import Iterable

from pydub import AudioSegment

from features.segment_models import MusicSegment

LOGGER = logging.getLogger(__name__)

_FADE_CURVES = {
    "linear": "tri",
    "exponential": "exp",
    "logarithmic": "log",
    "cosine": "hsin",
    "sigmoid": "esin",
    "step": "nofade",
}

MUSIC_VOLUME_SCALE = 0.8
MUSIC_VOLUME_CAP = 0.7
SILENCE_DB = -120.0
FADE_STEPS = 32

# Amplitude reached at fade progress t in [0, 1].
_CURVE_SHAPES = {
    "tri": lambda t: t,
    "exp": lambda t: math.expm1(4.0 * t) / math.expm1(4.0),
    "log": lambda t: math.log1p(9.0 * t) / math.log(10.0),
    "hsin": lambda t: math.sin(t * math.pi / 2.0),
    "esin": lambda t: (1.0 - math.cos(t * math.pi)) / 2.0,
}


def fade_curve_for(algorithm: str | None) -> str:
    return _FADE_CURVES.get((algorithm or "").lower(), "tri")


def effective_music_gain(volume: int) -> float:
    """Linear gain for a 0-100 volume, kept below the dialogue track."""
    factor = max(0, min(100, int(volume))) / 100.0
    return min(factor * MUSIC_VOLUME_SCALE, MUSIC_VOLUME_CAP)


def _gain_db(factor: float) -> float:
    if factor <= 0.0:
        return SILENCE_DB
    return 20.0 * math.log10(factor)


def _fit_to_duration(music: AudioSegment, target_ms: int) -> AudioSegment:
    if len(music) == 0:
        return AudioSegment.silent(duration=target_ms)
    if len(music) < target_ms:
        music = music * int(math.ceil(target_ms / len(music)))
    return music[:target_ms]


def apply_curve_fade(clip: AudioSegment, start_ms: int, duration_ms: int, curve: str, *, fade_in: bool) -> AudioSegment:
    """Fade ``clip[start_ms:start_ms + duration_ms]`` along ``curve``.

    pydub only ramps linearly, so the curve is approximated by FADE_STEPS
    short linear ramps whose end points sit on the curve.
    """
    shape = _CURVE_SHAPES.get(curve)
    if shape is None or duration_ms <= 0:
        return clip

    end_ms = min(len(clip), start_ms + duration_ms)
    step_ms = max(1, duration_ms // FADE_STEPS)
    faded = clip[:start_ms]
    position = start_ms
    while position < end_ms:
        next_position = min(position + step_ms, end_ms)
        first = (position - start_ms) / duration_ms
        last = (next_position - start_ms) / duration_ms
        if not fade_in:
            first, last = 1.0 - first, 1.0 - last
        piece = clip[position:next_position]
        if len(piece) > 0:
            piece = piece.fade(
                from_gain=_gain_db(shape(first)),
                to_gain=_gain_db(shape(last)),
                start=0,
                end=len(piece),
            )
        faded += piece
        position = next_position
    return faded + clip[end_ms:]


def render_segment_clip(music: AudioSegment, segment: MusicSegment) -> AudioSegment:
    target_ms = int(round(segment.duration * 1000))
    clip = _fit_to_duration(music, target_ms)

    curve = fade_curve_for(segment.fade_algorithm)
    if curve != "nofade":
        fade_in_ms = min(int(float(segment.fadein_duration) * 1000), target_ms // 2)
        fade_out_ms = min(int(float(segment.fadeout_duration) * 1000), target_ms // 2)
        clip = apply_curve_fade(clip, 0, fade_in_ms, curve, fade_in=True)
        clip = apply_curve_fade(clip, len(clip) - fade_out_ms, fade_out_ms, curve, fade_in=False)

    gain = effective_music_gain(segment.volume)
    LOGGER.debug(
        "Rendered %sms clip (%s fade, curve %s, gain %.2f)",
        target_ms,
        segment.fade_algorithm,
        curve,
        gain,
    )
    return clip.apply_gain(_gain_db(gain))


def overlay_segments(base: AudioSegment, rendered_clips: Iterable[tuple[MusicSegment, AudioSegment]]) -> AudioSegment:
    """Overlay rendered clips onto ``base`` at each segment's start; overlapping clips are summed."""
    clips = list(rendered_clips)
    if not clips:
        return base

    required_ms = max(int(round(segment.start_time * 1000)) + len(clip) for segment, clip in clips)
    if len(base) < required_ms:
        base = base + AudioSegment.silent(duration=required_ms - len(base), frame_rate=base.frame_rate)

    mixed = base
    for segment, clip in clips:
        mixed = mixed.overlay(clip, position=int(round(segment.start_time * 1000)))
    return mixed
