from __future__ import annotations

import logging
import math
import re
from typing import Any

LOGGER = logging.getLogger(__name__)

_CLOCK_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")
_LEADING_NUMBER_PATTERN = re.compile(r"\s*([-+]?\d+(?:\.\d+)?)")


class TimeParseError(ValueError):
    pass


def parse_time_strict(value: Any) -> float:
    """Parse ``M:SS``/``MM:SS`` text or a plain number of seconds.

    Raises TimeParseError when the value cannot be read, including clock
    strings whose seconds field is 60 or more.
    """
    if isinstance(value, bool):
        raise TimeParseError(f"Boolean is not a time value: {value!r}")
    if isinstance(value, (int, float)):
        return float(value)
    if not isinstance(value, str) or not value.strip():
        raise TimeParseError(f"Unsupported time value: {value!r}")

    text = value.strip()
    match = _CLOCK_PATTERN.match(text)
    if match:
        minutes = int(match.group(1))
        seconds = int(match.group(2))
        if seconds >= 60:
            raise TimeParseError(f"Invalid seconds in time {text}: {seconds} >= 60")
        return float(minutes * 60 + seconds)

    try:
        return float(text)
    except ValueError:
        pass

    # Unit suffixes such as "30s" or "12.5 sec" keep their leading number.
    number = _LEADING_NUMBER_PATTERN.match(text) if ":" not in text else None
    if number is None:
        raise TimeParseError(f"Could not parse time format: {text}")
    return float(number.group(1))


def parse_time_to_seconds(value: Any) -> float:
    try:
        seconds = parse_time_strict(value)
    except TimeParseError as exc:
        LOGGER.warning("%s; using 0 seconds", exc)
        return 0.0
    if not math.isfinite(seconds):
        LOGGER.warning("Non-finite time value %r; using 0 seconds", value)
        return 0.0
    return seconds


def format_seconds_to_time(seconds: float) -> str:
    whole = int(math.floor(max(0.0, float(seconds))))
    minutes, secs = divmod(whole, 60)
    return f"{minutes}:{secs:02d}"
