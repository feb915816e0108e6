from __future__ import annotations

import re

_UNIT_SPELLINGS = {
    7 * 24 * 60 * 60: ("w", "wk", "wks", "week", "weeks"),
    24 * 60 * 60: ("d", "day", "days"),
    60 * 60: ("h", "hr", "hrs", "hour", "hours"),
    60: ("m", "min", "mins", "minute", "minutes"),
    1: ("s", "sec", "secs", "second", "seconds"),
}
_UNIT_SECONDS = {
    spelling: seconds
    for seconds, spellings in _UNIT_SPELLINGS.items()
    for spelling in spellings
}

_NOISE_PATTERN = re.compile(r"\s+|,|\band\b", re.IGNORECASE)
_TOKEN_PATTERN = re.compile(r"([0-9]+)([a-z]*)")


def parse_time(raw: str) -> int | None:
    """Convert a duration like ``"1d 12h30m"`` or ``"2 hours and 5 minutes"`` to seconds.

    A number without a unit counts as seconds. Returns ``None`` when the text
    contains anything that is not a number followed by a known unit spelling.
    """
    if raw is None:
        return None
    compact = _NOISE_PATTERN.sub("", raw.strip().lower())
    if not compact:
        return None

    total = 0
    position = 0
    for match in _TOKEN_PATTERN.finditer(compact):
        if match.start() != position:
            return None
        position = match.end()
        value, unit = match.groups()
        multiplier = _UNIT_SECONDS.get(unit) if unit else 1
        if multiplier is None:
            return None
        total += int(value) * multiplier
    if position != len(compact):
        return None
    return total


__all__ = ["parse_time"]
