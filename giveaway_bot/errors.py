from __future__ import annotations

import enum
from dataclasses import dataclass


class ErrorKind(enum.Enum):
    COOLDOWN_ACTIVE = "cooldown_active"
    QUOTA_EXCEEDED = "quota_exceeded"
    INVALID_TIME_FORMAT = "invalid_time_format"
    TIME_BELOW_MINIMUM = "time_below_minimum"
    TIME_ABOVE_MAXIMUM = "time_above_maximum"
    INVALID_WINNERS_FORMAT = "invalid_winners_format"
    WINNERS_OUT_OF_RANGE = "winners_out_of_range"
    PRIZE_TOO_LONG = "prize_too_long"
    DESCRIPTION_TOO_LONG = "description_too_long"
    BOT_LACKS_PERMISSIONS = "bot_lacks_permissions"
    CREATION_FAILED = "creation_failed"


@dataclass(frozen=True, slots=True)
class GiveawayError:
    """A rejected giveaway request.

    Returned (not raised) by the validation and creation steps so the command
    layer can pick the matching user-facing template. ``value`` is the offending
    input, ``limit`` the bound it broke and ``minimum`` the lower bound for
    range checks.
    """

    kind: ErrorKind
    value: object | None = None
    limit: object | None = None
    minimum: int | None = None
    per_channel: bool = False

    def describe(self) -> str:
        from .messages import render_error

        return render_error(self)


__all__ = ["ErrorKind", "GiveawayError"]
