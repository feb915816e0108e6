"""Giveaway lifecycle bot.

Validates and posts time-boxed giveaways, sweeps for expired ones and draws
winners uniformly at random.
"""

from .cooldown import CooldownTracker
from .errors import ErrorKind, GiveawayError
from .manager import GiveawayManager, build_summary
from .models import (
    PREMIUM_LEVELS,
    Entrant,
    Giveaway,
    GuildSettings,
    PremiumLevel,
    premium_level,
    utc_now,
)
from .rendering import (
    AnnouncementPayload,
    EnterButton,
    LinkButton,
    MessagePayload,
    render_giveaway,
    render_winner_message,
    render_winners,
)
from .scheduler import SweepScheduler
from .selection import select_winners
from .storage import GiveawayStorage
from .time_parser import parse_time

__all__ = [
    "AnnouncementPayload",
    "CooldownTracker",
    "EnterButton",
    "Entrant",
    "ErrorKind",
    "Giveaway",
    "GiveawayError",
    "GiveawayManager",
    "GiveawayStorage",
    "GuildSettings",
    "LinkButton",
    "MessagePayload",
    "PREMIUM_LEVELS",
    "PremiumLevel",
    "SweepScheduler",
    "build_summary",
    "parse_time",
    "premium_level",
    "render_giveaway",
    "render_winner_message",
    "render_winners",
    "select_winners",
    "utc_now",
]
