"""Turns giveaway state into outbound message payloads.

Nothing in here talks to Discord or the database; the transport layer converts
these payloads into discord.py objects.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Final, Union

from . import messages
from .models import Entrant, Giveaway, GuildSettings

ENTER_BUTTON_ID: Final = "enter-giveaway"
ENDED_COLOR: Final = 0x2F3136
SUMMARY_URL: Final = "https://giveawaybot.party/summary"


@dataclass(frozen=True, slots=True)
class EnterButton:
    emoji: str
    custom_id: str = ENTER_BUTTON_ID


@dataclass(frozen=True, slots=True)
class LinkButton:
    label: str
    url: str


Component = Union[EnterButton, LinkButton]


@dataclass(frozen=True, slots=True)
class MessagePayload:
    title: str
    color: int
    timestamp: datetime
    description: str
    components: tuple[Component, ...] = ()


@dataclass(frozen=True, slots=True)
class AnnouncementPayload:
    content: str
    reference_message_id: int | None = None
    allowed_mentions: tuple[str, ...] = ("users",)


def render_winners(winners: Sequence[Entrant]) -> str:
    return ", ".join(winner.mention for winner in winners)


def render_giveaway(
    giveaway: Giveaway,
    settings: GuildSettings,
    num_entries: int,
    winners: Sequence[Entrant] | None = None,
    summary_key: str | None = None,
    *,
    summary_url: str = SUMMARY_URL,
) -> MessagePayload:
    """Render a giveaway message.

    ``winners is None`` means the giveaway is still running; an empty sequence
    means it ended without entrants.
    """
    ended = winners is not None
    end = giveaway.end_timestamp

    lines = []
    if giveaway.description:
        lines.append(giveaway.description + "\n")
    lines.append(f"{'Ended' if ended else 'Ends'}: <t:{end}:R> (<t:{end}:f>)")
    lines.append(f"Hosted by: <@{giveaway.host_id}>")
    lines.append(f"Entries: **{num_entries}**")
    if not ended:
        lines.append(f"Winners: **{giveaway.num_winners}**")
    else:
        lines.append(f"Winners: {render_winners(winners) or messages.NO_ENTRIES_SHORT}")

    components: tuple[Component, ...]
    if not ended:
        components = (EnterButton(emoji=settings.emoji),)
    elif summary_key is not None:
        components = (
            LinkButton(
                label=messages.SUMMARY_LABEL,
                url=f"{summary_url}#giveaway={summary_key}",
            ),
        )
    else:
        components = ()

    return MessagePayload(
        title=giveaway.prize,
        color=ENDED_COLOR if ended else settings.color,
        timestamp=giveaway.end_time,
        description="\n".join(lines),
        components=components,
    )


def render_winner_message(
    giveaway: Giveaway, winners: Sequence[Entrant]
) -> AnnouncementPayload:
    if winners:
        content = messages.winner_announcement(render_winners(winners), giveaway.prize)
    else:
        content = messages.NO_ENTRIES
    return AnnouncementPayload(
        content=content,
        reference_message_id=giveaway.message_id,
        allowed_mentions=("users",),
    )


__all__ = [
    "AnnouncementPayload",
    "Component",
    "ENDED_COLOR",
    "ENTER_BUTTON_ID",
    "EnterButton",
    "LinkButton",
    "MessagePayload",
    "SUMMARY_URL",
    "render_giveaway",
    "render_winner_message",
    "render_winners",
]
