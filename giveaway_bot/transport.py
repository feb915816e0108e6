"""discord.py adapters for posting, editing and uploading."""

from __future__ import annotations

import io
import logging
import re
from dataclasses import dataclass
from typing import Final

import discord
import discord.abc

from .rendering import AnnouncementPayload, EnterButton, LinkButton, MessagePayload

log = logging.getLogger(__name__)

MISSING_PERMISSIONS: Final = 50013

_SUMMARY_KEY_PATTERN = re.compile(r".*/(\d+/\d+)/.*")


@dataclass(frozen=True, slots=True)
class TransportResult:
    ok: bool
    status: int
    message_id: int | None = None
    error_code: int | None = None

    @property
    def missing_permissions(self) -> bool:
        return self.error_code == MISSING_PERMISSIONS


def summary_key_from_url(url: str | None) -> str | None:
    """Extract ``<channel>/<attachment>`` from an attachment URL."""
    if not url:
        return None
    match = _SUMMARY_KEY_PATTERN.fullmatch(url)
    if match is None:
        return None
    return match.group(1)


def build_embed(payload: MessagePayload) -> discord.Embed:
    return discord.Embed(
        title=payload.title,
        description=payload.description,
        color=payload.color,
        timestamp=payload.timestamp,
    )


def build_view(payload: MessagePayload) -> discord.ui.View | None:
    """Build the component row; needs a running event loop."""
    if not payload.components:
        return None
    view = discord.ui.View(timeout=None)
    for component in payload.components:
        if isinstance(component, EnterButton):
            view.add_item(
                discord.ui.Button(
                    style=discord.ButtonStyle.primary,
                    emoji=discord.PartialEmoji.from_str(component.emoji),
                    custom_id=component.custom_id,
                )
            )
        elif isinstance(component, LinkButton):
            view.add_item(
                discord.ui.Button(
                    style=discord.ButtonStyle.link,
                    label=component.label,
                    url=component.url,
                )
            )
    return view


def build_allowed_mentions(payload: AnnouncementPayload) -> discord.AllowedMentions:
    parse = set(payload.allowed_mentions)
    return discord.AllowedMentions(
        everyone="everyone" in parse,
        users="users" in parse,
        roles="roles" in parse,
        replied_user=False,
    )


def _failure(exc: discord.HTTPException) -> TransportResult:
    return TransportResult(ok=False, status=exc.status, error_code=exc.code or None)


class DiscordMessenger:
    def __init__(self, client: discord.Client) -> None:
        self._client = client

    async def _resolve_channel(self, channel_id: int) -> discord.abc.Messageable:
        channel = self._client.get_channel(channel_id)
        if channel is None:
            channel = await self._client.fetch_channel(channel_id)
        if not isinstance(channel, discord.abc.Messageable):
            raise TypeError(f"Channel {channel_id} cannot receive messages")
        return channel

    def _message_kwargs(
        self, channel_id: int, payload: MessagePayload | AnnouncementPayload
    ) -> dict[str, object]:
        if isinstance(payload, AnnouncementPayload):
            kwargs: dict[str, object] = {
                "content": payload.content,
                "allowed_mentions": build_allowed_mentions(payload),
            }
            if payload.reference_message_id is not None:
                kwargs["reference"] = discord.MessageReference(
                    message_id=payload.reference_message_id,
                    channel_id=channel_id,
                    fail_if_not_exists=False,
                )
            return kwargs
        return {"embed": build_embed(payload), "view": build_view(payload)}

    async def post(
        self, channel_id: int, payload: MessagePayload | AnnouncementPayload
    ) -> TransportResult:
        try:
            channel = await self._resolve_channel(channel_id)
            kwargs = self._message_kwargs(channel_id, payload)
            message = await channel.send(**kwargs)
        except discord.HTTPException as exc:
            log.warning(
                "Failed to post to channel %s: %s (code %s)",
                channel_id,
                exc.status,
                exc.code,
            )
            return _failure(exc)
        release_view(kwargs.get("view"))
        return TransportResult(ok=True, status=200, message_id=message.id)

    async def edit(
        self,
        channel_id: int,
        message_id: int,
        payload: MessagePayload | AnnouncementPayload,
    ) -> TransportResult:
        try:
            channel = await self._resolve_channel(channel_id)
            get_partial = getattr(channel, "get_partial_message", None)
            if callable(get_partial):
                message = get_partial(message_id)
            else:
                message = await channel.fetch_message(message_id)
            kwargs = self._message_kwargs(channel_id, payload)
            kwargs.pop("reference", None)
            await message.edit(**kwargs)
        except discord.HTTPException as exc:
            log.warning(
                "Failed to edit message %s in channel %s: %s (code %s)",
                message_id,
                channel_id,
                exc.status,
                exc.code,
            )
            return _failure(exc)
        release_view(kwargs.get("view"))
        return TransportResult(ok=True, status=200, message_id=message_id)


def release_view(view: object) -> None:
    # button presses are handled in on_interaction, not through the view store
    if isinstance(view, discord.ui.View):
        view.stop()


class ChannelFileUploader:
    """Uploads summary files as attachments to a dedicated channel."""

    def __init__(self, client: discord.Client, channel_id: int | None) -> None:
        self._client = client
        self._channel_id = channel_id

    async def upload(self, content: str, filename: str) -> str | None:
        if not self._channel_id:
            return None
        try:
            channel = self._client.get_channel(self._channel_id)
            if channel is None:
                channel = await self._client.fetch_channel(self._channel_id)
            if not isinstance(channel, discord.abc.Messageable):
                log.warning("Summary channel %s is not messageable", self._channel_id)
                return None
            message = await channel.send(
                file=discord.File(io.BytesIO(content.encode("utf-8")), filename=filename)
            )
        except discord.DiscordException as exc:
            log.warning("Failed to upload %s: %s", filename, exc)
            return None
        if not message.attachments:
            return None
        return message.attachments[0].url


__all__ = [
    "ChannelFileUploader",
    "DiscordMessenger",
    "MISSING_PERMISSIONS",
    "TransportResult",
    "build_allowed_mentions",
    "build_embed",
    "build_view",
    "release_view",
    "summary_key_from_url",
]
