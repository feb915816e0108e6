from __future__ import annotations

import json
import logging
import random
import re
from collections.abc import Callable, Sequence
from datetime import datetime, timedelta
from typing import Final, Protocol

from botocore.exceptions import ClientError

from .cooldown import CooldownTracker
from .errors import ErrorKind, GiveawayError
from .models import Entrant, Giveaway, PremiumLevel, utc_now
from .rendering import (
    SUMMARY_URL,
    AnnouncementPayload,
    MessagePayload,
    render_giveaway,
    render_winner_message,
)
from .selection import select_winners
from .storage import GiveawayStorage
from .time_parser import parse_time
from .transport import TransportResult, summary_key_from_url

log = logging.getLogger(__name__)

MINIMUM_SECONDS: Final = 10
MAX_PRIZE_LENGTH: Final = 250
MAX_DESCRIPTION_LENGTH: Final = 1000
SUMMARY_FILENAME: Final = "giveaway_summary.json"

# optional sign and ASCII digits, nothing else
_WINNERS_PATTERN = re.compile(r"[+-]?[0-9]+")


class Messenger(Protocol):
    async def post(
        self, channel_id: int, payload: MessagePayload | AnnouncementPayload
    ) -> TransportResult: ...

    async def edit(
        self,
        channel_id: int,
        message_id: int,
        payload: MessagePayload | AnnouncementPayload,
    ) -> TransportResult: ...


class FileUploader(Protocol):
    async def upload(self, content: str, filename: str) -> str | None: ...


def build_summary(
    giveaway: Giveaway,
    host: Entrant,
    entries: Sequence[Entrant],
    winners: Sequence[Entrant],
) -> dict[str, object]:
    return {
        "giveaway": {
            "id": str(giveaway.message_id),
            "prize": giveaway.prize,
            "num_winners": giveaway.num_winners,
            "host": host.to_json(),
            "end": giveaway.end_timestamp,
        },
        "winners": [winner.to_json() for winner in winners],
        "entries": [entry.to_json() for entry in entries],
    }


class GiveawayManager:
    """Coordinates validation, creation and finalization of giveaways."""

    def __init__(
        self,
        storage: GiveawayStorage,
        messenger: Messenger,
        uploader: FileUploader,
        *,
        cooldown: CooldownTracker | None = None,
        clock: Callable[[], datetime] = utc_now,
        rng: random.Random | None = None,
        summary_url: str = SUMMARY_URL,
    ) -> None:
        self.storage = storage
        self.messenger = messenger
        self.uploader = uploader
        self.cooldown = cooldown or CooldownTracker(clock=clock)
        self._clock = clock
        self._rng = rng
        self._summary_url = summary_url

    # ----- Validation -----
    def check_availability(
        self, guild_id: int, channel_id: int, level: PremiumLevel
    ) -> GiveawayError | None:
        if self.cooldown.is_on_cooldown(guild_id):
            return GiveawayError(
                ErrorKind.COOLDOWN_ACTIVE,
                limit=int(self.cooldown.window.total_seconds()),
            )

        per_channel = level.per_channel_max_giveaways
        if per_channel:
            current = self.storage.count_by_channel(channel_id)
        else:
            current = self.storage.count_by_guild(guild_id)
        if current >= level.max_giveaways:
            return GiveawayError(
                ErrorKind.QUOTA_EXCEEDED,
                value=current,
                limit=level.max_giveaways,
                per_channel=per_channel,
            )
        return None

    def construct_giveaway(
        self,
        host_id: int,
        time_text: str,
        winners_text: str,
        prize: str,
        description: str | None,
        level: PremiumLevel,
    ) -> Giveaway | GiveawayError:
        seconds = parse_time(time_text)
        if seconds is None or seconds <= 0:
            return GiveawayError(ErrorKind.INVALID_TIME_FORMAT, value=time_text)
        if seconds < MINIMUM_SECONDS:
            return GiveawayError(
                ErrorKind.TIME_BELOW_MINIMUM, value=seconds, limit=MINIMUM_SECONDS
            )
        if seconds > level.max_time:
            return GiveawayError(
                ErrorKind.TIME_ABOVE_MAXIMUM, value=seconds, limit=level.max_time
            )

        stripped = winners_text.strip() if isinstance(winners_text, str) else ""
        if not _WINNERS_PATTERN.fullmatch(stripped):
            return GiveawayError(ErrorKind.INVALID_WINNERS_FORMAT, value=winners_text)
        winners = int(stripped)
        if winners < 1 or winners > level.max_winners:
            return GiveawayError(
                ErrorKind.WINNERS_OUT_OF_RANGE,
                value=winners,
                limit=level.max_winners,
                minimum=1,
            )

        if len(prize) > MAX_PRIZE_LENGTH:
            return GiveawayError(
                ErrorKind.PRIZE_TOO_LONG, value=prize, limit=MAX_PRIZE_LENGTH
            )
        if description and len(description) > MAX_DESCRIPTION_LENGTH:
            return GiveawayError(
                ErrorKind.DESCRIPTION_TOO_LONG,
                value=description,
                limit=MAX_DESCRIPTION_LENGTH,
            )

        return Giveaway(
            host_id=host_id,
            end_time=self._clock() + timedelta(seconds=seconds),
            num_winners=winners,
            prize=prize,
            description=description or None,
        )

    # ----- Rendering -----
    def render_giveaway(
        self,
        giveaway: Giveaway,
        num_entries: int,
        winners: Sequence[Entrant] | None = None,
        summary_key: str | None = None,
    ) -> MessagePayload:
        settings = self.storage.get_guild_settings(giveaway.guild_id)
        return render_giveaway(
            giveaway,
            settings,
            num_entries,
            winners,
            summary_key,
            summary_url=self._summary_url,
        )

    # ----- Creation -----
    async def send_giveaway(
        self, giveaway: Giveaway, guild_id: int, channel_id: int
    ) -> int | GiveawayError:
        giveaway = giveaway.with_placement(guild_id, channel_id)
        try:
            payload = self.render_giveaway(giveaway, 0)
            log.info("Attempting to create giveaway in channel %s: %s", channel_id, payload)
            result = await self.messenger.post(channel_id, payload)
        except Exception as exc:  # pylint: disable=broad-except
            log.exception("Giveaway creation failed in guild %s: %s", guild_id, exc)
            self.cooldown.record_failure(guild_id)
            return GiveawayError(ErrorKind.CREATION_FAILED)

        log.info(
            "Attempted to create giveaway, response: %s (code %s)",
            result.status,
            result.error_code,
        )
        if not result.ok or result.message_id is None:
            self.cooldown.record_failure(guild_id)
            if result.missing_permissions:
                return GiveawayError(ErrorKind.BOT_LACKS_PERMISSIONS)
            return GiveawayError(ErrorKind.CREATION_FAILED)

        giveaway = giveaway.with_message_id(result.message_id)
        try:
            self.storage.create_giveaway(giveaway)
        except ClientError as exc:
            log.exception(
                "Posted giveaway %s but failed to store it: %s", result.message_id, exc
            )
            self.cooldown.record_failure(guild_id)
            return GiveawayError(ErrorKind.CREATION_FAILED)
        return result.message_id

    # ----- Finalization -----
    async def end_giveaway(self, giveaway: Giveaway) -> bool:
        gid = giveaway.message_id
        try:
            entries = self.storage.list_entrants(gid)
            if not self.storage.remove_giveaway(gid):
                log.info("Giveaway %s was already finalized elsewhere", gid)
                return False

            winners = select_winners(entries, giveaway.num_winners, self._rng)
            log.info(
                "Selected %s of %s entrants as winners for giveaway %s",
                len(winners),
                len(entries),
                gid,
            )

            host = self.storage.get_user(giveaway.host_id) or Entrant(id=giveaway.host_id)
            summary = build_summary(giveaway, host, entries, winners)
            url = await self.uploader.upload(json.dumps(summary), SUMMARY_FILENAME)
            summary_key = summary_key_from_url(url)

            edited = await self.messenger.edit(
                giveaway.channel_id,
                gid,
                self.render_giveaway(giveaway, len(entries), winners, summary_key),
            )
            if not edited.ok:
                log.warning(
                    "Failed to update giveaway message %s: %s (code %s)",
                    gid,
                    edited.status,
                    edited.error_code,
                )

            announced = await self.messenger.post(
                giveaway.channel_id, render_winner_message(giveaway, winners)
            )
            if not announced.ok:
                log.warning(
                    "Failed to announce winners of giveaway %s: %s (code %s)",
                    gid,
                    announced.status,
                    announced.error_code,
                )
        except Exception as exc:  # pylint: disable=broad-except
            log.exception("Failed to end giveaway %s: %s", gid, exc)
            return False
        return edited.ok and announced.ok


__all__ = [
    "FileUploader",
    "GiveawayManager",
    "MAX_DESCRIPTION_LENGTH",
    "MAX_PRIZE_LENGTH",
    "MINIMUM_SECONDS",
    "Messenger",
    "SUMMARY_FILENAME",
    "build_summary",
]
