from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import ClassVar

BLURPLE = 0x5865F2
DEFAULT_EMOJI = "\U0001f389"


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class Giveaway:
    host_id: int
    end_time: datetime
    num_winners: int
    prize: str
    description: str | None = None
    guild_id: int | None = None
    channel_id: int | None = None
    message_id: int | None = None

    PK_TEMPLATE: ClassVar[str] = "GIVEAWAY#%s"
    SK_VALUE: ClassVar[str] = "META"

    @property
    def end_timestamp(self) -> int:
        return int(self.end_time.timestamp())

    def with_placement(self, guild_id: int, channel_id: int) -> Giveaway:
        return dataclasses.replace(self, guild_id=guild_id, channel_id=channel_id)

    def with_message_id(self, message_id: int) -> Giveaway:
        return dataclasses.replace(self, message_id=message_id)

    @classmethod
    def key(cls, message_id: int) -> dict[str, str]:
        return {"pk": cls.PK_TEMPLATE % message_id, "sk": cls.SK_VALUE}

    def to_item(self) -> dict[str, object]:
        if self.message_id is None:
            raise ValueError("Giveaway has not been posted yet")
        item: dict[str, object] = self.key(self.message_id)
        item.update(
            {
                "message_id": str(self.message_id),
                "guild_id": str(self.guild_id),
                "channel_id": str(self.channel_id),
                "host_id": str(self.host_id),
                "end_time": self.end_timestamp,
                "num_winners": self.num_winners,
                "prize": self.prize,
            }
        )
        if self.description:
            item["description"] = self.description
        return item

    @classmethod
    def from_item(cls, item: Mapping[str, object]) -> Giveaway:
        message_id = int(str(item["pk"]).split("#", 1)[1])
        description = item.get("description")
        return cls(
            host_id=int(str(item["host_id"])),
            end_time=datetime.fromtimestamp(int(item["end_time"]), UTC),
            num_winners=int(item.get("num_winners", 1)),
            prize=str(item.get("prize", "")),
            description=str(description) if description else None,
            guild_id=int(str(item["guild_id"])),
            channel_id=int(str(item["channel_id"])),
            message_id=message_id,
        )


@dataclass(frozen=True, slots=True)
class Entrant:
    """Snapshot of a Discord user taken when they entered or hosted."""

    id: int
    username: str = ""
    discriminator: str = "0"
    avatar: str | None = None

    PK_TEMPLATE: ClassVar[str] = "USER#%s"
    SK_VALUE: ClassVar[str] = "PROFILE"

    @property
    def mention(self) -> str:
        return f"<@{self.id}>"

    @classmethod
    def from_user(cls, user) -> Entrant:
        avatar = getattr(user, "avatar", None)
        return cls(
            id=int(user.id),
            username=str(getattr(user, "name", "")),
            discriminator=str(getattr(user, "discriminator", "0") or "0"),
            avatar=getattr(avatar, "key", None),
        )

    def to_json(self) -> dict[str, object]:
        return {
            "id": str(self.id),
            "username": self.username,
            "discriminator": self.discriminator,
            "avatar": self.avatar,
        }

    @classmethod
    def key(cls, user_id: int) -> dict[str, str]:
        return {"pk": cls.PK_TEMPLATE % user_id, "sk": cls.SK_VALUE}

    def to_attributes(self) -> dict[str, object]:
        attributes: dict[str, object] = {
            "user_id": str(self.id),
            "username": self.username,
            "discriminator": self.discriminator,
        }
        if self.avatar:
            attributes["avatar"] = self.avatar
        return attributes

    @classmethod
    def from_attributes(cls, item: Mapping[str, object]) -> Entrant:
        avatar = item.get("avatar")
        return cls(
            id=int(str(item["user_id"])),
            username=str(item.get("username", "")),
            discriminator=str(item.get("discriminator", "0")),
            avatar=str(avatar) if avatar else None,
        )


@dataclass(frozen=True, slots=True)
class GuildSettings:
    guild_id: int
    color: int = BLURPLE
    emoji: str = DEFAULT_EMOJI

    PK_TEMPLATE: ClassVar[str] = "GUILD#%s"
    SK_VALUE: ClassVar[str] = "SETTINGS"

    @classmethod
    def key(cls, guild_id: int) -> dict[str, str]:
        return {"pk": cls.PK_TEMPLATE % guild_id, "sk": cls.SK_VALUE}

    def to_item(self) -> dict[str, object]:
        item: dict[str, object] = self.key(self.guild_id)
        item.update({"color": self.color, "emoji": self.emoji})
        return item

    @classmethod
    def from_item(cls, item: Mapping[str, object]) -> GuildSettings:
        guild_id = int(str(item["pk"]).split("#", 1)[1])
        return cls(
            guild_id=guild_id,
            color=int(item.get("color", BLURPLE)),
            emoji=str(item.get("emoji") or DEFAULT_EMOJI),
        )


@dataclass(frozen=True, slots=True)
class PremiumLevel:
    name: str
    max_time: int
    max_winners: int
    max_giveaways: int
    per_channel_max_giveaways: bool = False


_DAY = 24 * 60 * 60

FREE = PremiumLevel(
    name="free", max_time=14 * _DAY, max_winners=20, max_giveaways=20
)
BOOSTED = PremiumLevel(
    name="boosted", max_time=30 * _DAY, max_winners=30, max_giveaways=25
)
PREMIUM = PremiumLevel(
    name="premium",
    max_time=60 * _DAY,
    max_winners=50,
    max_giveaways=25,
    per_channel_max_giveaways=True,
)

PREMIUM_LEVELS: dict[str, PremiumLevel] = {
    level.name: level for level in (FREE, BOOSTED, PREMIUM)
}


def premium_level(name: str | None) -> PremiumLevel:
    if not name:
        return FREE
    try:
        return PREMIUM_LEVELS[name.strip().lower()]
    except KeyError as exc:
        raise ValueError(f"Unknown premium level: {name}") from exc


__all__ = [
    "BLURPLE",
    "DEFAULT_EMOJI",
    "BOOSTED",
    "Entrant",
    "FREE",
    "Giveaway",
    "GuildSettings",
    "PREMIUM",
    "PREMIUM_LEVELS",
    "PremiumLevel",
    "premium_level",
    "utc_now",
]
