from __future__ import annotations

import itertools
from datetime import UTC, datetime, timedelta

import pytest
from botocore.exceptions import ClientError

from giveaway_bot.models import Entrant, Giveaway, GuildSettings
from giveaway_bot.storage import GiveawayStorage
from giveaway_bot.transport import TransportResult

START = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)


class FakeClock:
    def __init__(self, now: datetime = START) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


def _conditional_failure(operation: str) -> ClientError:
    return ClientError(
        {
            "Error": {
                "Code": "ConditionalCheckFailedException",
                "Message": "The conditional request failed",
            }
        },
        operation,
    )


class FakeTable:
    def __init__(self) -> None:
        self.items: dict[tuple[str, str], dict[str, object]] = {}
        self.deleted: list[tuple[str, str]] = []

    def get_item(self, *, Key):
        item = self.items.get((Key["pk"], Key["sk"]))
        return {"Item": dict(item)} if item else {}

    def put_item(self, *, Item, ConditionExpression=None):
        key = (Item["pk"], Item["sk"])
        if ConditionExpression and key in self.items:
            raise _conditional_failure("PutItem")
        self.items[key] = dict(Item)

    def delete_item(self, *, Key, ConditionExpression=None):
        key = (Key["pk"], Key["sk"])
        if key not in self.items:
            if ConditionExpression:
                raise _conditional_failure("DeleteItem")
            return {}
        self.items.pop(key)
        self.deleted.append(key)
        return {}

    def query(self, *, KeyConditionExpression, Select="ALL_ATTRIBUTES", **_kwargs):
        pk_value = None
        sk_prefix = ""
        for condition in KeyConditionExpression._values:  # type: ignore[attr-defined]
            key, value = condition._values  # type: ignore[attr-defined]
            if key.name == "pk":
                pk_value = value
            elif key.name == "sk":
                sk_prefix = value
        items = [
            dict(self.items[key])
            for key in sorted(self.items)
            if key[0] == pk_value and key[1].startswith(sk_prefix)
        ]
        if Select == "COUNT":
            return {"Count": len(items)}
        return {"Items": items, "Count": len(items)}

    def scan(self, **_kwargs):
        return {"Items": [dict(item) for item in self.items.values()]}


class FakeMessenger:
    def __init__(self) -> None:
        self.posts: list[tuple[int, object]] = []
        self.edits: list[tuple[int, int, object]] = []
        self.post_results: list[TransportResult] = []
        self.edit_result = TransportResult(ok=True, status=200)
        self._ids = itertools.count(1000)

    async def post(self, channel_id, payload):
        self.posts.append((channel_id, payload))
        if self.post_results:
            return self.post_results.pop(0)
        return TransportResult(ok=True, status=200, message_id=next(self._ids))

    async def edit(self, channel_id, message_id, payload):
        self.edits.append((channel_id, message_id, payload))
        return self.edit_result


class FakeUploader:
    def __init__(self, url: str | None = None) -> None:
        self.url = url
        self.uploads: list[tuple[str, str]] = []

    async def upload(self, content: str, filename: str) -> str | None:
        self.uploads.append((content, filename))
        return self.url


SUMMARY_ATTACHMENT_URL = (
    "https://cdn.discordapp.com/attachments/111/222/giveaway_summary.json?ex=abc"
)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def table() -> FakeTable:
    return FakeTable()


@pytest.fixture
def storage(table: FakeTable) -> GiveawayStorage:
    return GiveawayStorage(table)


@pytest.fixture
def messenger() -> FakeMessenger:
    return FakeMessenger()


@pytest.fixture
def uploader() -> FakeUploader:
    return FakeUploader(SUMMARY_ATTACHMENT_URL)


def make_entrant(user_id: int, name: str | None = None) -> Entrant:
    return Entrant(id=user_id, username=name or f"user{user_id}")


def make_giveaway(
    *,
    message_id: int | None = 500,
    end_time: datetime = START,
    num_winners: int = 1,
    prize: str = "Nitro",
    description: str | None = None,
    guild_id: int = 10,
    channel_id: int = 20,
    host_id: int = 1,
) -> Giveaway:
    return Giveaway(
        host_id=host_id,
        end_time=end_time,
        num_winners=num_winners,
        prize=prize,
        description=description,
        guild_id=guild_id,
        channel_id=channel_id,
        message_id=message_id,
    )


def make_settings(guild_id: int = 10) -> GuildSettings:
    return GuildSettings(guild_id=guild_id, color=0x123456, emoji="\U0001f381")
