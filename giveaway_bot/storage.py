from __future__ import annotations

import logging
from collections.abc import Iterator
from datetime import datetime

from boto3.dynamodb.conditions import Attr, Key
from botocore.exceptions import ClientError

from .models import Entrant, Giveaway, GuildSettings

log = logging.getLogger(__name__)

ENTRY_PREFIX = "ENTRY#"


def _is_conditional_failure(exc: ClientError) -> bool:
    code = exc.response.get("Error", {}).get("Code")
    return code == "ConditionalCheckFailedException"


class GiveawayStorage:
    """DynamoDB-backed store for running giveaways, entries and guild settings."""

    def __init__(self, table) -> None:
        self._table = table

    def ensure_table(self) -> None:
        if self._table is None:
            raise RuntimeError("Giveaway table is not configured")

    # ----- Giveaways -----
    def create_giveaway(self, giveaway: Giveaway) -> None:
        self.ensure_table()
        self._table.put_item(Item=giveaway.to_item())

    def get_giveaway(self, message_id: int) -> Giveaway | None:
        self.ensure_table()
        resp = self._table.get_item(Key=Giveaway.key(message_id))
        item = resp.get("Item")
        if not item:
            return None
        return Giveaway.from_item(item)

    def list_active(self) -> list[Giveaway]:
        return [Giveaway.from_item(item) for item in self._scan_giveaways()]

    def list_expired(self, before: datetime) -> list[Giveaway]:
        cutoff = int(before.timestamp())
        return [
            Giveaway.from_item(item)
            for item in self._scan_giveaways()
            if int(item.get("end_time", 0)) <= cutoff
        ]

    def count_by_channel(self, channel_id: int) -> int:
        return sum(
            1
            for item in self._scan_giveaways()
            if str(item.get("channel_id")) == str(channel_id)
        )

    def count_by_guild(self, guild_id: int) -> int:
        return sum(
            1
            for item in self._scan_giveaways()
            if str(item.get("guild_id")) == str(guild_id)
        )

    def remove_giveaway(self, message_id: int) -> bool:
        """Delete a giveaway and its entries.

        Returns ``False`` if the giveaway was already gone, which means another
        worker removed it first.
        """
        self.ensure_table()
        try:
            self._table.delete_item(
                Key=Giveaway.key(message_id),
                ConditionExpression="attribute_exists(pk)",
            )
        except ClientError as exc:
            if _is_conditional_failure(exc):
                return False
            raise

        for item in list(self._query_entries(message_id)):
            try:
                self._table.delete_item(Key={"pk": item["pk"], "sk": item["sk"]})
            except ClientError as exc:
                log.warning(
                    "Failed to delete entry %s of giveaway %s: %s",
                    item.get("sk"),
                    message_id,
                    exc,
                )
        return True

    # ----- Entries -----
    def add_entry(self, message_id: int, entrant: Entrant) -> bool:
        """Record an entrant; ``False`` if they had already entered."""
        self.ensure_table()
        item: dict[str, object] = {
            "pk": Giveaway.PK_TEMPLATE % message_id,
            "sk": f"{ENTRY_PREFIX}{entrant.id}",
        }
        item.update(entrant.to_attributes())
        try:
            self._table.put_item(
                Item=item, ConditionExpression="attribute_not_exists(sk)"
            )
        except ClientError as exc:
            if _is_conditional_failure(exc):
                return False
            raise
        return True

    def list_entrants(self, message_id: int) -> list[Entrant]:
        return [Entrant.from_attributes(item) for item in self._query_entries(message_id)]

    def count_entries(self, message_id: int) -> int:
        return sum(1 for _ in self._query_entries(message_id))

    # ----- Users -----
    def get_user(self, user_id: int) -> Entrant | None:
        self.ensure_table()
        resp = self._table.get_item(Key=Entrant.key(user_id))
        item = resp.get("Item")
        if not item:
            return None
        return Entrant.from_attributes(item)

    def save_user(self, entrant: Entrant) -> None:
        self.ensure_table()
        item: dict[str, object] = Entrant.key(entrant.id)
        item.update(entrant.to_attributes())
        self._table.put_item(Item=item)

    # ----- Guild settings -----
    def get_guild_settings(self, guild_id: int) -> GuildSettings:
        self.ensure_table()
        resp = self._table.get_item(Key=GuildSettings.key(guild_id))
        item = resp.get("Item")
        if not item:
            return GuildSettings(guild_id=guild_id)
        return GuildSettings.from_item(item)

    def save_guild_settings(self, settings: GuildSettings) -> None:
        self.ensure_table()
        self._table.put_item(Item=settings.to_item())

    # ----- Helpers -----
    def _scan_giveaways(self) -> Iterator[dict]:
        self.ensure_table()
        scan_kwargs: dict[str, object] = {
            "FilterExpression": Attr("sk").eq(Giveaway.SK_VALUE)
        }
        while True:
            resp = self._table.scan(**scan_kwargs)
            for item in resp.get("Items", []):
                if item.get("sk") == Giveaway.SK_VALUE and str(
                    item.get("pk", "")
                ).startswith("GIVEAWAY#"):
                    yield item
            last_key = resp.get("LastEvaluatedKey")
            if not last_key:
                break
            scan_kwargs["ExclusiveStartKey"] = last_key

    def _query_entries(self, message_id: int) -> Iterator[dict]:
        self.ensure_table()
        query_kwargs: dict[str, object] = {
            "KeyConditionExpression": Key("pk").eq(Giveaway.PK_TEMPLATE % message_id)
            & Key("sk").begins_with(ENTRY_PREFIX),
            "Select": "ALL_ATTRIBUTES",
        }
        while True:
            resp = self._table.query(**query_kwargs)
            yield from resp.get("Items", [])
            last_key = resp.get("LastEvaluatedKey")
            if not last_key:
                break
            query_kwargs["ExclusiveStartKey"] = last_key


__all__ = ["ENTRY_PREFIX", "GiveawayStorage"]
