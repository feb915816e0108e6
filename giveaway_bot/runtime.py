"""Discord bot runtime that wires storage, transport, manager and sweep together."""

from __future__ import annotations

import asyncio
import logging

import boto3
import discord
from discord import app_commands

from . import messages
from .config import EnvironmentConfig
from .errors import GiveawayError
from .logging_utils import configure_logging
from .manager import GiveawayManager
from .models import Entrant, utc_now
from .rendering import ENTER_BUTTON_ID
from .scheduler import SweepScheduler
from .storage import GiveawayStorage
from .transport import (
    ChannelFileUploader,
    DiscordMessenger,
    build_embed,
    build_view,
    release_view,
)

log = logging.getLogger(__name__)


class GiveawayRuntime:
    def __init__(self, config: EnvironmentConfig, *, dynamodb_resource=None) -> None:
        intents = discord.Intents.default()
        intents.guilds = True

        self.config = config
        self.bot = discord.Client(intents=intents)
        self.tree = app_commands.CommandTree(self.bot)
        self.dynamodb = dynamodb_resource or boto3.resource(
            "dynamodb", region_name=config.aws_region
        )
        self.storage = GiveawayStorage(self.dynamodb.Table(config.giveaway_table_name))
        self.manager = GiveawayManager(
            self.storage,
            DiscordMessenger(self.bot),
            ChannelFileUploader(self.bot, config.summary_channel_id),
            summary_url=config.summary_url,
        )
        self.scheduler = SweepScheduler(
            self.storage,
            self.manager.end_giveaway,
            interval=config.sweep_interval,
            workers=config.sweep_workers,
        )
        self._register_commands()
        self.bot.event(self.on_ready)
        self.bot.event(self.on_interaction)

    def _register_commands(self) -> None:
        @app_commands.command(name="gstart", description="Start a giveaway in this channel")
        @app_commands.describe(
            time="How long the giveaway runs, e.g. 30m, 2h or 1d12h",
            winners="Number of winners",
            prize="What the winners get",
            description="Extra details shown on the giveaway",
        )
        @app_commands.guild_only()
        @app_commands.default_permissions(manage_guild=True)
        async def gstart(
            interaction: discord.Interaction,
            time: str,
            winners: str,
            prize: str,
            description: str | None = None,
        ) -> None:
            await self.start_giveaway(interaction, time, winners, prize, description)

        self.tree.add_command(gstart)

    async def on_ready(self) -> None:
        if self.config.sync_commands:
            await self.tree.sync()
        self.scheduler.start()
        log.info("Giveaway bot ready as %s", self.bot.user)

    async def start_giveaway(
        self,
        interaction: discord.Interaction,
        time_text: str,
        winners_text: str,
        prize: str,
        description: str | None = None,
    ) -> None:
        guild_id = interaction.guild_id
        channel_id = interaction.channel_id
        if guild_id is None or channel_id is None:
            await interaction.response.send_message(
                "Giveaways can only be started in a server channel.", ephemeral=True
            )
            return

        level = self.config.premium_level
        error = self.manager.check_availability(guild_id, channel_id, level)
        if error is not None:
            await interaction.response.send_message(error.describe(), ephemeral=True)
            return

        giveaway = self.manager.construct_giveaway(
            interaction.user.id, time_text, winners_text, prize, description, level
        )
        if isinstance(giveaway, GiveawayError):
            await interaction.response.send_message(giveaway.describe(), ephemeral=True)
            return

        await interaction.response.defer(ephemeral=True, thinking=True)
        try:
            self.storage.save_user(Entrant.from_user(interaction.user))
        except Exception as exc:  # pylint: disable=broad-except
            log.exception("Failed to cache host %s: %s", interaction.user.id, exc)

        outcome = await self.manager.send_giveaway(giveaway, guild_id, channel_id)
        if isinstance(outcome, GiveawayError):
            await interaction.followup.send(outcome.describe(), ephemeral=True)
            return
        log.info("Giveaway %s started in guild %s", outcome, guild_id)
        await interaction.followup.send(
            messages.CREATED.format(end=giveaway.end_timestamp), ephemeral=True
        )

    async def on_interaction(self, interaction: discord.Interaction) -> None:
        if interaction.type is not discord.InteractionType.component:
            return
        data = interaction.data or {}
        if data.get("custom_id") != ENTER_BUTTON_ID or interaction.message is None:
            return
        await self.enter_giveaway(interaction)

    async def enter_giveaway(self, interaction: discord.Interaction) -> None:
        message_id = interaction.message.id
        giveaway = self.storage.get_giveaway(message_id)
        if giveaway is None or giveaway.end_time <= utc_now():
            await interaction.response.send_message(messages.NOT_RUNNING, ephemeral=True)
            return

        entrant = Entrant.from_user(interaction.user)
        if not self.storage.add_entry(message_id, entrant):
            await interaction.response.send_message(
                messages.ALREADY_ENTERED, ephemeral=True
            )
            return
        self.storage.save_user(entrant)

        payload = self.manager.render_giveaway(
            giveaway, self.storage.count_entries(message_id)
        )
        view = build_view(payload)
        await interaction.response.edit_message(embed=build_embed(payload), view=view)
        release_view(view)
        await interaction.followup.send(messages.ENTERED, ephemeral=True)

    async def run(self) -> None:
        async with self.bot:
            try:
                await self.bot.start(self.config.discord_token)
            finally:
                await self.scheduler.shutdown()

    @classmethod
    def create(cls) -> GiveawayRuntime:
        return cls(EnvironmentConfig.load())


async def main() -> None:
    config = EnvironmentConfig.load()
    configure_logging(config.log_level)
    runtime = GiveawayRuntime(config)
    await runtime.run()


def cli() -> None:
    asyncio.run(main())


__all__ = ["GiveawayRuntime", "cli", "main"]
