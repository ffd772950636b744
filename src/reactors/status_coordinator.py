"""
Status Coordinator - presence and startup survey for the reaction bot.

Features:
- Sets the bot's "Watching for W/L reactions" presence once connected
- Logs which allow-listed channels the bot can actually see
"""

import logging

import discord

from reactor_config import ConfigStore

PRESENCE_TEXT = "for W/L reactions"


class StatusCoordinator:
    """Handles the bot's Discord presence and the ready-time channel survey."""

    def __init__(self, store: ConfigStore):
        self.store = store
        self.logger = logging.getLogger("processor.status_coordinator")

    async def on_startup(self, bot: discord.Bot) -> None:
        self.log_channel_survey(bot)
        await self.update_presence(bot)

    async def update_presence(self, bot: discord.Bot) -> None:
        """Set the watching activity; failures are logged, never raised"""
        try:
            activity = discord.Activity(type=discord.ActivityType.watching, name=PRESENCE_TEXT)
            await bot.change_presence(status=discord.Status.online, activity=activity)
            self.logger.info(f"🟢 Presence set: watching {PRESENCE_TEXT}")
        except Exception as e:
            self.logger.error(f"❌ Failed to update bot status: {e}")

    def log_channel_survey(self, bot: discord.Bot) -> None:
        channel_ids = self.store.config.enabled_channels
        self.logger.info(f"🎯 Monitoring {len(channel_ids)} channels for reactions")

        for channel_id in channel_ids:
            try:
                channel = bot.get_channel(int(channel_id))
            except ValueError:
                self.logger.warning(f"  ⚠️ {channel_id} is not a valid channel id")
                continue

            if channel is None:
                self.logger.warning(f"  ⚫ {channel_id} - not visible to the bot")
            else:
                self.logger.info(f"  🟢 #{channel.name} ({channel_id})")
