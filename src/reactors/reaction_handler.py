"""
Reaction Handler Processor - adds the W/L reactions to a message.

Features:
- Strictly sequential reactions (win first, then loss)
- Optional delay between the two reactions
- Discord error classification, no retries
- Statistics bookkeeping and save policy
"""

import asyncio

import discord

from reactor_config import ConfigStore, utc_now_iso
from .base_processor import BaseProcessor, MessageContext

# Discord JSON error codes seen when reacting
UNKNOWN_MESSAGE = 10008
MAX_REACTIONS = 30010
MISSING_PERMISSIONS = 50013
TOO_MANY_REQUESTS = 429


class ReactionHandlerProcessor(BaseProcessor):
    """
    Processor that reacts to accepted messages.

    Both reactions are one unit: a failure in either call counts as a single
    failed reaction and neither success counter moves.
    """

    def __init__(self, store: ConfigStore):
        self.store = store
        super().__init__("reaction_handler")

    async def process(self, context: MessageContext) -> bool:
        """
        Add the win and loss reactions to the message.

        Returns:
            True if both reactions were added, False otherwise
        """
        reactions = self.store.config.reactions
        stats = self.store.config.statistics

        try:
            await context.message.add_reaction(reactions.win_emoji)
            if reactions.delay_ms > 0:
                await asyncio.sleep(reactions.delay_ms / 1000)
            await context.message.add_reaction(reactions.loss_emoji)
        except Exception as e:
            stats.failed_reactions += 1
            self.logger.error(f"❌ Failed to add reactions to message in #{context.channel_name}: {e}")
            self._log_reaction_error(e)
            return False

        self.logger.info(f"✅ Added W/L reactions to message in #{context.channel_name} ({context.channel_id})")

        stats.total_reactions += 2
        stats.messages_processed += 1
        stats.last_reaction_time = utc_now_iso()

        if self._should_persist():
            self.store.save()

        return True

    def _should_persist(self) -> bool:
        """Auto-save writes after every success, otherwise every Nth processed message"""
        settings = self.store.config.settings
        if settings.auto_save:
            return True
        if settings.save_interval <= 0:
            return False
        return self.store.config.statistics.messages_processed % settings.save_interval == 0

    def _log_reaction_error(self, error: Exception) -> None:
        """Explain common Discord API failures"""
        if not isinstance(error, discord.HTTPException):
            return

        if error.code == UNKNOWN_MESSAGE:
            self.logger.warning("Message was deleted before reactions could be added")
        elif error.code == MISSING_PERMISSIONS:
            self.logger.error("Missing permissions to add reactions in this channel")
        elif error.code == MAX_REACTIONS:
            self.logger.warning("Maximum number of reactions reached on this message")
        elif error.status == TOO_MANY_REQUESTS:
            self.logger.warning("Rate limited by Discord while adding reactions")
