"""
Command registry and dispatch for the bot's slash commands.

Every command shares one shape: an async execute(interaction, context)
callable. The registry maps names to commands and funnels all failures
into a single ephemeral error reply.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Iterator, Optional

import discord

from bot_logger import BotLogger
from reactor_config import BotConfig, ConfigStore

logger = logging.getLogger(__name__)

ERROR_MESSAGE = "There was an error while executing this command!"


@dataclass
class CommandContext:
    """Shared state handed to every command."""

    config: BotConfig
    add_channel: Callable[[Any], bool]
    remove_channel: Callable[[Any], bool]
    is_channel_enabled: Callable[[Any], bool]
    logger: BotLogger

    @classmethod
    def from_store(cls, store: ConfigStore, bot_logger: BotLogger) -> "CommandContext":
        return cls(
            config=store.config,
            add_channel=store.add_channel,
            remove_channel=store.remove_channel,
            is_channel_enabled=store.is_channel_enabled,
            logger=bot_logger,
        )


@dataclass(frozen=True)
class BotCommand:
    name: str
    description: str
    execute: Callable[[Any, CommandContext], Awaitable[None]]
    admin_only: bool = False


class CommandRegistry:
    """Name -> command table, filled once at startup."""

    def __init__(self):
        self._commands: Dict[str, BotCommand] = {}

    def register(self, command: BotCommand) -> None:
        if command.name in self._commands:
            raise ValueError(f"Command '{command.name}' is already registered")
        self._commands[command.name] = command
        logger.debug(f"Registered command /{command.name}")

    def get(self, name: str) -> Optional[BotCommand]:
        return self._commands.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._commands

    def __iter__(self) -> Iterator[BotCommand]:
        return iter(self._commands.values())

    def __len__(self) -> int:
        return len(self._commands)

    async def dispatch(self, name: str, interaction, context: CommandContext) -> bool:
        """
        Run the named command for an interaction.

        Unknown names are logged and get no reply. A failing command gets
        exactly one ephemeral error message: a follow-up if the interaction
        was already answered, a reply otherwise.

        Returns:
            True if the command ran without raising
        """
        command = self._commands.get(name)
        if command is None:
            logger.error(f"No command matching {name} was found.")
            return False

        try:
            await command.execute(interaction, context)
            return True
        except Exception as e:
            logger.error(f"Error executing command {name}: {e}")
            await self._send_error(interaction, name)
            return False

    async def _send_error(self, interaction, name: str) -> None:
        try:
            if interaction.response.is_done():
                await interaction.followup.send(ERROR_MESSAGE, ephemeral=True)
            else:
                await interaction.response.send_message(ERROR_MESSAGE, ephemeral=True)
        except discord.HTTPException as e:
            logger.error(f"Could not deliver error message for {name}: {e}")


def register_slash_commands(bot: discord.Bot, registry: CommandRegistry, context: CommandContext) -> None:
    """Attach every registered command to the bot as a slash command."""

    def make_callback(command_name: str):
        async def callback(ctx: discord.ApplicationContext):
            await registry.dispatch(command_name, ctx, context)
        return callback

    for command in registry:
        permissions = discord.Permissions(manage_channels=True) if command.admin_only else None
        bot.slash_command(
            name=command.name,
            description=command.description,
            default_member_permissions=permissions,
        )(make_callback(command.name))
        logger.info(f"Added /{command.name} slash command")
