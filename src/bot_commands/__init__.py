"""
Slash commands for the W/L reaction bot.

Commands are plain BotCommand records collected in a CommandRegistry;
register_slash_commands() exposes them on the py-cord bot.
"""

from . import channel_commands, info_commands
from .registry import (
    ERROR_MESSAGE,
    BotCommand,
    CommandContext,
    CommandRegistry,
    register_slash_commands,
)


def default_registry() -> CommandRegistry:
    registry = CommandRegistry()
    for command in channel_commands.COMMANDS + info_commands.COMMANDS:
        registry.register(command)
    return registry


__all__ = [
    "ERROR_MESSAGE",
    "BotCommand",
    "CommandContext",
    "CommandRegistry",
    "default_registry",
    "register_slash_commands",
]
