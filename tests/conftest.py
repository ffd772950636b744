"""Shared fixtures for the reaction bot tests."""

from __future__ import annotations

from unittest.mock import AsyncMock, Mock

import pytest

from bot_logger import BotLogger
from reactor_config import BotConfig, ConfigStore

BOT_USER_ID = 999
ENABLED_CHANNEL_ID = 111
OTHER_CHANNEL_ID = 333


@pytest.fixture
def store(tmp_path) -> ConfigStore:
    config = BotConfig(enabled_channels=[str(ENABLED_CHANNEL_ID)])
    return ConfigStore(tmp_path / "config.json", config=config)


@pytest.fixture
def bot_logger(tmp_path, request):
    sink = BotLogger(log_file=tmp_path / "bot.log", level="info", name=f"test.{request.node.name}")
    yield sink
    sink.close()


@pytest.fixture
def bot() -> Mock:
    return Mock(user=Mock(id=BOT_USER_ID))


def make_message(
    content: str = "gg that was a win",
    channel_id: int = ENABLED_CHANNEL_ID,
    author_id: int = 222,
    author_is_bot: bool = False,
    channel_name: str = "general",
) -> Mock:
    message = Mock()
    message.content = content
    message.author = Mock(id=author_id, bot=author_is_bot)
    message.channel = Mock(id=channel_id)
    message.channel.name = channel_name
    message.add_reaction = AsyncMock()
    return message


def make_interaction(channel_id: int = ENABLED_CHANNEL_ID, done: bool = False, channel_name: str = "general") -> Mock:
    interaction = Mock()
    interaction.channel_id = channel_id
    interaction.channel = Mock()
    interaction.channel.name = channel_name
    interaction.user = "tester#0001"
    interaction.respond = AsyncMock()
    interaction.response.is_done = Mock(return_value=done)
    interaction.response.send_message = AsyncMock()
    interaction.followup.send = AsyncMock()
    return interaction
