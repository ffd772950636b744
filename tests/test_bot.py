"""Tests for startup helpers and bot wiring."""

from __future__ import annotations

import asyncio
import logging
import os
import signal
from unittest.mock import AsyncMock, Mock

import discord
import pytest

import bot as bot_module
from bot_commands import CommandContext, default_registry
from reactor_config import ConfigStore
from reactors import StatusCoordinator, build_pipeline


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if getattr(handler, "bot_logger_handler", False):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


def test_token_prefers_token_variable(monkeypatch) -> None:
    monkeypatch.setenv("TOKEN", "primary")
    monkeypatch.setenv("DISCORD_TOKEN", "secondary")

    assert bot_module.load_token() == "primary"


def test_token_falls_back_to_discord_token(monkeypatch) -> None:
    monkeypatch.delenv("TOKEN", raising=False)
    monkeypatch.setenv("DISCORD_TOKEN", "secondary")

    assert bot_module.load_token() == "secondary"


def test_missing_token(monkeypatch) -> None:
    monkeypatch.delenv("TOKEN", raising=False)
    monkeypatch.delenv("DISCORD_TOKEN", raising=False)

    assert bot_module.load_token() is None


def test_missing_config_exits_non_zero(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("CONFIG_FILE", str(tmp_path / "absent.json"))
    monkeypatch.setenv("LOG_FILE", str(tmp_path / "bot.log"))
    monkeypatch.setattr(bot_module, "load_dotenv", lambda: None)

    with pytest.raises(SystemExit) as excinfo:
        bot_module.main()

    assert excinfo.value.code == 1
    assert "Failed to load config.json" in (tmp_path / "bot.log").read_text(encoding="utf-8")


def test_missing_token_exits_non_zero(tmp_path, monkeypatch, store) -> None:
    store.save()
    monkeypatch.setenv("CONFIG_FILE", str(store.path))
    monkeypatch.setenv("LOG_FILE", str(tmp_path / "bot.log"))
    monkeypatch.delenv("TOKEN", raising=False)
    monkeypatch.delenv("DISCORD_TOKEN", raising=False)
    monkeypatch.setattr(bot_module, "load_dotenv", lambda: None)

    with pytest.raises(SystemExit) as excinfo:
        bot_module.main()

    assert excinfo.value.code == 1
    assert "No Discord bot token found" in (tmp_path / "bot.log").read_text(encoding="utf-8")


def test_create_bot_registers_slash_commands(store, bot_logger) -> None:
    registry = default_registry()
    context = CommandContext.from_store(store, bot_logger)

    async def build():
        return bot_module.create_bot(store, build_pipeline(store), registry, context)

    bot = asyncio.run(build())

    names = {command.name for command in bot.pending_application_commands}
    assert names == {"enable", "disable", "status", "stats", "logs"}

    permissions = {command.name: command.default_member_permissions for command in bot.pending_application_commands}
    assert permissions["enable"].manage_channels is True
    assert permissions["status"] is None


def test_status_coordinator_sets_presence_and_surveys(store, caplog) -> None:
    caplog.set_level(logging.INFO)
    store.config.enabled_channels.append("222")
    visible = Mock()
    visible.name = "wins"
    fake_bot = Mock()
    fake_bot.get_channel = Mock(side_effect=lambda channel_id: visible if channel_id == 111 else None)
    fake_bot.change_presence = AsyncMock()

    asyncio.run(StatusCoordinator(store).on_startup(fake_bot))

    activity = fake_bot.change_presence.await_args.kwargs["activity"]
    assert activity.type == discord.ActivityType.watching
    assert activity.name == "for W/L reactions"
    assert "Monitoring 2 channels" in caplog.text
    assert "#wins (111)" in caplog.text
    assert "222 - not visible" in caplog.text


def test_status_coordinator_survives_presence_failure(store) -> None:
    fake_bot = Mock()
    fake_bot.get_channel = Mock(return_value=None)
    fake_bot.change_presence = AsyncMock(side_effect=RuntimeError("gateway closed"))

    asyncio.run(StatusCoordinator(store).on_startup(fake_bot))


class FakeClient:
    """Stands in for discord.Bot: start() blocks until close() is awaited."""

    def __init__(self, start_error=None, on_start=None):
        self.start_error = start_error
        self.on_start = on_start
        self.exception_handler = None
        self.closed = asyncio.Event()
        self.close = AsyncMock(side_effect=self._close)

    async def start(self, token):
        self.exception_handler = asyncio.get_running_loop().get_exception_handler()
        if self.start_error is not None:
            raise self.start_error
        if self.on_start is not None:
            self.on_start(asyncio.get_running_loop())
        await self.closed.wait()

    async def _close(self):
        self.closed.set()

    def is_closed(self):
        return self.closed.is_set()


@pytest.fixture
def run_env(tmp_path, monkeypatch, store):
    store.save()
    monkeypatch.setenv("CONFIG_FILE", str(store.path))
    monkeypatch.setenv("LOG_FILE", str(tmp_path / "bot.log"))
    monkeypatch.setenv("TOKEN", "test-token")
    monkeypatch.setattr(bot_module, "load_dotenv", lambda: None)
    return tmp_path


def _use_client(monkeypatch, client: FakeClient) -> None:
    monkeypatch.setattr(bot_module, "create_bot", lambda *args, **kwargs: client)


def test_sigterm_saves_config_and_exits_cleanly(run_env, monkeypatch, store) -> None:
    def stray_error_then_sigterm(loop):
        loop.call_exception_handler({"message": "stray task failed", "exception": RuntimeError("lost")})
        loop.call_later(0.01, os.kill, os.getpid(), signal.SIGTERM)

    client = FakeClient(on_start=stray_error_then_sigterm)
    _use_client(monkeypatch, client)

    bot_module.main()

    client.close.assert_awaited()
    assert client.exception_handler is bot_module._log_loop_exception
    saved = ConfigStore(store.path).load()
    assert saved.statistics.bot_start_time is not None
    log_text = (run_env / "bot.log").read_text(encoding="utf-8")
    assert "Unhandled exception in event loop: stray task failed" in log_text
    assert "Received SIGTERM, shutting down gracefully" in log_text


def test_login_failure_exits_non_zero(run_env, monkeypatch) -> None:
    client = FakeClient(start_error=discord.LoginFailure("Improper token has been passed."))
    _use_client(monkeypatch, client)

    with pytest.raises(SystemExit) as excinfo:
        bot_module.main()

    assert excinfo.value.code == 1
    client.close.assert_awaited_once()
    assert "Failed to login to Discord: Improper token" in (run_env / "bot.log").read_text(encoding="utf-8")


def test_unexpected_start_error_exits_non_zero(run_env, monkeypatch) -> None:
    _use_client(monkeypatch, FakeClient(start_error=RuntimeError("gateway exploded")))

    with pytest.raises(SystemExit) as excinfo:
        bot_module.main()

    assert excinfo.value.code == 1
    assert "Uncaught exception" in (run_env / "bot.log").read_text(encoding="utf-8")


def test_loop_exception_handler_logs(caplog) -> None:
    caplog.set_level(logging.ERROR)

    bot_module._log_loop_exception(None, {"message": "Task exception was never retrieved", "exception": ValueError("x")})

    assert "Unhandled exception in event loop: Task exception was never retrieved" in caplog.text
