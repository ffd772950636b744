"""
W/L Reaction Bot
Adds win/loss reactions to messages in allow-listed channels, with slash
commands to manage those channels and inspect the bot.
"""

import asyncio
import logging
import os
import signal
import sys
from typing import Optional

import discord
from dotenv import load_dotenv

from bot_commands import CommandContext, CommandRegistry, default_registry, register_slash_commands
from bot_logger import DEFAULT_LOG_FILE, BotLogger
from reactor_config import DEFAULT_CONFIG_FILE, ConfigError, ConfigStore
from reactors import MessageContext, ProcessorPipeline, StatusCoordinator, build_pipeline

logger = logging.getLogger(__name__)

# First one set wins
TOKEN_ENV_VARS = ("TOKEN", "DISCORD_TOKEN")


def load_token() -> Optional[str]:
    for name in TOKEN_ENV_VARS:
        token = os.getenv(name)
        if token:
            return token
    return None


def create_bot(
    store: ConfigStore,
    pipeline: ProcessorPipeline,
    registry: CommandRegistry,
    command_context: CommandContext,
) -> discord.Bot:
    """Build the py-cord bot with its events and slash commands."""
    intents = discord.Intents.default()
    intents.guilds = True
    intents.messages = True
    intents.message_content = True
    bot = discord.Bot(intents=intents)

    status_coordinator = StatusCoordinator(store)

    @bot.event
    async def on_ready():
        logger.info(f"✅ Bot logged in as {bot.user}")
        await status_coordinator.on_startup(bot)
        logger.info("⚡ Waiting for messages...")

    @bot.event
    async def on_message(message):
        context = MessageContext(message, bot)
        await pipeline.process(context)

    @bot.event
    async def on_error(event_method, *args, **kwargs):
        logger.error(f"Discord client error in {event_method}", exc_info=True)

    register_slash_commands(bot, registry, command_context)
    return bot


def _log_loop_exception(loop, context) -> None:
    """Exceptions nobody awaited are logged; the bot keeps running"""
    message = context.get("message", "no details")
    logger.error(f"Unhandled exception in event loop: {message}", exc_info=context.get("exception"))


async def run_bot(
    store: ConfigStore,
    token: str,
    pipeline: ProcessorPipeline,
    registry: CommandRegistry,
    command_context: CommandContext,
) -> None:
    """Connect and run until SIGINT/SIGTERM, then save and disconnect."""
    loop = asyncio.get_running_loop()
    loop.set_exception_handler(_log_loop_exception)

    shutdown = asyncio.Event()

    def request_shutdown(sig: signal.Signals) -> None:
        logger.info(f"Received {sig.name}, shutting down gracefully...")
        shutdown.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, request_shutdown, sig)
        except NotImplementedError:
            # Windows event loops have no add_signal_handler
            signal.signal(sig, lambda signum, frame: loop.call_soon_threadsafe(request_shutdown, signal.Signals(signum)))

    bot = create_bot(store, pipeline, registry, command_context)
    bot_task = asyncio.create_task(bot.start(token))
    shutdown_task = asyncio.create_task(shutdown.wait())

    try:
        done, _ = await asyncio.wait({bot_task, shutdown_task}, return_when=asyncio.FIRST_COMPLETED)
        if bot_task in done:
            # Raises LoginFailure and friends
            bot_task.result()
            return

        store.save()
        await bot.close()
        await asyncio.gather(bot_task, return_exceptions=True)
    finally:
        shutdown_task.cancel()
        if not bot.is_closed():
            await bot.close()


def main() -> None:
    load_dotenv()

    bot_logger = BotLogger(
        log_file=os.getenv("LOG_FILE", DEFAULT_LOG_FILE),
        level=os.getenv("LOG_LEVEL", "info"),
    )
    logging.getLogger("discord").setLevel(logging.ERROR)

    store = ConfigStore(os.getenv("CONFIG_FILE", DEFAULT_CONFIG_FILE))
    try:
        store.load()
    except ConfigError as e:
        bot_logger.error("Failed to load config.json:", str(e))
        sys.exit(1)

    token = load_token()
    if not token:
        bot_logger.error("No Discord bot token found. Please set TOKEN or DISCORD_TOKEN environment variable.")
        sys.exit(1)

    store.record_start()
    pipeline = build_pipeline(store)
    registry = default_registry()
    command_context = CommandContext.from_store(store, bot_logger)
    bot_logger.info(f"Loaded {len(registry)} commands, {len(pipeline.processors)} processors")

    try:
        asyncio.run(run_bot(store, token, pipeline, registry, command_context))
    except discord.LoginFailure as e:
        bot_logger.error("Failed to login to Discord:", str(e))
        sys.exit(1)
    except Exception:
        logger.exception("Uncaught exception")
        sys.exit(1)


if __name__ == "__main__":
    main()
