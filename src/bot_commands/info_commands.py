"""Read-only commands: channel status, statistics and recent logs."""

from .registry import BotCommand, CommandContext

RECENT_LOG_LINES = 20
# Leaves room for the code fence inside Discord's 2000 character limit
MAX_LOG_CHARS = 1900


async def show_status(interaction, context: CommandContext) -> None:
    config = context.config
    enabled = context.is_channel_enabled(interaction.channel_id)
    filters = config.content_filters

    lines = ["**🔧 W/L Reaction Status**\n"]
    lines.append(f"**This channel**: {'✅ Enabled' if enabled else '❌ Disabled'}")
    lines.append(f"**Monitored channels**: {len(config.enabled_channels)}")
    lines.append(f"**Reactions**: {config.reactions.win_emoji} {config.reactions.loss_emoji}")

    if filters.enabled:
        lines.append("\n**Content filters:** ✅ Enabled")
        lines.append(f"• Required keywords: {', '.join(filters.required_keywords) or 'none'}")
        lines.append(f"• Excluded keywords: {', '.join(filters.excluded_keywords) or 'none'}")
        lines.append(f"• Minimum length: {filters.min_length}")
    else:
        lines.append("\n**Content filters:** ❌ Disabled")

    await interaction.respond("\n".join(lines), ephemeral=True)


async def show_stats(interaction, context: CommandContext) -> None:
    stats = context.config.statistics

    lines = ["**📊 W/L Reaction Statistics**\n"]
    lines.append(f"• Total reactions: {stats.total_reactions}")
    lines.append(f"• Messages processed: {stats.messages_processed}")
    lines.append(f"• Failed reactions: {stats.failed_reactions}")
    lines.append(f"• Bot started: {stats.bot_start_time or 'unknown'}")
    lines.append(f"• Last reaction: {stats.last_reaction_time or 'never'}")

    await interaction.respond("\n".join(lines), ephemeral=True)


async def show_logs(interaction, context: CommandContext) -> None:
    recent = context.logger.get_recent_logs(RECENT_LOG_LINES)
    if not recent:
        await interaction.respond("📭 No log entries yet.", ephemeral=True)
        return

    if len(recent) > MAX_LOG_CHARS:
        recent = recent[-MAX_LOG_CHARS:]

    await interaction.respond(f"```\n{recent}\n```", ephemeral=True)


COMMANDS = [
    BotCommand(
        name="status",
        description="Show whether W/L reactions are active in this channel",
        execute=show_status,
    ),
    BotCommand(
        name="stats",
        description="Show W/L reaction statistics",
        execute=show_stats,
    ),
    BotCommand(
        name="logs",
        description="Show the most recent bot log lines",
        execute=show_logs,
        admin_only=True,
    ),
]
