"""Commands that manage the channel allow-list."""

from .registry import BotCommand, CommandContext


def _channel_label(interaction) -> str:
    channel = getattr(interaction, "channel", None)
    name = getattr(channel, "name", None)
    return f"#{name}" if name else "this channel"


async def enable_channel(interaction, context: CommandContext) -> None:
    channel_id = interaction.channel_id
    label = _channel_label(interaction)

    if context.is_channel_enabled(channel_id):
        await interaction.respond(f"✅ W/L reactions are already enabled in {label}.", ephemeral=True)
        return

    if context.add_channel(channel_id):
        context.logger.info(f"✅ Reactions enabled in {label} ({channel_id}) by {interaction.user}")
        await interaction.respond(f"✅ W/L reactions enabled in {label}.", ephemeral=True)
    else:
        await interaction.respond(
            f"⚠️ W/L reactions enabled in {label}, but the configuration could not be saved.",
            ephemeral=True,
        )


async def disable_channel(interaction, context: CommandContext) -> None:
    channel_id = interaction.channel_id
    label = _channel_label(interaction)

    if not context.is_channel_enabled(channel_id):
        await interaction.respond(f"ℹ️ W/L reactions are not enabled in {label}.", ephemeral=True)
        return

    if context.remove_channel(channel_id):
        context.logger.info(f"🛑 Reactions disabled in {label} ({channel_id}) by {interaction.user}")
        await interaction.respond(f"🛑 W/L reactions disabled in {label}.", ephemeral=True)
    else:
        await interaction.respond(
            f"⚠️ W/L reactions disabled in {label}, but the configuration could not be saved.",
            ephemeral=True,
        )


COMMANDS = [
    BotCommand(
        name="enable",
        description="Enable W/L reactions in this channel",
        execute=enable_channel,
        admin_only=True,
    ),
    BotCommand(
        name="disable",
        description="Disable W/L reactions in this channel",
        execute=disable_channel,
        admin_only=True,
    ),
]
