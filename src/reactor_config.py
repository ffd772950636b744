"""
Configuration store for the reaction bot.

The whole bot state lives in one JSON document (config.json in the working
directory by default). It is loaded once at startup, mutated in place by
the reaction pipeline and the slash commands, and rewritten wholesale on
every save.
"""

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "config.json"
DEFAULT_WIN_EMOJI = "🇼"
DEFAULT_LOSS_EMOJI = "🇱"
DEFAULT_SAVE_INTERVAL = 10


class ConfigError(Exception):
    """Raised when the configuration file cannot be read or understood."""


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _section(payload: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = payload.get(key, {})
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{key}' must be an object, got {type(value).__name__}")
    return value


def _string_list(payload: Dict[str, Any], key: str) -> List[str]:
    value = payload.get(key, [])
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigError(f"'{key}' must be a list, got {type(value).__name__}")
    return [str(item) for item in value]


def _flag(payload: Dict[str, Any], key: str, default: bool = False) -> bool:
    value = payload.get(key, default)
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        # Same spelling rules as the <NAME>_ENABLED switches
        return value.strip().lower() == "true"
    raise ConfigError(f"'{key}' must be true or false, got {type(value).__name__}")


def _safe_int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning(f"Failed to parse integer value {value!r}; using {default}")
        return default


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


@dataclass
class ContentFilters:
    enabled: bool = False
    required_keywords: List[str] = field(default_factory=list)
    excluded_keywords: List[str] = field(default_factory=list)
    min_length: int = 0

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "ContentFilters":
        return cls(
            enabled=_flag(payload, "enabled"),
            required_keywords=_string_list(payload, "requiredKeywords"),
            excluded_keywords=_string_list(payload, "excludedKeywords"),
            min_length=_safe_int(payload.get("minLength", 0)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "requiredKeywords": list(self.required_keywords),
            "excludedKeywords": list(self.excluded_keywords),
            "minLength": self.min_length,
        }


@dataclass
class ReactionSettings:
    win_emoji: str = DEFAULT_WIN_EMOJI
    loss_emoji: str = DEFAULT_LOSS_EMOJI
    delay_ms: int = 0

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "ReactionSettings":
        return cls(
            win_emoji=str(payload.get("winEmoji", DEFAULT_WIN_EMOJI)),
            loss_emoji=str(payload.get("lossEmoji", DEFAULT_LOSS_EMOJI)),
            delay_ms=_safe_int(payload.get("delayMs", 0)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "winEmoji": self.win_emoji,
            "lossEmoji": self.loss_emoji,
            "delayMs": self.delay_ms,
        }


@dataclass
class Settings:
    auto_save: bool = False
    save_interval: int = DEFAULT_SAVE_INTERVAL

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Settings":
        return cls(
            auto_save=_flag(payload, "autoSave"),
            save_interval=_safe_int(payload.get("saveInterval", DEFAULT_SAVE_INTERVAL), DEFAULT_SAVE_INTERVAL),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"autoSave": self.auto_save, "saveInterval": self.save_interval}


@dataclass
class Statistics:
    total_reactions: int = 0
    messages_processed: int = 0
    failed_reactions: int = 0
    bot_start_time: Optional[str] = None
    last_reaction_time: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Statistics":
        return cls(
            total_reactions=_safe_int(payload.get("totalReactions", 0)),
            messages_processed=_safe_int(payload.get("messagesProcessed", 0)),
            failed_reactions=_safe_int(payload.get("failedReactions", 0)),
            bot_start_time=_optional_str(payload.get("botStartTime")),
            last_reaction_time=_optional_str(payload.get("lastReactionTime")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalReactions": self.total_reactions,
            "messagesProcessed": self.messages_processed,
            "failedReactions": self.failed_reactions,
            "botStartTime": self.bot_start_time,
            "lastReactionTime": self.last_reaction_time,
        }


@dataclass
class BotConfig:
    """In-memory form of config.json."""

    enabled_channels: List[str] = field(default_factory=list)
    content_filters: ContentFilters = field(default_factory=ContentFilters)
    reactions: ReactionSettings = field(default_factory=ReactionSettings)
    settings: Settings = field(default_factory=Settings)
    statistics: Statistics = field(default_factory=Statistics)

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "BotConfig":
        if not isinstance(payload, dict):
            raise ConfigError(f"Configuration must be a JSON object, got {type(payload).__name__}")

        # Collapse duplicates, keep first-seen order
        channels = list(dict.fromkeys(_string_list(payload, "enabledChannels")))

        return cls(
            enabled_channels=channels,
            content_filters=ContentFilters.from_dict(_section(payload, "contentFilters")),
            reactions=ReactionSettings.from_dict(_section(payload, "reactions")),
            settings=Settings.from_dict(_section(payload, "settings")),
            statistics=Statistics.from_dict(_section(payload, "statistics")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabledChannels": list(self.enabled_channels),
            "contentFilters": self.content_filters.to_dict(),
            "reactions": self.reactions.to_dict(),
            "settings": self.settings.to_dict(),
            "statistics": self.statistics.to_dict(),
        }


class ConfigStore:
    """
    Owns the bot configuration and its file on disk.

    Mutating operations change the in-memory document; callers persist it
    explicitly with save(). Channel add/remove persist on change and report
    whether that write succeeded.
    """

    def __init__(self, path=DEFAULT_CONFIG_FILE, config: Optional[BotConfig] = None):
        self.path = Path(path)
        self.config = config if config is not None else BotConfig()

    def load(self) -> BotConfig:
        """
        Read and parse the configuration file.

        Raises:
            ConfigError: when the file is missing, unreadable or malformed
        """
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                payload = json.load(f)
        except FileNotFoundError as e:
            raise ConfigError(f"Configuration file not found: {self.path}") from e
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in {self.path}: {e}") from e
        except UnicodeDecodeError as e:
            raise ConfigError(f"{self.path} is not valid UTF-8: {e}") from e
        except OSError as e:
            raise ConfigError(f"Could not read {self.path}: {e}") from e

        self.config = BotConfig.from_dict(payload)
        logger.debug(f"Loaded configuration from {self.path} ({len(self.config.enabled_channels)} channels)")
        return self.config

    def save(self) -> bool:
        """Write the configuration to disk; returns False if the write failed."""
        tmp_name = None
        try:
            data = json.dumps(self.config.to_dict(), indent=2, ensure_ascii=False)
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp", delete=False
            ) as f:
                tmp_name = f.name
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to save config: {e}")
            if tmp_name and os.path.exists(tmp_name):
                try:
                    os.unlink(tmp_name)
                except OSError:
                    pass
            return False

    def is_channel_enabled(self, channel_id) -> bool:
        return str(channel_id) in self.config.enabled_channels

    def add_channel(self, channel_id) -> bool:
        channel_id = str(channel_id)
        if channel_id in self.config.enabled_channels:
            return True
        self.config.enabled_channels.append(channel_id)
        logger.info(f"Enabled reactions in channel {channel_id}")
        return self.save()

    def remove_channel(self, channel_id) -> bool:
        channel_id = str(channel_id)
        if channel_id not in self.config.enabled_channels:
            return True
        self.config.enabled_channels.remove(channel_id)
        logger.info(f"Disabled reactions in channel {channel_id}")
        return self.save()

    def record_start(self) -> None:
        self.config.statistics.bot_start_time = utc_now_iso()
