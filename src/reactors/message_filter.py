"""
Message Filter Processor - decides whether a message gets W/L reactions.

Checks, in order:
- Author is this bot or another bot
- Channel is on the allow-list
- Optional content filters (required/excluded keywords, minimum length)
"""

from typing import Any, Dict, Optional

from reactor_config import ConfigStore, ContentFilters
from .base_processor import BaseProcessor, MessageContext


def check_content_filters(content: str, filters: ContentFilters) -> Optional[str]:
    """
    Apply the content filters to a message.

    Keyword matching is case-insensitive substring containment.

    Returns:
        None if the message passes, otherwise the rejection reason
    """
    if not filters.enabled:
        return None

    lowered = content.lower()

    if filters.required_keywords:
        if not any(keyword.lower() in lowered for keyword in filters.required_keywords):
            return "missing_required_keyword"

    if any(keyword.lower() in lowered for keyword in filters.excluded_keywords):
        return "excluded_keyword"

    if len(lowered) < filters.min_length:
        return "too_short"

    return None


class MessageFilterProcessor(BaseProcessor):
    """Gate in front of the reaction handler."""

    def __init__(self, store: ConfigStore):
        self.store = store
        super().__init__("message_filter")

    def _is_enabled(self) -> bool:
        # The allow-list gate cannot be switched off
        return True

    async def process(self, context: MessageContext) -> Dict[str, Any]:
        if context.is_own_message:
            return {"should_skip": True, "reason": "own_message"}

        if getattr(context.author, "bot", False):
            return {"should_skip": True, "reason": "bot_author"}

        if not self.store.is_channel_enabled(context.channel_id):
            return {"should_skip": True, "reason": "channel_disabled"}

        reason = check_content_filters(context.content, self.store.config.content_filters)
        if reason:
            self.logger.debug(f"Filtered message in #{context.channel_name}: {reason}")
            return {"should_skip": True, "reason": reason}

        return {"should_skip": False}
