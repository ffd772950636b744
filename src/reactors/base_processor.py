"""
Base processor class for the reaction bot's message pipeline.

Provides common interface and utilities for all processors.
"""

import logging
import os
from abc import ABC, abstractmethod
from typing import Any, Dict


class MessageContext:
    """
    Standardized context object passed between processors.
    Contains the Discord message/channel/author data needed for processing.
    """

    def __init__(self, message, bot):
        self.message = message
        self.bot = bot

        # Basic message info
        self.content = message.content or ""
        self.author = message.author
        self.channel = message.channel
        self.channel_id = str(message.channel.id)
        self.channel_name = getattr(message.channel, "name", None) or self.channel_id

    @property
    def is_own_message(self) -> bool:
        """True when the message was sent by this bot"""
        bot_user = getattr(self.bot, "user", None)
        if bot_user is None:
            return False
        return self.author.id == bot_user.id


class BaseProcessor(ABC):
    """
    Abstract base class for all message processors.

    Processors should:
    1. Keep per-message state in the context, not on the processor
    2. Have clear input/output contracts
    3. Handle their own configuration
    4. Include proper error handling and logging
    """

    def __init__(self, name: str):
        self.name = name
        self.logger = logging.getLogger(f"processor.{name}")
        self.enabled = self._is_enabled()

        if self.enabled:
            self.logger.info(f"{name} processor initialized")

    def _is_enabled(self) -> bool:
        """
        Check if this processor is enabled.
        Default: check environment variable {PROCESSOR_NAME}_ENABLED
        """
        env_var = f"{self.name.upper()}_ENABLED"
        return os.getenv(env_var, "true").lower() == "true"

    @abstractmethod
    async def process(self, context: MessageContext) -> Any:
        """
        Process the message context and return a result.

        A result dict with a truthy "should_skip" stops the pipeline, as
        does any exception raised here.
        """
        pass

    def is_enabled(self) -> bool:
        """Check if processor is enabled"""
        return self.enabled


class ProcessorPipeline:
    """
    Orchestrates multiple processors in sequence.
    Provides error handling and logging for the entire pipeline.
    """

    def __init__(self):
        self.processors = []
        self.logger = logging.getLogger("processor.pipeline")

    def add_processor(self, processor: BaseProcessor) -> None:
        """Add a processor to the pipeline"""
        if processor.is_enabled():
            self.processors.append(processor)
            self.logger.info(f"Added {processor.name} processor to pipeline")
        else:
            self.logger.info(f"Skipped disabled processor: {processor.name}")

    async def process(self, context: MessageContext) -> Dict[str, Any]:
        """
        Run processors in sequence until one asks to skip the message.

        Returns:
            Dictionary mapping processor names to their results
        """
        results = {}

        for processor in self.processors:
            try:
                result = await processor.process(context)
                results[processor.name] = result
                self.logger.debug(f"{processor.name}: {result}")

            except Exception as e:
                self.logger.error(f"Unexpected error in {processor.name}: {e}")
                results[processor.name] = {"error": f"Unexpected error: {e}"}
                break

            if isinstance(result, dict) and result.get("should_skip"):
                self.logger.debug(f"⏭️ {processor.name} skipped message: {result.get('reason', 'unknown')}")
                break

        return results
