"""
Message pipeline for the W/L reaction bot.

Each processor handles one step of handling an inbound message:
- Filtering (own/bot messages, channel allow-list, content filters)
- Reacting (win/loss emoji, statistics, saving)

Processors are designed to be:
- Self-contained with clear interfaces
- Testable in isolation
"""

from .base_processor import BaseProcessor, MessageContext, ProcessorPipeline
from .message_filter import MessageFilterProcessor, check_content_filters
from .reaction_handler import ReactionHandlerProcessor
from .status_coordinator import StatusCoordinator


def build_pipeline(store) -> ProcessorPipeline:
    """Filter first, then react."""
    pipeline = ProcessorPipeline()
    pipeline.add_processor(MessageFilterProcessor(store))
    pipeline.add_processor(ReactionHandlerProcessor(store))
    return pipeline


__all__ = [
    "BaseProcessor",
    "MessageContext",
    "ProcessorPipeline",
    "MessageFilterProcessor",
    "ReactionHandlerProcessor",
    "StatusCoordinator",
    "build_pipeline",
    "check_content_filters",
]
