"""Use cases."""

from chatfleet.application.use_cases.process_message import MessagePipeline

__all__ = ["MessagePipeline"]
