"""Presentation layer."""

from chatfleet.presentation.http_handlers import register_handlers

__all__ = ["register_handlers"]
