"""Application services."""

from chatfleet.application.services.conversation_registry import ConversationRegistry
from chatfleet.application.services.orchestrator import Orchestrator
from chatfleet.application.services.quota_guard import QuotaGuard
from chatfleet.application.services.session_manager import SessionManager

__all__ = ["ConversationRegistry", "Orchestrator", "QuotaGuard", "SessionManager"]
