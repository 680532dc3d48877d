"""アプリケーションのエントリポイント"""

import asyncio
import functools
import logging
import signal
import sys
from pathlib import Path

from chatfleet.application.services import (
    ConversationRegistry,
    Orchestrator,
    QuotaGuard,
    SessionManager,
)
from chatfleet.application.services.session_manager import TerminationHook
from chatfleet.application.use_cases import MessagePipeline
from chatfleet.config import ConfigError, LoggingConfig, load_config
from chatfleet.domain.entities import Channel
from chatfleet.domain.services import ExponentialBackoff
from chatfleet.infrastructure.http import HttpServer, WebSocketBroadcaster
from chatfleet.infrastructure.llm import (
    LiteLLMCompletionProvider,
    LiteLLMTranscriber,
    LLMClient,
    render_followup_prompt,
)
from chatfleet.infrastructure.persistence import (
    DatabaseManager,
    SQLiteChannelRepository,
    SQLitePlanRepository,
    SQLitePromptRepository,
    SQLiteTenantRepository,
)
from chatfleet.infrastructure.transport import (
    CredentialStore,
    QRCodeRenderer,
    load_transport_provider,
)
from chatfleet.presentation import register_handlers

# Default logging for early startup
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def configure_logging(config: LoggingConfig | None) -> None:
    """Configure logging based on config.

    Args:
        config: Logging configuration. If None, uses defaults.
    """
    if config is None:
        return

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, config.level.upper(), logging.INFO))

    if root_logger.handlers:
        formatter = logging.Formatter(config.format)
        for handler in root_logger.handlers:
            handler.setFormatter(formatter)

    # Per-logger overrides (e.g. quiet LiteLLM or aiohttp.access)
    for logger_name, logger_level in (config.loggers or {}).items():
        logging.getLogger(logger_name).setLevel(
            getattr(logging, logger_level.upper(), logging.INFO)
        )
        logger.debug("Set logger '%s' to level %s", logger_name, logger_level.upper())


async def main() -> None:
    """アプリケーションを起動する"""
    config_path = Path("config.yaml")
    if not config_path.exists():
        logger.error("config.yaml not found")
        sys.exit(1)

    try:
        config = load_config(config_path)
    except ConfigError as e:
        logger.error("Failed to load config: %s", e)
        sys.exit(1)

    configure_logging(config.logging)

    # Initialize database
    db_manager = DatabaseManager(
        config.database.database_path, timeout_seconds=config.database.timeout_seconds
    )
    await db_manager.create_tables()

    tenant_repository = SQLiteTenantRepository(db_manager.get_session)
    plan_repository = SQLitePlanRepository(db_manager.get_session)
    channel_repository = SQLiteChannelRepository(db_manager.get_session)
    prompt_repository = SQLitePromptRepository(db_manager.get_session)

    # Language providers
    llm_config = config.llm["default"]
    debug_llm_messages = bool(config.logging and config.logging.debug_llm_messages)
    completion_provider = LiteLLMCompletionProvider(
        LLMClient(llm_config), debug_llm_messages=debug_llm_messages
    )
    transcriber = LiteLLMTranscriber(config.transcription)

    broadcaster = WebSocketBroadcaster(queue_size=config.server.subscriber_queue_size)
    sessions = config.sessions

    pipeline = MessagePipeline(
        registry=ConversationRegistry(),
        quota_guard=QuotaGuard(tenant_repository, plan_repository),
        prompt_repository=prompt_repository,
        completion_provider=completion_provider,
        transcription_provider=transcriber,
        unit_of_work=db_manager.unit_of_work,
        broadcaster=broadcaster,
        followup_prompt=render_followup_prompt,
        skip_participant_messages=sessions.skip_participant_messages,
        completion_timeout=llm_config.timeout_seconds,
    )

    transport = load_transport_provider(
        config.transport.factory, config.transport.options
    )
    credential_store = CredentialStore(sessions.auth_dir)
    qr_renderer = QRCodeRenderer(sessions.qr_dir, sessions.qr_base_url)

    def create_manager(channel: Channel, on_terminated: TerminationHook) -> SessionManager:
        return SessionManager(
            channel,
            transport,
            pipeline,
            credential_store,
            qr_renderer,
            broadcaster,
            ExponentialBackoff(
                initial=sessions.reconnect_initial_seconds,
                maximum=sessions.reconnect_max_seconds,
                multiplier=sessions.reconnect_multiplier,
            ),
            queue_size=sessions.inbound_queue_size,
            max_in_flight=sessions.max_in_flight_messages,
            on_terminated=on_terminated,
        )

    orchestrator = Orchestrator(
        create_manager,
        channel_repository,
        credential_store,
        provisioning_timeout=sessions.provisioning_timeout_seconds,
    )

    server = HttpServer(
        orchestrator=orchestrator,
        broadcaster=broadcaster,
        register_routes=functools.partial(
            register_handlers,
            orchestrator=orchestrator,
            tenant_repository=tenant_repository,
            channel_repository=channel_repository,
            provisioning_timeout=sessions.provisioning_timeout_seconds,
        ),
        db_manager=db_manager,
        qr_dir=sessions.qr_dir,
        host=config.server.host,
        port=config.server.port,
    )
    await server.start()

    # Resume channels that already have credentials
    await orchestrator.boot()

    # Setup signal handlers for graceful shutdown
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()

    def shutdown_handler() -> None:
        logger.info("Received shutdown signal...")
        stop_event.set()

    loop.add_signal_handler(signal.SIGINT, shutdown_handler)
    loop.add_signal_handler(signal.SIGTERM, shutdown_handler)

    await stop_event.wait()

    # Graceful shutdown
    logger.info("Shutting down...")
    await orchestrator.shutdown_all()
    await server.stop()
    await db_manager.close()

    logger.info("Shutdown complete")


def run() -> None:
    """Run the async main function."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Shutting down...")


if __name__ == "__main__":
    run()
