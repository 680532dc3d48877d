"""HTTP server: provisioning API, QR images, status feed and health probes."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

from aiohttp import web

if TYPE_CHECKING:
    from chatfleet.application.services.orchestrator import Orchestrator
    from chatfleet.infrastructure.http.broadcaster import WebSocketBroadcaster
    from chatfleet.infrastructure.persistence.database import DatabaseManager

logger = logging.getLogger(__name__)


class HttpServer:
    """HTTP server hosting every externally reachable endpoint.

    Routes:
        POST /create-bot, POST /regenerate_qr: provisioning (register_routes)
        GET /uploads/<channel>.png: rendered QR codes
        GET /ws: websocket status feed
        GET /live, GET /ready: health probes
    """

    def __init__(
        self,
        orchestrator: Orchestrator,
        broadcaster: WebSocketBroadcaster,
        register_routes: Callable[[web.Application], None],
        db_manager: DatabaseManager,
        qr_dir: str | Path,
        host: str = "0.0.0.0",
        port: int = 3000,
    ) -> None:
        """Initialize the server.

        Args:
            orchestrator: Orchestrator owning the live sessions.
            broadcaster: Status broadcaster serving /ws.
            register_routes: Registers the provisioning endpoints on the app.
            db_manager: DatabaseManager instance.
            qr_dir: Directory QR images are rendered into.
            host: Interface to bind.
            port: Port to listen on. Use 0 for any available port.
        """
        self._orchestrator = orchestrator
        self._broadcaster = broadcaster
        self._register_routes = register_routes
        self._db_manager = db_manager
        self._qr_dir = Path(qr_dir)
        self._host = host
        self._port = port
        self._actual_port = port
        self._runner: web.AppRunner | None = None
        self._site: web.TCPSite | None = None
        self._running = False

    @property
    def is_running(self) -> bool:
        """Check if the server is running."""
        return self._running

    @property
    def port(self) -> int:
        """Get the port the server is listening on."""
        return self._actual_port

    def create_app(self) -> web.Application:
        """Build the aiohttp application with every route registered."""
        self._qr_dir.mkdir(parents=True, exist_ok=True)

        app = web.Application()
        self._register_routes(app)
        app.router.add_get("/ws", self._broadcaster.handle_websocket)
        app.router.add_get("/live", self._handle_live)
        app.router.add_get("/ready", self._handle_ready)
        app.router.add_static("/uploads", self._qr_dir)
        return app

    async def check_liveness(self) -> dict[str, Any]:
        """Check if the application is alive.

        Returns:
            Liveness status with timestamp.
        """
        is_alive = self._orchestrator.is_running
        return {
            "status": "alive" if is_alive else "dead",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    async def check_readiness(self) -> dict[str, Any]:
        """Check if the application is ready to serve traffic.

        Returns:
            Readiness status with component health details.
        """
        orchestrator_ok = self._orchestrator.is_running
        db_ok = await self._db_manager.is_healthy()
        channels = self._orchestrator.live_channels()

        return {
            "ready": orchestrator_ok and db_ok,
            "orchestrator": orchestrator_ok,
            "database": db_ok,
            "channels": len(channels),
            "connected": sum(1 for manager in channels.values() if manager.is_connected),
        }

    async def _handle_live(self, request: web.Request) -> web.Response:
        """Handle /live endpoint."""
        result = await self.check_liveness()
        return web.json_response(result)

    async def _handle_ready(self, request: web.Request) -> web.Response:
        """Handle /ready endpoint."""
        result = await self.check_readiness()
        status = 200 if result["ready"] else 503
        return web.json_response(result, status=status)

    async def start(self) -> None:
        """Start the HTTP server."""
        self._runner = web.AppRunner(self.create_app())
        await self._runner.setup()

        self._site = web.TCPSite(self._runner, self._host, self._port)
        await self._site.start()

        # Get actual port (useful when port=0 for dynamic allocation)
        if self._site._server is not None:
            sockets = self._site._server.sockets  # type: ignore[union-attr]
            if sockets:
                self._actual_port = sockets[0].getsockname()[1]

        self._running = True
        logger.info("HTTP server started on %s:%d", self._host, self.port)

    async def stop(self) -> None:
        """Stop the HTTP server."""
        await self._broadcaster.close()
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None
            self._site = None

        self._running = False
        logger.info("HTTP server stopped")
