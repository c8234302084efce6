"""
============================================================================
USERNAME WATCH BOT - HEALTH SERVER
============================================================================
A lightweight aiohttp HTTP server bound to PORT so hosting platforms see
the process as alive. Endpoints:
    GET /          → 200 "Bot is running"
    GET /health    → 200 JSON { status, bot, timestamp, uptime_seconds,
                                watched_usernames, watch_entries,
                                subscriptions, poller }

Author: Professional Development Team
Version: 1.0.0
License: MIT
============================================================================
"""

import time
from typing import Any, Callable, Dict, Optional

from aiohttp import web

from config.settings import Settings
from storage.registry import WatchRegistry
from storage.subscriptions import SubscriptionStore
from utils.helpers import TimeHelper
from utils.logger import get_logger


logger = get_logger("HealthServer")


class HealthServer:
    """
    Liveness and status endpoint for the bot process.

    Attributes
    ----------
    _app : aiohttp.web.Application
    _runner : aiohttp.web.AppRunner
    _site : aiohttp.web.TCPSite
    _start_time : float          — epoch seconds when the server was created
    _request_count : int         — total requests served
    """

    def __init__(
        self,
        settings: Settings,
        registry: WatchRegistry,
        subscriptions: SubscriptionStore,
        poller: Any = None,
        is_connected: Optional[Callable[[], bool]] = None,
    ):
        self.settings = settings
        self.registry = registry
        self.subscriptions = subscriptions
        self.poller = poller
        self._is_connected = is_connected or (lambda: False)

        self._host = settings.WEB_HOST
        self._port = settings.PORT
        self._app = web.Application()
        self._runner: Optional[web.AppRunner] = None
        self._site: Optional[web.TCPSite] = None
        self._start_time: float = time.time()
        self._request_count: int = 0

        self._app.router.add_get("/", self._handle_root)
        self._app.router.add_get("/health", self._handle_health)

    @property
    def app(self) -> web.Application:
        return self._app

    async def start(self) -> None:
        """Bind and start serving."""
        self._runner = web.AppRunner(self._app)
        await self._runner.setup()
        self._site = web.TCPSite(self._runner, self._host, self._port)
        await self._site.start()
        logger.info(f"✓ HealthServer listening on {self._host}:{self._port}")

    async def stop(self) -> None:
        """Gracefully shut down the server."""
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
            self._site = None
        logger.info("✓ HealthServer stopped")

    # ------------------------------------------------------------------
    # ROUTE HANDLERS
    # ------------------------------------------------------------------

    async def _handle_root(self, request: web.Request) -> web.Response:
        """GET / — simple liveness probe."""
        self._request_count += 1
        return web.Response(text="Bot is running", status=200)

    async def _handle_health(self, request: web.Request) -> web.Response:
        """GET /health — detailed health JSON."""
        self._request_count += 1
        return web.json_response(self.build_status(), status=200)

    def build_status(self) -> Dict[str, Any]:
        uptime_seconds = time.time() - self._start_time
        return {
            "status": "ok",
            "bot": "connected" if self._is_connected() else "disconnected",
            "timestamp": TimeHelper.get_utc_now().isoformat(),
            "uptime_seconds": round(uptime_seconds, 1),
            "uptime_human": TimeHelper.format_duration(int(uptime_seconds)),
            "watched_usernames": len(self.registry),
            "watch_entries": self.registry.total_entries(),
            "subscriptions": len(self.subscriptions),
            "poller": self.poller.get_stats() if self.poller else None,
            "requests_served": self._request_count,
            "bot_name": self.settings.BOT_NAME,
            "bot_version": self.settings.BOT_VERSION,
        }
