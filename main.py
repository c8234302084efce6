"""
============================================================================
USERNAME WATCH BOT - MAIN APPLICATION
============================================================================
Integrates every layer of the bot:

    Layer 1 — Core
        • Settings (pydantic-settings)
        • Logging (loguru)
        • WatchRegistry + SubscriptionStore (in-memory)

    Layer 2 — Bot
        • aiogram Bot + Dispatcher (BotManager)
        • CommandDispatcher (watch / unwatch / list / help / admin)

    Layer 3 — Monitoring & Infra
        • AvailabilityProber — profile-page lookups (httpx)
        • PollScheduler      — periodic sweep + notifications
        • Notifier           — direct messages and admin log channel
        • Scheduler          — periodic job runner driving the sweep
        • HealthServer       — aiohttp server on PORT

Startup Order
-------------
1.  Load settings & configure logging (missing/malformed token → exit 1)
2.  Create in-memory state
3.  Create aiogram Bot + Dispatcher and verify the token
4.  Wire up Notifier, Prober, PollScheduler, CommandDispatcher
5.  Register the sweep on the Scheduler
6.  Start HealthServer (aiohttp, non-blocking)
7.  Start Scheduler
8.  Start aiogram polling (this blocks until shutdown)

Shutdown Order (reverse)
-------------------------
On KeyboardInterrupt or SIGTERM:
    stop scheduler → stop health server → stop bot polling → exit

All state is in memory; a restart forgets every watch and subscription.

Author: Professional Development Team
Version: 1.0.0
License: MIT
============================================================================
"""

import asyncio
import signal
import sys
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

# ---------------------------------------------------------------------------
# Path setup: ensure the project root is importable regardless of CWD
# ---------------------------------------------------------------------------
sys.path.insert(0, str(Path(__file__).parent))

# ---------------------------------------------------------------------------
# Project imports
# ---------------------------------------------------------------------------
from bot.dispatcher import CommandDispatcher
from bot.manager import BotManager
from config.settings import Settings, get_settings
from exceptions import ConfigurationError, InitializationError
from monitoring.health import HealthServer
from monitoring.notifier import Notifier
from monitoring.poller import PollScheduler
from monitoring.prober import AvailabilityProber
from monitoring.scheduler import Scheduler
from storage.registry import WatchRegistry
from storage.subscriptions import SubscriptionStore
from utils.helpers import TimeHelper
from utils.logger import get_logger, setup_logging


logger = get_logger("Main")


# ============================================================================
# APPLICATION CLASS
# ============================================================================

class WatchBotApplication:
    """
    Top-level application orchestrator.

    Owns every subsystem and is the single place that knows the startup /
    shutdown order. Subsystems get their collaborators through their
    constructors; only Settings is cached via lru_cache.
    """

    def __init__(self, settings: Settings):
        self.settings = settings

        # --- state ---
        self.registry = WatchRegistry(max_per_subscriber=settings.MAX_WATCHES_PER_USER)
        self.subscriptions = SubscriptionStore(admin_id=settings.ADMIN_ID)

        # --- subsystems (populated during startup) ---
        self.bot_manager: Optional[BotManager] = None
        self.notifier: Optional[Notifier] = None
        self.poller: Optional[PollScheduler] = None
        self.command_dispatcher: Optional[CommandDispatcher] = None
        self.scheduler: Optional[Scheduler] = None
        self.health_server: Optional[HealthServer] = None

        # --- lifecycle flag ---
        self._is_running = False

        self._print_banner()

    # ------------------------------------------------------------------
    # BANNER
    # ------------------------------------------------------------------

    def _print_banner(self) -> None:
        interval = TimeHelper.format_duration(self.settings.POLL_INTERVAL)
        banner = f"""
╔══════════════════════════════════════════════════════════════════════════╗
║                                                                          ║
║          🔎  USERNAME WATCH BOT  v{self.settings.BOT_VERSION:<20}                  ║
║                                                                          ║
║   Availability Prober  •  Poll Scheduler  •  Notifier  •  Health         ║
║                                                                          ║
║   Interval : {interval:<10}   Port : {self.settings.PORT:<8}                          ║
║   Admin ID : {str(self.settings.ADMIN_ID):<50}    ║
║                                                                          ║
╚══════════════════════════════════════════════════════════════════════════╝
"""
        logger.info(banner)

    # ==================================================================
    # PHASE 1: BOT (aiogram)
    # ==================================================================

    async def _init_bot(self) -> bool:
        """Create the aiogram Bot and verify the token."""
        logger.info("── Phase 1: Telegram Bot ─────────────────────────")
        try:
            self.bot_manager = BotManager(self.settings)
            if not await self.bot_manager.initialize():
                logger.error("  ✗ BotManager.initialize() returned False")
                return False
            return True

        except Exception as e:
            logger.opt(exception=True).error(f"  ✗ Bot init failed: {e}")
            return False

    # ==================================================================
    # PHASE 2: MONITORING
    # ==================================================================

    async def _init_monitoring(self) -> bool:
        """Wire up Notifier, Prober, PollScheduler, CommandDispatcher, Scheduler."""
        logger.info("── Phase 2: Monitoring ───────────────────────────")
        try:
            self.notifier = Notifier(
                bot=self.bot_manager.bot,
                admin_log_channel_id=self.settings.ADMIN_LOG_CHANNEL_ID,
            )
            prober = AvailabilityProber(self.settings)
            self.poller = PollScheduler(
                registry=self.registry,
                subscriptions=self.subscriptions,
                prober=prober,
                notifier=self.notifier,
                settings=self.settings,
            )
            self.command_dispatcher = CommandDispatcher(
                registry=self.registry,
                subscriptions=self.subscriptions,
                notifier=self.notifier,
                poller=self.poller,
                settings=self.settings,
            )
            self.bot_manager.set_dispatcher(self.command_dispatcher)

            self.scheduler = Scheduler()
            self.poller.attach(self.scheduler)

            logger.info("  ✓ Notifier, PollScheduler, CommandDispatcher, Scheduler created")
            return True

        except Exception as e:
            logger.opt(exception=True).error(f"  ✗ Monitoring init failed: {e}")
            return False

    # ==================================================================
    # PHASE 3: HEALTH SERVER
    # ==================================================================

    async def _init_health(self) -> bool:
        logger.info("── Phase 3: Health Server ────────────────────────")
        try:
            self.health_server = HealthServer(
                self.settings,
                registry=self.registry,
                subscriptions=self.subscriptions,
                poller=self.poller,
                is_connected=lambda: bool(self.bot_manager and self.bot_manager.is_connected),
            )
            return True

        except Exception as e:
            logger.opt(exception=True).error(f"  ✗ Health server init failed: {e}")
            return False

    # ==================================================================
    # FULL STARTUP SEQUENCE
    # ==================================================================

    async def startup(self) -> bool:
        """
        Execute the complete startup sequence.
        Returns False (and logs errors) if any critical phase fails.
        """
        logger.info("=" * 74)
        logger.info("  STARTING UP …")
        logger.info("=" * 74)

        if self.settings.ADMIN_ID is None:
            logger.warning("  ⚠ ADMIN_ID is not set — nobody can manage subscriptions")

        if not await self._init_bot():
            return False

        if not await self._init_monitoring():
            return False

        # Health endpoint is non-critical
        if not await self._init_health():
            logger.warning("  ⚠ Health server init failed — continuing without it")

        logger.info("── Starting background services ───────────────────")

        if self.health_server:
            try:
                await self.health_server.start()
            except OSError as e:
                logger.warning(f"  ⚠ Health server could not bind: {e}")
                self.health_server = None

        if self.scheduler:
            await self.scheduler.start()

        self._is_running = True

        logger.info("=" * 74)
        logger.info("  ✓ ALL SYSTEMS OPERATIONAL")
        logger.info("=" * 74)
        logger.info(f"  Bot: {self.settings.BOT_NAME} v{self.settings.BOT_VERSION}")
        logger.info(
            f"  Health endpoint: http://{self.settings.WEB_HOST}:{self.settings.PORT}/health"
        )
        logger.info(
            f"  Sweep every {self.settings.POLL_INTERVAL}s, "
            f"{self.settings.CHECK_DELAY_MIN}-{self.settings.CHECK_DELAY_MAX}s between checks"
        )
        logger.info("=" * 74)

        return True

    # ==================================================================
    # SHUTDOWN SEQUENCE
    # ==================================================================

    async def shutdown(self) -> None:
        """
        Graceful shutdown in reverse order.
        Each step is wrapped in try/except so a failure in one subsystem
        doesn't prevent the others from cleaning up.
        """
        if not self._is_running and self.bot_manager is None:
            return

        logger.info("=" * 74)
        logger.info("  SHUTTING DOWN …")
        logger.info("=" * 74)

        self._is_running = False

        # 1. Stop scheduler (cancels in-flight sweeps)
        if self.scheduler:
            try:
                await self.scheduler.stop()
            except Exception as e:
                logger.error(f"  ✗ Scheduler stop error: {e}")
            self.scheduler = None

        # 2. Stop health server
        if self.health_server:
            try:
                await self.health_server.stop()
            except Exception as e:
                logger.error(f"  ✗ HealthServer stop error: {e}")
            self.health_server = None

        # 3. Stop bot polling
        if self.bot_manager:
            try:
                await self.bot_manager.stop_polling()
            except Exception as e:
                logger.error(f"  ✗ Bot stop error: {e}")
            self.bot_manager = None

        logger.info("=" * 74)
        logger.info("  ✓ SHUTDOWN COMPLETE")
        logger.info("=" * 74)

    # ==================================================================
    # RUN
    # ==================================================================

    async def run(self) -> None:
        """
        Start aiogram polling, which blocks until the bot is stopped
        (e.g., via Ctrl+C or SIGTERM).
        """
        if self.bot_manager is None:
            raise InitializationError("run() called before startup()", component="bot")
        logger.info("  Starting aiogram polling…")
        await self.bot_manager.start_polling()

    async def request_stop(self) -> None:
        """Make ``run`` return so ``main`` can shut down."""
        if self.bot_manager and self.bot_manager.is_polling:
            await self.bot_manager.dp.stop_polling()


# ============================================================================
# SIGNAL HANDLER SETUP
# ============================================================================

def _install_signal_handlers(app: WatchBotApplication) -> None:
    """
    Install SIGTERM / SIGINT handlers so that the bot shuts down gracefully
    even when killed by the OS.
    """
    loop = asyncio.get_running_loop()

    def _handle_signal() -> None:
        logger.info("  ⚡ Signal received — initiating graceful shutdown…")
        asyncio.ensure_future(app.request_stop())

    for sig in (signal.SIGTERM, signal.SIGINT):
        try:
            loop.add_signal_handler(sig, _handle_signal)
        except (NotImplementedError, OSError):
            # Not supported on Windows; KeyboardInterrupt still works
            pass


# ============================================================================
# MAIN ENTRY POINT
# ============================================================================

def load_settings() -> Settings:
    """Load settings; a missing or malformed value is a ConfigurationError."""
    try:
        return get_settings()
    except ValidationError as e:
        keys = ", ".join(str(err["loc"][0]) for err in e.errors() if err.get("loc"))
        raise ConfigurationError(
            f"Invalid configuration ({keys or 'unknown'}); is BOT_TOKEN set?",
            config_key=keys or None,
            cause=e,
        ) from e


async def main() -> None:
    """
    Async main — creates the app, starts it, and runs until shutdown.
    """
    try:
        settings = load_settings()
    except ConfigurationError as e:
        logger.error(f"✗ {e.log_format()}")
        sys.exit(1)
    setup_logging(settings)

    app = WatchBotApplication(settings)
    _install_signal_handlers(app)

    if not await app.startup():
        logger.error("  ✗ Startup failed — exiting")
        await app.shutdown()
        sys.exit(1)

    try:
        await app.run()
    except Exception as e:
        logger.opt(exception=True).error(f"  ✗ Unhandled error in run: {e}")
    finally:
        await app.shutdown()


# ============================================================================
# SCRIPT ENTRY POINT
# ============================================================================

def run() -> None:
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
