"""
============================================================================
USERNAME WATCH BOT - MONITORING PACKAGE
============================================================================
Runtime monitoring infrastructure:
    • AvailabilityProber — one profile-page lookup per username
    • PollScheduler      — periodic sweep over the watch registry
    • Notifier           — direct messages and the admin log channel
    • HealthServer       — aiohttp liveness / status endpoint
    • Scheduler          — periodic background job runner

monitoring/
├── __init__.py          ← this file
├── prober.py            ← AvailabilityProber + ProbeResult
├── poller.py            ← PollScheduler
├── notifier.py          ← Notifier + DeliveryResult
├── health.py            ← HealthServer
└── scheduler.py         ← Scheduler + JobScheduler protocol

============================================================================
"""

from monitoring.prober import Availability, AvailabilityProber, ProbeResult
from monitoring.poller import PollScheduler
from monitoring.notifier import DeliveryResult, Notifier
from monitoring.health import HealthServer
from monitoring.scheduler import JobScheduler, ScheduledJob, Scheduler

__all__ = [
    # Probing
    "Availability",
    "AvailabilityProber",
    "ProbeResult",

    # Sweep
    "PollScheduler",

    # Delivery
    "DeliveryResult",
    "Notifier",

    # Health
    "HealthServer",

    # Scheduler
    "JobScheduler",
    "ScheduledJob",
    "Scheduler",
]
