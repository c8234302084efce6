"""
============================================================================
USERNAME WATCH BOT - AVAILABILITY PROBER
============================================================================
Performs one GET against the public profile page of a username and
classifies the answer.

Classification
--------------
• 404, or a 2xx body containing any availability marker  → AVAILABLE
• any other 2xx                                           → TAKEN
• any other status, timeout or transport failure          → ERROR

A 429 answer is an ERROR flagged ``rate_limited`` so the poll scheduler
can back off. ERROR is handled exactly like TAKEN by every caller; it is
only kept separate for logging. There are no retries here.

Author: Professional Development Team
Version: 1.0.0
License: MIT
============================================================================
"""

import enum
import random
import time
from typing import Any, Dict, Optional

import httpx

from config.constants import ProbeConstants
from config.settings import Settings
from exceptions import ProbeError, ProbeRateLimitedError
from utils.logger import get_logger


logger = get_logger("Prober")


class Availability(str, enum.Enum):
    """Outcome of a single availability check"""
    AVAILABLE = "available"
    TAKEN = "taken"
    ERROR = "error"


# ============================================================================
# PROBE RESULT
# ============================================================================

class ProbeResult:
    """
    Value object carrying everything produced by one check back to the
    poll scheduler.
    """
    __slots__ = (
        "username", "availability", "status_code", "response_time",
        "error_message", "error_type", "rate_limited",
    )

    def __init__(
        self,
        username: str,
        availability: Availability,
        status_code: Optional[int] = None,
        response_time: Optional[float] = None,
        error_message: Optional[str] = None,
        error_type: Optional[str] = None,
        rate_limited: bool = False,
    ):
        self.username = username
        self.availability = availability
        self.status_code = status_code
        self.response_time = response_time
        self.error_message = error_message
        self.error_type = error_type
        self.rate_limited = rate_limited

    @property
    def is_available(self) -> bool:
        return self.availability == Availability.AVAILABLE

    @property
    def is_error(self) -> bool:
        return self.availability == Availability.ERROR

    def to_dict(self) -> Dict[str, Any]:
        return {slot: getattr(self, slot) for slot in self.__slots__}

    def __repr__(self) -> str:
        return (
            f"ProbeResult(username={self.username!r}, "
            f"availability={self.availability.value}, "
            f"status_code={self.status_code})"
        )


# ============================================================================
# PROBER
# ============================================================================

class AvailabilityProber:
    """
    Checks profile-page availability using an httpx async client.

    Parameters
    ----------
    settings : Settings
        Source of the URL template, timeout and referer.
    transport : httpx.AsyncBaseTransport | None
        Optional transport override (``httpx.MockTransport`` in tests).
    rng : random.Random | None
        Source of randomness for the User-Agent choice.
    """

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        rng: Optional[random.Random] = None,
    ):
        self.url_template = settings.PROBE_URL_TEMPLATE
        self.timeout = settings.PROBE_TIMEOUT
        self.referer = settings.PROBE_REFERER
        self._transport = transport
        self._rng = rng or random.Random()

    def build_url(self, username: str) -> str:
        return self.url_template.format(username=username)

    def build_headers(self) -> Dict[str, str]:
        """Browser-like headers with a randomly chosen User-Agent."""
        return {
            "User-Agent": self._rng.choice(ProbeConstants.USER_AGENTS),
            "Accept": ProbeConstants.ACCEPT,
            "Accept-Language": ProbeConstants.ACCEPT_LANGUAGE,
            "Referer": self.referer,
        }

    @staticmethod
    def classify(status_code: int, body: str) -> Availability:
        """Map a well-formed response to AVAILABLE or TAKEN."""
        if status_code == ProbeConstants.NOT_FOUND_STATUS:
            return Availability.AVAILABLE
        if any(marker in body for marker in ProbeConstants.AVAILABILITY_MARKERS):
            return Availability.AVAILABLE
        return Availability.TAKEN

    async def check(self, username: str) -> ProbeResult:
        """
        Execute one availability check for *username*.

        Never raises; every failure is returned as an ERROR result.
        """
        url = self.build_url(username)
        start_time = time.perf_counter()

        try:
            response = await self._fetch(username, url)
        except ProbeRateLimitedError as e:
            elapsed = time.perf_counter() - start_time
            logger.warning(f"[Probe] {username} → rate limited ({e.status_code})")
            return ProbeResult(
                username=username,
                availability=Availability.ERROR,
                status_code=e.status_code,
                response_time=round(elapsed, 4),
                error_message=e.message,
                error_type=type(e).__name__,
                rate_limited=True,
            )
        except ProbeError as e:
            elapsed = time.perf_counter() - start_time
            logger.warning(f"[Probe] {username} → {e.message}")
            return ProbeResult(
                username=username,
                availability=Availability.ERROR,
                status_code=e.status_code,
                response_time=round(elapsed, 4),
                error_message=e.message,
                error_type=type(e.cause).__name__ if e.cause else type(e).__name__,
            )

        elapsed = time.perf_counter() - start_time
        availability = self.classify(response.status_code, response.text)

        logger.debug(
            f"[Probe] {username} → {response.status_code} "
            f"({availability.value}) in {elapsed:.3f}s"
        )
        return ProbeResult(
            username=username,
            availability=availability,
            status_code=response.status_code,
            response_time=round(elapsed, 4),
        )

    async def _fetch(self, username: str, url: str) -> httpx.Response:
        """
        GET *url*; raise ProbeError for anything but a 2xx or 404 answer.
        """
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                response = await client.get(url, headers=self.build_headers())
        except httpx.TimeoutException as e:
            raise ProbeError(
                f"Request timed out after {self.timeout}s",
                username=username,
                cause=e,
            ) from e
        except httpx.HTTPError as e:
            raise ProbeError(
                f"Request failed: {str(e)[:200]}",
                username=username,
                cause=e,
            ) from e
        except Exception as e:
            raise ProbeError(
                f"Unexpected error: {str(e)[:200]}",
                username=username,
                cause=e,
            ) from e

        if response.status_code == ProbeConstants.RATE_LIMIT_STATUS:
            raise ProbeRateLimitedError(
                "Rate limited by the profile site",
                username=username,
                status_code=response.status_code,
            )

        if not ProbeConstants.is_well_formed(response.status_code):
            raise ProbeError(
                f"Unexpected status {response.status_code}",
                username=username,
                status_code=response.status_code,
            )

        return response
