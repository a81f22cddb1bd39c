"""Bounded readiness wait for the external directions service."""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Awaitable, Callable, Union

from .errors import ServiceUnavailableError

DEFAULT_POLL_INTERVAL_SECONDS = 0.2
DEFAULT_MAX_ATTEMPTS = 50  # 50 * 0.2s = 10 seconds

Probe = Callable[[], Union[bool, Awaitable[bool]]]
Sleep = Callable[[float], Awaitable[None]]

logger = logging.getLogger(__name__)


class ReadinessGate:
    """Poll a readiness probe at a fixed interval until it passes or the budget runs out.

    The probe may be a plain or async callable. ``sleep`` is injectable so tests
    can replace the clock.
    """

    def __init__(
        self,
        probe: Probe,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        sleep: Sleep = asyncio.sleep,
        service_name: str = "Google Directions",
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1.")
        self.probe = probe
        self.poll_interval = poll_interval
        self.max_attempts = max_attempts
        self.service_name = service_name
        self._sleep = sleep

    @property
    def timeout_seconds(self) -> float:
        return self.poll_interval * self.max_attempts

    async def _check(self) -> bool:
        outcome = self.probe()
        if inspect.isawaitable(outcome):
            outcome = await outcome
        return bool(outcome)

    async def wait(self) -> None:
        if await self._check():
            return
        for attempt in range(1, self.max_attempts + 1):
            await self._sleep(self.poll_interval)
            if await self._check():
                logger.debug(f"{self.service_name} became ready after {attempt} polls")
                return
        logger.warning(f"{self.service_name} not ready after {self.timeout_seconds:.1f}s")
        raise ServiceUnavailableError(
            f"{self.service_name} failed to become ready within {self.timeout_seconds:.1f} seconds. "
            f"Check the API key and network connection."
        )
