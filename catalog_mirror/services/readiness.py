"""Bounded readiness check for collaborators that become available late."""

import asyncio
import logging
from typing import Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_ATTEMPTS = 100
RETRY_DELAY = 0.05  # seconds, 100 * 50ms = 5 seconds in total


class DependencyUnavailable(Exception):
    """A required collaborator did not become available in time."""

    def __init__(self, name: str, attempts: int):
        self.name = name
        self.attempts = attempts
        super().__init__(f"'{name}' was not available after {attempts} attempts")


async def wait_for_dependency(
    name: str,
    probe: Callable[[], Optional[T]],
    max_attempts: int = MAX_ATTEMPTS,
    delay: float = RETRY_DELAY,
) -> T:
    """
    Poll ``probe`` until it returns a truthy value.

    Args:
        name: Human-readable name used in logs and the error.
        probe: Returns the dependency, or a falsy value while it is not ready.
        max_attempts: Number of probes before giving up.
        delay: Fixed pause between probes, in seconds.

    Returns:
        The first truthy value returned by ``probe``.

    Raises:
        DependencyUnavailable: If every attempt came back empty.
    """
    for attempt in range(1, max_attempts + 1):
        dependency = probe()
        if dependency:
            logger.debug(f"'{name}' available after {attempt} attempt(s)")
            return dependency
        if attempt < max_attempts:
            await asyncio.sleep(delay)

    logger.error(f"Gave up waiting for '{name}' after {max_attempts} attempts")
    raise DependencyUnavailable(name, max_attempts)
