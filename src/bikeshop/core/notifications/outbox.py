"""Background delivery of notifications with bounded retry.

Notification work never runs on the request path: callers spawn it here and
return immediately. Every task is tracked so shutdown can drain what is in
flight and cancel the rest.
"""

import asyncio
from collections.abc import Awaitable, Callable, Coroutine
from typing import Any

from src.bikeshop.core.exceptions import NotificationDispatchError
from src.bikeshop.core.logging import get_logger
from src.bikeshop.core.notifications.channel import NotificationChannel
from src.bikeshop.schemas.notification import NotificationRequest

logger = get_logger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class NotificationOutbox:
    """Tracks fire-and-forget notification tasks for one channel."""

    def __init__(
        self,
        channel: NotificationChannel,
        max_attempts: int = 3,
        backoff_seconds: float = 1.0,
        timeout_seconds: float = 5.0,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.channel = channel
        self.max_attempts = max_attempts
        self.backoff_seconds = backoff_seconds
        self.timeout_seconds = timeout_seconds
        self._sleep = sleep
        self._tasks: set[asyncio.Task[Any]] = set()
        self._closed = False

    @property
    def pending_count(self) -> int:
        """Number of notification tasks still running."""
        return len(self._tasks)

    @property
    def is_closed(self) -> bool:
        return self._closed

    def spawn(
        self, work: Coroutine[Any, Any, Any], *, name: str = "notification"
    ) -> asyncio.Task[Any] | None:
        """Run notification work in the background.

        Failures inside the task are logged and swallowed. Returns None (and
        discards the work) once the outbox is closed.
        """
        if self._closed:
            work.close()
            logger.warning("Notification outbox closed, dropping work", task_name=name)
            return None

        task = asyncio.create_task(self._guard(work, name), name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def send_now(self, request: NotificationRequest) -> None:
        """Single delivery attempt bounded by the configured timeout.

        Raises:
            NotificationDispatchError: If the channel fails or times out.
        """
        try:
            await asyncio.wait_for(self.channel.send(request), timeout=self.timeout_seconds)
        except TimeoutError as e:
            raise NotificationDispatchError(
                f"Notification timed out after {self.timeout_seconds}s"
            ) from e
        except NotificationDispatchError:
            raise
        except Exception as e:
            raise NotificationDispatchError(f"Notification failed: {e}") from e

    async def deliver(self, request: NotificationRequest) -> bool:
        """Send with bounded retry and increasing backoff.

        Returns:
            True once a send succeeds, False after all attempts fail.
        """
        for attempt in range(1, self.max_attempts + 1):
            try:
                await self.send_now(request)
                logger.info(
                    "Notification sent",
                    kind=request.kind.value,
                    transaction_id=str(request.transaction_id),
                    attempt=attempt,
                )
                return True
            except NotificationDispatchError as e:
                logger.warning(
                    "Notification attempt failed",
                    kind=request.kind.value,
                    transaction_id=str(request.transaction_id),
                    attempt=attempt,
                    max_attempts=self.max_attempts,
                    error=e.message,
                )
                if attempt < self.max_attempts:
                    await self._sleep(self.backoff_seconds * attempt)

        logger.error(
            "Notification dropped after retries",
            kind=request.kind.value,
            transaction_id=str(request.transaction_id),
            attempts=self.max_attempts,
        )
        return False

    async def join(self) -> None:
        """Wait for every task spawned so far to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def drain(self, timeout: float) -> bool:
        """Stop accepting work, wait for in-flight tasks, cancel leftovers.

        Args:
            timeout: Maximum time to wait in seconds

        Returns:
            True if all tasks finished within timeout, False otherwise
        """
        self._closed = True
        if not self._tasks:
            return True

        logger.info("Draining notification outbox", pending=len(self._tasks))
        try:
            await asyncio.wait_for(self.join(), timeout=timeout)
            return True
        except TimeoutError:
            remaining = list(self._tasks)
            logger.warning(
                f"Notification drain timeout after {timeout}s - cancelling {len(remaining)} tasks"
            )
            for task in remaining:
                task.cancel()
            await asyncio.gather(*remaining, return_exceptions=True)
            return False

    async def _guard(self, work: Coroutine[Any, Any, Any], name: str) -> None:
        try:
            await work
        except asyncio.CancelledError:
            logger.warning("Notification task cancelled", task_name=name)
            raise
        except Exception as e:
            logger.exception("Notification task failed", task_name=name, error=str(e))
