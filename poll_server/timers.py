"""Deferred poll expiry.

One asyncio task per session sleeps for the active poll's time limit and then
runs the expiry callback. Ending a poll early cancels the task. A callback that
fires for a poll that has already ended is the callback's problem to reject;
the gateway passes the poll id along so a stale expiry never ends a newer poll.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict

logger = logging.getLogger(__name__)

ExpiryCallback = Callable[..., Awaitable[Any]]


class PollTimer:
    def __init__(self):
        self._tasks: Dict[str, asyncio.Task] = {}

    def schedule(self, session_key: str, delay: float, callback: ExpiryCallback, *args: Any) -> None:
        """Run ``callback(*args)`` after ``delay`` seconds, replacing any pending timer for the session."""
        self.cancel(session_key)
        self._tasks[session_key] = asyncio.create_task(self._run(session_key, delay, callback, args))
        logger.debug(f"Poll timer scheduled for session {session_key} in {delay}s")

    def cancel(self, session_key: str) -> None:
        """Cancel the pending timer for a session, if any."""
        task = self._tasks.get(session_key)
        # The expiry task itself may reach cancel() through the shared end-poll path.
        if task is None or task is asyncio.current_task():
            return
        del self._tasks[session_key]
        if not task.done():
            task.cancel()
            logger.debug(f"Poll timer cancelled for session {session_key}")

    def is_pending(self, session_key: str) -> bool:
        task = self._tasks.get(session_key)
        return task is not None and not task.done()

    async def _run(self, session_key: str, delay: float, callback: ExpiryCallback, args: tuple) -> None:
        await asyncio.sleep(delay)
        if self._tasks.get(session_key) is asyncio.current_task():
            del self._tasks[session_key]
        logger.info(f"Poll time limit reached in session {session_key}")
        try:
            await callback(*args)
        except Exception as e:
            logger.error(f"Error while expiring poll in session {session_key}: {e}", exc_info=True)

    async def shutdown(self) -> None:
        """Cancel every pending timer and wait for them to finish."""
        tasks = list(self._tasks.values())
        self._tasks.clear()
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.info(f"Cancelled {len(tasks)} poll timer(s)")
