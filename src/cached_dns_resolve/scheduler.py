"""
Recurring asyncio tasks with graceful stop
"""
import asyncio
import logging
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class RecurringTask:
    """
    Calls an async function every interval_seconds until stopped.

    start() while already running signals the previous loop to stop and arms
    a new one, so there is never more than one armed loop. Stopping never
    cancels: a call already in progress is allowed to finish.
    """

    def __init__(
        self,
        name: str,
        interval_seconds: float,
        func: Callable[[], Awaitable[object]],
        on_error: Optional[Callable[[BaseException], None]] = None,
    ) -> None:
        self._name = name
        self._interval_seconds = interval_seconds
        self._func = func
        self._on_error = on_error
        self._task: Optional[asyncio.Task] = None
        self._stop_event: Optional[asyncio.Event] = None
        # Loops replaced by start() that may still be finishing a call
        self._retired: list[asyncio.Task] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def running(self) -> bool:
        return (
            self._task is not None
            and not self._task.done()
            and self._stop_event is not None
            and not self._stop_event.is_set()
        )

    def start(self) -> None:
        """Arm the loop. Must be called from a running event loop"""
        self.signal_stop()
        if self._task is not None and not self._task.done():
            self._retired.append(self._task)
        self._retired = [t for t in self._retired if not t.done()]
        stop_event = asyncio.Event()
        self._stop_event = stop_event
        self._task = asyncio.create_task(self._run(stop_event), name=self._name)
        logger.debug(f"[{self._name}] started, interval={self._interval_seconds}s")

    def signal_stop(self) -> None:
        """Prevent any further ticks without waiting"""
        if self._stop_event is not None and not self._stop_event.is_set():
            self._stop_event.set()
            logger.debug(f"[{self._name}] stop requested")

    async def stop(self) -> None:
        """Prevent further ticks and wait for in-flight calls, including those of replaced loops"""
        self.signal_stop()
        tasks = self._retired + ([self._task] if self._task is not None else [])
        self._task = None
        self._retired = []
        current = asyncio.current_task()
        for task in tasks:
            if task is not current:
                await task

    async def _run(self, stop_event: asyncio.Event) -> None:
        while not stop_event.is_set():
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self._interval_seconds)
                break
            except asyncio.TimeoutError:
                pass

            try:
                await self._func()
            except Exception as e:
                if self._on_error is not None:
                    self._on_error(e)
                else:
                    logger.error(f"[{self._name}] tick failed: {e}", exc_info=True)
