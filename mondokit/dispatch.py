"""
Result dispatchers.

API calls run on worker threads; their completions are handed to a
dispatcher that decides which thread runs them. A GUI host uses a
QueueDispatcher drained by its main thread; a CLI or service host can run
completions immediately on the worker.
"""

import logging
import queue
from abc import ABC, abstractmethod
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class ResultDispatcher(ABC):
    """Runs completion callbacks on a designated execution context."""

    @abstractmethod
    def dispatch(self, callback: Callable[[], None]) -> None:
        """Schedule ``callback`` to run on this dispatcher's context."""


class ImmediateDispatcher(ResultDispatcher):
    """Runs completions on whichever thread finished the call."""

    def dispatch(self, callback: Callable[[], None]) -> None:
        callback()


class QueueDispatcher(ResultDispatcher):
    """
    Queues completions for a single consumer thread.

    The owning thread (the "main" thread of the host) calls run_pending()
    from its event loop. Completions run in the order their calls finished.

    Example:
        dispatcher = QueueDispatcher()
        api = MondoAPI(dispatcher=dispatcher)
        api.list_accounts(show_accounts)
        while running:
            dispatcher.run_pending(timeout=0.1)
    """

    def __init__(self) -> None:
        self._queue: "queue.Queue[Callable[[], None]]" = queue.Queue()

    def dispatch(self, callback: Callable[[], None]) -> None:
        self._queue.put(callback)

    def run_pending(self, timeout: Optional[float] = None) -> int:
        """
        Run queued completions on the calling thread.

        Args:
            timeout: Seconds to wait for the first completion when the queue
                is empty (None = do not wait)

        Returns:
            Number of completions run
        """
        count = 0
        block = timeout is not None
        while True:
            try:
                callback = self._queue.get(block=block, timeout=timeout)
            except queue.Empty:
                return count
            block = False
            try:
                callback()
            except Exception:
                logger.exception("Completion callback raised")
            finally:
                self._queue.task_done()
            count += 1

    @property
    def pending(self) -> int:
        """Approximate number of queued completions."""
        return self._queue.qsize()
