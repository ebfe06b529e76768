"""Delayed task scheduling on timer threads."""

import logging
import threading
from typing import Callable

from .base import Scheduler


class ThreadingScheduler(Scheduler):
    """Schedules each task on its own daemon ``threading.Timer``."""

    def __init__(self):
        self.logger = logging.getLogger("TabMover.Scheduler")

    def schedule(self, delay_seconds: float, func: Callable, *args) -> threading.Timer:
        """Run ``func(*args)`` after ``delay_seconds``.

        Exceptions raised by the task are logged, not propagated, since
        nothing is waiting on the timer thread.
        """

        def _run():
            try:
                func(*args)
            except Exception:
                self.logger.exception(
                    f"Scheduled task {getattr(func, '__name__', func)} failed"
                )

        timer = threading.Timer(delay_seconds, _run)
        timer.daemon = True
        timer.start()
        return timer
