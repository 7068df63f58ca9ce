"""
Satisfactory Monitor - Scheduled Restart

Daily restart at a fixed local time, regardless of server health. Runs on its
own timer thread, independent of the monitor loop.
"""

import logging
import threading
from collections.abc import Callable, Sequence
from datetime import datetime, timedelta

from satisfactory.config.models import ScheduleSpec, TimerState
from satisfactory.core.compose import ComposeController
from satisfactory.core.errors import MonitorError

logger = logging.getLogger(__name__)


def next_restart_at(now: datetime, schedule: ScheduleSpec) -> datetime:
    """
    Next occurrence of the schedule strictly after ``now``.

    Works on wall-clock time. An aware ``now`` keeps its tzinfo, so a zone
    such as ZoneInfo gives the target the offset in force on that date.

    Examples:
        >>> next_restart_at(datetime(2024, 1, 1, 2, 0), ScheduleSpec(3, 0))
        datetime.datetime(2024, 1, 1, 3, 0)
        >>> next_restart_at(datetime(2024, 1, 1, 3, 0), ScheduleSpec(3, 0))
        datetime.datetime(2024, 1, 2, 3, 0)
    """
    restart_at = now.replace(hour=schedule.hour, minute=schedule.minute, second=0, microsecond=0)
    if restart_at <= now:
        restart_at += timedelta(days=1)
    return restart_at


class ScheduledTask:
    """Cancellable one-shot timer"""

    def __init__(self) -> None:
        self._timer: threading.Timer | None = None
        self._lock = threading.Lock()

    @property
    def armed(self) -> bool:
        return self._timer is not None and self._timer.is_alive()

    def arm(self, delay: float, callback: Callable[[], None]) -> None:
        """Run ``callback`` once after ``delay`` seconds, replacing any pending run"""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(max(delay, 0.0), callback)
            self._timer.daemon = True
            self._timer.start()

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None


class ScheduledRestartTimer:
    """Restarts the managed services every day at the scheduled time"""

    def __init__(
        self,
        controller: ComposeController,
        schedule: ScheduleSpec,
        services: Sequence[str] = (),
        *,
        clock: Callable[[], datetime] = datetime.now,
        task: ScheduledTask | None = None,
    ) -> None:
        self.controller = controller
        self.schedule = schedule
        self.services = tuple(services)
        self.state = TimerState.IDLE
        self.next_restart: datetime | None = None
        self._clock = clock
        self._task = task or ScheduledTask()
        self._lock = threading.Lock()
        self._stopped = False
        self._idle = threading.Event()
        self._idle.set()

    def start(self) -> None:
        self._arm()

    def _arm(self) -> None:
        with self._lock:
            if self._stopped:
                return

            now = self._clock()
            restart_at = next_restart_at(now, self.schedule)
            # Timestamps, not wall-clock difference, so DST changes are counted
            delay = restart_at.timestamp() - now.timestamp()

            self.next_restart = restart_at
            self.state = TimerState.ARMED
            logger.info("Scheduled restart at %s, waiting %.0fs", restart_at.isoformat(), delay)
            self._task.arm(delay, self._fire)

    def _fire(self) -> None:
        with self._lock:
            if self._stopped:
                return
            self.state = TimerState.FIRING
            self._idle.clear()

        logger.info("Running scheduled restart")
        try:
            self.controller.restart(self.services)
        except MonitorError as e:
            logger.error("Scheduled restart failed: %s", e)
        except Exception:
            logger.exception("Unexpected error during scheduled restart")
        finally:
            with self._lock:
                if self._stopped:
                    self.state = TimerState.IDLE
            self._idle.set()

        self._arm()

    def stop(self) -> None:
        """Cancel the pending restart; one already running completes"""
        with self._lock:
            self._stopped = True
            self._task.cancel()
            if self.state == TimerState.ARMED:
                self.state = TimerState.IDLE

    def join(self, timeout: float | None = None) -> bool:
        """
        Wait for a running restart to finish.

        Returns:
            False if ``timeout`` expired while a restart was still running
        """
        return self._idle.wait(timeout)
