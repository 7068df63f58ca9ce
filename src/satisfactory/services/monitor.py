#!/usr/bin/env python3
"""
Satisfactory Server Monitor

- Checks server health every CHECK_INTERVAL, restarting the managed services
  when the server is unhealthy or slow twice in a row
- Pulls and recreates the managed services when Steam has a newer build
- Optionally restarts daily at RESTART_SCHEDULE
- Handles graceful shutdown on SIGTERM/SIGINT
"""

import logging
import os
import signal
import sys
import threading
from collections.abc import Sequence

from satisfactory.config.models import HealthStatus, MonitorConfig, MonitorState
from satisfactory.config.settings import load_config
from satisfactory.core.compose import ComposeController
from satisfactory.core.errors import ConfigError, ControllerError, MonitorError, ParseError
from satisfactory.core.health import HealthProbe, apply_slow_hysteresis
from satisfactory.core.schedule import ScheduledRestartTimer
from satisfactory.core.version import VersionProbe
from satisfactory.utils.process_utils import describe_services

logger = logging.getLogger(__name__)


def setup_logging() -> None:
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stdout,
    )


# =============================================================================
# Monitor
# =============================================================================


class MonitorLoop:
    """Health / update decision loop"""

    def __init__(
        self,
        health_probe: HealthProbe,
        version_probe: VersionProbe,
        controller: ComposeController,
        *,
        services: Sequence[str] = (),
        startup_delay: float = 300.0,
        check_interval: float = 1800.0,
        restart_interval: float = 300.0,
    ) -> None:
        self.health_probe = health_probe
        self.version_probe = version_probe
        self.controller = controller
        self.services = tuple(services)
        self.startup_delay = startup_delay
        self.check_interval = check_interval
        self.restart_interval = restart_interval

        self.state = MonitorState.STARTING
        self.last_check_slow = False
        self._stop_event = threading.Event()

    @classmethod
    def from_config(cls, config: MonitorConfig, controller: ComposeController) -> "MonitorLoop":
        return cls(
            HealthProbe.from_config(config),
            VersionProbe.from_config(config, controller),
            controller,
            services=config.services,
            startup_delay=config.startup_delay,
            check_interval=config.check_interval,
            restart_interval=config.restart_interval,
        )

    @property
    def should_run(self) -> bool:
        return not self._stop_event.is_set()

    def stop(self) -> None:
        """Interrupt the pending wait; a running check finishes first"""
        self._stop_event.set()

    def _wait(self, seconds: float) -> bool:
        """Sleep unless stopped. Returns False if the wait was interrupted"""
        return not self._stop_event.wait(seconds)

    def check_health(self) -> HealthStatus:
        """Probe the server and apply the slow-result hysteresis"""
        raw = self.health_probe.check()
        status, self.last_check_slow = apply_slow_hysteresis(raw, self.last_check_slow)
        if raw == HealthStatus.SLOW and status == HealthStatus.UNHEALTHY:
            logger.warning("Too many slow health checks, restarting")
        return status

    def _restart(self) -> None:
        try:
            self.controller.restart(self.services)
        except ControllerError as e:
            logger.error("Restart of %s failed: %s", describe_services(self.services), e)

    def run_once(self) -> float:
        """
        Run a single check.

        Returns:
            Seconds to wait before the next check
        """
        self.state = MonitorState.CHECKING

        try:
            status = self.check_health()

            if not status.is_healthy:
                self._restart()
                logger.info(
                    "Restarted services, waiting %.0fs before checking again",
                    self.restart_interval,
                )
                self.state = MonitorState.AWAITING_RESTART_RECOVERY
                return self.restart_interval

            if self.version_probe.needs_update():
                self.controller.update(self.services)

        except ParseError as e:
            logger.error("ParseError: %s", e)
            if e.payload is not None:
                logger.error("Unparsed payload: %s", str(e.payload)[:500])
        except MonitorError as e:
            logger.error("%s: %s", type(e).__name__, e)
        except Exception:
            logger.exception("Unexpected error during check")

        self.state = MonitorState.AWAITING_NEXT_CHECK
        return self.check_interval

    def run(self) -> None:
        """Main monitor loop, returns once stop() is called"""
        logger.info("Monitor started, waiting %.0fs before starting checks", self.startup_delay)
        self.state = MonitorState.STARTING

        if self._wait(self.startup_delay):
            while self.should_run:
                delay = self.run_once()
                if not self._wait(delay):
                    break

        self.state = MonitorState.STOPPED
        logger.info("Monitor stopped")


# =============================================================================
# Entry point
# =============================================================================


def main() -> None:
    setup_logging()

    try:
        config = load_config()
    except ConfigError as e:
        logger.error("%s", e)
        sys.exit(2)

    controller = ComposeController.from_config(config)
    monitor = MonitorLoop.from_config(config, controller)

    restart_timer: ScheduledRestartTimer | None = None
    if config.restart_schedule:
        restart_timer = ScheduledRestartTimer(controller, config.restart_schedule, config.services)

    def _handle_signal(signum: int, frame: object) -> None:
        logger.info("Received %s, initiating shutdown...", signal.Signals(signum).name)
        if restart_timer:
            restart_timer.stop()
        monitor.stop()

    signal.signal(signal.SIGTERM, _handle_signal)
    signal.signal(signal.SIGINT, _handle_signal)

    logger.info("Managing %s", describe_services(config.services))
    if restart_timer:
        restart_timer.start()

    try:
        monitor.run()
    finally:
        if restart_timer:
            restart_timer.stop()
            if not restart_timer.join(timeout=config.compose_timeout):
                logger.warning("Scheduled restart still running at exit")


if __name__ == "__main__":
    main()
