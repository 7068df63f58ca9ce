#!/usr/bin/env python3
"""
One-shot Server Check

Checks:
1. Game server health endpoint
2. Installed build vs latest Steam build

Exits 0 when the server is healthy and up to date, 1 otherwise. Never
restarts or updates anything.
"""

import sys
from dataclasses import dataclass

from satisfactory.config.models import HealthStatus, MonitorConfig
from satisfactory.config.settings import load_config
from satisfactory.core.compose import ComposeController
from satisfactory.core.errors import ConfigError, MonitorError
from satisfactory.core.health import HealthProbe
from satisfactory.core.version import VersionProbe, is_update_available


@dataclass(frozen=True, slots=True)
class CheckResult:
    """Outcome of one check"""

    name: str
    passed: bool
    message: str

    def __str__(self) -> str:
        return f"{'✓' if self.passed else '✗'} {self.name}: {self.message}"


def check_health(config: MonitorConfig) -> CheckResult:
    """Probe the health endpoint once"""
    status = HealthProbe.from_config(config).check()
    return CheckResult("Health", status == HealthStatus.HEALTHY, f"Server reports {status.value}")


def check_version(config: MonitorConfig) -> CheckResult:
    """Compare installed and latest build ids; errors fail the check"""
    probe = VersionProbe.from_config(config, ComposeController.from_config(config))
    try:
        latest = probe.latest_build_id()
        current = probe.current_build_id()
    except MonitorError as e:
        return CheckResult("Version", False, f"Version check failed: {e}")

    if is_update_available(latest, current):
        return CheckResult("Version", False, f"Update available ({current} -> {latest})")
    return CheckResult("Version", True, f"Up to date (build {current})")


def main() -> None:
    try:
        config = load_config()
    except ConfigError as e:
        print(CheckResult("Config", False, str(e)))
        sys.exit(2)

    results = [check_health(config), check_version(config)]
    print("\n".join(str(result) for result in results))
    sys.exit(0 if all(result.passed for result in results) else 1)


if __name__ == "__main__":
    main()
