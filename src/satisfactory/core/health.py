"""
Satisfactory Monitor - Health Check

Asks the dedicated server's HTTPS API for its health. The server usually runs
with a self-signed certificate, so certificate validation is disabled for
these requests.

If the server reports slow, a single result is tolerated and two consecutive
slow results are escalated to unhealthy (see apply_slow_hysteresis).
"""

import logging
from typing import Any

import requests
import urllib3

from satisfactory.config.models import HealthStatus, MonitorConfig

logger = logging.getLogger(__name__)

urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

HEALTH_CHECK_PAYLOAD = {
    "function": "HealthCheck",
    "data": {
        "clientCustomData": "",
    },
}


def classify_health(value: Any) -> HealthStatus:
    """Map the reported ``data.health`` value to a status"""
    if value == "healthy":
        return HealthStatus.HEALTHY
    if value == "slow":
        return HealthStatus.SLOW
    return HealthStatus.UNHEALTHY


def apply_slow_hysteresis(status: HealthStatus, last_check_slow: bool) -> tuple[HealthStatus, bool]:
    """
    Apply the two-strikes rule for slow results.

    Args:
        status: Raw classification from HealthProbe.check()
        last_check_slow: Whether the previous check was slow

    Returns:
        Tuple of (effective status, new last_check_slow)

    Examples:
        >>> apply_slow_hysteresis(HealthStatus.SLOW, False)
        (<HealthStatus.SLOW: 'slow'>, True)
        >>> apply_slow_hysteresis(HealthStatus.SLOW, True)
        (<HealthStatus.UNHEALTHY: 'unhealthy'>, True)
    """
    if status == HealthStatus.SLOW:
        if last_check_slow:
            return HealthStatus.UNHEALTHY, True
        return HealthStatus.SLOW, True

    # Only explicit health values move the flag; a failed request says nothing
    if status == HealthStatus.ERROR:
        return status, last_check_slow

    return status, False


class HealthProbe:
    """Single health-check request against the game server API"""

    def __init__(
        self,
        url: str,
        *,
        header_host: str | None = None,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self.url = url
        self.header_host = header_host
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, config: MonitorConfig, **kwargs: Any) -> "HealthProbe":
        return cls(
            config.health_url,
            header_host=config.header_host,
            timeout=config.request_timeout,
            **kwargs,
        )

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if self.header_host:
            headers["Host"] = self.header_host
        return headers

    def check(self) -> HealthStatus:
        """
        Run one health check. Never raises.

        Returns:
            HEALTHY, SLOW or UNHEALTHY from the reported value, or ERROR when the
            request failed, returned non-2xx or could not be read
        """
        try:
            response = self.session.post(
                self.url,
                json=HEALTH_CHECK_PAYLOAD,
                headers=self._headers(),
                timeout=self.timeout,
                verify=False,
            )
        except requests.RequestException as e:
            logger.warning("Health check failed: %s", e)
            return HealthStatus.ERROR

        if not response.ok:
            logger.warning(
                "Health check failed: HTTP %s: %s", response.status_code, response.text[:500]
            )
            return HealthStatus.ERROR

        try:
            body = response.json()
        except ValueError:
            logger.warning("Health check failed: invalid JSON: %s", response.text[:500])
            return HealthStatus.ERROR

        try:
            value = body["data"]["health"]
        except (KeyError, TypeError):
            logger.warning("Health check failed: no health in response: %s", body)
            return HealthStatus.ERROR

        status = classify_health(value)
        if status == HealthStatus.HEALTHY:
            logger.info("Health check passed")
        elif status == HealthStatus.SLOW:
            logger.info("Health check slow")
        else:
            logger.warning("Health check failed: %s", body)
        return status
