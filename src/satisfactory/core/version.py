"""
Satisfactory Monitor - Update Check

Compares the build id installed in the running server container against the
latest public build id reported by the steamcmd.net API.
"""

import logging
from typing import Any

import requests

from satisfactory.config.models import MonitorConfig
from satisfactory.core.compose import ComposeController
from satisfactory.core.errors import ParseError, TransportError
from satisfactory.utils.manifest import extract_latest_build_id, parse_manifest_build_id

logger = logging.getLogger(__name__)


def is_update_available(latest: int, current: int) -> bool:
    """
    Strict comparison: an equal build needs no update.

    Examples:
        >>> is_update_available(12345, 12344)
        True
        >>> is_update_available(12344, 12344)
        False
    """
    return latest > current


class VersionProbe:
    """Latest vs installed build id check"""

    def __init__(
        self,
        controller: ComposeController,
        *,
        app_id: str,
        version_url: str,
        server_service: str,
        manifest_path: str,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self.controller = controller
        self.app_id = app_id
        self.version_url = version_url
        self.server_service = server_service
        self.manifest_path = manifest_path
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_config(
        cls, config: MonitorConfig, controller: ComposeController, **kwargs: Any
    ) -> "VersionProbe":
        return cls(
            controller,
            app_id=config.server_app_id,
            version_url=config.version_url,
            server_service=config.server_service,
            manifest_path=config.manifest_path,
            timeout=config.request_timeout,
            **kwargs,
        )

    def latest_build_id(self) -> int:
        """
        Fetch the latest public build id.

        Raises:
            TransportError: If the version service can't be reached
            ParseError: If the response is not JSON or lacks the build id
        """
        try:
            response = self.session.get(self.version_url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise TransportError(f"Version info request failed: {e}") from e

        try:
            document = response.json()
        except ValueError as e:
            raise ParseError("Version info is not valid JSON", payload=response.text) from e

        build_id = extract_latest_build_id(document, self.app_id)
        logger.info("Latest build ID: %s", build_id)
        return build_id

    def current_build_id(self) -> int:
        """
        Read the installed build id from the app manifest in the server container.

        Raises:
            ControllerError: If the exec fails (container down, file missing)
            ParseError: If the manifest has no build id
        """
        manifest = self.controller.exec(self.server_service, ["cat", self.manifest_path])
        build_id = parse_manifest_build_id(manifest)
        logger.info("Current build ID: %s", build_id)
        return build_id

    def needs_update(self) -> bool:
        """Errors propagate to the caller"""
        latest = self.latest_build_id()
        current = self.current_build_id()

        if is_update_available(latest, current):
            logger.info("Update needed")
            return True

        logger.info("No update needed")
        return False
