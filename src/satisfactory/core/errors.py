"""
Satisfactory Monitor - Errors

Every failure a tick can hit derives from MonitorError so the loop can catch
them at the tick boundary.
"""


class MonitorError(Exception):
    """Base class for monitor failures"""


class ConfigError(MonitorError):
    """Invalid configuration at startup"""


class TransportError(MonitorError):
    """Network or TLS failure reaching the game server or version service"""


class ParseError(MonitorError):
    """Malformed response, missing field or unreadable build id"""

    def __init__(self, message: str, payload: object = None) -> None:
        super().__init__(message)
        self.payload = payload


class ControllerError(MonitorError):
    """docker compose failed to pull, recreate, restart or exec"""

    def __init__(self, message: str, command: tuple[str, ...] = (), output: str = "") -> None:
        super().__init__(message)
        self.command = command
        self.output = output
