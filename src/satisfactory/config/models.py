"""
Satisfactory Monitor - Data Models

Shared enums, dataclasses and the Pydantic configuration model.
"""

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

# =============================================================================
# Enums
# =============================================================================


class HealthStatus(str, Enum):
    """Classification of a single health check"""

    HEALTHY = "healthy"
    SLOW = "slow"
    UNHEALTHY = "unhealthy"
    ERROR = "error"

    @property
    def is_healthy(self) -> bool:
        """A single slow result is tolerated"""
        return self in (HealthStatus.HEALTHY, HealthStatus.SLOW)


class MonitorState(str, Enum):
    """Monitor loop states"""

    STARTING = "starting"
    CHECKING = "checking"
    AWAITING_RESTART_RECOVERY = "awaiting_restart_recovery"
    AWAITING_NEXT_CHECK = "awaiting_next_check"
    STOPPED = "stopped"


class TimerState(str, Enum):
    """Scheduled restart timer states"""

    IDLE = "idle"
    ARMED = "armed"
    FIRING = "firing"


# =============================================================================
# Dataclasses (internal use)
# =============================================================================


@dataclass(frozen=True, slots=True)
class ScheduleSpec:
    """Daily restart time (local)"""

    hour: int
    minute: int

    @classmethod
    def parse(cls, value: str) -> "ScheduleSpec":
        """
        Parse an ``HH:MM`` string.

        Raises:
            ValueError: If the value is not a valid 24h time
        """
        parts = value.strip().split(":")
        if len(parts) != 2:
            raise ValueError(f"Restart schedule must be HH:MM, got {value!r}")

        try:
            hour, minute = int(parts[0]), int(parts[1])
        except ValueError:
            raise ValueError(f"Restart schedule must be HH:MM, got {value!r}") from None

        if not 0 <= hour <= 23 or not 0 <= minute <= 59:
            raise ValueError(f"Restart schedule out of range: {value!r}")

        return cls(hour=hour, minute=minute)

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


@dataclass(frozen=True, slots=True)
class ComposeResult:
    """Result of a docker compose invocation"""

    args: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def output(self) -> str:
        return self.stdout + self.stderr

    @property
    def last_500(self) -> str:
        """Get last 500 characters of output for error display"""
        return self.output[-500:] if len(self.output) > 500 else self.output


# =============================================================================
# Configuration
# =============================================================================


class MonitorConfig(BaseModel):
    """Immutable monitor configuration, built once at startup"""

    model_config = ConfigDict(frozen=True)

    server_url: str = "https://satisfactory-server:7777"
    services: tuple[str, ...] = ()
    server_service: str = "server"
    steamapps_path: str = "/config/gamefiles/steamapps"
    compose_file: str = "docker-compose.yml"
    compose_path: str = "."
    server_app_id: str = "1690800"
    header_host: str | None = None
    restart_schedule: ScheduleSpec | None = None

    # Intervals are in milliseconds, matching the environment variables
    startup_delay_ms: int = Field(default=1000 * 60 * 5, ge=0)
    check_interval_ms: int = Field(default=1000 * 60 * 30, ge=0)
    restart_interval_ms: int = Field(default=1000 * 60 * 5, ge=0)

    steamcmd_api_url: str = "https://api.steamcmd.net/v1/info"
    request_timeout: float = Field(default=10.0, gt=0)
    compose_timeout: float = Field(default=600.0, gt=0)

    @field_validator("server_url", "steamcmd_api_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("services", mode="before")
    @classmethod
    def _split_services(cls, value: object) -> object:
        if isinstance(value, str):
            value = value.split(",")
        if isinstance(value, (list, tuple)):
            return tuple(name.strip() for name in value if name and name.strip())
        return value

    @field_validator("restart_schedule", mode="before")
    @classmethod
    def _parse_schedule(cls, value: object) -> object:
        if isinstance(value, str):
            return ScheduleSpec.parse(value) if value.strip() else None
        return value

    @field_validator("header_host", mode="before")
    @classmethod
    def _empty_host_is_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def startup_delay(self) -> float:
        return self.startup_delay_ms / 1000

    @property
    def check_interval(self) -> float:
        return self.check_interval_ms / 1000

    @property
    def restart_interval(self) -> float:
        return self.restart_interval_ms / 1000

    @property
    def manifest_path(self) -> str:
        """Path of the app manifest inside the server container"""
        return f"{self.steamapps_path.rstrip('/')}/appmanifest_{self.server_app_id}.acf"

    @property
    def health_url(self) -> str:
        return f"{self.server_url}/api/v1"

    @property
    def version_url(self) -> str:
        return f"{self.steamcmd_api_url}/{self.server_app_id}"
