"""
Satisfactory Monitor - Environment Configuration

Reads the monitor's environment variables into a single MonitorConfig.
Defaults are designed to work with the wolveix/satisfactory-server image.
"""

import os
from collections.abc import Mapping
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError

from satisfactory.config.models import MonitorConfig
from satisfactory.core.errors import ConfigError

# =============================================================================
# Environment Variables
# =============================================================================

ENV_FILE_VAR = "MONITOR_ENV_FILE"
DEFAULT_ENV_FILE = Path(".env")

# Environment variable -> MonitorConfig field
ENV_FIELDS = {
    "SERVER_URL": "server_url",
    "SERVER_SERVICE": "server_service",
    "STEAMAPPS_PATH": "steamapps_path",
    "DOCKER_COMPOSE_FILE": "compose_file",
    "DOCKER_COMPOSE_PATH": "compose_path",
    "SERVER_APP_ID": "server_app_id",
    "HEADER_HOST": "header_host",
    "RESTART_SCHEDULE": "restart_schedule",
    "RESTART_INTERVAL": "restart_interval_ms",
    "CHECK_INTERVAL": "check_interval_ms",
    "STARTUP_DELAY": "startup_delay_ms",
    "STEAMCMD_API_URL": "steamcmd_api_url",
    "REQUEST_TIMEOUT": "request_timeout",
    "COMPOSE_TIMEOUT": "compose_timeout",
}

# Checked in order, first non-empty wins
SERVICE_VARS = ("MANAGE_SERVICES", "UPDATE_SERVICES")


# =============================================================================
# Loading
# =============================================================================


def load_env_file(path: Path | None = None) -> bool:
    """Load a .env file without overriding variables already set.

    Order of precedence for the file path:
    1) Explicit ``path`` argument
    2) MONITOR_ENV_FILE
    3) ``.env`` in the working directory
    """

    env_file = path or Path(os.getenv(ENV_FILE_VAR, str(DEFAULT_ENV_FILE)))
    if not env_file.is_file():
        return False
    return load_dotenv(env_file, override=False)


def config_from_env(environ: Mapping[str, str]) -> MonitorConfig:
    """
    Build a MonitorConfig from an environment mapping.

    Unset or empty variables fall back to the model defaults.

    Raises:
        ConfigError: If any value fails validation
    """
    values: dict[str, object] = {}

    for var, field_name in ENV_FIELDS.items():
        raw = environ.get(var)
        if raw is not None and raw.strip():
            values[field_name] = raw.strip()

    for var in SERVICE_VARS:
        raw = environ.get(var, "")
        if raw.strip():
            values["services"] = raw
            break

    try:
        return MonitorConfig(**values)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def load_config(env_file: Path | None = None) -> MonitorConfig:
    """Load .env (if present) then read the process environment"""
    load_env_file(env_file)
    return config_from_env(os.environ)
