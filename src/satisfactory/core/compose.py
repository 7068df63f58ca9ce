"""
Satisfactory Monitor - docker compose Operations

Pulls, recreates, restarts and execs into the managed services through the
docker compose CLI. An empty service list means every service in the compose
file, including the monitor itself when it is defined there.
"""

import logging
import subprocess
from collections.abc import Callable, Sequence

from satisfactory.config.models import ComposeResult, MonitorConfig
from satisfactory.core.errors import ControllerError
from satisfactory.utils.process_utils import (
    build_compose_args,
    describe_services,
    get_compose_command,
)

logger = logging.getLogger(__name__)

Runner = Callable[..., subprocess.CompletedProcess]


class ComposeController:
    """docker compose wrapper for the managed service set"""

    def __init__(
        self,
        *,
        compose_file: str = "docker-compose.yml",
        compose_path: str = ".",
        timeout: float = 600.0,
        command: Sequence[str] | None = None,
        runner: Runner = subprocess.run,
    ) -> None:
        self.compose_file = compose_file
        self.compose_path = compose_path
        self.timeout = timeout
        self.command = list(command) if command else get_compose_command()
        self._runner = runner

    @classmethod
    def from_config(cls, config: MonitorConfig, **kwargs: object) -> "ComposeController":
        return cls(
            compose_file=config.compose_file,
            compose_path=config.compose_path,
            timeout=config.compose_timeout,
            **kwargs,
        )

    def _run(self, subcommand: Sequence[str], services: Sequence[str] = ()) -> ComposeResult:
        """Run a compose subcommand and raise ControllerError on failure"""
        args = tuple(build_compose_args(self.command, self.compose_file, subcommand, services))
        logger.debug("Running: %s", " ".join(args))

        try:
            proc = self._runner(
                list(args),
                cwd=self.compose_path,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except FileNotFoundError as e:
            raise ControllerError(f"Compose binary not found: {args[0]}", args) from e
        except subprocess.TimeoutExpired as e:
            raise ControllerError(
                f"Compose command timed out after {self.timeout}s: {' '.join(subcommand)}", args
            ) from e
        except OSError as e:
            raise ControllerError(f"Failed to run compose: {e}", args) from e

        result = ComposeResult(
            args=args,
            returncode=proc.returncode,
            stdout=proc.stdout or "",
            stderr=proc.stderr or "",
        )
        if result.returncode != 0:
            raise ControllerError(
                f"Compose {' '.join(subcommand)} failed with exit code {result.returncode}: "
                f"{result.last_500}",
                args,
                result.output,
            )
        return result

    def pull(self, services: Sequence[str] = ()) -> ComposeResult:
        """Pull fresh images"""
        return self._run(["pull"], services)

    def up(self, services: Sequence[str] = (), *, force_recreate: bool = False) -> ComposeResult:
        """Bring services up detached"""
        subcommand = ["up", "-d"]
        if force_recreate:
            subcommand.append("--force-recreate")
        return self._run(subcommand, services)

    def update(self, services: Sequence[str] = ()) -> ComposeResult:
        """Pull then recreate, so the new image is the one started"""
        logger.info("Updating & restarting services: %s", describe_services(services))
        self.pull(services)
        return self.up(services, force_recreate=True)

    def restart(self, services: Sequence[str] = ()) -> ComposeResult:
        """Restart in place without pulling"""
        logger.info("Restarting services: %s", describe_services(services))
        return self._run(["restart"], services)

    def exec(self, service: str, command: Sequence[str]) -> str:
        """
        Run a command inside a running service container.

        Returns:
            Command stdout
        """
        return self._run(["exec", "-T", service, *command]).stdout
