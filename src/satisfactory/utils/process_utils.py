"""
Subprocess utilities.

Helpers for locating the docker compose CLI and building its command lines.
"""

import shutil
from collections.abc import Callable, Sequence


def get_compose_command(which: Callable[[str], str | None] = shutil.which) -> list[str]:
    """
    Determine the docker compose command (plugin or standalone).

    Args:
        which: Binary lookup function (shutil.which by default)

    Returns:
        Command prefix, e.g. ["docker", "compose"]

    Examples:
        >>> get_compose_command(lambda name: "/usr/bin/docker")
        ['docker', 'compose']
        >>> get_compose_command(lambda name: None)
        ['docker-compose']
    """
    if which("docker"):
        return ["docker", "compose"]
    return ["docker-compose"]


def build_compose_args(
    base: Sequence[str],
    compose_file: str,
    subcommand: Sequence[str],
    services: Sequence[str] = (),
) -> list[str]:
    """
    Build a full compose command line.

    An empty ``services`` list leaves the service arguments off so compose acts
    on every service in the file.

    Examples:
        >>> build_compose_args(["docker", "compose"], "dc.yml", ["restart"], ["server"])
        ['docker', 'compose', '-f', 'dc.yml', 'restart', 'server']
        >>> build_compose_args(["docker-compose"], "dc.yml", ["pull"])
        ['docker-compose', '-f', 'dc.yml', 'pull']
    """
    return [*base, "-f", compose_file, *subcommand, *services]


def describe_services(services: Sequence[str]) -> str:
    """Human readable service list for log lines"""
    return ", ".join(services) if services else "all services"
