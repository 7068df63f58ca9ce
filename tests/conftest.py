"""Shared fixtures: fake HTTP session, fake compose runner, config."""

from __future__ import annotations

import json
import subprocess

import pytest
import requests

from satisfactory.config.models import MonitorConfig
from satisfactory.core.compose import ComposeController

MANIFEST = """
"AppState"
{
\t"appid"\t\t"1690800"
\t"name"\t\t"Satisfactory Dedicated Server"
\t"buildid"\t\t"100"
\t"installdir"\t\t"SatisfactoryDedicatedServer"
}
"""


def make_response(body=None, status: int = 200, text: str | None = None) -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response.url = "https://example.invalid/"
    if text is not None:
        response._content = text.encode()
    else:
        response._content = json.dumps(body).encode()
    return response


def version_document(app_id: str, build_id) -> dict:
    return {"data": {app_id: {"depots": {"branches": {"public": {"buildid": build_id}}}}}}


class FakeSession:
    """Stands in for requests.Session; replies from a queue or raises"""

    def __init__(self, *replies) -> None:
        self.replies = list(replies)
        self.calls: list[tuple[str, str, dict]] = []

    def _next(self, method: str, url: str, kwargs: dict):
        self.calls.append((method, url, kwargs))
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, Exception):
            raise reply
        return reply

    def post(self, url, **kwargs):
        return self._next("POST", url, kwargs)

    def get(self, url, **kwargs):
        return self._next("GET", url, kwargs)


class FakeRunner:
    """Stands in for subprocess.run; records every command line"""

    def __init__(self, stdout: str = "", returncode: int = 0, stderr: str = "", exc=None) -> None:
        self.stdout = stdout
        self.returncode = returncode
        self.stderr = stderr
        self.exc = exc
        self.calls: list[list[str]] = []
        self.kwargs: list[dict] = []

    def __call__(self, args, **kwargs):
        self.calls.append(list(args))
        self.kwargs.append(kwargs)
        if self.exc is not None:
            raise self.exc
        return subprocess.CompletedProcess(args, self.returncode, self.stdout, self.stderr)


@pytest.fixture
def config() -> MonitorConfig:
    return MonitorConfig(services=("server",), compose_file="compose.yml", compose_path="/srv/sf")


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner(stdout=MANIFEST)


@pytest.fixture
def controller(runner: FakeRunner) -> ComposeController:
    return ComposeController(
        compose_file="compose.yml",
        compose_path="/srv/sf",
        command=["docker", "compose"],
        runner=runner,
    )
