from __future__ import annotations

import pytest
import requests

from conftest import FakeRunner, FakeSession, make_response, version_document
from satisfactory.config.models import MonitorConfig
from satisfactory.core.compose import ComposeController
from satisfactory.core.errors import ControllerError, ParseError, TransportError
from satisfactory.core.version import VersionProbe, is_update_available


def make_probe(session: FakeSession, runner: FakeRunner) -> VersionProbe:
    config = MonitorConfig(server_service="game", steamapps_path="/data/steamapps/")
    controller = ComposeController(command=["docker", "compose"], runner=runner)
    return VersionProbe.from_config(config, controller, session=session)


def manifest(build_id: int) -> str:
    return f'"AppState"\n{{\n\t"buildid"\t\t"{build_id}"\n}}\n'


@pytest.mark.parametrize(
    "latest, current, expected",
    [
        (12345, 12344, True),
        (12344, 12344, False),
        (12343, 12344, False),
        (0, 0, False),
    ],
)
def test_is_update_available(latest, current, expected):
    assert is_update_available(latest, current) is expected


def test_needs_update_when_latest_is_newer():
    session = FakeSession(make_response(version_document("1690800", "12345")))
    runner = FakeRunner(stdout=manifest(12344))
    probe = make_probe(session, runner)

    assert probe.needs_update() is True

    method, url, _ = session.calls[0]
    assert method == "GET"
    assert url == "https://api.steamcmd.net/v1/info/1690800"
    assert runner.calls[0][-5:] == [
        "exec",
        "-T",
        "game",
        "cat",
        "/data/steamapps/appmanifest_1690800.acf",
    ]


def test_no_update_when_builds_match():
    session = FakeSession(make_response(version_document("1690800", "12344")))
    probe = make_probe(session, FakeRunner(stdout=manifest(12344)))
    assert probe.needs_update() is False


def test_network_failure_raises_transport_error():
    probe = make_probe(FakeSession(requests.ConnectionError("down")), FakeRunner())
    with pytest.raises(TransportError):
        probe.needs_update()


def test_http_error_raises_transport_error():
    probe = make_probe(FakeSession(make_response({}, status=500)), FakeRunner())
    with pytest.raises(TransportError):
        probe.latest_build_id()


def test_non_json_version_info_raises_parse_error():
    probe = make_probe(FakeSession(make_response(text="oops")), FakeRunner())
    with pytest.raises(ParseError) as exc:
        probe.latest_build_id()
    assert exc.value.payload == "oops"


def test_manifest_without_build_id_raises_parse_error():
    session = FakeSession(make_response(version_document("1690800", "12345")))
    probe = make_probe(session, FakeRunner(stdout="no such token"))
    with pytest.raises(ParseError):
        probe.needs_update()


def test_missing_manifest_raises_controller_error():
    session = FakeSession(make_response(version_document("1690800", "12345")))
    runner = FakeRunner(returncode=1, stderr="cat: /data/...: No such file or directory")
    probe = make_probe(session, runner)
    with pytest.raises(ControllerError):
        probe.needs_update()
