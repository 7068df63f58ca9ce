from __future__ import annotations

import pytest
import requests

from conftest import FakeSession, make_response
from satisfactory.config.models import HealthStatus, MonitorConfig
from satisfactory.core.health import (
    HEALTH_CHECK_PAYLOAD,
    HealthProbe,
    apply_slow_hysteresis,
    classify_health,
)


def health(value: str) -> requests.Response:
    return make_response({"data": {"health": value, "serverCustomData": ""}})


def run_sequence(values: list[HealthStatus]) -> tuple[list[HealthStatus], list[bool]]:
    flag = False
    statuses, flags = [], []
    for value in values:
        status, flag = apply_slow_hysteresis(value, flag)
        statuses.append(status)
        flags.append(flag)
    return statuses, flags


# ---- classification ----


def test_classify_health_values():
    assert classify_health("healthy") == HealthStatus.HEALTHY
    assert classify_health("slow") == HealthStatus.SLOW
    assert classify_health("broken") == HealthStatus.UNHEALTHY
    assert classify_health(None) == HealthStatus.UNHEALTHY


def test_is_healthy():
    assert HealthStatus.HEALTHY.is_healthy
    assert HealthStatus.SLOW.is_healthy
    assert not HealthStatus.UNHEALTHY.is_healthy
    assert not HealthStatus.ERROR.is_healthy


# ---- hysteresis ----


def test_second_consecutive_slow_escalates():
    statuses, flags = run_sequence([HealthStatus.HEALTHY, HealthStatus.SLOW, HealthStatus.SLOW])
    # healthy, healthy, unhealthy
    assert [s.is_healthy for s in statuses] == [True, True, False]
    # a tolerated slow keeps its own status so it can be logged as slow
    assert statuses == [HealthStatus.HEALTHY, HealthStatus.SLOW, HealthStatus.UNHEALTHY]
    assert flags == [False, True, True]


def test_isolated_slow_is_tolerated():
    statuses, flags = run_sequence([HealthStatus.SLOW, HealthStatus.HEALTHY, HealthStatus.SLOW])
    assert statuses == [HealthStatus.SLOW, HealthStatus.HEALTHY, HealthStatus.SLOW]
    assert flags == [True, False, True]


def test_unhealthy_clears_slow_flag():
    statuses, flags = run_sequence([HealthStatus.SLOW, HealthStatus.UNHEALTHY, HealthStatus.SLOW])
    assert statuses == [HealthStatus.SLOW, HealthStatus.UNHEALTHY, HealthStatus.SLOW]
    assert flags == [True, False, True]


def test_error_leaves_slow_flag_unchanged():
    statuses, flags = run_sequence([HealthStatus.SLOW, HealthStatus.ERROR, HealthStatus.SLOW])
    assert statuses == [HealthStatus.SLOW, HealthStatus.ERROR, HealthStatus.UNHEALTHY]
    assert flags == [True, True, True]

    assert apply_slow_hysteresis(HealthStatus.ERROR, False) == (HealthStatus.ERROR, False)


# ---- probe ----


def test_probe_posts_health_check_payload():
    session = FakeSession(health("healthy"))
    probe = HealthProbe("https://sf:7777/api/v1", session=session, timeout=3)

    assert probe.check() == HealthStatus.HEALTHY

    method, url, kwargs = session.calls[0]
    assert method == "POST"
    assert url == "https://sf:7777/api/v1"
    assert kwargs["json"] == HEALTH_CHECK_PAYLOAD
    assert kwargs["json"] == {"function": "HealthCheck", "data": {"clientCustomData": ""}}
    assert kwargs["verify"] is False
    assert kwargs["timeout"] == 3
    assert kwargs["headers"]["Content-Type"] == "application/json"
    assert "Host" not in kwargs["headers"]


def test_probe_sends_host_header_when_configured():
    session = FakeSession(health("healthy"))
    config = MonitorConfig(server_url="https://10.0.0.5:7777", header_host="sf.example.com")
    probe = HealthProbe.from_config(config, session=session)

    probe.check()

    _, url, kwargs = session.calls[0]
    assert url == "https://10.0.0.5:7777/api/v1"
    assert kwargs["headers"]["Host"] == "sf.example.com"


def test_probe_reports_slow_and_unknown_values():
    assert HealthProbe("u", session=FakeSession(health("slow"))).check() == HealthStatus.SLOW
    assert HealthProbe("u", session=FakeSession(health("dying"))).check() == HealthStatus.UNHEALTHY


@pytest.mark.parametrize(
    "reply",
    [
        requests.ConnectionError("connection refused"),
        requests.Timeout("timed out"),
        requests.exceptions.SSLError("bad certificate"),
        make_response(text="<html>gateway</html>"),
        make_response({"data": {}}),
        make_response({"errorCode": "x"}),
        make_response(["health"]),
    ],
)
def test_probe_failures_are_errors_not_exceptions(reply):
    assert HealthProbe("u", session=FakeSession(reply)).check() == HealthStatus.ERROR


def test_non_2xx_response_is_error_even_with_json_body():
    reply = make_response({"data": {"health": "healthy"}}, status=503)
    assert HealthProbe("u", session=FakeSession(reply)).check() == HealthStatus.ERROR


def test_non_2xx_response_keeps_slow_flag():
    probe = HealthProbe("u", session=FakeSession(make_response({"error": "x"}, status=502)))
    status, flag = apply_slow_hysteresis(probe.check(), True)
    assert status == HealthStatus.ERROR
    assert flag is True
