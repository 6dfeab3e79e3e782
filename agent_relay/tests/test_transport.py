import httpx
import pytest

from agent_relay.domain.exceptions import ApiError, RateLimitError, TransportError, ValidationError
from agent_relay.providers.base import WireRequest
from agent_relay.providers.transport import RetryingTransport


WIRE = WireRequest(
    url="https://api.example.test/v1/chat/completions",
    body={"model": "m"},
    headers={"Authorization": "Bearer k"},
)


class Resp:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("Expecting value")
        return self._payload


def _install_client(monkeypatch, outcomes):
    """按顺序返回 outcomes 中的响应或抛出其中的异常。"""

    calls = []

    class Client:
        def __init__(self, *a, **kw):
            calls.append({"init": kw})

        def __enter__(self):
            return self

        def __exit__(self, *a):
            return False

        def post(self, url, json=None, headers=None, params=None):
            calls[-1].update(url=url, json=json, headers=headers, params=params)
            outcome = outcomes.pop(0)
            if isinstance(outcome, Exception):
                raise outcome
            return outcome

    monkeypatch.setattr("httpx.Client", Client)
    return calls


def test_fail_twice_then_succeed(monkeypatch):
    calls = _install_client(
        monkeypatch,
        [httpx.ConnectError("refused"), httpx.ReadTimeout("slow"), Resp(payload={"ok": 2})],
    )
    sleeps = []
    transport = RetryingTransport(retry_count=3, backoff_base_ms=500, sleep=sleeps.append)
    assert transport.execute(WIRE) == {"ok": 2}
    assert len(calls) == 3
    assert sleeps == [0.5, 1.0]
    assert sum(sleeps) * 1000 >= 1500


def test_always_failing_stops_after_retry_count(monkeypatch):
    calls = _install_client(monkeypatch, [httpx.ConnectError("refused") for _ in range(5)])
    sleeps = []
    transport = RetryingTransport(retry_count=3, backoff_base_ms=500, sleep=sleeps.append)
    with pytest.raises(TransportError) as exc:
        transport.execute(WIRE)
    assert exc.value.code == "NETWORK_ERROR"
    assert len(calls) == 3
    assert sleeps == [0.5, 1.0]


def test_single_attempt_never_sleeps(monkeypatch):
    _install_client(monkeypatch, [httpx.ConnectError("refused")])
    sleeps = []
    with pytest.raises(TransportError):
        RetryingTransport(retry_count=1, backoff_base_ms=500, sleep=sleeps.append).execute(WIRE)
    assert sleeps == []


def test_success_returns_immediately(monkeypatch):
    calls = _install_client(monkeypatch, [Resp(payload={"choices": []})])
    sleeps = []
    assert RetryingTransport(sleep=sleeps.append).execute(WIRE) == {"choices": []}
    assert len(calls) == 1
    assert sleeps == []
    assert calls[0]["url"] == WIRE.url
    assert calls[0]["json"] == {"model": "m"}
    assert calls[0]["params"] is None
    assert calls[0]["init"]["trust_env"] is False


def test_rate_limit_and_server_errors_are_retried(monkeypatch):
    calls = _install_client(
        monkeypatch,
        [Resp(status_code=429), Resp(status_code=503, text="busy"), Resp(payload={"ok": True})],
    )
    sleeps = []
    assert RetryingTransport(retry_count=3, backoff_base_ms=100, sleep=sleeps.append).execute(WIRE) == {"ok": True}
    assert len(calls) == 3
    assert sleeps == [0.1, 0.2]


def test_rate_limit_surfaces_after_last_attempt(monkeypatch):
    _install_client(monkeypatch, [Resp(status_code=429), Resp(status_code=429)])
    with pytest.raises(RateLimitError):
        RetryingTransport(retry_count=2, backoff_base_ms=0, sleep=lambda s: None).execute(WIRE)


def test_client_error_is_not_retried(monkeypatch):
    calls = _install_client(monkeypatch, [Resp(status_code=401, text="bad key"), Resp(payload={})])
    sleeps = []
    with pytest.raises(ApiError) as exc:
        RetryingTransport(retry_count=3, sleep=sleeps.append).execute(WIRE)
    assert exc.value.http_status == 401
    assert len(calls) == 1
    assert sleeps == []


def test_non_json_body_is_retried(monkeypatch):
    calls = _install_client(monkeypatch, [Resp(payload=None), Resp(payload={"completion": "hi"})])
    sleeps = []
    transport = RetryingTransport(retry_count=3, backoff_base_ms=500, sleep=sleeps.append)
    assert transport.execute(WIRE) == {"completion": "hi"}
    assert len(calls) == 2
    assert sleeps == [0.5]


def test_query_params_are_forwarded(monkeypatch):
    calls = _install_client(monkeypatch, [Resp(payload={})])
    wire = WireRequest(url="https://x.test/generate", body={}, params={"key": "g"})
    RetryingTransport(sleep=lambda s: None).execute(wire)
    assert calls[0]["params"] == {"key": "g"}


def test_zero_retry_count_is_rejected():
    with pytest.raises(ValidationError) as exc:
        RetryingTransport(retry_count=0)
    assert exc.value.code == "INVALID_CONFIG"
