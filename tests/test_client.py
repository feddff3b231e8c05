import pytest
import requests

from ingestion.client import FetchError, HttpClient


class FakeResp:
    def __init__(self, json_data=None, status_code=200, bad_json=False):
        self._json = json_data
        self.status_code = status_code
        self.reason = "reason"
        self._bad_json = bad_json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"status {self.status_code}", response=self)

    def json(self):
        if self._bad_json:
            raise ValueError("Expecting value")
        return self._json


class FakeSession:
    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []
        self.closed = False

    def request(self, method, url, timeout=None, **kwargs):
        self.calls.append((method, url, kwargs))
        r = self.responses.pop(0)
        if isinstance(r, Exception):
            raise r
        return r

    def close(self):
        self.closed = True


def _client(responses, max_retries=3):
    sleeps = []
    session = FakeSession(responses)
    client = HttpClient(max_retries=max_retries, backoff_seconds=0.5, session=session, sleep=sleeps.append)
    return client, session, sleeps


def test_get_json_success():
    client, session, sleeps = _client([FakeResp({"ok": True})])
    assert client.get_json("https://api.example/x", params={"a": 1}) == {"ok": True}
    assert session.calls == [("GET", "https://api.example/x", {"params": {"a": 1}})]
    assert sleeps == []


def test_retries_rate_limit_then_succeeds():
    client, session, sleeps = _client([FakeResp(status_code=429), FakeResp(status_code=503), FakeResp({"ok": 1})])
    assert client.post_json("https://rpc.example", {"id": 1}) == {"ok": 1}
    assert len(session.calls) == 3
    assert sleeps == [0.5, 1.0]


def test_retries_connection_errors():
    client, _, sleeps = _client([requests.ConnectionError("reset"), requests.Timeout("slow"), FakeResp([])])
    assert client.get_json("https://api.example") == []
    assert len(sleeps) == 2


def test_gives_up_after_max_retries():
    client, session, sleeps = _client([FakeResp(status_code=502)] * 3, max_retries=2)
    with pytest.raises(FetchError):
        client.get_json("https://api.example")
    assert len(session.calls) == 3
    assert len(sleeps) == 2


def test_client_error_not_retried():
    client, session, sleeps = _client([FakeResp(status_code=404)])
    with pytest.raises(FetchError):
        client.get_json("https://api.example")
    assert len(session.calls) == 1
    assert sleeps == []


def test_invalid_json_raises():
    client, _, _ = _client([FakeResp(bad_json=True)])
    with pytest.raises(FetchError):
        client.get_json("https://api.example")


def test_error_message_hides_url_path():
    client, _, _ = _client([FakeResp(status_code=403)])
    with pytest.raises(FetchError) as exc:
        client.post_json("https://mainnet.infura.io/v3/secretkey", {})
    assert "secretkey" not in str(exc.value)


def test_context_manager_closes_session():
    client, session, _ = _client([])
    with client:
        pass
    assert session.closed
