import pytest

from sitegen.vendors import openrouter


class DummyResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("not json")
        return self._payload


class DummySession:
    def __init__(self):
        self.calls = []

    def post(self, url, json=None, headers=None, timeout=None):
        self.calls.append((url, json, headers, timeout))
        return self.response


@pytest.fixture(autouse=True)
def patch_session(monkeypatch):
    session = DummySession()
    monkeypatch.setattr(openrouter, "_SESSION", session)
    return session


def _call(**overrides):
    kwargs = dict(api_key="key", model="m", api_url="https://example.test/chat", max_tokens=10)
    kwargs.update(overrides)
    return openrouter.chat_completion("hello", **kwargs)


def test_chat_completion_success(patch_session):
    patch_session.response = DummyResponse(payload={"choices": [{"message": {"content": "hi"}}]})
    assert _call(temperature=0.7, timeout=5) == "hi"

    url, body, headers, timeout = patch_session.calls[0]
    assert url == "https://example.test/chat"
    assert body["messages"] == [{"role": "user", "content": "hello"}]
    assert body["temperature"] == 0.7
    assert headers["Authorization"] == "Bearer key"
    assert timeout == 5


def test_chat_completion_omits_temperature_by_default(patch_session):
    patch_session.response = DummyResponse(payload={"choices": [{"message": {"content": "x"}}]})
    _call()
    assert "temperature" not in patch_session.calls[0][1]


def test_chat_completion_error_status(patch_session):
    patch_session.response = DummyResponse(status_code=429, text="rate limited")
    with pytest.raises(openrouter.OpenRouterError) as excinfo:
        _call()
    assert excinfo.value.status_code == 429


def test_chat_completion_rejects_bad_envelopes(patch_session):
    patch_session.response = DummyResponse(payload={"choices": []})
    with pytest.raises(openrouter.OpenRouterError):
        _call()

    patch_session.response = DummyResponse(payload=None, text="<html>")
    with pytest.raises(openrouter.OpenRouterError):
        _call()

    for payload in ([], "text", {"choices": ["oops"]}, {"choices": "oops"}, {"choices": [{"message": "hi"}]}):
        patch_session.response = DummyResponse(payload=payload)
        with pytest.raises(openrouter.OpenRouterError, match="Malformed"):
            _call()


def test_chat_completion_tolerates_missing_content(patch_session):
    patch_session.response = DummyResponse(payload={"choices": [{"message": {"content": None}}]})
    assert _call() == ""
