import pytest
import requests

from leadrank.core.errors import ErrorKind, LeadRankError
from leadrank.vendors import gemini


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
        self.response = DummyResponse(payload={})

    def post(self, url, params=None, headers=None, json=None, timeout=None):
        self.calls.append({"url": url, "params": params, "headers": headers, "json": json, "timeout": timeout})
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


@pytest.fixture(autouse=True)
def patch_session(monkeypatch):
    session = DummySession()
    monkeypatch.setattr(gemini, "_SESSION", session)
    return session


def _candidate(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def test_generate_content_posts_prompt_and_generation_config(patch_session, settings):
    patch_session.response = DummyResponse(payload=_candidate("{}"))

    payload = gemini.generate_content("Rate this", settings)

    call = patch_session.calls[0]
    assert call["url"].endswith("/models/gemini-test:generateContent")
    assert call["headers"] == {"x-goog-api-key": "ai-key"}
    assert not call["params"]
    assert "ai-key" not in call["url"]
    assert call["timeout"] == settings.request_timeout
    assert call["json"]["contents"][0]["parts"][0]["text"] == "Rate this"
    assert call["json"]["generationConfig"] == {
        "temperature": 0.7,
        "topK": 40,
        "topP": 0.95,
        "maxOutputTokens": 4094,
    }
    assert payload == _candidate("{}")


def test_generate_content_http_error_keeps_status_and_body(patch_session, settings):
    patch_session.response = DummyResponse(status_code=429, text="quota exceeded")

    with pytest.raises(LeadRankError) as excinfo:
        gemini.generate_content("Rate this", settings)

    assert excinfo.value.kind is ErrorKind.UPSTREAM_REQUEST
    assert excinfo.value.status == 429
    assert "quota exceeded" in str(excinfo.value)


def test_generate_content_timeout_is_upstream_error(patch_session, settings):
    patch_session.response = requests.Timeout("slow")

    with pytest.raises(LeadRankError) as excinfo:
        gemini.generate_content("Rate this", settings)

    assert excinfo.value.kind is ErrorKind.UPSTREAM_REQUEST


def test_session_returns_last_response_when_retries_run_out():
    retries = gemini._build_session().get_adapter(gemini.BASE_URL).max_retries

    assert 503 in retries.status_forcelist
    assert retries.raise_on_status is False


def test_generate_content_exhausted_503_keeps_status_and_body(patch_session, settings):
    patch_session.response = DummyResponse(status_code=503, text="model overloaded")

    with pytest.raises(LeadRankError) as excinfo:
        gemini.generate_content("Rate this", settings)

    assert excinfo.value.kind is ErrorKind.UPSTREAM_REQUEST
    assert excinfo.value.status == 503
    assert excinfo.value.raw == "model overloaded"


def test_transport_error_message_does_not_carry_api_key(patch_session, settings):
    patch_session.response = requests.ConnectionError("connection reset")

    with pytest.raises(LeadRankError) as excinfo:
        gemini.generate_content("Rate this", settings)

    assert "ai-key" not in str(excinfo.value)


def test_first_candidate_text_trims():
    assert gemini.first_candidate_text(_candidate("  {\"score\": 1}\n")) == '{"score": 1}'


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"candidates": []},
        {"candidates": [{"finishReason": "SAFETY"}]},
        {"candidates": [{"content": {"parts": []}}]},
    ],
)
def test_first_candidate_text_shape_errors(payload):
    with pytest.raises(LeadRankError) as excinfo:
        gemini.first_candidate_text(payload)
    assert excinfo.value.kind is ErrorKind.RESPONSE_SHAPE
