from __future__ import annotations

import pytest

from ai import ai as ai_module


class _FakeAPIError(ai_module.genai_errors.APIError):
    def __init__(self, status_code: int, message: str):
        Exception.__init__(self, message)
        self.status_code = status_code


def _install_client(monkeypatch, models):
    class _FakeClient:
        def __init__(self, api_key):
            self.api_key = api_key
            self.models = models

    monkeypatch.setattr(ai_module.genai, "Client", _FakeClient)


def test_generate_with_instruction_streams_chunks(monkeypatch):
    monkeypatch.setenv("GOOGLE_API_KEY", "test-key")
    seen = {}

    class _Chunk:
        def __init__(self, text):
            self.text = text

    class _FakeModels:
        @staticmethod
        def generate_content_stream(model, contents, config):
            seen["model"] = model
            seen["mime"] = config.response_mime_type
            return [_Chunk('[{"start_time": '), _Chunk(None), _Chunk('"0:00"}]')]

    _install_client(monkeypatch, _FakeModels())

    output = ai_module.generate_with_instruction("video", "system", response_mime_type="application/json")

    assert output == '[{"start_time": "0:00"}]'
    assert seen == {"model": "gemini-2.0-flash", "mime": "application/json"}


def test_generate_with_instruction_falls_back_to_non_stream(monkeypatch):
    monkeypatch.setenv("GOOGLE_API_KEY", "test-key")
    monkeypatch.setenv("GEMINI_MAX_RETRIES", "0")

    class _FakeModels:
        @staticmethod
        def generate_content_stream(model, contents, config):
            raise RuntimeError("stream parser failure")

        @staticmethod
        def generate_content(model, contents, config):
            class _Response:
                text = '{"segments": []}'

            return _Response()

    _install_client(monkeypatch, _FakeModels())

    output = ai_module.generate_with_instruction("hello", "system")
    assert output == '{"segments": []}'


def test_generate_with_instruction_maps_api_error(monkeypatch):
    monkeypatch.setenv("GOOGLE_API_KEY", "test-key")
    monkeypatch.setenv("GEMINI_MAX_RETRIES", "0")
    monkeypatch.setenv("GEMINI_MODEL_NAME", "gemini-3-flash-preview")

    class _FakeModels:
        @staticmethod
        def generate_content_stream(model, contents, config):
            raise _FakeAPIError(404, "model not found")

        @staticmethod
        def generate_content(model, contents, config):
            raise AssertionError("fallback should not run when APIError is raised directly")

    _install_client(monkeypatch, _FakeModels())

    with pytest.raises(ai_module.AIServiceError) as excinfo:
        ai_module.generate_with_instruction("hello", "system")

    assert excinfo.value.error_code == "AI_MODEL_NOT_FOUND"
    assert excinfo.value.status_code == 502
    assert "gemini-3-flash-preview" in str(excinfo.value)


def test_generate_with_instruction_retries_rate_limit(monkeypatch):
    monkeypatch.setenv("GOOGLE_API_KEY", "test-key")
    monkeypatch.setenv("GEMINI_MAX_RETRIES", "2")
    sleeps = []
    monkeypatch.setattr(ai_module.time, "sleep", sleeps.append)
    calls = {"count": 0}

    class _Chunk:
        text = "[]"

    class _FakeModels:
        @staticmethod
        def generate_content_stream(model, contents, config):
            calls["count"] += 1
            if calls["count"] == 1:
                raise _FakeAPIError(429, "429 RESOURCE_EXHAUSTED. Please retry in 3.2s.")
            return [_Chunk()]

    _install_client(monkeypatch, _FakeModels())

    assert ai_module.generate_with_instruction("hello", "system") == "[]"
    assert calls["count"] == 2
    assert sleeps == [4]


def test_generate_with_instruction_gives_up_after_retries(monkeypatch):
    monkeypatch.setenv("GOOGLE_API_KEY", "test-key")
    monkeypatch.setenv("GEMINI_MAX_RETRIES", "1")
    monkeypatch.setattr(ai_module.time, "sleep", lambda seconds: None)

    class _FakeModels:
        @staticmethod
        def generate_content_stream(model, contents, config):
            raise _FakeAPIError(503, "overloaded")

    _install_client(monkeypatch, _FakeModels())

    with pytest.raises(ai_module.AIServiceError) as excinfo:
        ai_module.generate_with_instruction("hello", "system")

    assert excinfo.value.error_code == "AI_TEMPORARILY_UNAVAILABLE"
    assert excinfo.value.to_payload()["error_code"] == "AI_TEMPORARILY_UNAVAILABLE"


def test_generate_with_instruction_requires_api_key(monkeypatch):
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)

    with pytest.raises(ai_module.AIServiceError) as excinfo:
        ai_module.generate_with_instruction("hello", "system")

    assert excinfo.value.error_code == "AI_KEY_MISSING"
    assert excinfo.value.status_code == 500


def test_generate_with_instruction_rejects_empty_response(monkeypatch):
    monkeypatch.setenv("GOOGLE_API_KEY", "test-key")

    class _FakeModels:
        @staticmethod
        def generate_content_stream(model, contents, config):
            return []

    _install_client(monkeypatch, _FakeModels())

    with pytest.raises(ai_module.AIServiceError) as excinfo:
        ai_module.generate_with_instruction("hello", "system")

    assert excinfo.value.error_code == "AI_EMPTY_RESPONSE"
