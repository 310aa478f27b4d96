from __future__ import annotations

import json

import pytest

import app as app_module
from ai import segment_analysis
from ai.ai import AIServiceError
from ai.parser_config import ParserConfig
from app import create_app


def _segment(start: str, end: str, reason: str):
    return {
        "start_time": start,
        "end_time": end,
        "reason": reason,
        "intensity": "high",
        "type": "dramatic",
        "detailed_description": "Prompt: Storm rolls over the cliffs\nMusic Style: 105 BPM, B minor, brass",
    }


@pytest.fixture()
def app():
    test_app = create_app({"TESTING": True, "PARSER_CONFIG": ParserConfig(default_max_segments=5)})
    yield test_app


@pytest.fixture()
def client(app):
    return app.test_client()


def test_health(client):
    response = client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.get_json() == {"status": "ok"}


def test_parse_endpoint_returns_segments_and_overlaps(client):
    text = json.dumps([_segment("0:00", "0:40", "storm"), _segment("0:30", "1:00", "calm after")])

    response = client.post("/api/v1/music-segments/parse", json={"text": text})

    assert response.status_code == 200
    payload = response.get_json()
    assert payload["success"] is True
    assert payload["parseStrategy"] == "clean_json_direct"
    assert payload["parseError"] is None
    assert payload["trustworthy"] is True
    assert payload["totalSegments"] == 2
    assert payload["overlaps"] == [[0, 1]]
    first = payload["musicSegments"][0]
    assert first["start_time"] == 0
    assert first["end_time"] == 40
    assert first["volume"] == 60
    assert first["fade_algorithm"] == "linear"


def test_parse_endpoint_uses_app_default_limit(client):
    text = json.dumps([_segment(f"{minute}:00", f"{minute}:30", f"s{minute}") for minute in range(8)])

    payload = client.post("/api/v1/music-segments/parse", json={"text": text}).get_json()

    assert payload["totalSegments"] == 5


def test_parse_endpoint_falls_back_for_garbage(client):
    payload = client.post(
        "/api/v1/music-segments/parse",
        json={"text": "The model refused.", "maxSegments": 3},
    ).get_json()

    assert payload["parseStrategy"] == "emergency_fallback"
    assert payload["trustworthy"] is False
    assert payload["totalSegments"] == 3
    assert payload["parseError"]


def test_parse_endpoint_rejects_missing_text(client):
    response = client.post("/api/v1/music-segments/parse", json={"text": 42})
    assert response.status_code == 400


def test_analyze_endpoint_parses_model_output(client, monkeypatch):
    captured = {}

    def _fake_generate(prompt, system_instruction, *, response_mime_type=None):
        captured["prompt"] = prompt
        captured["system_instruction"] = system_instruction
        captured["mime"] = response_mime_type
        return json.dumps({"segments": [_segment("0:10", "0:50", "storm")]})

    monkeypatch.setattr(segment_analysis, "generate_with_instruction", _fake_generate)

    response = client.post(
        "/api/v1/music-segments/analyze",
        json={"description": "  A storm approaches a lighthouse.  ", "maxSegments": 4},
    )

    assert response.status_code == 200
    payload = response.get_json()
    assert payload["parseStrategy"] == "clean_json_direct"
    assert payload["musicSegments"][0]["reason"] == "storm"
    assert payload["rawResponse"].startswith('{"segments"')
    assert captured["prompt"] == "A storm approaches a lighthouse."
    assert captured["mime"] == "application/json"
    assert "up to 4 segments" in captured["system_instruction"]


def test_analyze_endpoint_maps_ai_errors(client, monkeypatch):
    def _failing_analysis(description, max_segments, config):
        raise AIServiceError("quota", status_code=429, error_code="AI_RATE_LIMITED", retry_after_seconds=7)

    monkeypatch.setattr(app_module, "analyze_description_for_segments", _failing_analysis)

    response = client.post("/api/v1/music-segments/analyze", json={"description": "video"})

    assert response.status_code == 429
    assert response.get_json() == {
        "error": "quota",
        "error_code": "AI_RATE_LIMITED",
        "retry_after_seconds": 7,
    }


def test_analyze_endpoint_requires_description(client):
    response = client.post("/api/v1/music-segments/analyze", json={"description": "   "})
    assert response.status_code == 400


def test_validate_analysis_endpoint(client):
    text = (
        "The opening section uses a chord progression in D minor with a slow tempo. "
        "Dynamics build toward a climax, then the resolution brings back the melody "
        "with light reverb and gentle compression in the mix."
    )

    response = client.post("/api/v1/music-segments/validate-analysis", json={"analysisText": text})

    assert response.status_code == 200
    payload = response.get_json()
    assert payload["success"] is True
    assert payload["length"] == len(text)
    assert 0 < payload["qualityScore"] <= 100
    assert set(payload["terminology"]["categories"]) == {
        "harmony",
        "rhythm",
        "melody",
        "orchestration",
        "form",
        "production",
    }


def test_validate_analysis_requires_text(client):
    response = client.post("/api/v1/music-segments/validate-analysis", json={})
    assert response.status_code == 400
    assert response.get_json()["success"] is False


@pytest.mark.parametrize(
    "route",
    ["/api/v1/music-segments/parse", "/api/v1/music-segments/analyze", "/api/v1/music-segments/validate-analysis"],
)
def test_routes_reject_non_object_json(client, route):
    response = client.post(route, json=["not", "an", "object"])
    assert response.status_code == 400
