from __future__ import annotations

import logging
from typing import Any

from flask import Flask, jsonify, request
from flask_cors import CORS

from ai.ai import AIServiceError
from ai.parser_config import ParserConfig
from ai.segment_analysis import analyze_description_for_segments
from ai.segment_parser import extract_segments_from_response, log_parse_summary
from features.analysis_quality import calculate_quality_score, validate_musical_terminology
from features.segment_models import ParseResult
from features.segment_validation import find_overlapping_segments

LOGGER = logging.getLogger(__name__)


def _json_object() -> dict[str, Any]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _segments_payload(result: ParseResult) -> dict[str, Any]:
    return {
        "success": bool(result.segments),
        "musicSegments": [segment.to_dict() for segment in result.segments],
        "totalSegments": len(result.segments),
        "parseError": result.parse_error,
        "parseStrategy": result.strategy,
        "trustworthy": result.is_trustworthy,
        "overlaps": [list(pair) for pair in find_overlapping_segments(result.segments)],
    }


def create_app(test_config: dict[str, Any] | None = None) -> Flask:
    app = Flask(__name__)
    app.config.from_mapping(PARSER_CONFIG=ParserConfig.from_env())
    if test_config:
        app.config.update(test_config)
    CORS(app)

    def parser_config() -> ParserConfig:
        return app.config["PARSER_CONFIG"]

    @app.get("/api/v1/health")
    def health():
        return jsonify({"status": "ok"})

    @app.post("/api/v1/music-segments/parse")
    def parse_segments():
        data = _json_object()
        text = data.get("text")
        if not isinstance(text, str):
            return jsonify({"error": "Invalid input. Expected 'text' with the raw model response."}), 400

        result = extract_segments_from_response(text, data.get("maxSegments"), parser_config())
        log_parse_summary(result)
        return jsonify(_segments_payload(result))

    @app.post("/api/v1/music-segments/analyze")
    def analyze_segments():
        data = _json_object()
        description = data.get("description")
        if not isinstance(description, str) or not description.strip():
            return jsonify({"error": "Invalid input. Expected a video description."}), 400

        try:
            result, raw_text = analyze_description_for_segments(
                description.strip(),
                data.get("maxSegments"),
                parser_config(),
            )
        except AIServiceError as exc:
            LOGGER.warning("Segment analysis failed (%s)", exc.error_code)
            return jsonify(exc.to_payload()), exc.status_code

        log_parse_summary(result)
        payload = _segments_payload(result)
        payload["rawResponse"] = raw_text
        return jsonify(payload)

    @app.post("/api/v1/music-segments/validate-analysis")
    def validate_analysis():
        data = _json_object()
        analysis_text = data.get("analysisText")
        if not isinstance(analysis_text, str) or not analysis_text.strip():
            return jsonify({"success": False, "error": "No analysis text provided"}), 400

        return jsonify(
            {
                "success": True,
                "qualityScore": calculate_quality_score(analysis_text),
                "length": len(analysis_text),
                "terminology": validate_musical_terminology(analysis_text),
            }
        )

    return app


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    create_app().run(debug=True, port=5001)
