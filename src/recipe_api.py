#!/usr/bin/env python3
"""
Recipe Formatter API Server
HTTP envelope around the recipe formatter: accepts OCR recognition results
as JSON or plain text and returns the structured recipe.
"""

import os
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from flask import Flask, Response, jsonify, request
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from marshmallow import EXCLUDE, Schema, ValidationError, fields, pre_load
import structlog

from error_handling import InvalidRecognitionInputError, RecipeProcessingError
from formatter_config import load_config, merge_config
from monitoring_logging import configure_logging
from output_formatter import OutputFormatter
from recipe_formatter import RecipeFormatter
from recipe_types import RawRecognitionResult


API_VERSION = "1.0.0"

_MIMETYPES = {
    "yaml": "application/x-yaml",
    "csv": "text/csv",
    "txt": "text/plain",
}


class ApiConfig:
    """API server settings read from the environment."""

    API_HOST = os.getenv("API_HOST", "0.0.0.0")
    API_PORT = int(os.getenv("API_PORT", "5000"))
    MAX_CONTENT_LENGTH = int(os.getenv("MAX_CONTENT_LENGTH", str(1024 * 1024)))
    RATELIMIT_ENABLED = os.getenv("RATELIMIT_ENABLED", "true").lower() == "true"
    RATELIMIT_DEFAULT = os.getenv("RATELIMIT_DEFAULT", "120 per minute")
    FORMATTER_CONFIG = os.getenv("FORMATTER_CONFIG")


# API Schemas
class RecognitionLineSchema(Schema):
    """Schema for one recognized line."""

    class Meta:
        unknown = EXCLUDE

    text = fields.Str(required=True)
    bounding_box = fields.Raw(allow_none=True)

    @pre_load
    def accept_camel_case(self, data, **kwargs):
        if isinstance(data, dict) and "boundingBox" in data and "bounding_box" not in data:
            data = dict(data, bounding_box=data["boundingBox"])
        return data


class RecognitionResultSchema(Schema):
    """Schema for a recognition result envelope."""

    class Meta:
        unknown = EXCLUDE

    full_text = fields.Str(required=True)
    lines = fields.List(fields.Nested(RecognitionLineSchema), load_default=list)

    @pre_load
    def accept_text_alias(self, data, **kwargs):
        if isinstance(data, dict) and "text" in data and "full_text" not in data:
            data = dict(data, full_text=data["text"])
        return data


def _error_body(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {"error": {"code": code, "message": message, "details": details or {}}}


class RecipeAPI:
    """HTTP API for the recipe formatter."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize Recipe API server.

        Args:
            config: Optional settings: 'formatter' (config overrides),
                'formatter_config_path', 'max_content_length',
                'ratelimit_enabled', 'ratelimit_default'
        """
        self.config = config or {}
        self.app = Flask(__name__)

        self.app.config.update({
            "MAX_CONTENT_LENGTH": self.config.get("max_content_length", ApiConfig.MAX_CONTENT_LENGTH),
            "RATELIMIT_ENABLED": self.config.get("ratelimit_enabled", ApiConfig.RATELIMIT_ENABLED),
        })

        formatter_config = load_config(self.config.get("formatter_config_path", ApiConfig.FORMATTER_CONFIG))
        formatter_config = merge_config(formatter_config, self.config.get("formatter"))
        configure_logging(formatter_config["logging"]["level"], formatter_config["logging"]["format"])
        self.logger = structlog.get_logger(__name__)

        # Extensions
        CORS(self.app)
        self.limiter = Limiter(
            get_remote_address,
            app=self.app,
            default_limits=[self.config.get("ratelimit_default", ApiConfig.RATELIMIT_DEFAULT)],
            storage_uri="memory://",
        )

        self.formatter = RecipeFormatter(formatter_config)
        self.output_formatter = OutputFormatter()

        self._register_routes()
        self._register_error_handlers()

        self.logger.info("Initialized recipe formatter API", version=API_VERSION)

    def _respond(self, recognition: RawRecognitionResult, endpoint: str):
        request_id = str(uuid.uuid4())
        log = self.logger.bind(request_id=request_id, endpoint=endpoint)
        start = time.perf_counter()

        output_format = request.args.get("format", "json").lower()
        recipe = self.formatter.format_recipe(recognition)
        elapsed_ms = round((time.perf_counter() - start) * 1000, 3)

        log.info(
            "Formatted recipe",
            text_lines=len(recognition.full_text.splitlines()),
            recognized_lines=len(recognition.lines),
            ingredients=len(recipe.ingredients),
            steps=len(recipe.steps),
            elapsed_ms=elapsed_ms,
        )

        if output_format == "json":
            return jsonify({
                "recipe": recipe.to_dict(),
                "metadata": {"request_id": request_id, "elapsed_ms": elapsed_ms},
            })

        formatted = self.output_formatter.format_recipe(recipe, output_format)
        response = Response(formatted.content, mimetype=_MIMETYPES.get(formatted.format_type, "text/plain"))
        response.headers["X-Request-ID"] = request_id
        return response

    def _register_routes(self):
        """Register API routes."""

        @self.app.route("/api/health", methods=["GET"])
        def health_check():
            """Health check endpoint."""
            return jsonify({
                "status": "healthy",
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "version": API_VERSION,
            })

        @self.app.route("/api/format", methods=["POST"])
        def format_recognition():
            """Format a JSON recognition result envelope."""
            payload = request.get_json(silent=True)
            if payload is None:
                raise InvalidRecognitionInputError("Request body must be a JSON recognition envelope")

            data = RecognitionResultSchema().load(payload)
            return self._respond(RawRecognitionResult.from_dict(data), "format")

        @self.app.route("/api/format/text", methods=["POST"])
        def format_plain_text():
            """Format a raw text/plain body."""
            text = request.get_data(as_text=True)
            return self._respond(RawRecognitionResult.from_text(text), "format_text")

    def _register_error_handlers(self):

        @self.app.errorhandler(RecipeProcessingError)
        def processing_error(e):
            self.logger.warning("Rejected request", code=e.error_code, trace_id=e.trace_id)
            return jsonify({"error": e.to_dict()}), 400

        @self.app.errorhandler(ValidationError)
        def validation_error(e):
            return jsonify(_error_body("VALIDATION_ERROR", "Invalid request body", e.messages)), 400

        @self.app.errorhandler(404)
        def not_found(e):
            return jsonify(_error_body("NOT_FOUND", "Endpoint not found")), 404

        @self.app.errorhandler(405)
        def method_not_allowed(e):
            return jsonify(_error_body("METHOD_NOT_ALLOWED", "Method not allowed")), 405

        @self.app.errorhandler(413)
        def too_large(e):
            return jsonify(_error_body("PAYLOAD_TOO_LARGE", "Request body too large")), 413

        @self.app.errorhandler(429)
        def rate_limit_exceeded(e):
            return jsonify(_error_body("RATE_LIMITED", "Rate limit exceeded")), 429

        @self.app.errorhandler(500)
        def internal_error(e):
            return jsonify(_error_body("INTERNAL_ERROR", "Internal server error")), 500

    def run(self, host: str = ApiConfig.API_HOST, port: int = ApiConfig.API_PORT, debug: bool = False):
        """
        Run the API server.

        Args:
            host: Host address
            port: Port number
            debug: Debug mode
        """
        self.logger.info("Starting recipe formatter API", host=host, port=port)
        self.app.run(host=host, port=port, debug=debug)


def create_app(config: Optional[Dict[str, Any]] = None) -> Flask:
    """Application factory."""
    return RecipeAPI(config).app


def main():
    """Main API server script."""
    import argparse

    parser = argparse.ArgumentParser(description="Recipe formatter API server")
    parser.add_argument("--host", default=ApiConfig.API_HOST, help="Host address")
    parser.add_argument("--port", type=int, default=ApiConfig.API_PORT, help="Port number")
    parser.add_argument("--debug", action="store_true", help="Debug mode")
    parser.add_argument("--config", help="Formatter configuration file (.json, .yaml)")

    args = parser.parse_args()

    api = RecipeAPI({"formatter_config_path": args.config} if args.config else None)
    api.run(host=args.host, port=args.port, debug=args.debug)


if __name__ == "__main__":
    main()
