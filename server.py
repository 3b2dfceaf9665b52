"""
Routine Advisor — Proxy Relay
Stateless endpoint that forwards chat messages to the completion API with
the server-held credential and returns the upstream JSON unchanged.

Usage:
    python server.py

Endpoint:
    POST http://localhost:8787/
    Body: {"messages": [{"role": "...", "content": "..."}, ...]}
"""

from datetime import datetime, timezone

import requests
from flask import Flask, request, jsonify
from flask_cors import CORS

from app_config import (
    PORT, DEBUG, OPENAI_API_KEY,
    CORS_ALLOWED_METHODS, CORS_ALLOWED_HEADERS,
)
from services.completion_forwarder import CompletionForwarder
from chat_logger import get_logger, redact_secret

logger = get_logger("routine_advisor")


def create_app(forwarder=None) -> Flask:
    """Build the relay app. `forwarder` defaults to a CompletionForwarder."""
    forwarder = forwarder or CompletionForwarder()

    app = Flask(__name__)
    CORS(
        app,
        origins="*",
        send_wildcard=True,
        methods=CORS_ALLOWED_METHODS,
        allow_headers=CORS_ALLOWED_HEADERS,
    )

    @app.errorhandler(405)
    def method_not_allowed(_error):
        logger.warning(f"{request.method} {request.path} | Method not allowed")
        return jsonify({"error": "Method not allowed"}), 405

    @app.route("/", methods=["POST"])
    def relay():
        """
        Forward a message list.

        Request:
            POST /
            {"messages": [{"role": "system", "content": "..."}, ...]}

        Response:
            200: upstream JSON (expects choices[0].message.content)
            400: {"error": "..."} for an unparsable body or missing messages
            500: upstream error JSON, or {"error": "..."} on transport failure
        """
        body = request.get_json(force=True, silent=True)
        if body is None:
            logger.warning("POST / | Invalid JSON body")
            return jsonify({"error": "Invalid JSON body"}), 400

        messages = body.get("messages") if isinstance(body, dict) else None
        if not isinstance(messages, list):
            logger.warning("POST / | Missing messages array")
            return jsonify({"error": "Missing messages array"}), 400

        logger.info(f"POST / | messages={len(messages)}")

        try:
            data, status = forwarder.forward(messages)
        except (requests.exceptions.RequestException, ValueError) as e:
            error_msg = redact_secret(str(e)) or "Request failed"
            logger.error(f"POST / | upstream call failed | error={error_msg}")
            return jsonify({"error": error_msg}), 500

        if status != 200:
            logger.warning(f"POST / | upstream returned an error | relay_status={status}")
        return jsonify(data), status

    @app.route("/health", methods=["GET"])
    def health():
        """Health check endpoint."""
        return jsonify({
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "model": getattr(forwarder, "model", None),
        })

    return app


app = create_app()


if __name__ == "__main__":
    print("=" * 60)
    print("  Routine Advisor — Proxy Relay")
    print("=" * 60)
    print()

    if not OPENAI_API_KEY:
        logger.warning("OPENAI_API_KEY is not set; upstream calls will be rejected")

    print(f"🚀 Starting relay on http://localhost:{PORT}")
    print(f"   POST http://localhost:{PORT}/")
    print(f"   GET  http://localhost:{PORT}/health")
    print()

    app.run(
        host="0.0.0.0",
        port=PORT,
        debug=DEBUG,
    )
