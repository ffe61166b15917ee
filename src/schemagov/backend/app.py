"""Flask application factory for the schemagov HTTP API."""

from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from schemagov.backend.services.endpoint_service import check_health
from schemagov.config import Config

logger = logging.getLogger(__name__)


def register_error_handlers(app: Flask) -> None:
    """Register consistent JSON error handlers."""

    @app.errorhandler(400)
    def bad_request(exc):
        return jsonify({"error": str(exc.description)}), 400

    @app.errorhandler(404)
    def not_found(exc):
        return jsonify({"error": "Resource not found"}), 404

    @app.errorhandler(Exception)
    def unhandled(exc):
        app.logger.exception("Unhandled exception")
        return jsonify({"error": "Internal server error"}), 500


def create_app(config_class: type[Config] = Config) -> Flask:
    """Create and configure the Flask application.

    Parameters
    ----------
    config_class:
        Configuration class (default :class:`Config`).

    Returns
    -------
    Flask
        Configured Flask application.
    """
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.config["CONFIG_CLASS"] = config_class
    # Tests install an httpx.MockTransport here
    app.config.setdefault("SPARQL_TRANSPORT", None)

    # ── Blueprints ────────────────────────────────────────────────────
    from schemagov.backend.routes.tools import tools_bp

    app.register_blueprint(tools_bp, url_prefix="/api/tools")

    # ── Error handlers ────────────────────────────────────────────────
    register_error_handlers(app)

    # ── Health check ──────────────────────────────────────────────────
    @app.route("/api/health")
    def health():
        payload = {"status": "ok"}
        if request.args.get("probe") == "1":
            payload["sparql"] = check_health(config_class.SPARQL_ENDPOINT)
        return jsonify(payload)

    logger.info("HTTP API ready (endpoint %s)", config_class.SPARQL_ENDPOINT)
    return app


if __name__ == "__main__":
    create_app().run(host="127.0.0.1", port=5000, debug=True)
