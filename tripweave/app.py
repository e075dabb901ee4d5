# tripweave/app.py
"""Flask application factory."""

import logging
import os

from flask import Flask, jsonify
from flask_cors import CORS

from tripweave.api.config import get_cors_origins
from tripweave.routes.base import register_error_handlers
from tripweave.routes.geo import create_geo_blueprint
from tripweave.routes.travel import create_travel_blueprint

logger = logging.getLogger(__name__)


def create_app(service=None, resolver_factory=None) -> Flask:
    """Build the API application.

    Args:
        service: Optional ItineraryService, mainly for tests
        resolver_factory: Optional callable returning a GeocodeResolver

    Returns:
        Configured Flask app
    """
    app = Flask(__name__)

    flask_secret_key = os.getenv("FLASK_SECRET_KEY") or os.urandom(32).hex()
    if "FLASK_SECRET_KEY" not in os.environ:
        logger.warning("No FLASK_SECRET_KEY found. Generated a temporary key.")
    app.secret_key = flask_secret_key

    # CORS for local dev / cross-origin front-end requests
    CORS(app, origins=get_cors_origins())

    app.register_blueprint(create_geo_blueprint(resolver_factory))
    app.register_blueprint(create_travel_blueprint(service))
    register_error_handlers(app)

    @app.route("/health")
    def health():
        """Health check endpoint."""
        return jsonify({"status": "ok", "service": "tripweave"})

    return app


__all__ = ["create_app"]
