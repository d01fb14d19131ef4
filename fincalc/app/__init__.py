"""Application factory and app-wide configuration."""

import logging
from typing import Optional

from flask import Flask
from flask_cors import CORS

from fincalc.app.api.routes import api_bp
from fincalc.config import Settings, settings as default_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


def create_app(settings: Optional[Settings] = None) -> Flask:
    """Build the Flask app instance."""
    settings = settings or default_settings
    configure_logging(settings.log_level)

    app = Flask(__name__)
    app.config["DEBUG"] = settings.debug

    CORS(
        app,
        resources={r"/api/*": {"origins": settings.cors_origins}},
        supports_credentials=True,
    )

    app.register_blueprint(api_bp, url_prefix="/api")
    return app
