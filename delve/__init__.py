"""
project: Delve
module: __init__.py
License: MIT

Flask application factory.

Configuration is sourced from environment variables (``DUNGEON_*``) with
defaults suitable for development, then from ``config_overrides``. A local
``instance/`` directory holds runtime files such as the rotating log.
"""

import logging
import os
import uuid

from dotenv import load_dotenv
from flask import Flask, jsonify

__all__ = ["create_app"]

_ENV_KEYS = (
    "DUNGEON_SEED",
    "DUNGEON_WIDTH",
    "DUNGEON_HEIGHT",
    "DUNGEON_MAX_ROOMS",
    "DUNGEON_MAX_RECTS",
    "DUNGEON_EXTRA_CORRIDORS",
    "DUNGEON_ENABLE_METRICS",
    "DUNGEON_LANDING_ATTEMPTS",
    "DUNGEON_ENGRAVING_FADE_TURNS",
)


def create_app(config_overrides=None) -> Flask:
    """Build the Flask app with the dungeon blueprint registered.

    The dungeon itself is created lazily on the first request that needs it
    (or eagerly by ``POST /api/dungeon/seed``) and stored in
    ``app.extensions["delve.dungeon"]``.
    """
    # Load .env if present so DUNGEON_SEED etc. can be supplied without
    # exporting shell variables during development.
    load_dotenv()

    app = Flask(__name__, instance_relative_config=True)
    try:
        os.makedirs(app.instance_path, exist_ok=True)
    except OSError:
        # read-only deployments still serve the API; only file logging is lost
        pass

    app.config.update(
        JSON_SORT_KEYS=False,
        DUNGEON_ENABLE_METRICS=os.getenv("DUNGEON_ENABLE_METRICS", "1") == "1",
    )
    for key in _ENV_KEYS:
        value = os.getenv(key)
        if value is not None:
            app.config[key] = value
    if config_overrides:
        app.config.update(config_overrides)

    from delve.routes.dungeon_api import bp_dungeon

    app.register_blueprint(bp_dungeon)

    @app.errorhandler(500)
    def internal_error(e):
        error_id = uuid.uuid4().hex[:8]
        logging.exception("Unhandled exception (id=%s)", error_id)
        return jsonify({"error": "internal server error", "error_id": error_id}), 500

    return app
