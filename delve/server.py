"""
project: Delve
module: server.py
License: MIT

Server bootstrap: logging setup and the development HTTP server.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler

from delve import create_app
from delve.logging_utils import get_logger
from delve.routes.dungeon_api import build_dungeon

log = get_logger("delve.server")


def start_server(host="0.0.0.0", port=5000, debug: bool = False, seed=None):  # pragma: no cover (runtime only)
    """Build the app, generate the first level and serve the JSON API.

    When debug=True, Flask's debugger and reloader provide verbose tracebacks.
    """
    overrides = {"DUNGEON_SEED": seed} if seed is not None else None
    app = create_app(overrides)
    _configure_logging(app.instance_path)
    with app.app_context():
        dungeon = build_dungeon(app.config.get("DUNGEON_SEED"))
        log.info(event="dungeon_ready", seed=dungeon.seed, level_id=str(dungeon.current_level))
    try:
        print(f"[INFO] Starting dungeon server on {host}:{port}")
        app.run(host=host, port=port, debug=debug)
    except KeyboardInterrupt:
        print("\n[INFO] Server stopped by user (Ctrl+C)")
        sys.exit(0)


def _configure_logging(log_dir: str) -> str:
    """Configure logging to both console and a rotating file in ``log_dir``.

    The file is ``delve.log``; a few backups are kept to bound growth.
    Returns the log file path.
    """
    try:
        os.makedirs(log_dir, exist_ok=True)
    except OSError:
        pass
    log_path = os.path.join(log_dir, "delve.log")

    root = logging.getLogger()
    root.setLevel(logging.INFO)
    formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    file_handler = RotatingFileHandler(log_path, maxBytes=1_000_000, backupCount=3)
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(formatter)

    console = logging.StreamHandler()
    console.setLevel(logging.INFO)
    console.setFormatter(formatter)

    # Avoid duplicate handlers if reconfigured
    for h in list(root.handlers):
        root.removeHandler(h)

    root.addHandler(file_handler)
    root.addHandler(console)
    return log_path
