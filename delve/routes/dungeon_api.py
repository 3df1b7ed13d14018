"""
project: Delve
module: dungeon_api.py
License: MIT

Dungeon inspection and navigation API routes.

One in-process :class:`~delve.dungeon.dungeon.Dungeon` lives in
``app.extensions["delve.dungeon"]``; every handler holds ``_dungeon_lock``
while it touches it, so concurrent requests never interleave Rng draws.
"""

import threading

from flask import Blueprint, current_app, jsonify, request

from delve.dungeon import (
    ChangeKind,
    Dungeon,
    DungeonBranch,
    DungeonConfig,
    EngraveType,
    Landing,
    LandingType,
    LevelChange,
    LevelID,
    PathFinder,
    is_passable,
    is_walkable_now,
)
from delve.logging_utils import get_logger

log = get_logger("delve.api")

bp_dungeon = Blueprint("dungeon", __name__)

_dungeon_lock = threading.Lock()

EXTENSION_KEY = "delve.dungeon"

_PATH_MODES = {"structural": is_passable, "walk": is_walkable_now}
_DOOR_ACTIONS = ("open", "close", "lock", "unlock", "break", "reveal")


class BadRequest(ValueError):
    """Client input that maps to HTTP 400."""


def get_dungeon() -> Dungeon:
    dungeon = current_app.extensions.get(EXTENSION_KEY)
    if dungeon is None:
        dungeon = build_dungeon(current_app.config.get("DUNGEON_SEED"))
    return dungeon


def build_dungeon(seed=None) -> Dungeon:
    """Create a fresh dungeon from the app's ``DUNGEON_*`` config and install it."""
    config = DungeonConfig.from_mapping(current_app.config)
    dungeon = Dungeon(seed=seed, config=config)
    current_app.extensions[EXTENSION_KEY] = dungeon
    return dungeon


def _payload() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise BadRequest("JSON body must be an object")
    return data


def _int(data: dict, key: str, default=None) -> int:
    raw = data.get(key, default)
    if raw is None:
        raise BadRequest(f"missing '{key}'")
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise BadRequest(f"'{key}' must be an integer") from None


def _coord(data: dict, key: str) -> tuple:
    raw = data.get(key)
    if not isinstance(raw, (list, tuple)) or len(raw) != 2:
        raise BadRequest(f"'{key}' must be [x, y]")
    try:
        return int(raw[0]), int(raw[1])
    except (TypeError, ValueError):
        raise BadRequest(f"'{key}' must be [x, y]") from None


def _position(data: dict, dungeon: Dungeon) -> tuple:
    px, py = dungeon.player_pos
    return _int(data, "x", px), _int(data, "y", py)


def _parse_change(data: dict) -> LevelChange:
    kind = str(data.get("change", "")).strip().lower()
    if kind == ChangeKind.NEXT_LEVEL.value:
        return LevelChange.next_level()
    if kind == ChangeKind.PREV_LEVEL.value:
        return LevelChange.prev_level()
    if kind != ChangeKind.TELEPORT.value:
        raise BadRequest("'change' must be one of next, prev, teleport")
    try:
        branch = DungeonBranch.parse(data.get("branch", "main"))
    except ValueError as exc:
        raise BadRequest(str(exc)) from None
    target = LevelID(branch, _int(data, "depth"))
    landing_name = str(data.get("landing", LandingType.RANDOM.value)).strip().lower()
    try:
        landing_kind = LandingType(landing_name)
    except ValueError:
        raise BadRequest(f"unknown landing: {landing_name!r}") from None
    if landing_kind == LandingType.COORDINATE:
        landing = Landing.coordinate(_int(data, "x"), _int(data, "y"))
    elif landing_kind == LandingType.CONNECTION:
        try:
            landing = Landing.connection(LevelID.parse(data["source"])) if data.get("source") else Landing(landing_kind)
        except ValueError as exc:
            raise BadRequest(str(exc)) from None
    else:
        landing = Landing(landing_kind)
    return LevelChange.teleport(target, landing)


def _level_payload(dungeon: Dungeon) -> dict:
    data = dungeon.current.to_json()
    data["description"] = dungeon.describe_current()
    data["short_name"] = dungeon.short_level_name()
    data["player"] = list(dungeon.player_pos)
    return data


@bp_dungeon.errorhandler(BadRequest)
def _bad_request(exc):
    return jsonify({"error": str(exc)}), 400


@bp_dungeon.route("/api/dungeon/level")
def dungeon_level():
    """Current level: grid, rooms, stairs and the player's position."""
    with _dungeon_lock:
        return jsonify(_level_payload(get_dungeon()))


@bp_dungeon.route("/api/dungeon/level/ascii")
def dungeon_level_ascii():
    with _dungeon_lock:
        dungeon = get_dungeon()
        return jsonify({"level": str(dungeon.current_level), "ascii": dungeon.current.to_ascii()})


@bp_dungeon.route("/api/dungeon/seed", methods=["POST"])
def dungeon_seed():
    """Rebuild the dungeon.

    Body JSON (optional): ``{"seed": <int|str|null>}``; a null or missing seed
    picks a random one. Response: ``{"seed": <int>, "level": "MAIN:1"}``.
    """
    data = _payload()
    seed = data.get("seed")
    if isinstance(seed, bool) or (seed is not None and not isinstance(seed, (int, str))):
        raise BadRequest("'seed' must be an integer or string")
    with _dungeon_lock:
        dungeon = build_dungeon(seed)
        log.info(event="dungeon_reseeded", seed=dungeon.seed)
        return jsonify({"seed": dungeon.seed, "level": str(dungeon.current_level)})


@bp_dungeon.route("/api/dungeon/stairs", methods=["POST"])
def dungeon_stairs():
    """Use the stairs or portal at ``x``/``y`` (default: the player's cell)."""
    data = _payload()
    with _dungeon_lock:
        dungeon = get_dungeon()
        x, y = _position(data, dungeon)
        result = dungeon.use_stairs(x, y)
        if result is None:
            return jsonify({"error": "no usable stairs here", "level": str(dungeon.current_level)}), 409
        level_id, pos = result
        return jsonify({"level": str(level_id), "x": pos[0], "y": pos[1], "description": dungeon.describe_current()})


@bp_dungeon.route("/api/dungeon/change", methods=["POST"])
def dungeon_change():
    """Explicit level change: next, prev or teleport (branch/depth/landing)."""
    change = _parse_change(_payload())
    with _dungeon_lock:
        dungeon = get_dungeon()
        result = dungeon.change_level(change)
        if result is None:
            return jsonify({"error": "level does not exist", "level": str(dungeon.current_level)}), 409
        level_id, pos = result
        return jsonify({"level": str(level_id), "x": pos[0], "y": pos[1], "description": dungeon.describe_current()})


@bp_dungeon.route("/api/dungeon/path", methods=["POST"])
def dungeon_path():
    data = _payload()
    start = _coord(data, "start")
    goal = _coord(data, "goal")
    mode = str(data.get("mode", "structural")).lower()
    can_pass = _PATH_MODES.get(mode)
    if can_pass is None:
        raise BadRequest("'mode' must be structural or walk")
    with _dungeon_lock:
        grid = get_dungeon().current.grid
        path = PathFinder.find_path(grid, start, goal, can_pass)
    if path is None:
        return jsonify({"path": None, "length": None})
    return jsonify({"path": [list(p) for p in path], "length": len(path) - 1})


@bp_dungeon.route("/api/dungeon/light", methods=["POST"])
def dungeon_light():
    data = _payload()
    with _dungeon_lock:
        dungeon = get_dungeon()
        x, y = _position(data, dungeon)
        touched = dungeon.light_at(x, y)
        return jsonify({"lit": touched, "lit_total": dungeon.current.grid.lit_count()})


@bp_dungeon.route("/api/dungeon/door", methods=["POST"])
def dungeon_door():
    """Door interaction: ``{"x", "y", "action": open|close|lock|unlock|break|reveal}``."""
    data = _payload()
    action = str(data.get("action", "")).lower()
    if action not in _DOOR_ACTIONS:
        raise BadRequest("'action' must be one of " + ", ".join(_DOOR_ACTIONS))
    with _dungeon_lock:
        dungeon = get_dungeon()
        x, y = _position(data, dungeon)
        tile = dungeon.current.grid.get_tile_mut(x, y)
        if tile is None:
            raise BadRequest("coordinates out of bounds")
        handler = tile.reveal if action == "reveal" else getattr(tile, f"{action}_door")
        changed = handler()
        return jsonify({"changed": changed, "tile": tile.to_dict()}), (200 if changed else 409)


@bp_dungeon.route("/api/dungeon/engrave", methods=["POST"])
def dungeon_engrave():
    data = _payload()
    text = str(data.get("text", "")).strip()
    if not text:
        raise BadRequest("missing 'text'")
    try:
        method = EngraveType(str(data.get("method", "dust")).lower())
    except ValueError:
        raise BadRequest("unknown engraving method") from None
    with _dungeon_lock:
        dungeon = get_dungeon()
        x, y = _position(data, dungeon)
        if not dungeon.current.grid.engrave(x, y, text, method):
            return jsonify({"error": "cannot engrave here"}), 409
        return jsonify({"x": x, "y": y, "engraving": dungeon.current.grid.get_tile(x, y).engraving.to_dict()})


@bp_dungeon.route("/api/dungeon/turn", methods=["POST"])
def dungeon_turn():
    data = _payload()
    turns = _int(data, "turns", 1)
    if turns < 1:
        raise BadRequest("'turns' must be positive")
    with _dungeon_lock:
        dungeon = get_dungeon()
        faded = dungeon.advance_turn(turns)
        return jsonify({"turn": dungeon.turn, "faded": faded})


@bp_dungeon.route("/api/dungeon/metrics")
def dungeon_metrics():
    with _dungeon_lock:
        dungeon = get_dungeon()
        return jsonify({"level": str(dungeon.current_level), "metrics": dungeon.current.metrics})


@bp_dungeon.route("/api/dungeon/levels")
def dungeon_levels():
    with _dungeon_lock:
        dungeon = get_dungeon()
        levels = [
            {
                "level": str(lid),
                "description": dungeon.describe_level(lid),
                "type": dungeon.get_level(lid).level_type.value,
                "current": lid == dungeon.current_level,
            }
            for lid in dungeon.all_level_ids()
        ]
        return jsonify({"levels": levels, "deepest_reached": dungeon.deepest_reached, "seed": dungeon.seed})
