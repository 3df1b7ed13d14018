import os
from dataclasses import dataclass, fields
from typing import Any, Mapping, Optional

COLNO = 80
ROWNO = 21
MAXRECT = 50
MAXNROFROOMS = 40
XLIM = 4
YLIM = 3


@dataclass
class DungeonConfig:
    width: int = COLNO
    height: int = ROWNO
    max_rects: int = MAXRECT
    max_rooms: int = MAXNROFROOMS
    xlim: int = XLIM
    ylim: int = YLIM
    room_attempts: int = 100
    landing_attempts: int = 200
    engraving_fade_turns: int = 250
    extra_corridors: bool = True
    enable_metrics: bool = True
    seed: Optional[Any] = None

    def __post_init__(self):
        for name in ("width", "height", "max_rects", "max_rooms", "room_attempts", "landing_attempts"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)!r}")
        if self.width < 20 or self.height < 10:
            raise ValueError(f"grid too small for room placement: {self.width}x{self.height}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "DungeonConfig":
        """Build a config from ``DELVE_*`` environment variables.

        e.g. ``DELVE_MAX_ROOMS=12`` or ``DELVE_EXTRA_CORRIDORS=0``. Explicit
        keyword overrides win over the environment.
        """
        env = os.environ if environ is None else environ
        values = _collect(env, "DELVE_")
        values.update(overrides)
        return cls(**values)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any], base: Optional["DungeonConfig"] = None) -> "DungeonConfig":
        """Apply ``DUNGEON_*`` keys (e.g. a Flask ``app.config``) on top of ``base``."""
        values = {f.name: getattr(base, f.name) for f in fields(cls)} if base else {}
        values.update(_collect(mapping, "DUNGEON_"))
        return cls(**values)


def _collect(mapping: Mapping[str, Any], prefix: str) -> dict:
    out = {}
    for f in fields(DungeonConfig):
        key = prefix + f.name.upper()
        if key not in mapping:
            continue
        raw = mapping[key]
        if f.name in ("extra_corridors", "enable_metrics"):
            if isinstance(raw, str):
                out[f.name] = raw.strip().lower() not in {"0", "false", "no", "off", ""}
            else:
                out[f.name] = bool(raw)
        elif f.name == "seed":
            out[f.name] = raw if raw not in (None, "") else None
        elif raw is None or raw == "":
            continue
        else:
            out[f.name] = int(raw)
    return out


__all__ = ["DungeonConfig", "COLNO", "ROWNO", "MAXRECT", "MAXNROFROOMS", "XLIM", "YLIM"]
