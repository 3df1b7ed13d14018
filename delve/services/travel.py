"""Agent travel helper.

Responsibility: move turn-stepped agents (monsters, followers, the player in
travel mode) one cell toward their goal per call.

Design goals:
 - Pure function style: accepts agent dicts (mutable) and a Grid.
 - Agents are processed in ascending ``id`` order so the outcome for a given
   input never depends on dict or list ordering.
 - An agent never steps onto a cell another agent occupies (or one listed in
   ``blocked``); it waits instead and tries again next turn.
 - No randomness: every step comes from the pathfinder's deterministic
   tie-breaking.

Agent dict shape: ``{"id": int, "x": int, "y": int, "goal": [x, y]}``;
``goal`` is optional and an agent without one stays put.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from ..dungeon.grid import Grid
from ..dungeon.pathfinding import CanPass, PathFinder, is_walkable_now

Coord = Tuple[int, int]


def next_step(grid: Grid, start: Coord, goal: Coord, can_pass: CanPass = is_walkable_now) -> Optional[Coord]:
    """The cell one move along the shortest path, or None (arrived / no path)."""
    path = PathFinder.find_path(grid, start, goal, can_pass)
    if not path or len(path) < 2:
        return None
    return path[1]


def _goal_of(agent: Dict[str, Any]) -> Optional[Coord]:
    goal = agent.get("goal")
    if goal is None:
        return None
    return int(goal[0]), int(goal[1])


def advance_agents(
    grid: Grid,
    agents: List[Dict[str, Any]],
    can_pass: CanPass = is_walkable_now,
    blocked: Optional[Iterable[Coord]] = None,
) -> List[int]:
    """Step every agent toward its goal once; returns the ids that moved.

    Positions are updated in place. Occupancy is re-evaluated after each move,
    so an agent may step into a cell vacated earlier in the same turn.
    """
    fixed: Set[Coord] = {(int(x), int(y)) for x, y in (blocked or ())}
    occupied: Dict[Coord, int] = {(int(a["x"]), int(a["y"])): a["id"] for a in agents}
    moved: List[int] = []
    for agent in sorted(agents, key=lambda a: a["id"]):
        goal = _goal_of(agent)
        if goal is None:
            continue
        pos = (int(agent["x"]), int(agent["y"]))
        step = next_step(grid, pos, goal, can_pass)
        if step is None:
            continue
        if step in fixed or occupied.get(step, agent["id"]) != agent["id"]:
            continue
        del occupied[pos]
        occupied[step] = agent["id"]
        agent["x"], agent["y"] = step
        moved.append(agent["id"])
    return moved


__all__ = ["next_step", "advance_agents"]
