from delve.dungeon import PathFinder, TileType, find_path, is_passable, is_walkable_now
from delve.dungeon.pathfinding import chebyshev
from delve.dungeon.tiles import DoorState
from tests.dungeon_test_utils import open_grid


def test_diagonal_path_length():
    grid = open_grid()
    path = PathFinder.find_path(grid, (0, 0), (5, 3), is_passable)
    assert path is not None
    assert len(path) == 6
    assert path[0] == (0, 0) and path[-1] == (5, 3)
    for a, b in zip(path, path[1:]):
        assert chebyshev(a, b) == 1


def test_start_equals_goal():
    grid = open_grid()
    assert PathFinder.find_path(grid, (0, 0), (0, 0), is_passable) == [(0, 0)]


def test_enclosed_start_has_no_path():
    grid = open_grid()
    for x in range(3, 8):
        for y in range(3, 8):
            if x in (3, 7) or y in (3, 7):
                grid.set_type(x, y, TileType.HWALL)
    assert PathFinder.find_path(grid, (5, 5), (15, 5), is_passable) is None


def test_goal_is_always_enterable():
    grid = open_grid()
    grid.set_type(6, 2, TileType.VWALL)
    path = PathFinder.find_path(grid, (2, 2), (6, 2), is_passable)
    assert path is not None and path[-1] == (6, 2)


def test_goal_out_of_bounds():
    assert PathFinder.find_path(open_grid(), (0, 0), (50, 50), is_passable) is None


def test_start_out_of_bounds():
    grid = open_grid()
    assert PathFinder.find_path(grid, (-1, 0), (3, 0), is_passable) is None
    assert PathFinder.find_path(grid, (grid.width, 2), (grid.width - 3, 2), is_passable) is None
    assert PathFinder.find_path(grid, (-1, -1), (-1, -1), is_passable) is None


def test_detours_around_wall():
    grid = open_grid()
    for y in range(0, 9):
        grid.set_type(10, y, TileType.VWALL)
    path = PathFinder.find_path(grid, (5, 0), (15, 0), is_passable)
    assert path is not None
    assert (10, 9) in path
    assert all(grid.get_tile(x, y).typ != TileType.VWALL for x, y in path)


def test_paths_are_deterministic():
    grid = open_grid()
    first = PathFinder.find_path(grid, (1, 1), (12, 7), is_passable)
    for _ in range(3):
        assert PathFinder.find_path(grid, (1, 1), (12, 7), is_passable) == first


def test_max_nodes_limit():
    grid = open_grid()
    assert find_path(grid, (0, 0), (19, 9), max_nodes=2) is None
    assert find_path(grid, (0, 0), (19, 9)) is not None


def test_walkable_now_respects_door_state():
    grid = open_grid()
    for y in range(10):
        grid.set_type(10, y, TileType.VWALL)
    door = grid.get_tile_mut(10, 5)
    door.make_door(DoorState.CLOSED)
    assert PathFinder.find_path(grid, (5, 5), (15, 5), is_passable) is not None
    assert PathFinder.find_path(grid, (5, 5), (15, 5), is_walkable_now) is None
    door.open_door()
    assert PathFinder.find_path(grid, (5, 5), (15, 5), is_walkable_now) is not None


def test_secret_passages_are_structurally_passable():
    grid = open_grid()
    grid.set_type(4, 4, TileType.SDOOR)
    grid.set_type(5, 4, TileType.SCORR)
    assert is_passable(grid, 4, 4) and is_passable(grid, 5, 4)
    assert not is_walkable_now(grid, 4, 4)
    assert not is_walkable_now(grid, 5, 4)
    assert not is_passable(grid, -1, 4)
