import pytest

from delve.dungeon import Grid, LevelID, DungeonBranch, Room, TileFlags, TileType
from delve.dungeon.rooms import stamp_room
from delve.dungeon.tiles import EngraveType


@pytest.mark.parametrize("x,y", [(-1, 0), (0, -1), (80, 0), (0, 21), (200, 200)])
def test_out_of_bounds_access_is_none(x, y):
    grid = Grid()
    assert grid.get_tile(x, y) is None
    assert grid.get_tile_mut(x, y) is None
    assert grid.set_type(x, y, TileType.ROOM) is False


def test_default_dimensions_and_stone():
    grid = Grid()
    assert (grid.width, grid.height) == (80, 21)
    assert grid.get_tile(79, 20).typ == TileType.STONE


def test_mutation_through_get_tile_mut():
    grid = Grid(10, 10)
    grid.get_tile_mut(3, 4).typ = TileType.FOUNTAIN
    assert grid.get_tile(3, 4).typ == TileType.FOUNTAIN
    assert grid.find_first(TileType.FOUNTAIN) == (3, 4)
    assert grid.find_first(TileType.ALTAR) is None


def test_light_box_outside_rooms():
    grid = Grid(10, 10)
    assert grid.light_room_at(5, 5) == 25
    assert grid.lit_count() == 25
    assert grid.get_tile(3, 3).lit and grid.get_tile(7, 7).lit
    assert not grid.get_tile(8, 5).lit


def test_light_box_clipped_at_corner():
    grid = Grid(10, 10)
    assert grid.light_room_at(0, 0) == 9
    assert grid.light_room_at(-1, 0) == 0


def test_light_whole_room_including_walls():
    grid = Grid(12, 12)
    stamp_room(grid, Room(2, 2, 4, 4, roomno=1))
    assert grid.get_tile(1, 1).typ == TileType.TLCORNER
    assert grid.light_room_at(3, 3) == 25
    assert grid.get_tile(1, 1).lit and grid.get_tile(5, 5).lit
    assert not grid.get_tile(6, 6).lit
    assert grid.tiles_of_room(1) and len(grid.tiles_of_room(1)) == 25


def test_stamp_room_walls_and_flags():
    grid = Grid(12, 12)
    stamp_room(grid, Room(2, 2, 4, 3, roomno=4, lit=True))
    assert grid.get_tile(3, 1).typ == TileType.HWALL
    assert grid.get_tile(3, 1).has_flag(TileFlags.HORIZONTAL)
    assert grid.get_tile(1, 2).typ == TileType.VWALL
    assert grid.get_tile(5, 4).typ == TileType.BRCORNER
    assert grid.get_tile(3, 2).typ == TileType.ROOM
    assert grid.get_tile(3, 2).roomno == 4
    assert grid.get_tile(3, 2).lit


def test_portals():
    grid = Grid(10, 10)
    target = LevelID(DungeonBranch.MAIN, 2)
    assert grid.add_portal(4, 4, target)
    assert not grid.add_portal(40, 4, target)
    assert grid.portal_at(4, 4) == target
    assert grid.portal_at(5, 5) is None
    assert grid.portal_to(target) == (4, 4)
    assert grid.portal_to(LevelID(DungeonBranch.MAIN, 3)) is None


def test_engravings_fade_by_method():
    grid = Grid(10, 10)
    grid.set_type(2, 2, TileType.ROOM)
    grid.set_type(3, 3, TileType.ROOM)
    assert grid.engrave(2, 2, "dusty", EngraveType.DUST)
    assert grid.engrave(3, 3, "burnt", EngraveType.BURNED)
    assert not grid.engrave(5, 5, "stone", EngraveType.DUST)
    assert grid.age_engravings(2, fade_after=3) == 0
    assert grid.age_engravings(2, fade_after=3) == 1
    assert grid.get_tile(2, 2).engraving is None
    assert grid.get_tile(3, 3).engraving.age == 4


def test_ascii_and_json_export():
    grid = Grid(12, 8)
    stamp_room(grid, Room(2, 2, 4, 3, roomno=1))
    rows = grid.to_ascii().split("\n")
    assert len(rows) == 8
    assert rows[0] == ""
    assert rows[1] == " -----"
    assert rows[2] == " |...|"
    data = grid.to_json()
    assert data["width"] == 12 and data["height"] == 8
    assert data["rows"][2][2] == int(TileType.ROOM)
    assert data["portals"] == []
