import pytest

from delve.dungeon import (
    Dungeon,
    DungeonBranch,
    DungeonConfig,
    Landing,
    LevelChange,
    LevelID,
    TileType,
    is_passable,
)
from delve.dungeon.tiles import EngraveType
from delve.utils.rng import coerce_seed

B = DungeonBranch
MAIN1, MAIN2, MAIN3 = LevelID(B.MAIN, 1), LevelID(B.MAIN, 2), LevelID(B.MAIN, 3)


def test_starts_on_welcome_level(dungeon):
    assert dungeon.current_level == MAIN1
    assert dungeon.player_pos == dungeon.current.start_pos
    assert dungeon.num_explored_levels() == 1
    assert dungeon.describe_current() == "The Dungeons of Doom: Welcome Level (Depth 1)"
    assert dungeon.short_level_name() == "Dlvl:1"
    assert dungeon.deepest_reached == 1
    assert dungeon.at_branch_top() and not dungeon.at_branch_bottom()


def test_string_seed_is_hashed():
    assert Dungeon(seed="crypt").seed == coerce_seed("crypt")


def test_config_seed_used_when_none_given():
    assert Dungeon(config=DungeonConfig(seed=99)).seed == 99


def test_invalid_start_rejected():
    with pytest.raises(ValueError):
        Dungeon(seed=1, start=LevelID(B.MAIN, 31))


def test_prev_from_top_is_rejected(dungeon):
    pos = dungeon.player_pos
    assert dungeon.change_level(LevelChange.prev_level()) is None
    assert dungeon.current_level == MAIN1
    assert dungeon.player_pos == pos


def test_next_lands_on_up_stairs_and_prev_returns_to_down_stairs(dungeon):
    down = dungeon.current.down_stairs
    level_id, pos = dungeon.change_level(LevelChange.next_level())
    assert level_id == MAIN2
    assert pos == dungeon.current.up_stairs
    assert dungeon.current.grid.get_tile(*pos).typ == TileType.STAIRS_UP

    level_id, pos = dungeon.change_level(LevelChange.prev_level())
    assert level_id == MAIN1
    assert pos == down


def test_visited_levels_are_cached(dungeon):
    first = dungeon.current
    x, y = first.grid.find_first(TileType.ROOM)
    first.grid.engrave(x, y, "here", EngraveType.BURNED)
    dungeon.change_level(LevelChange.next_level())
    dungeon.change_level(LevelChange.prev_level())
    assert dungeon.current is first
    assert dungeon.get_level(MAIN1).grid.get_tile(x, y).engraving.text == "here"
    assert dungeon.all_level_ids() == [MAIN1, MAIN2]
    assert dungeon.level_exists(MAIN2) and not dungeon.level_exists(MAIN3)


def test_use_stairs_follows_portals(dungeon):
    assert dungeon.use_stairs(*dungeon.current.down_stairs)[0] == MAIN2
    assert dungeon.use_stairs(*dungeon.current.down_stairs)[0] == MAIN3
    level_id, pos = dungeon.use_stairs(*dungeon.current.up_stairs)
    assert level_id == MAIN2
    assert pos == dungeon.current.down_stairs


def test_stair_change_on_plain_floor_is_none(dungeon):
    level = dungeon.current
    floor = next(
        (x, y) for x, y, t in level.grid.tiles() if t.typ == TileType.ROOM and level.grid.portal_at(x, y) is None
    )
    assert dungeon.stair_change(*floor) is None
    assert dungeon.use_stairs(*floor) is None
    assert dungeon.stair_change(-1, -1) is None


def test_stair_change_defaults_to_player_position(dungeon):
    dungeon.player_pos = dungeon.current.down_stairs
    change = dungeon.stair_change()
    assert change is not None and change.target == MAIN2


def test_teleport_to_coordinate(dungeon):
    level_id, pos = dungeon.change_level(LevelChange.teleport(LevelID(B.MAIN, 4), Landing.coordinate(2, 2)))
    assert level_id == LevelID(B.MAIN, 4)
    assert pos == (2, 2)
    assert dungeon.deepest_reached == 4


def test_teleport_out_of_bounds_coordinate_falls_back_to_start(dungeon):
    _, pos = dungeon.change_level(LevelChange.teleport(MAIN3, Landing.coordinate(500, 500)))
    assert pos == dungeon.current.start_pos


def test_teleport_random_lands_on_passable_cell(dungeon):
    _, pos = dungeon.change_level(LevelChange.teleport(LevelID(B.MAIN, 5)))
    grid = dungeon.current.grid
    assert is_passable(grid, *pos) or pos == dungeon.current.start_pos


def test_teleport_connection_landing(dungeon):
    _, pos = dungeon.change_level(LevelChange.teleport(MAIN3, Landing.connection(MAIN2)))
    assert pos == dungeon.current.up_stairs
    # no portal from MAIN:3 leads to MAIN:1, so the level start is used
    dungeon.change_level(LevelChange.teleport(MAIN1, Landing.stairs_down()))
    _, pos = dungeon.change_level(LevelChange.teleport(MAIN3, Landing.connection(MAIN1)))
    assert pos == dungeon.current.start_pos


@pytest.mark.parametrize(
    "target", [LevelID(B.MAIN, 0), LevelID(B.MAIN, 31), LevelID(B.MINES, 14), LevelID(B.FORT_KNOX, 1)], ids=str
)
def test_teleport_to_missing_level_is_rejected(dungeon, target):
    assert dungeon.change_level(LevelChange.teleport(target)) is None
    assert dungeon.current_level == MAIN1
    assert not dungeon.level_exists(target)


def test_same_seed_same_journey():
    maps = []
    for _ in range(2):
        d = Dungeon(seed=4242)
        d.use_stairs(*d.current.down_stairs)
        d.change_level(LevelChange.teleport(LevelID(B.MAIN, 7)))
        maps.append((d.player_pos, [d.get_level(lid).to_ascii() for lid in d.all_level_ids()]))
    assert maps[0] == maps[1]


def test_gnomish_mines_round_trip(dungeon):
    dungeon.change_level(LevelChange.teleport(MAIN3, Landing.stairs_up()))
    entrance = dungeon.current.branch_stairs[LevelID(B.MINES, 1)]
    level_id, pos = dungeon.use_stairs(*entrance)
    assert level_id == LevelID(B.MINES, 1)
    assert dungeon.in_mines() and not dungeon.in_hell()
    assert dungeon.current_depth() == 3
    assert dungeon.next_level_up() == MAIN3
    assert dungeon.next_level_down() == LevelID(B.MINES, 2)
    assert dungeon.current.grid.portal_at(*pos) == MAIN3

    level_id, pos = dungeon.use_stairs(*pos)
    assert level_id == MAIN3
    assert pos == entrance


def test_sokoban_portal_back_to_main(dungeon):
    main6 = LevelID(B.MAIN, 6)
    dungeon.change_level(LevelChange.teleport(main6, Landing.stairs_up()))
    entrance = dungeon.current.branch_stairs[LevelID(B.SOKOBAN, 1)]
    level_id, pos = dungeon.use_stairs(*entrance)
    assert level_id == LevelID(B.SOKOBAN, 1)
    assert dungeon.in_sokoban()
    assert dungeon.current.grid.get_tile(*pos).typ == TileType.STAIRS_DOWN

    level_id, pos = dungeon.use_stairs(*pos)
    assert level_id == main6
    assert pos == entrance


def test_branch_predicates():
    d = Dungeon(seed=5, start=LevelID(B.GEHENNOM, 2))
    assert d.in_hell() and d.current_depth() == 26
    assert d.next_level_up() == LevelID(B.GEHENNOM, 1)
    assert Dungeon(seed=5, start=LevelID(B.QUEST, 1)).in_quest()
    tower = Dungeon(seed=5, start=LevelID(B.VLAD_TOWER, 4))
    assert tower.on_tower() and tower.at_branch_bottom()
    assert tower.next_level_down() is None
    assert Dungeon(seed=5).next_level_up() is None


def test_level_difficulty(dungeon):
    assert dungeon.level_difficulty() == 1
    assert dungeon.level_difficulty(player_level=10) == 3
    dungeon.amulet_obtained = True
    assert dungeon.level_difficulty() == 6
    dungeon.amulet_obtained = False
    dungeon.difficulty_offset = -5
    assert dungeon.level_difficulty() == 1


def test_advance_turn_fades_dust_engravings():
    d = Dungeon(seed=3, config=DungeonConfig(engraving_fade_turns=10))
    grid = d.current.grid
    cells = [(x, y) for x, y, t in grid.tiles() if t.typ == TileType.ROOM][:2]
    grid.engrave(*cells[0], "dust", EngraveType.DUST)
    grid.engrave(*cells[1], "fire", EngraveType.BURNED)
    assert d.advance_turn(10) == 0
    assert d.advance_turn() == 1
    assert d.turn == 11
    assert grid.get_tile(*cells[0]).engraving is None
    assert grid.get_tile(*cells[1]).engraving.text == "fire"


def test_light_at_player(dungeon):
    assert dungeon.light_at(*dungeon.player_pos) > 0
    assert dungeon.light_at(-3, -3) == 0


def test_to_json(dungeon):
    data = dungeon.to_json()
    assert data["current"] == "MAIN:1"
    assert data["seed"] == dungeon.seed
    assert data["player"] == list(dungeon.player_pos)
    assert data["levels"] == ["MAIN:1"]
    assert data["turn"] == 0
