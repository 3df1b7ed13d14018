import pytest

from delve.dungeon.levels import (
    DEFAULT_BRANCHES,
    ChangeKind,
    DungeonBranch,
    Landing,
    LandingType,
    LevelChange,
    LevelID,
    absolute_depth,
    describe_level,
    item_difficulty,
    max_monster_level,
    short_level_name,
    special_level_name,
)

B = DungeonBranch


@pytest.mark.parametrize("text", ["mines", "MINES", " Mines ", "vlad_tower", "VLAD_TOWER"])
def test_branch_parse_is_case_insensitive(text):
    assert isinstance(DungeonBranch.parse(text), DungeonBranch)


def test_branch_parse_rejects_unknown():
    with pytest.raises(ValueError):
        DungeonBranch.parse("underdark")


def test_level_id_str_parse_and_order():
    lid = LevelID(B.MINES, 4)
    assert str(lid) == "MINES:4"
    assert LevelID.parse("mines:4") == lid
    assert sorted([LevelID(B.MAIN, 3), LevelID(B.MAIN, 1), LevelID(B.GEHENNOM, 2)]) == [
        LevelID(B.GEHENNOM, 2),
        LevelID(B.MAIN, 1),
        LevelID(B.MAIN, 3),
    ]
    with pytest.raises(ValueError):
        LevelID.parse("MAIN")


def test_level_change_constructors():
    assert LevelChange.next_level().kind == ChangeKind.NEXT_LEVEL
    assert LevelChange.prev_level().target is None
    tele = LevelChange.teleport(LevelID(B.MAIN, 9))
    assert tele.kind == ChangeKind.TELEPORT
    assert tele.landing == Landing.random()
    assert Landing.coordinate(3, 4).coord == (3, 4)
    assert Landing.connection(LevelID(B.MAIN, 2)).kind == LandingType.CONNECTION


def test_branch_table_depths():
    mines = DEFAULT_BRANCHES[B.MINES]
    assert mines.num_levels == 13
    assert mines.absolute_depth(1) == 3
    assert mines.relative_level(5) == 3
    assert mines.contains_depth(15) and not mines.contains_depth(16)
    assert mines.entry_level == LevelID(B.MAIN, 3)
    assert DEFAULT_BRANCHES[B.SOKOBAN].ascending
    assert DEFAULT_BRANCHES[B.GEHENNOM].is_hellish
    assert DEFAULT_BRANCHES[B.VLAD_TOWER].entry_level == LevelID(B.GEHENNOM, 16)
    assert DEFAULT_BRANCHES[B.MAIN].entry_level is None


def test_absolute_depth_falls_back_for_unknown_branch():
    assert absolute_depth(LevelID(B.GEHENNOM, 2)) == 26
    assert absolute_depth(LevelID(B.FORT_KNOX, 7)) == 7


@pytest.mark.parametrize(
    "level,name",
    [
        (LevelID(B.MAIN, 1), "Welcome Level"),
        (LevelID(B.MAIN, 5), "The Oracle"),
        (LevelID(B.MAIN, 20), "Castle"),
        (LevelID(B.MAIN, 2), None),
        (LevelID(B.MINES, 6), "Minetown"),
        (LevelID(B.MINES, 13), "Mine's End"),
        (LevelID(B.MINES, 2), None),
        (LevelID(B.GEHENNOM, 11), "Juiblex's Swamp"),
        (LevelID(B.GEHENNOM, 26), "Sanctum"),
        (LevelID(B.ASTRAL, 1), "The Astral Plane"),
        (LevelID(B.QUEST, 1), None),
    ],
    ids=str,
)
def test_special_level_names(level, name):
    assert special_level_name(level) == name


def test_describe_level():
    assert describe_level(LevelID(B.MAIN, 1)) == "The Dungeons of Doom: Welcome Level (Depth 1)"
    assert describe_level(LevelID(B.MINES, 2)) == "The Gnomish Mines: Level 2 (Depth 4)"
    assert describe_level(LevelID(B.FORT_KNOX, 1)) == "Unknown: Level 1 (Depth 1)"


def test_short_level_names():
    assert short_level_name(LevelID(B.MAIN, 7)) == "Dlvl:7"
    assert short_level_name(LevelID(B.MINES, 2)) == "Mine:2"
    assert short_level_name(LevelID(B.SOKOBAN, 3)) == "Sok:3"
    assert short_level_name(LevelID(B.GEHENNOM, 2)) == "Geh:26"
    assert short_level_name(LevelID(B.ASTRAL, 1)) == "Astral"
    assert short_level_name(LevelID(B.FORT_KNOX, 1)) == "Lvl:1"


def test_difficulty_helpers():
    assert max_monster_level(1) == 6
    assert max_monster_level(60) == 49
    assert item_difficulty(3) == 5
    assert item_difficulty(-10) == 1
