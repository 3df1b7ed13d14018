import pytest

from delve.dungeon import DungeonConfig, Grid
from delve.dungeon.rect import NhRect, RectTracker, intersect
from delve.dungeon.rooms import create_room
from delve.utils.rng import Rng


def test_tracker_starts_with_full_grid():
    tracker = RectTracker(80, 21)
    assert tracker.rects == [NhRect(0, 0, 79, 20)]
    assert len(tracker) == 1


@pytest.mark.parametrize(
    "a,b,expected",
    [
        (NhRect(0, 0, 5, 5), NhRect(3, 3, 10, 10), NhRect(3, 3, 5, 5)),
        (NhRect(0, 0, 5, 5), NhRect(5, 0, 9, 5), NhRect(5, 0, 5, 5)),
        (NhRect(0, 0, 5, 5), NhRect(6, 0, 9, 5), None),
        (NhRect(2, 2, 8, 8), NhRect(4, 4, 5, 5), NhRect(4, 4, 5, 5)),
        (NhRect(0, 0, 3, 3), NhRect(0, 10, 3, 12), None),
    ],
)
def test_intersect_exact_and_symmetric(a, b, expected):
    assert intersect(a, b) == expected
    assert intersect(b, a) == expected


def test_split_keeps_wide_side_strips():
    tracker = RectTracker(80, 21)
    whole = tracker.rects[0]
    tracker.split_rects(whole, NhRect(30, 8, 40, 12))
    # top/bottom strips (7 rows) are below the edge margin of ylim + 1 + 4
    assert tracker.rects == [NhRect(0, 0, 28, 20), NhRect(42, 0, 79, 20)]


def test_split_near_top_keeps_bottom_strip():
    tracker = RectTracker(80, 21)
    tracker.split_rects(tracker.rects[0], NhRect(30, 1, 40, 3))
    assert tracker.rects == [NhRect(0, 0, 28, 20), NhRect(0, 5, 79, 20), NhRect(42, 0, 79, 20)]


def test_inner_margin_is_stricter_than_edge_margin():
    tracker = RectTracker(80, 21)
    inner = NhRect(10, 2, 60, 18)
    tracker.rects = [inner]
    # 11 free columns on the left: enough at the grid edge (> 9), not inside (> 12)
    tracker.split_rects(inner, NhRect(22, 5, 30, 10))
    assert NhRect(10, 2, 20, 18) not in tracker.rects
    assert NhRect(32, 2, 60, 18) in tracker.rects


def test_two_splits_leave_no_rect_over_carved_rooms():
    tracker = RectTracker(80, 21)
    first = NhRect(30, 1, 40, 3)
    tracker.split_rects(tracker.rects[0], first)
    host = NhRect(0, 5, 79, 20)
    second = NhRect(50, 10, 56, 14)
    tracker.split_rects(host, second)
    assert tracker.rects
    for r in tracker.rects:
        assert intersect(r, first) is None
        assert intersect(r, second) is None
        assert 0 <= r.lx <= r.hx <= 79
        assert 0 <= r.ly <= r.hy <= 20


def test_capacity_drops_extra_rects():
    tracker = RectTracker(80, 21, max_rects=2)
    assert tracker.add_rect(NhRect(0, 0, 5, 5)) is False  # contained in the full rect
    tracker.rects = [NhRect(0, 0, 5, 5)]
    assert tracker.add_rect(NhRect(10, 0, 15, 5)) is True
    assert tracker.add_rect(NhRect(20, 0, 25, 5)) is False
    assert tracker.dropped == 1
    assert len(tracker) == 2


def test_remove_swaps_last_into_hole():
    tracker = RectTracker(80, 21)
    a, b, c = NhRect(0, 0, 1, 1), NhRect(5, 5, 6, 6), NhRect(9, 9, 10, 10)
    tracker.rects = [a, b, c]
    tracker.remove_rect(a)
    assert tracker.rects == [c, b]
    tracker.remove_rect(NhRect(40, 4, 41, 5))  # absent: no-op
    assert tracker.rects == [c, b]
    assert tracker.get_rect_ind(b) == 1
    assert tracker.get_rect_ind(a) is None


def test_get_rect_finds_container():
    tracker = RectTracker(80, 21)
    assert tracker.get_rect(NhRect(3, 3, 4, 4)) == NhRect(0, 0, 79, 20)
    tracker.rects = [NhRect(0, 0, 10, 10)]
    assert tracker.get_rect(NhRect(9, 9, 12, 12)) is None


def test_rnd_rect_empty_and_deterministic():
    tracker = RectTracker(80, 21)
    tracker.rects = []
    assert tracker.rnd_rect(Rng(1)) is None
    tracker.rects = [NhRect(0, 0, 1, 1), NhRect(3, 3, 4, 4), NhRect(6, 6, 7, 7)]
    assert tracker.rnd_rect(Rng(0)) == tracker.rects[1]


@pytest.mark.parametrize("seed", range(100))
def test_tracker_stays_clear_of_placed_rooms(seed):
    cfg = DungeonConfig()
    grid = Grid(cfg.width, cfg.height)
    tracker = RectTracker(cfg.width, cfg.height, cfg.max_rects, cfg.xlim, cfg.ylim)
    rng = Rng(seed)
    rooms = []
    while len(rooms) < cfg.max_rooms and tracker.count:
        room = create_room(grid, tracker, rooms, rng, cfg, depth=3)
        if room is None:
            break
        rooms.append(room)
        for r in tracker.rects:
            assert 0 <= r.lx <= r.hx < cfg.width, r
            assert 0 <= r.ly <= r.hy < cfg.height, r
            for placed in rooms:
                assert intersect(r, placed.bounds) is None, (r, placed.bounds)
    assert rooms
