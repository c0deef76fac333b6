# tests/test_adjacency.py
import pytest

from openhome.adjacency import (
    WallSegment,
    build_wall_plan,
    find_adjacent_room,
    get_combined_wall_openings,
    get_openings_for_room,
    get_openings_for_wall,
    owns_shared_wall,
    should_render_shared_wall,
    wall_segments,
)
from openhome.models import AppState, Room, WallOpening, WallSide


@pytest.fixture
def room_a():
    return Room(id="a", name="A", x_cm=0, y_cm=0, width_cm=300, height_cm=400)


def _b(x, y=0, height=400):
    return Room(id="b", name="B", x_cm=x, y_cm=y, width_cm=200, height_cm=height)


def _door(id, room_id, wall, position):
    return WallOpening(id=id, room_id=room_id, wall=wall, position_cm=position, width_cm=90)


def test_overlapping_walls_are_adjacent(room_a):
    room_b = _b(310)
    state = AppState(rooms=(room_a, room_b))
    adj = find_adjacent_room(state, room_a, WallSide.EAST)
    assert adj.other_room.id == "b"
    assert adj.other_wall == WallSide.WEST
    back = find_adjacent_room(state, room_b, WallSide.WEST)
    assert back.other_room.id == "a"
    assert back.other_wall == WallSide.EAST


def test_touching_outer_edges_are_adjacent(room_a):
    state = AppState(rooms=(room_a, _b(320)))
    assert find_adjacent_room(state, room_a, WallSide.EAST) is not None


def test_gap_between_rooms_is_not_adjacent(room_a):
    state = AppState(rooms=(room_a, _b(340)))
    assert find_adjacent_room(state, room_a, WallSide.EAST) is None


def test_rooms_meeting_at_corner_are_not_adjacent(room_a):
    state = AppState(rooms=(room_a, _b(310, y=410)))
    assert find_adjacent_room(state, room_a, WallSide.EAST) is None
    assert find_adjacent_room(state, room_a, WallSide.SOUTH) is None


def test_other_sides_have_no_neighbour(room_a):
    state = AppState(rooms=(room_a, _b(310)))
    assert find_adjacent_room(state, room_a, WallSide.WEST) is None
    assert find_adjacent_room(state, room_a, WallSide.NORTH) is None


def test_tie_break_by_id(room_a):
    room_b = _b(310)
    assert should_render_shared_wall(room_a, room_b)
    assert not should_render_shared_wall(room_b, room_a)


def test_room_with_openings_owns_shared_wall(room_a):
    room_b = _b(310)
    plain = AppState(rooms=(room_a, room_b))
    adj_a = find_adjacent_room(plain, room_a, WallSide.EAST)
    adj_b = find_adjacent_room(plain, room_b, WallSide.WEST)
    assert owns_shared_wall(plain, room_a, WallSide.EAST, adj_a)
    assert not owns_shared_wall(plain, room_b, WallSide.WEST, adj_b)

    with_door = plain.model_copy(
        update={"wall_openings": (_door("o1", "b", WallSide.WEST, 100),)}
    )
    assert not owns_shared_wall(with_door, room_a, WallSide.EAST, adj_a)
    assert owns_shared_wall(with_door, room_b, WallSide.WEST, adj_b)

    both = plain.model_copy(update={"wall_openings": (
        _door("o1", "b", WallSide.WEST, 100),
        _door("o2", "a", WallSide.EAST, 10),
    )})
    assert owns_shared_wall(both, room_a, WallSide.EAST, adj_a)
    assert not owns_shared_wall(both, room_b, WallSide.WEST, adj_b)


def test_combined_openings_share_one_coordinate(room_a):
    room_b = _b(310, y=100)
    state = AppState(
        rooms=(room_a, room_b),
        wall_openings=(
            _door("theirs", "b", WallSide.WEST, 200),
            _door("mine", "a", WallSide.EAST, 50),
        ),
    )
    adj = find_adjacent_room(state, room_a, WallSide.EAST)
    combined = get_combined_wall_openings(state, room_a, WallSide.EAST, adj)
    assert [o.id for o in combined] == ["mine", "theirs"]
    assert [o.position_cm for o in combined] == [50, 300]
    # stored openings are untouched
    assert state.wall_openings[0].position_cm == 200


def test_wall_plan_draws_shared_wall_once(room_a):
    state = AppState(rooms=(room_a, _b(310)))
    plan = build_wall_plan(state)
    assert len(plan) == 7
    assert ("b", WallSide.WEST) not in [(s.room_id, s.side) for s in plan]
    shared = [s for s in plan if s.adjacency is not None]
    assert [(s.room_id, s.side) for s in shared] == [("a", WallSide.EAST)]


def test_wall_plan_puts_walls_with_openings_last(room_a):
    state = AppState(
        rooms=(room_a,),
        wall_openings=(_door("o1", "a", WallSide.NORTH, 50),),
    )
    plan = build_wall_plan(state)
    assert len(plan) == 4
    assert (plan[-1].room_id, plan[-1].side) == ("a", WallSide.NORTH)


def test_wall_spec_rectangles(room_a):
    plan = {s.side: s for s in build_wall_plan(AppState(rooms=(room_a,)))}
    north = plan[WallSide.NORTH]
    assert (north.base_x_cm, north.base_y_cm, north.width_cm, north.height_cm) == (-10, -10, 320, 10)
    east = plan[WallSide.EAST]
    assert (east.base_x_cm, east.base_y_cm, east.width_cm, east.height_cm) == (300, -10, 10, 420)
    assert east.length_cm == 420


def test_wall_segments_split_around_openings(room_a):
    state = AppState(
        rooms=(room_a,),
        wall_openings=(_door("o1", "a", WallSide.NORTH, 50),),
    )
    north = next(s for s in build_wall_plan(state) if s.side == WallSide.NORTH)
    segments = wall_segments(north)
    assert segments == [
        WallSegment(0, 60, None),
        WallSegment(60, 150, state.wall_openings[0]),
        WallSegment(150, 320, None),
    ]


def test_opening_lookups(room_a):
    state = AppState(
        rooms=(room_a, _b(310)),
        wall_openings=(
            _door("o1", "a", WallSide.NORTH, 10),
            _door("o2", "b", WallSide.NORTH, 10),
            _door("o3", "a", WallSide.EAST, 10),
        ),
    )
    assert [o.id for o in get_openings_for_room(state, "a")] == ["o1", "o3"]
    assert [o.id for o in get_openings_for_wall(state, "a", WallSide.EAST)] == ["o3"]
    assert get_openings_for_wall(state, "b", WallSide.SOUTH) == []
