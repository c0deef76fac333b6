# tests/test_geometry.py
import pytest

from openhome.geometry import (
    Bounds,
    HitKind,
    Rect,
    cm_to_svg_pixels,
    content_to_screen,
    distance_cm,
    hit_test,
    inner_bounds,
    outer_bounds,
    resolve_wall_thickness,
    screen_to_content,
    storage_from_visual,
    svg_pixels_to_cm,
    visual_bounds,
    wall_length_cm,
)
from openhome.models import AppState, ObjectDef, PlacedObject, Room, WallSide, WallThickness


@pytest.fixture
def room():
    return Room(id="a", name="A", x_cm=0, y_cm=0, width_cm=300, height_cm=400)


def test_inner_bounds(room):
    assert inner_bounds(room) == Bounds(left=0, right=300, top=0, bottom=400)


def test_inner_bounds_at_hypothetical_position(room):
    b = inner_bounds(room, 50, 60)
    assert b == Bounds(left=50, right=350, top=60, bottom=460)
    assert room.x_cm == 0  # room untouched


def test_outer_bounds_uses_global_thickness(room):
    b = outer_bounds(room, 10)
    assert (b.left, b.right, b.top, b.bottom) == (-10, 310, -10, 410)
    assert b.walls.north == 10


def test_outer_bounds_with_side_override(room):
    r = room.model_copy(update={"wall_thickness": WallThickness(east=25, north=0)})
    b = outer_bounds(r, 10)
    assert b.right == 325
    assert b.top == 0
    assert b.left == -10


def test_resolve_wall_thickness_falls_back_per_side(room):
    r = room.model_copy(update={"wall_thickness": WallThickness(west=5)})
    w = resolve_wall_thickness(r, 12)
    assert w.get(WallSide.WEST) == 5
    assert w.get(WallSide.EAST) == 12


def test_wall_length(room):
    assert wall_length_cm(room, WallSide.NORTH) == 300
    assert wall_length_cm(room, WallSide.EAST) == 400


def test_visual_bounds_unrotated_and_half_turn():
    assert visual_bounds(100, 100, 60, 20, 0) == Rect(100, 100, 60, 20)
    assert visual_bounds(100, 100, 60, 20, 180) == Rect(100, 100, 60, 20)


def test_visual_bounds_quarter_turn_keeps_center():
    v = visual_bounds(100, 100, 60, 20, 90)
    assert v == Rect(120, 80, 20, 60)
    assert v.x + v.w / 2 == 130
    assert v.y + v.h / 2 == 110


@pytest.mark.parametrize("rotation", [90, 270])
def test_rotation_round_trip(rotation):
    v = visual_bounds(37, 54, 80, 30, rotation)
    assert storage_from_visual(v.x, v.y, 80, 30, rotation) == (37, 54)


def test_pixel_conversion_round_trip():
    assert svg_pixels_to_cm(50, 25) == (10, 5)
    assert cm_to_svg_pixels(*svg_pixels_to_cm(135, 70)) == (135, 70)


def test_view_transform_round_trip():
    x, y = screen_to_content(226, 94, 26, -6, 2)
    assert (x, y) == (100, 50)
    assert content_to_screen(x, y, 26, -6, 2) == (226, 94)


def test_distance():
    assert distance_cm(0, 0, 30, 40) == 50


@pytest.fixture
def scene(room):
    obj_def = ObjectDef(id="d", name="Table", width_cm=50, height_cm=50)
    placed = PlacedObject(id="p", def_id="d", room_id="a", x_cm=100, y_cm=100)
    return AppState(rooms=(room,), object_defs=(obj_def,), placed_objects=(placed,))


def test_hit_test_room_body(scene):
    hit = hit_test(scene, 250, 300, 8)
    assert hit.kind == HitKind.ROOM
    assert hit.room_id == "a"


def test_hit_test_placed_object_beats_room(scene):
    hit = hit_test(scene, 120, 120, 8)
    assert hit.kind == HitKind.PLACED_OBJECT
    assert hit.object_id == "p"


def test_hit_test_empty_canvas(scene):
    assert hit_test(scene, 1000, 1000, 8).kind == HitKind.CANVAS


def test_hit_test_handles_only_on_selected_rooms(scene):
    assert hit_test(scene, 300, 200, 8).kind == HitKind.ROOM
    selected = scene.model_copy(update={"selected_room_ids": ("a",)})
    hit = hit_test(selected, 302, 199, 8)
    assert hit.kind == HitKind.RESIZE_HANDLE
    assert hit.handle == "e"
    assert hit_test(selected, 0, 0, 8).handle == "nw"


def test_hit_test_later_room_on_top():
    a = Room(id="a", x_cm=0, y_cm=0, width_cm=300, height_cm=300)
    b = Room(id="b", x_cm=100, y_cm=100, width_cm=300, height_cm=300)
    hit = hit_test(AppState(rooms=(a, b)), 150, 150, 8)
    assert hit.room_id == "b"
