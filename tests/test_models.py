# tests/test_models.py
import pytest
from pydantic import ValidationError

from openhome.models import (
    AppState, ObjectDef, OpeningType, PlacedObject, Room, WallOpening, WallSide, WallThickness
)


def test_room_creation():
    room = Room(id="r1", name="Kitchen", x_cm=0, y_cm=0, width_cm=300, height_cm=400)
    assert room.width_cm == 300
    assert room.wall_thickness is None


def test_room_accepts_camel_case_keys():
    room = Room.model_validate(
        {"id": "r1", "name": "Hall", "xCm": 10, "yCm": 20, "widthCm": 100, "heightCm": 50}
    )
    assert room.x_cm == 10
    assert room.height_cm == 50


def test_room_rejects_non_positive_size():
    with pytest.raises(ValidationError):
        Room(id="r1", x_cm=0, y_cm=0, width_cm=0, height_cm=100)


def test_room_is_frozen():
    room = Room(id="r1", x_cm=0, y_cm=0, width_cm=100, height_cm=100)
    with pytest.raises(ValidationError):
        room.x_cm = 5


def test_wall_thickness_get():
    wt = WallThickness(east=20)
    assert wt.get(WallSide.EAST) == 20
    assert wt.get(WallSide.NORTH) is None


def test_wall_side_helpers():
    assert WallSide.NORTH.is_horizontal
    assert not WallSide.EAST.is_horizontal
    assert WallSide.EAST.opposite == WallSide.WEST
    assert WallSide.SOUTH.opposite == WallSide.NORTH


def test_opening_defaults_to_door():
    o = WallOpening(id="o1", room_id="r1", wall="north", position_cm=10, width_cm=90)
    assert o.type == OpeningType.DOOR
    assert o.wall == WallSide.NORTH


def test_placed_object_missing_rotation_defaults_to_zero():
    p = PlacedObject.model_validate(
        {"id": "p1", "defId": "d1", "roomId": "r1", "xCm": 0, "yCm": 0, "rotationDeg": None}
    )
    assert p.rotation_deg == 0


def test_app_state_defaults():
    s = AppState()
    assert s.rooms == ()
    assert s.selected_room_ids == ()
    assert s.selected_object_id is None
    assert s.zoom == 1.0


def test_legacy_selected_room_id_migrated():
    s = AppState.model_validate({"selectedRoomId": "r1"})
    assert s.selected_room_ids == ("r1",)


def test_legacy_null_selection_becomes_empty():
    s = AppState.model_validate({"selectedRoomId": None})
    assert s.selected_room_ids == ()


def test_current_selection_wins_over_legacy_field():
    s = AppState.model_validate({"selectedRoomIds": ["a", "b"], "selectedRoomId": "c"})
    assert s.selected_room_ids == ("a", "b")


def test_null_collections_default_to_empty():
    s = AppState.model_validate({"objectDefs": None, "placedObjects": None})
    assert s.object_defs == ()
    assert s.placed_objects == ()


def test_app_state_equality_is_structural():
    d = ObjectDef(id="d1", name="Bed", width_cm=160, height_cm=200)
    assert AppState(object_defs=(d,)) == AppState(object_defs=(d,))
