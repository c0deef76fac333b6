import json

import pytest

from openhome.models import AppState, ObjectDef, PlacedObject, Room, WallOpening
from openhome.storage import DocumentError, dump_document, load_document, read_document, write_document


@pytest.fixture
def document():
    return AppState(
        rooms=(Room(id="a", name="Kitchen", x_cm=10, y_cm=10, width_cm=300, height_cm=400),),
        wall_openings=(
            WallOpening(id="o", room_id="a", wall="east", type="window", position_cm=100, width_cm=100),
        ),
        object_defs=(ObjectDef(id="d", name="Fridge", width_cm=60, height_cm=60),),
        placed_objects=(
            PlacedObject(id="p", def_id="d", room_id="a", x_cm=20, y_cm=20, rotation_deg=90),
        ),
        selected_room_ids=("a",),
        zoom=1.5,
    )


def test_dump_uses_camel_case(document):
    data = json.loads(dump_document(document))
    assert set(data) >= {"rooms", "wallOpenings", "objectDefs", "placedObjects",
                         "selectedRoomIds", "selectedObjectId", "globalWallThicknessCm",
                         "panX", "panY", "zoom"}
    assert data["rooms"][0]["widthCm"] == 300
    assert data["placedObjects"][0]["rotationDeg"] == 90


def test_load_restores_dumped_document(document):
    assert load_document(dump_document(document)) == document


def test_load_legacy_selection():
    text = json.dumps({
        "rooms": [{"id": "a", "name": "A", "xCm": 0, "yCm": 0, "widthCm": 100, "heightCm": 100}],
        "selectedRoomId": "a",
    })
    state = load_document(text)
    assert state.selected_room_ids == ("a",)
    assert "selectedRoomId" not in json.loads(dump_document(state))


def test_load_fills_missing_fields():
    state = load_document("{}")
    assert state == AppState()


def test_invalid_json_raises():
    with pytest.raises(DocumentError, match="Invalid JSON"):
        load_document("{not json")


def test_non_object_document_raises():
    with pytest.raises(DocumentError, match="JSON object"):
        load_document("[]")


def test_invalid_room_raises_with_location():
    text = json.dumps({
        "rooms": [{"id": "a", "xCm": 0, "yCm": 0, "widthCm": -5, "heightCm": 100}],
    })
    with pytest.raises(DocumentError, match="widthCm"):
        load_document(text)


def test_file_round_trip(tmp_path, document):
    path = tmp_path / "plan.json"
    write_document(path, document)
    assert read_document(path) == document


def test_missing_file_raises(tmp_path):
    with pytest.raises(DocumentError, match="Cannot read"):
        read_document(tmp_path / "missing.json")
