import json

from pipeboard.infra.persistence.state import StateManager


def test_load_nonexistent_file(tmp_path):
    f = tmp_path / "state.json"
    mgr = StateManager(f)

    assert mgr.get_location("London,uk") == "London,uk"  # default
    assert f.exists() is False  # no auto-create on load


def test_set_and_get_location(tmp_path):
    f = tmp_path / "state.json"
    mgr = StateManager(f)

    mgr.set_location("Tokyo,jp")
    assert mgr.get_location("London,uk") == "Tokyo,jp"

    data = json.loads(f.read_text(encoding="utf-8"))
    assert data["location"] == "Tokyo,jp"


def test_load_existing_state(tmp_path):
    f = tmp_path / "state.json"
    f.write_text(json.dumps({"location": "Paris,fr"}), encoding="utf-8")

    assert StateManager(f).get_location("London,uk") == "Paris,fr"


def test_load_invalid_json(tmp_path):
    f = tmp_path / "state.json"
    f.write_text("{not a json", encoding="utf-8")

    mgr = StateManager(f)
    assert mgr.get_location("London,uk") == "London,uk"
    # Writing should overwrite invalid file
    mgr.set_location("Sydney,au")
    assert json.loads(f.read_text(encoding="utf-8"))["location"] == "Sydney,au"


def test_non_string_location_is_ignored(tmp_path):
    f = tmp_path / "state.json"
    f.write_text(json.dumps({"location": 42}), encoding="utf-8")

    assert StateManager(f).get_location("London,uk") == "London,uk"


def test_save_creates_parent_dirs(tmp_path):
    f = tmp_path / "a/b/c" / "state.json"

    StateManager(f).set_location("New York,us")
    assert f.exists()
