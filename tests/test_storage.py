import json
import os

import pytest

from bustrack.errors import PersistenceFailure
from bustrack.models import AttendanceChange, AttendanceStatus, RouteStatus
from bustrack.session import RouteSession
from bustrack.storage import (
    ChangeStore,
    JsonFileStore,
    clear_credentials,
    load_route_status,
    load_token,
    load_user,
    pending_changes_key,
    save_credentials,
    save_route_status,
)


def _change(student_id, status):
    return AttendanceChange(student_id, "r1", status, "2026-10-18T07:00:00+00:00")


def test_json_file_store_roundtrip(tmp_path):
    store = JsonFileStore(str(tmp_path / "data"))
    assert store.get("missing") is None
    store.set("k", "value")
    assert store.get("k") == "value"
    store.remove("k")
    assert store.get("k") is None
    store.remove("k")


def test_change_store_persists_per_route(tmp_path):
    changes = ChangeStore(JsonFileStore(str(tmp_path)))
    changes.save("r1", {"1": _change("1", AttendanceStatus.PRESENT)})

    assert changes.load("r2") == {}
    loaded = changes.load("r1")
    assert loaded["1"].status is AttendanceStatus.PRESENT

    changes.clear("r1")
    assert changes.load("r1") == {}


def test_corrupt_change_set_loads_empty(store):
    store.set(pending_changes_key("r1"), "{not json")
    assert ChangeStore(store).load("r1") == {}

    store.set(pending_changes_key("r1"), json.dumps({"1": {"status": "present"}}))
    assert ChangeStore(store).load("r1") == {}

    store.set(pending_changes_key("r1"), json.dumps(["a"]))
    assert ChangeStore(store).load("r1") == {}


def test_route_status_cache(store):
    assert load_route_status(store, "r1") is None
    save_route_status(store, "r1", RouteStatus.PENDING)
    assert load_route_status(store, "r1") is RouteStatus.PENDING


def test_credentials(store):
    save_credentials(store, "tok", {"username": "driver1", "is_driver": True})
    assert load_token(store) == "tok"
    assert load_user(store)["username"] == "driver1"
    clear_credentials(store)
    assert load_token(store) is None
    assert load_user(store) is None


def test_undecodable_files_degrade_instead_of_crashing(tmp_path):
    store = JsonFileStore(str(tmp_path))
    for key in ("route_status_r1", "pending_changes_r1", "token"):
        (tmp_path / f"{key}.json").write_bytes(b"\xff\xfe\x00bad")

    with pytest.raises(PersistenceFailure):
        store.get("route_status_r1")
    assert load_route_status(store, "r1") is None
    assert ChangeStore(store).load("r1") == {}
    assert load_token(store) is None


def test_session_opens_over_undecodable_status_cache(route_factory, api, tmp_path):
    (tmp_path / "route_status_r1.json").write_bytes(b"\xff\xfe\x00bad")
    route = route_factory()
    route.status = None

    session = RouteSession(route, JsonFileStore(str(tmp_path)), api).open()

    assert session.status is RouteStatus.INACTIVE


def test_failed_write_keeps_previous_value(tmp_path, monkeypatch):
    store = JsonFileStore(str(tmp_path))
    store.set("k", "old")

    def broken_replace(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(os, "replace", broken_replace)
    with pytest.raises(PersistenceFailure):
        store.set("k", "new")

    assert store.get("k") == "old"


def test_write_leaves_no_temp_file(tmp_path):
    store = JsonFileStore(str(tmp_path))
    store.set("k", "value")
    assert sorted(p.name for p in tmp_path.iterdir()) == ["k.json"]
