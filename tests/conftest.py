import itertools

import pytest

from bustrack.errors import RemoteStatusUpdateFailure, SyncError
from bustrack.models import Route
from bustrack.storage import MemoryStore


class FakeApi:
    def __init__(self):
        self.fail_sync = False
        self.fail_status = False
        self.reachable = True
        self.routes = []
        self.login_result = ("tok", {})
        self.attendance_calls = []
        self.status_calls = []

    def update_attendance(self, token, change_set):
        self.attendance_calls.append((token, {k: v.to_dict() for k, v in change_set.items()}))
        if self.fail_sync:
            raise SyncError("network down")
        return {"ok": True}

    def update_route_status(self, token, route_id, status):
        self.status_calls.append((token, route_id, status))
        if self.fail_status:
            raise RemoteStatusUpdateFailure("network down")
        return {"ok": True}

    def is_reachable(self, timeout):
        return self.reachable

    def fetch_routes(self, token):
        return self.routes

    def login(self, username, password):
        return self.login_result


def make_route(status="active", route_id="r1"):
    return Route.from_dict({
        "id": route_id,
        "title": "Morning North",
        "description": "Main campus",
        "schedule": "07:00",
        "status": status,
        "students": [
            {"id": 1, "first_name": "Ana", "last_name": "Diaz", "group": {"name": "3A"}, "pickup_time": "06:40"},
            {"id": 2, "first_name": "Ben", "last_name": "Ruiz", "attendance_status": "present"},
            {"id": 3, "first_name": "Cai", "last_name": "Lee", "attendance_status": None},
        ],
    })


@pytest.fixture
def api():
    return FakeApi()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def clock():
    counter = itertools.count(1)
    return lambda: f"2026-10-18T07:00:{next(counter):02d}+00:00"


@pytest.fixture
def route_factory():
    return make_route
