import pytest

from bustrack.errors import EditNotAllowed
from bustrack.models import AttendanceStatus, RouteStatus, SyncStatus
from bustrack.session import RouteSession
from bustrack.storage import ChangeStore


def test_open_without_changes_is_idle(route_factory, store, api, clock):
    with RouteSession(route_factory(), store, api, token="tok", clock=clock) as session:
        assert session.sync_status is SyncStatus.IDLE
        assert session.status is RouteStatus.ACTIVE
        assert session.online


def test_offline_day(route_factory, store, api, clock):
    api.fail_sync = True
    session = RouteSession(route_factory(), store, api, token="tok", clock=clock).open()
    session.toggle(1)
    session.toggle(2)
    session.on_connectivity(False)
    assert session.save() is SyncStatus.ERROR
    session.close()

    # app restarted
    reopened = RouteSession(route_factory(), store, api, token="tok", clock=clock).open()
    assert reopened.sync_status is SyncStatus.PENDING
    assert reopened.book.find(1).attendance_status is AttendanceStatus.PRESENT
    assert reopened.book.find(2).attendance_status is AttendanceStatus.ABSENT

    reopened.on_connectivity(False)
    reopened.on_connectivity(True)
    assert reopened.sync_status is SyncStatus.PENDING

    api.fail_sync = False
    assert reopened.save() is SyncStatus.SYNCED
    assert ChangeStore(store).load("r1") == {}


def test_route_lifecycle_through_session(route_factory, store, api, clock):
    api.fail_sync = True
    session = RouteSession(route_factory(status="inactive"), store, api, token="tok", clock=clock).open()

    with pytest.raises(EditNotAllowed):
        session.toggle(1)

    session.activate()
    session.toggle(1)

    info = session.start_route(confirm=lambda: True)
    assert info.status is RouteStatus.PENDING
    assert session.book.has_changes()

    with pytest.raises(EditNotAllowed):
        session.toggle(1)

    assert session.end_route().status is RouteStatus.INACTIVE


def test_cached_status_used_when_server_omits_it(route_factory, store, api, clock):
    route = route_factory()
    session = RouteSession(route, store, api, token="tok", clock=clock).open()
    session.start_route()

    route = route_factory()
    route.status = None
    assert RouteSession(route, store, api, clock=clock).open().status is RouteStatus.PENDING


def test_session_poller_stops_on_close(route_factory, store, api, clock):
    with RouteSession(route_factory(), store, api, token="tok", poll_reachability=True, clock=clock) as session:
        assert session.poller.running
    assert not session.poller.running
