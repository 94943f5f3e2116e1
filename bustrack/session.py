import logging

from bustrack.connectivity import ConnectivityObserver, ReachabilityPoller
from bustrack.lifecycle import RouteLifecycle
from bustrack.logic import AttendanceBook, now_iso
from bustrack.models import SyncStatus
from bustrack.storage import ChangeStore
from bustrack.sync import SyncCoordinator

logger = logging.getLogger(__name__)


class RouteSession:
    """Everything a driver's student-list screen needs for one open route."""

    def __init__(self, route, store, api, token=None, poll_reachability=False, clock=now_iso):
        self.route = route
        self.token = token
        self.change_store = ChangeStore(store)
        self.changes = {}

        self.coordinator = SyncCoordinator(route.id, api, self.change_store)
        self.lifecycle = RouteLifecycle(
            route, store, api,
            token=token,
            coordinator=self.coordinator,
            changes=self.changes,
        )
        self.book = AttendanceBook(
            route.id,
            route.students,
            self.change_store,
            lifecycle=self.lifecycle,
            changes=self.changes,
            clock=clock,
        )
        self.connectivity = ConnectivityObserver(self.coordinator, self.changes)
        self.poller = ReachabilityPoller(api, self.connectivity.notify) if poll_reachability else None

    def open(self):
        self.lifecycle.resolve_status(self.route.status)
        self.book.load()
        self.coordinator.status = SyncStatus.PENDING if self.changes else SyncStatus.IDLE
        if self.poller:
            self.poller.start()
        logger.info(
            "Opened route %s (%s) with %d pending changes",
            self.route.id, self.lifecycle.status.value, len(self.changes),
        )
        return self

    def close(self):
        if self.poller:
            self.poller.stop()

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.close()

    @property
    def students(self):
        return self.book.students

    @property
    def status(self):
        return self.lifecycle.status

    @property
    def sync_status(self):
        return self.coordinator.status

    @property
    def online(self):
        return self.connectivity.online

    def toggle(self, student_id):
        return self.book.toggle(student_id)

    def save(self):
        return self.coordinator.sync(self.changes, self.token)

    def start_route(self, confirm=None):
        return self.lifecycle.start_route(confirm)

    def activate(self):
        return self.lifecycle.activate()

    def end_route(self):
        return self.lifecycle.end_route()

    def on_connectivity(self, reachable):
        self.connectivity.notify(reachable)
