import logging

from bustrack.errors import (
    MissingCredentials,
    MissingRouteId,
    PersistenceFailure,
    RemoteStatusUpdateFailure,
    TransitionCancelled,
)
from bustrack.models import RouteStatus, SyncStatus
from bustrack.storage import load_route_status, save_route_status

logger = logging.getLogger(__name__)


class RouteLifecycle:
    """
    Route status transitions: inactive -> pending/active -> inactive.

    Remote status updates are best effort. The new status is always cached
    locally and the transition always completes, even when the server could
    not be reached.
    """

    def __init__(self, route, store, api, token=None, coordinator=None, changes=None):
        self.route = route
        self.store = store
        self.api = api
        self.token = token
        self.coordinator = coordinator
        self.changes = {} if changes is None else changes
        self.status = RouteStatus.parse(route.status)

    @property
    def can_edit(self):
        return self.status == RouteStatus.ACTIVE

    def resolve_status(self, server_status=None):
        """Prefer the server value; fall back to the cached one."""
        if server_status is not None:
            self.status = RouteStatus.parse(server_status)
            self._persist(self.status)
        else:
            cached = load_route_status(self.store, self.route.id)
            self.status = cached or RouteStatus.INACTIVE
        return self.status

    def _persist(self, status):
        try:
            save_route_status(self.store, self.route.id, status)
        except PersistenceFailure as e:
            logger.error("Could not cache status %s for route %s: %s", status.value, self.route.id, e)

    def _transition(self, status):
        if self.token:
            try:
                self.api.update_route_status(self.token, self.route.id, status)
            except RemoteStatusUpdateFailure as e:
                logger.warning("Route %s set to %s locally only: %s", self.route.id, status.value, e)
        else:
            logger.warning("No token, route %s set to %s locally only", self.route.id, status.value)

        self._persist(status)
        self.status = status
        logger.info("Route %s is now %s", self.route.id, status.value)
        return self.route.info(status)

    def _sync_before_start(self):
        if not self.changes or self.coordinator is None:
            return True
        try:
            return self.coordinator.sync(self.changes, self.token) == SyncStatus.SYNCED
        except MissingCredentials as e:
            logger.warning("Cannot sync route %s before starting: %s", self.route.id, e)
            return False

    def start_route(self, confirm=None):
        """
        Move the route to pending and return the tracking view payload.

        Pending changes are synced first. If that fails, ``confirm`` is asked
        whether to go on anyway; the changes then stay queued.
        """
        if self.status == RouteStatus.PENDING:
            return self.route.info(self.status)

        if not self._sync_before_start():
            if confirm is None or not confirm():
                raise TransitionCancelled(f"Route {self.route.id} not started")
            logger.info("Starting route %s with %d unsynced changes", self.route.id, len(self.changes))

        return self._transition(RouteStatus.PENDING)

    def activate(self):
        return self._transition(RouteStatus.ACTIVE)

    def end_route(self):
        if not self.token:
            raise MissingCredentials()
        if self.route.id is None:
            raise MissingRouteId()
        return self._transition(RouteStatus.INACTIVE)
