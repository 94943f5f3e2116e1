"""
sync.py

Submits a route's buffered attendance changes to the backend in one batch.
Nothing is retried automatically: a failed batch stays queued, both in memory
and in the change store, until the next explicit sync.
"""
import logging
import threading

from bustrack.errors import MissingCredentials, SyncError
from bustrack.models import SyncStatus

logger = logging.getLogger(__name__)


class SyncCoordinator:
    def __init__(self, route_id, api, change_store, status=SyncStatus.IDLE):
        self.route_id = route_id
        self.api = api
        self.change_store = change_store
        self.status = status
        self.last_error = None
        # guards change_set and status against the reachability worker
        self.lock = threading.Lock()

    def sync(self, change_set, token):
        if not change_set:
            return self.status

        if not token:
            raise MissingCredentials()

        with self.lock:
            return self._submit(change_set, token)

    def _submit(self, change_set, token):
        try:
            self.api.update_attendance(token, change_set)
        except SyncError as e:
            self.status = SyncStatus.ERROR
            self.last_error = e
            logger.warning("Sync of %d changes for route %s failed: %s", len(change_set), self.route_id, e)
            return self.status

        count = len(change_set)
        self.change_store.clear(self.route_id)
        change_set.clear()
        self.status = SyncStatus.SYNCED
        self.last_error = None
        logger.info("Synced %d attendance changes for route %s", count, self.route_id)
        return self.status
