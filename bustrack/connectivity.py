import logging
import threading

from bustrack.constants import REACHABILITY_TIMEOUT, REACHABILITY_INTERVAL
from bustrack.models import SyncStatus

logger = logging.getLogger(__name__)


class ConnectivityObserver:
    """
    Tracks online/offline transitions for an open route.

    Coming back online with queued changes only flags the coordinator as
    pending; syncing is left to the caller.
    """

    def __init__(self, coordinator, changes, online=True):
        self.coordinator = coordinator
        self.changes = changes
        self.online = online
        self.listeners = []

    def subscribe(self, callback):
        self.listeners.append(callback)

    def unsubscribe(self, callback):
        if callback in self.listeners:
            self.listeners.remove(callback)

    def notify(self, reachable):
        reachable = bool(reachable)
        with self.coordinator.lock:
            if reachable == self.online:
                return
            self.online = reachable
            if reachable and self.changes:
                self.coordinator.status = SyncStatus.PENDING
        logger.info("Network reachable again" if reachable else "Network unreachable")

        for callback in list(self.listeners):
            callback(reachable)


class ReachabilityPoller:
    def __init__(self, api, on_change, interval=REACHABILITY_INTERVAL, timeout=REACHABILITY_TIMEOUT):
        self.api = api
        self.on_change = on_change
        self.interval = interval
        self.timeout = timeout

        self.running = False
        self.thread = None
        self._stop_event = threading.Event()

    def start(self):
        if self.running:
            return

        self.running = True
        self._stop_event.clear()
        self.thread = threading.Thread(
            target=self._poll_worker,
            daemon=True
        )
        self.thread.start()

    def stop(self):
        self.running = False
        self._stop_event.set()
        if self.thread and self.thread is not threading.current_thread():
            self.thread.join(timeout=self.interval + self.timeout)
        self.thread = None

    def _poll_worker(self):
        while self.running:
            self.on_change(self.api.is_reachable(self.timeout))
            if self._stop_event.wait(self.interval):
                break
