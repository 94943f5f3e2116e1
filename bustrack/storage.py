import json
import logging
import os

from bustrack.constants import (
    PENDING_CHANGES_PREFIX,
    ROUTE_STATUS_PREFIX,
    TOKEN_KEY,
    USER_KEY,
)
from bustrack.errors import PersistenceFailure
from bustrack.models import RouteStatus, change_set_from_dict, change_set_to_dict

logger = logging.getLogger(__name__)


class JsonFileStore:
    """Key-value store keeping one file per key inside ``folder``."""

    def __init__(self, folder):
        self.folder = folder

    def _path(self, key):
        return os.path.join(self.folder, f"{key}.json")

    def get(self, key):
        path = self._path(key)
        if not os.path.exists(path):
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise PersistenceFailure(f"Failed to read {key}: {e}") from e

    def set(self, key, value):
        try:
            if not os.path.exists(self.folder):
                os.makedirs(self.folder)
            path = self._path(key)
            tmp_path = f"{path}.tmp"
            with open(tmp_path, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp_path, path)
        except OSError as e:
            raise PersistenceFailure(f"Failed to save {key}: {e}") from e

    def remove(self, key):
        path = self._path(key)
        try:
            if os.path.exists(path):
                os.remove(path)
        except OSError as e:
            raise PersistenceFailure(f"Failed to remove {key}: {e}") from e


class MemoryStore:
    def __init__(self, data=None):
        self.data = dict(data or {})

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value):
        self.data[key] = value

    def remove(self, key):
        self.data.pop(key, None)


def pending_changes_key(route_id):
    return f"{PENDING_CHANGES_PREFIX}{route_id}"


def route_status_key(route_id):
    return f"{ROUTE_STATUS_PREFIX}{route_id}"


class ChangeStore:
    """Durable per-route persistence of unsynced attendance edits."""

    def __init__(self, store):
        self.store = store

    def load(self, route_id):
        try:
            raw = self.store.get(pending_changes_key(route_id))
            if not raw:
                return {}
            return change_set_from_dict(json.loads(raw))
        except (PersistenceFailure, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning("Discarding unreadable pending changes for route %s: %s", route_id, e)
            return {}

    def save(self, route_id, change_set):
        data = json.dumps(change_set_to_dict(change_set), ensure_ascii=False)
        self.store.set(pending_changes_key(route_id), data)
        logger.debug("Saved %d pending changes for route %s", len(change_set), route_id)

    def clear(self, route_id):
        self.store.remove(pending_changes_key(route_id))


def load_route_status(store, route_id):
    try:
        raw = store.get(route_status_key(route_id))
    except PersistenceFailure as e:
        logger.warning("Could not read cached status for route %s: %s", route_id, e)
        return None
    if not raw:
        return None
    try:
        value = json.loads(raw)
    except ValueError:
        value = raw
    return RouteStatus.parse(value)


def save_route_status(store, route_id, status):
    store.set(route_status_key(route_id), json.dumps(RouteStatus(status).value))


def save_credentials(store, token, user):
    store.set(TOKEN_KEY, token)
    store.set(USER_KEY, json.dumps(user or {}, ensure_ascii=False))


def load_token(store):
    try:
        return store.get(TOKEN_KEY) or None
    except PersistenceFailure:
        return None


def load_user(store):
    try:
        raw = store.get(USER_KEY)
        return json.loads(raw) if raw else None
    except (PersistenceFailure, ValueError):
        return None


def clear_credentials(store):
    store.remove(TOKEN_KEY)
    store.remove(USER_KEY)
