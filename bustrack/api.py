import logging

import requests

from bustrack.constants import REQUEST_TIMEOUT
from bustrack.errors import (
    ApiError,
    InvalidCredentials,
    RemoteStatusUpdateFailure,
    SyncError,
)
from bustrack.models import Route, RouteStatus, change_set_to_dict

logger = logging.getLogger(__name__)


class ApiClient:
    def __init__(self, config, session=None, timeout=REQUEST_TIMEOUT):
        self.config = config
        self.session = session or requests.Session()
        self.timeout = timeout

    def _headers(self, token=None):
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _request(self, method, endpoint, token=None, payload=None, error_cls=ApiError):
        url = self.config.url(endpoint)
        try:
            resp = self.session.request(
                method,
                url,
                json=payload,
                headers=self._headers(token),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise error_cls(f"{method} {url} failed: {e}") from e

        if not resp.ok:
            raise error_cls(
                f"{method} {url} returned {resp.status_code} {resp.reason}",
                status_code=resp.status_code,
            )
        try:
            return resp.json()
        except ValueError:
            return None

    def login(self, username, password):
        """Return ``(token, user)`` for valid credentials."""
        try:
            data = self._request("POST", "login", payload={"username": username, "password": password})
        except ApiError as e:
            if e.status_code in (400, 401):
                raise InvalidCredentials("Wrong username or password", status_code=e.status_code) from e
            raise
        if not data or "token" not in data:
            raise ApiError("Login response did not include a token")
        return data["token"], data.get("user") or {}

    def logout(self, token):
        try:
            self._request("POST", "logout", token=token)
        except ApiError as e:
            logger.warning("Logout request failed: %s", e)

    def fetch_routes(self, token):
        data = self._request("GET", "data", token=token)
        try:
            return [Route.from_dict(item) for item in data or []]
        except (KeyError, TypeError, AttributeError) as e:
            raise ApiError(f"Unexpected route data: {e!r}") from e

    def update_attendance(self, token, change_set):
        payload = {"changes": change_set_to_dict(change_set)}
        return self._request("POST", "update_attendance", token=token, payload=payload, error_cls=SyncError)

    def update_route_status(self, token, route_id, status):
        payload = {"route_id": route_id, "status": RouteStatus(status).value}
        return self._request(
            "POST",
            "update_route_status",
            token=token,
            payload=payload,
            error_cls=RemoteStatusUpdateFailure,
        )

    def is_reachable(self, timeout):
        # called from the poller thread, so it does not share self.session
        try:
            requests.head(self.config.base_url, timeout=timeout)
            return True
        except requests.RequestException:
            return False
