APP_NAME = "BusTrack"
APP_VERSION = "1.0"

PROGRAM_STORAGE = "data"
RECORDS_FOLDER = "records"

PENDING_CHANGES_PREFIX = "pending_changes_"
ROUTE_STATUS_PREFIX = "route_status_"
TOKEN_KEY = "token"
USER_KEY = "user"

DEFAULT_BASE_URL = "http://localhost:9000"
ENDPOINTS = {
    "login": "/api/users/login/",
    "logout": "/api/users/logout/",
    "data": "/api/users/data/",
    "update_attendance": "/api/users/update-attendance/",
    "update_route_status": "/api/users/update-route-status/",
}

REQUEST_TIMEOUT = 10
REACHABILITY_TIMEOUT = 2
REACHABILITY_INTERVAL = 5

LOG_FORMAT = "%(asctime)s %(levelname)s: %(message)s"
