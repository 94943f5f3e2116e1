class BusTrackError(Exception):
    pass


class EditNotAllowed(BusTrackError):
    """Attendance edit attempted while the route is not active."""

    def __init__(self, route_id, status):
        super().__init__(f"Route {route_id} is {status}; attendance can only be edited while active")
        self.route_id = route_id
        self.status = status


class UnknownStudent(BusTrackError):
    def __init__(self, student_id):
        super().__init__(f"Student {student_id} is not on this route")
        self.student_id = student_id


class MissingCredentials(BusTrackError):
    def __init__(self, message="No authentication token found, please log in"):
        super().__init__(message)


class MissingRouteId(BusTrackError):
    def __init__(self, message="Route information not found"):
        super().__init__(message)


class PersistenceFailure(BusTrackError):
    """Local store read or write failed."""


class TransitionCancelled(BusTrackError):
    """The operator declined to proceed with a route transition."""


class ApiError(BusTrackError):
    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class InvalidCredentials(ApiError):
    pass


class SyncError(ApiError):
    pass


class RemoteStatusUpdateFailure(ApiError):
    pass
