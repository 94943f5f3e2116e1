import logging
from collections import Counter
from datetime import datetime, timezone

from bustrack.errors import EditNotAllowed, UnknownStudent
from bustrack.models import AttendanceChange, AttendanceStatus

logger = logging.getLogger(__name__)

# ==================================================
# Attendance cycle
# ==================================================

_NEXT_STATUS = {
    AttendanceStatus.PENDING: AttendanceStatus.PRESENT,
    AttendanceStatus.PRESENT: AttendanceStatus.ABSENT,
    AttendanceStatus.ABSENT: AttendanceStatus.PENDING,
}


def next_status(status):
    return _NEXT_STATUS[AttendanceStatus.parse(status)]


def now_iso():
    return datetime.now(timezone.utc).isoformat()


# ==================================================
# Per-route attendance with buffered changes
# ==================================================

class AttendanceBook:
    """
    In-memory student list of one route plus its unsynced change set.

    Every toggle updates the student first and then writes the whole change
    set through to the change store. A failed write raises PersistenceFailure
    but the in-memory edit stays applied.

    When ``lifecycle`` is given, toggles are only allowed while it reports
    ``can_edit``.
    """

    def __init__(self, route_id, students, change_store, lifecycle=None, changes=None, clock=now_iso):
        self.route_id = route_id
        self.students = list(students)
        self.change_store = change_store
        self.lifecycle = lifecycle
        self.changes = {} if changes is None else changes
        self.clock = clock

    def find(self, student_id):
        key = str(student_id)
        for student in self.students:
            if student.key == key:
                return student
        return None

    def load(self):
        """Restore unsynced edits left by a previous session."""
        self.changes.clear()
        self.changes.update(self.change_store.load(self.route_id))

        for student_id, change in self.changes.items():
            student = self.find(student_id)
            if student is None:
                logger.info("Pending change for student %s is not on route %s", student_id, self.route_id)
                continue
            student.attendance_status = change.status
            student.last_attendance_timestamp = change.timestamp
        return self.changes

    def toggle(self, student_id):
        if self.lifecycle is not None and not self.lifecycle.can_edit:
            raise EditNotAllowed(self.route_id, self.lifecycle.status.value)

        student = self.find(student_id)
        if student is None:
            raise UnknownStudent(student_id)

        new_status = next_status(student.attendance_status)
        timestamp = self.clock()

        student.attendance_status = new_status
        student.last_attendance_timestamp = timestamp

        change = AttendanceChange(
            student_id=student.key,
            route_id=self.route_id,
            status=new_status,
            timestamp=timestamp,
        )
        self.changes[student.key] = change

        self.change_store.save(self.route_id, self.changes)
        return change

    @property
    def pending_count(self):
        return len(self.changes)

    def has_changes(self):
        return bool(self.changes)

    def is_changed(self, student_id):
        return str(student_id) in self.changes

    def summary(self):
        counts = Counter(s.attendance_status for s in self.students)
        return {status: counts.get(status, 0) for status in AttendanceStatus}
