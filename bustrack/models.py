from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class AttendanceStatus(str, Enum):
    PENDING = "pending"
    PRESENT = "present"
    ABSENT = "absent"

    @classmethod
    def parse(cls, value):
        # anything unrecognised counts as pending
        if value == cls.PRESENT.value:
            return cls.PRESENT
        if value == cls.ABSENT.value:
            return cls.ABSENT
        return cls.PENDING


class RouteStatus(str, Enum):
    INACTIVE = "inactive"
    PENDING = "pending"
    ACTIVE = "active"

    @classmethod
    def parse(cls, value):
        for status in cls:
            if status.value == value:
                return status
        return cls.INACTIVE


class SyncStatus(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SYNCED = "synced"
    ERROR = "error"


@dataclass(frozen=True)
class AttendanceDescriptor:
    icon: str
    label: str


@dataclass(frozen=True)
class RouteStatusDescriptor:
    color: str
    label: str
    trackable: bool


ATTENDANCE_DESCRIPTORS = {
    AttendanceStatus.PENDING: AttendanceDescriptor("🟡", "Pending"),
    AttendanceStatus.PRESENT: AttendanceDescriptor("✅", "Present"),
    AttendanceStatus.ABSENT: AttendanceDescriptor("❌", "Absent"),
}

ROUTE_STATUS_DESCRIPTORS = {
    RouteStatus.ACTIVE: RouteStatusDescriptor("#4CAF50", "Active", True),
    RouteStatus.PENDING: RouteStatusDescriptor("#FFA000", "In progress", True),
    RouteStatus.INACTIVE: RouteStatusDescriptor("#FF5252", "Inactive", False),
}


def describe_attendance(status):
    return ATTENDANCE_DESCRIPTORS[AttendanceStatus.parse(status)]


def describe_route_status(status):
    return ROUTE_STATUS_DESCRIPTORS[RouteStatus.parse(status)]


@dataclass
class Student:
    id: Any
    first_name: str = ""
    last_name: str = ""
    group: Optional[str] = None
    pickup_time: Optional[str] = None
    attendance_status: AttendanceStatus = AttendanceStatus.PENDING
    last_attendance_timestamp: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def key(self):
        return str(self.id)

    @property
    def name(self):
        return f"{self.first_name} {self.last_name}".strip()

    @classmethod
    def from_dict(cls, data):
        data = dict(data)
        group = data.pop("group", None)
        if isinstance(group, dict):
            group = group.get("name")
        return cls(
            id=data.pop("id"),
            first_name=data.pop("first_name", "") or "",
            last_name=data.pop("last_name", "") or "",
            group=group,
            pickup_time=data.pop("pickup_time", None),
            attendance_status=AttendanceStatus.parse(data.pop("attendance_status", None)),
            last_attendance_timestamp=data.pop("last_attendance_timestamp", None),
            extra=data,
        )


@dataclass
class AttendanceChange:
    student_id: str
    route_id: Any
    status: AttendanceStatus
    timestamp: str

    def to_dict(self):
        return {
            "status": self.status.value,
            "route_id": self.route_id,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, student_id, data):
        return cls(
            student_id=str(student_id),
            route_id=data["route_id"],
            status=AttendanceStatus.parse(data["status"]),
            timestamp=data["timestamp"],
        )


ChangeSet = Dict[str, AttendanceChange]


def change_set_to_dict(change_set):
    return {student_id: change.to_dict() for student_id, change in change_set.items()}


def change_set_from_dict(data):
    return {
        str(student_id): AttendanceChange.from_dict(student_id, change)
        for student_id, change in data.items()
    }


@dataclass
class RouteInfo:
    """Metadata handed to the tracking view on a route transition."""
    id: Any
    title: str
    description: str
    schedule: str
    status: RouteStatus

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "schedule": self.schedule,
            "status": self.status.value,
        }


@dataclass
class Route:
    id: Any
    title: str = ""
    description: str = ""
    schedule: str = ""
    status: Optional[str] = None
    students: List[Student] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data.get("id"),
            title=data.get("title", "") or "",
            description=data.get("description", "") or "",
            schedule=data.get("schedule", "") or "",
            status=data.get("status"),
            students=[Student.from_dict(s) for s in data.get("students") or []],
        )

    def info(self, status):
        return RouteInfo(
            id=self.id,
            title=self.title,
            description=self.description,
            schedule=self.schedule,
            status=status,
        )
