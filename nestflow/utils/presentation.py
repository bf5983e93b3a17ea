"""Presentation helpers for turning internal status values into display labels.

The same rules are served by the API (``status_label`` on child rows) and
exported by the client SDK, so both sides agree on what a card shows.
"""

from __future__ import annotations

from nestflow.db.enums import AttendanceStatus, EnrollmentStatus


# Enrollment state wins over attendance for anyone not yet (or no longer) enrolled
_ENROLLMENT_LABELS = {
    EnrollmentStatus.PENDING.value: "Pending Approval",
    EnrollmentStatus.WAITLIST.value: "On Waitlist",
    EnrollmentStatus.ARCHIVED.value: "Archived",
}

_ATTENDANCE_LABELS = {
    AttendanceStatus.PRESENT.value: "Here",
    AttendanceStatus.CHECKED_OUT.value: "Gone Home",
}

ABSENT_LABEL = "Absent"


def _value(status: object) -> str | None:
    if status is None:
        return None
    return getattr(status, "value", status)


def child_status_label(enrollment_status: object, status: object) -> str:
    """Label shown for a child.

    Examples:
        ("WAITLIST", "PRESENT") -> "On Waitlist"
        ("ENROLLED", "PRESENT") -> "Here"
        ("ENROLLED", "CHECKED_OUT") -> "Gone Home"
        ("ENROLLED", "ABSENT") -> "Absent"
    """
    enrollment = _value(enrollment_status)
    if enrollment in _ENROLLMENT_LABELS:
        return _ENROLLMENT_LABELS[enrollment]
    return _ATTENDANCE_LABELS.get(_value(status), ABSENT_LABEL)


def display_name(first_name: str | None, last_name: str | None) -> str | None:
    """Join name parts, or None when both are empty."""
    parts = [p for p in (first_name, last_name) if p]
    return " ".join(parts) if parts else None
