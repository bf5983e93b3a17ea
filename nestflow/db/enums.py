"""Enum definitions for application constants."""

from enum import Enum


class Role(str, Enum):
    """
    User roles within a center.

    - ADMIN: Center administration (roster, billing, analytics, classrooms)
    - TEACHER: Daily operations (attendance, activities, child profiles)
    - PARENT: Parent portal (own messages, invoices, consent forms)
    """
    ADMIN = "ADMIN"
    TEACHER = "TEACHER"
    PARENT = "PARENT"

    @classmethod
    def has_value(cls, value: str) -> bool:
        """Check if value is a valid role."""
        return value in cls._value2member_map_


class AttendanceStatus(str, Enum):
    """Same-day presence state of a child (projection of attendance rows)."""
    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    CHECKED_OUT = "CHECKED_OUT"


class EnrollmentStatus(str, Enum):
    """
    Admissions lifecycle of a child (the enrollment pipeline).

    PENDING → WAITLIST → ENROLLED → ARCHIVED
    """
    PENDING = "PENDING"
    WAITLIST = "WAITLIST"
    ENROLLED = "ENROLLED"
    ARCHIVED = "ARCHIVED"


class ActivityType(str, Enum):
    """Kinds of timeline entries recorded against a child."""
    CHECK_IN = "CHECK_IN"
    CHECK_OUT = "CHECK_OUT"
    PHOTO = "PHOTO"
    MEAL = "MEAL"
    NAP = "NAP"
    INCIDENT = "INCIDENT"
    NOTE = "NOTE"
    MEDICATION = "MEDICATION"

    @classmethod
    def has_value(cls, value: str) -> bool:
        return value in cls._value2member_map_


class InvoiceStatus(str, Enum):
    """Invoice status. PAID is terminal."""
    PAID = "PAID"
    PENDING = "PENDING"
    OVERDUE = "OVERDUE"


class ConsentStatus(str, Enum):
    """Signed consent form status (PENDING → SIGNED)."""
    PENDING = "PENDING"
    SIGNED = "SIGNED"


# =============================================================================
# Defaults
# =============================================================================

DEFAULT_ATTENDANCE_STATUS = AttendanceStatus.ABSENT
DEFAULT_ENROLLMENT_STATUS = EnrollmentStatus.PENDING
DEFAULT_INVOICE_STATUS = InvoiceStatus.PENDING
DEFAULT_CLASSROOM_CAPACITY = 15


# =============================================================================
# Role groups (use these in require_roles, never raw strings)
# =============================================================================

ROLES_STAFF = [Role.ADMIN, Role.TEACHER]
ROLES_ADMIN = [Role.ADMIN]
ROLES_CAN_PAY_INVOICES = [Role.ADMIN, Role.PARENT]
