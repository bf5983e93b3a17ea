"""Dashboard service - admin metrics computed from current center state."""

from decimal import Decimal

from sqlalchemy import func
from sqlalchemy.orm import Session

from nestflow.db.enums import AttendanceStatus, EnrollmentStatus, InvoiceStatus
from nestflow.db.models import Child, Classroom, Invoice
from nestflow.schemas.dashboard import (
    AttendanceMetrics,
    BillingMetrics,
    CapacityMetrics,
    ClassroomMetrics,
    DashboardMetrics,
)


def _percent(part: int, whole: int) -> int:
    """Whole-number percentage, halves rounded up; 0 when whole is 0."""
    if not whole:
        return 0
    return int(part * 100 / whole + 0.5)


def _billing_totals(db: Session, center_id: str) -> dict[str, Decimal]:
    rows = db.query(Invoice.status, func.coalesce(func.sum(Invoice.amount), 0)).join(
        Invoice.child
    ).filter(Child.center_id == center_id).group_by(Invoice.status).all()
    return {status: Decimal(str(total)) for status, total in rows}


def get_metrics(db: Session, center_id: str) -> DashboardMetrics:
    """Attendance, capacity, billing, per-classroom and enrollment metrics."""
    children = db.query(Child.classroom_id, Child.status, Child.enrollment_status).filter(
        Child.center_id == center_id,
    ).all()
    classrooms = db.query(Classroom).filter(
        Classroom.center_id == center_id,
    ).order_by(Classroom.name).all()

    total = len(children)
    by_status = {status.value: 0 for status in AttendanceStatus}
    enrollment = {status.value: 0 for status in EnrollmentStatus}
    per_room: dict[str, list[int]] = {}  # classroom_id -> [enrolled, present]
    for classroom_id, status, enrollment_status in children:
        by_status[status] = by_status.get(status, 0) + 1
        enrollment[enrollment_status] = enrollment.get(enrollment_status, 0) + 1
        if classroom_id:
            counts = per_room.setdefault(classroom_id, [0, 0])
            counts[0] += 1
            if status == AttendanceStatus.PRESENT.value:
                counts[1] += 1

    present = by_status[AttendanceStatus.PRESENT.value]
    total_capacity = sum(room.capacity for room in classrooms)
    billing = _billing_totals(db, center_id)
    zero = Decimal("0")

    return DashboardMetrics(
        attendance=AttendanceMetrics(
            total=total,
            present=present,
            absent=by_status[AttendanceStatus.ABSENT.value],
            checked_out=by_status[AttendanceStatus.CHECKED_OUT.value],
            rate=_percent(present, total),
        ),
        capacity=CapacityMetrics(
            total=total_capacity,
            enrolled=total,
            utilization=_percent(total, total_capacity),
        ),
        billing=BillingMetrics(
            total_revenue=billing.get(InvoiceStatus.PAID.value, zero),
            pending_revenue=billing.get(InvoiceStatus.PENDING.value, zero),
            overdue_revenue=billing.get(InvoiceStatus.OVERDUE.value, zero),
        ),
        classrooms=[
            ClassroomMetrics(
                id=room.id,
                name=room.name,
                capacity=room.capacity,
                enrolled=per_room.get(room.id, [0, 0])[0],
                present_count=per_room.get(room.id, [0, 0])[1],
                utilization=_percent(per_room.get(room.id, [0, 0])[0], room.capacity),
            )
            for room in classrooms
        ],
        enrollment=enrollment,
    )
