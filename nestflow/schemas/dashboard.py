"""Pydantic schemas for the admin dashboard."""

from decimal import Decimal

from pydantic import BaseModel


class AttendanceMetrics(BaseModel):
    total: int
    present: int
    absent: int
    checked_out: int
    rate: int  # percent present


class CapacityMetrics(BaseModel):
    total: int
    enrolled: int
    utilization: int  # percent


class BillingMetrics(BaseModel):
    total_revenue: Decimal
    pending_revenue: Decimal
    overdue_revenue: Decimal


class ClassroomMetrics(BaseModel):
    id: str
    name: str
    capacity: int
    enrolled: int
    present_count: int
    utilization: int


class DashboardMetrics(BaseModel):
    attendance: AttendanceMetrics
    capacity: CapacityMetrics
    billing: BillingMetrics
    classrooms: list[ClassroomMetrics]
    enrollment: dict[str, int]
