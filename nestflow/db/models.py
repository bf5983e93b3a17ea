"""SQLAlchemy ORM models for tenants, rosters, attendance, messaging and billing."""

import datetime as dt
import uuid
from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    JSON, Boolean, Column, Date, ForeignKey, Index, Integer, Numeric, String,
    Table, Text, UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from nestflow.core.config import settings
from nestflow.db.base import Base
from nestflow.db.enums import (
    DEFAULT_ATTENDANCE_STATUS, DEFAULT_CLASSROOM_CAPACITY, DEFAULT_ENROLLMENT_STATUS,
    DEFAULT_INVOICE_STATUS, ConsentStatus,
)

# JSONB on PostgreSQL, plain JSON elsewhere
JsonType = JSON().with_variant(JSONB(), "postgresql")


def new_id() -> str:
    """Opaque identifier for every record."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Tenant & Auth Models
# =============================================================================

class Center(Base):
    """
    A childcare facility (tenant) in the multi-tenant system.

    All domain entities belong to a center
    and must be scoped by center_id in all queries.
    """
    __tablename__ = "centers"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    timezone: Mapped[str] = mapped_column(
        String(50),
        default=lambda: settings.DEFAULT_CENTER_TIMEZONE,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)

    # Relationships
    users: Mapped[list["User"]] = relationship(
        back_populates="center",
        cascade="all, delete-orphan"
    )
    classrooms: Mapped[list["Classroom"]] = relationship(
        back_populates="center",
        cascade="all, delete-orphan"
    )
    children: Mapped[list["Child"]] = relationship(
        back_populates="center",
        cascade="all, delete-orphan"
    )


class User(Base):
    """
    Application user (admin, teacher or parent).

    Belongs to exactly one center. Email is stored lower-case and unique.
    """
    __tablename__ = "users"
    __table_args__ = (
        Index("idx_users_center_id", "center_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    center_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("centers.id", ondelete="CASCADE"),
        nullable=False
    )
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)

    # Relationships
    center: Mapped["Center"] = relationship(back_populates="users")
    classrooms: Mapped[list["Classroom"]] = relationship(
        secondary="classroom_staff",
        back_populates="staff"
    )

    @property
    def full_name(self) -> str:
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts) if parts else self.email


# =============================================================================
# Roster Models
# =============================================================================

classroom_staff = Table(
    "classroom_staff",
    Base.metadata,
    Column(
        "classroom_id",
        String(36),
        ForeignKey("classrooms.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "user_id",
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Classroom(Base):
    """
    A room within a center.

    Enrolled count is derived from children.classroom_id and never stored.
    """
    __tablename__ = "classrooms"
    __table_args__ = (
        Index("idx_classrooms_center_id", "center_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    center_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("centers.id", ondelete="CASCADE"),
        nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    capacity: Mapped[int] = mapped_column(
        Integer,
        default=DEFAULT_CLASSROOM_CAPACITY,
        nullable=False
    )
    age_group: Mapped[str | None] = mapped_column(String(50), nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)

    # Relationships
    center: Mapped["Center"] = relationship(back_populates="classrooms")
    staff: Mapped[list["User"]] = relationship(
        secondary="classroom_staff",
        back_populates="classrooms"
    )
    children: Mapped[list["Child"]] = relationship(back_populates="classroom")


class Child(Base):
    """
    A child enrolled (or in the admissions pipeline) at a center.

    Two independent status fields:
    - status: same-day attendance, a cached projection of attendance rows
    - enrollment_status: admissions lifecycle
    """
    __tablename__ = "children"
    __table_args__ = (
        Index("idx_children_center_id", "center_id"),
        Index("idx_children_classroom_id", "classroom_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    center_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("centers.id", ondelete="CASCADE"),
        nullable=False
    )
    classroom_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("classrooms.id", ondelete="SET NULL"),
        nullable=True
    )
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    dob: Mapped[date | None] = mapped_column(Date, nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    allergies: Mapped[list[str]] = mapped_column(JsonType, default=list, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20),
        default=DEFAULT_ATTENDANCE_STATUS.value,
        nullable=False
    )
    enrollment_status: Mapped[str] = mapped_column(
        String(20),
        default=DEFAULT_ENROLLMENT_STATUS.value,
        nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        default=utcnow,
        onupdate=utcnow,
        nullable=False
    )

    # Relationships
    center: Mapped["Center"] = relationship(back_populates="children")
    classroom: Mapped["Classroom | None"] = relationship(back_populates="children")
    guardians: Mapped[list["Guardian"]] = relationship(
        back_populates="child",
        cascade="all, delete-orphan"
    )
    activities: Mapped[list["Activity"]] = relationship(
        back_populates="child",
        cascade="all, delete-orphan"
    )
    attendance_records: Mapped[list["Attendance"]] = relationship(
        back_populates="child",
        cascade="all, delete-orphan"
    )
    invoices: Mapped[list["Invoice"]] = relationship(
        back_populates="child",
        cascade="all, delete-orphan"
    )
    consent_forms: Mapped[list["SignedConsentForm"]] = relationship(
        back_populates="child",
        cascade="all, delete-orphan"
    )
    # Messages survive the child; child_id is nulled on delete
    messages: Mapped[list["Message"]] = relationship(back_populates="child")


class Guardian(Base):
    """Contact record for a child's parent or guardian."""
    __tablename__ = "guardians"
    __table_args__ = (
        Index("idx_guardians_child_id", "child_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    child_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("children.id", ondelete="CASCADE"),
        nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    relation: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)

    child: Mapped["Child"] = relationship(back_populates="guardians")


# =============================================================================
# Daily Operations Models
# =============================================================================

class Activity(Base):
    """
    Append-only timeline entry for a child (check-in, meal, nap, photo, ...).

    Never updated or deleted in normal flow.
    """
    __tablename__ = "activities"
    __table_args__ = (
        Index("idx_activities_child_created", "child_id", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    child_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("children.id", ondelete="CASCADE"),
        nullable=False
    )
    author_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True
    )
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    media_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    # "metadata" is reserved on declarative classes
    meta: Mapped[dict | None] = mapped_column("metadata", JsonType, nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)

    child: Mapped["Child"] = relationship(back_populates="activities")
    author: Mapped["User | None"] = relationship()


class Attendance(Base):
    """
    One check-in, completed by a matching check-out.

    check_out_time IS NULL marks the open record.
    """
    __tablename__ = "attendance"
    __table_args__ = (
        Index("idx_attendance_child_date", "child_id", "date"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    child_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("children.id", ondelete="CASCADE"),
        nullable=False
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    check_in_time: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
    check_out_time: Mapped[datetime | None] = mapped_column(nullable=True)
    checked_in_by: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True
    )
    checked_out_by: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True
    )
    signature_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    child: Mapped["Child"] = relationship(back_populates="attendance_records")
    checked_in_by_user: Mapped["User | None"] = relationship(foreign_keys=[checked_in_by])
    checked_out_by_user: Mapped["User | None"] = relationship(foreign_keys=[checked_out_by])


class Message(Base):
    """Directed message between two users of a center, optionally about a child."""
    __tablename__ = "messages"
    __table_args__ = (
        Index("idx_messages_sender", "sender_id"),
        Index("idx_messages_recipient", "recipient_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    center_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("centers.id", ondelete="CASCADE"),
        nullable=False
    )
    sender_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False
    )
    recipient_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False
    )
    child_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("children.id", ondelete="SET NULL"),
        nullable=True
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)

    sender: Mapped["User"] = relationship(foreign_keys=[sender_id])
    recipient: Mapped["User"] = relationship(foreign_keys=[recipient_id])
    child: Mapped["Child | None"] = relationship(back_populates="messages")


# =============================================================================
# Billing & Consent Models
# =============================================================================

class Invoice(Base):
    """Tuition invoice for a child. PAID is terminal."""
    __tablename__ = "invoices"
    __table_args__ = (
        Index("idx_invoices_child_id", "child_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    child_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("children.id", ondelete="CASCADE"),
        nullable=False
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20),
        default=DEFAULT_INVOICE_STATUS.value,
        nullable=False
    )
    paid_at: Mapped[datetime | None] = mapped_column(nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)

    child: Mapped["Child"] = relationship(back_populates="invoices")


class ConsentTemplate(Base):
    """Center-wide consent form template. Immutable after creation."""
    __tablename__ = "consent_templates"
    __table_args__ = (
        Index("idx_consent_templates_center_id", "center_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    center_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("centers.id", ondelete="CASCADE"),
        nullable=False
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    is_required: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)


class SignedConsentForm(Base):
    """
    A child's signature on a consent template.

    Keyed by (child_id, template_id); re-signing overwrites the row.
    """
    __tablename__ = "signed_consent_forms"
    __table_args__ = (
        UniqueConstraint("child_id", "template_id", name="uq_signed_consent_child_template"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    child_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("children.id", ondelete="CASCADE"),
        nullable=False
    )
    template_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("consent_templates.id", ondelete="CASCADE"),
        nullable=False
    )
    status: Mapped[str] = mapped_column(
        String(20),
        default=ConsentStatus.PENDING.value,
        nullable=False
    )
    signer_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    signed_at: Mapped[datetime | None] = mapped_column(nullable=True)

    child: Mapped["Child"] = relationship(back_populates="consent_forms")
    template: Mapped["ConsentTemplate"] = relationship()
