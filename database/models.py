from sqlalchemy import (
    Column, Integer, String, Date, Time, DateTime, ForeignKey, Text, Enum as SQLEnum,
    CheckConstraint, UniqueConstraint, Index,
)
from sqlalchemy.orm import relationship, declarative_base
from utils.timezone import get_utc_now
import enum

Base = declarative_base()


class UserRole(str, enum.Enum):
    STUDENT = "student"
    ORGANIZER = "organizer"
    FACULTY = "faculty"


class EventStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    full_name = Column(String(255), nullable=False)
    role = Column(SQLEnum(UserRole, name="user_role", values_callable=_enum_values), nullable=False)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=get_utc_now, nullable=False)

    # Relationships
    events = relationship("Event", foreign_keys="Event.organizer_id", back_populates="organizer")
    reviewed_events = relationship("Event", foreign_keys="Event.reviewed_by", back_populates="reviewer")
    registrations = relationship("Registration", back_populates="student", cascade="all, delete-orphan")
    sessions = relationship("AuthSession", back_populates="profile", cascade="all, delete-orphan")


class AuthSession(Base):
    __tablename__ = "auth_sessions"

    id = Column(String(64), primary_key=True)  # token "sid" claim
    profile_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=get_utc_now, nullable=False)
    expires_at = Column(DateTime, nullable=False)
    revoked_at = Column(DateTime, nullable=True)

    # Relationships
    profile = relationship("Profile", back_populates="sessions")


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    venue = Column(String(255), nullable=True)
    category = Column(String(100), default="General", nullable=False)
    capacity = Column(Integer, nullable=False)
    registered_count = Column(Integer, default=0, nullable=False)  # equals the number of registrations
    event_date = Column(Date, nullable=False)
    event_time = Column(Time, nullable=True)  # None = TBA
    poster_path = Column(String(512), nullable=True)  # path inside the storage bucket
    status = Column(
        SQLEnum(EventStatus, name="event_status", values_callable=_enum_values),
        default=EventStatus.PENDING,
        nullable=False,
    )
    organizer_id = Column(Integer, ForeignKey("profiles.id"), nullable=False)
    reviewed_by = Column(Integer, ForeignKey("profiles.id"), nullable=True)
    reviewed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=get_utc_now, nullable=False)
    updated_at = Column(DateTime, default=get_utc_now, onupdate=get_utc_now, nullable=False)

    # Relationships
    organizer = relationship("Profile", foreign_keys=[organizer_id], back_populates="events")
    reviewer = relationship("Profile", foreign_keys=[reviewed_by], back_populates="reviewed_events")
    registrations = relationship("Registration", back_populates="event", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("capacity > 0", name="ck_events_capacity_positive"),
        CheckConstraint("registered_count >= 0", name="ck_events_registered_non_negative"),
        CheckConstraint("registered_count <= capacity", name="ck_events_registered_lte_capacity"),
        Index("ix_events_status_date", "status", "event_date"),
    )

    @property
    def seats_left(self) -> int:
        return max(0, self.capacity - (self.registered_count or 0))

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, title={self.title}, {self.registered_count}/{self.capacity}, {self.status})>"


class Registration(Base):
    __tablename__ = "registrations"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    registered_at = Column(DateTime, default=get_utc_now, nullable=False)

    # Relationships
    event = relationship("Event", back_populates="registrations")
    student = relationship("Profile", back_populates="registrations")

    __table_args__ = (
        UniqueConstraint("event_id", "student_id", name="uq_registrations_event_student"),
    )
