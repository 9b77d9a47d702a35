"""
Booking model - a mentee's reservation of a mentor's time
"""
from sqlalchemy import (
    Column, Integer, String, DateTime, Text,
    ForeignKey, CheckConstraint, Index
)
from sqlalchemy.orm import relationship
from enum import Enum

from mentorhub.db.base import Base, TimestampMixin, enum_column


class BookingStatus(str, Enum):
    """Booking status enumeration"""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"
    RESCHEDULED = "rescheduled"


# Statuses that hold the mentor's time slot
ACTIVE_STATUSES = frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED})

TERMINAL_STATUSES = frozenset({
    BookingStatus.COMPLETED,
    BookingStatus.CANCELLED,
    BookingStatus.NO_SHOW,
})


class Booking(TimestampMixin, Base):
    """Scheduled session between a mentor and a mentee"""

    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    offering_id = Column(
        Integer,
        ForeignKey("offerings.id"),
        nullable=True,
        index=True
    )
    mentor_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    mentee_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    starts_at = Column(DateTime, nullable=False)
    ends_at = Column(DateTime, nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    status = Column(
        enum_column(BookingStatus, "booking_status"),
        default=BookingStatus.PENDING,
        nullable=False,
        index=True
    )

    # Snapshot of the offering price at booking time
    price_cents = Column(Integer, nullable=False, default=0)
    currency = Column(String(3), nullable=False, default="USD")

    meeting_url = Column(String(500), nullable=True)
    notes = Column(Text, nullable=True)
    cancellation_reason = Column(String(500), nullable=True)
    cancelled_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    cancelled_at = Column(DateTime, nullable=True)

    # Relationships
    offering = relationship("Offering", back_populates="bookings")
    mentor = relationship("User", foreign_keys=[mentor_id])
    mentee = relationship("User", foreign_keys=[mentee_id])
    reviews = relationship("Review", back_populates="booking")

    __table_args__ = (
        CheckConstraint("ends_at > starts_at", name="ck_bookings_time_range"),
        CheckConstraint("price_cents >= 0", name="ck_bookings_price"),
        CheckConstraint("mentor_id <> mentee_id", name="ck_bookings_distinct_parties"),
        Index("ix_bookings_mentor_starts", "mentor_id", "starts_at"),
    )

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def is_participant(self, user_id: int) -> bool:
        return user_id in (self.mentor_id, self.mentee_id)

    def counterpart_id(self, user_id: int) -> int:
        """The other party on the booking"""
        return self.mentee_id if user_id == self.mentor_id else self.mentor_id

    def __repr__(self):
        return (
            f"<Booking(id={self.id}, "
            f"mentor_id={self.mentor_id}, "
            f"mentee_id={self.mentee_id}, "
            f"status={self.status})>"
        )
