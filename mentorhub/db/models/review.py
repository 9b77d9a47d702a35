"""
Review model - post-session rating between booking parties
"""
from sqlalchemy import (
    Column, Integer, Text, DateTime,
    ForeignKey, UniqueConstraint, CheckConstraint
)
from sqlalchemy.orm import relationship

from mentorhub.db.base import Base, TimestampMixin


class Review(TimestampMixin, Base):
    """Rating given by one booking party to the other"""

    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    booking_id = Column(
        Integer,
        ForeignKey("bookings.id"),
        nullable=False,
        index=True
    )
    rater_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    ratee_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)
    moderated_at = Column(DateTime, nullable=True)
    moderated_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    # Relationships
    booking = relationship("Booking", back_populates="reviews")
    rater = relationship("User", foreign_keys=[rater_id])
    ratee = relationship("User", foreign_keys=[ratee_id])

    __table_args__ = (
        UniqueConstraint("booking_id", "rater_id", name="uq_reviews_booking_rater"),
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_reviews_rating"),
        CheckConstraint("rater_id <> ratee_id", name="ck_reviews_distinct_parties"),
    )

    @property
    def is_moderated(self) -> bool:
        return self.moderated_at is not None

    def __repr__(self):
        return (
            f"<Review(id={self.id}, "
            f"booking_id={self.booking_id}, "
            f"rating={self.rating})>"
        )
