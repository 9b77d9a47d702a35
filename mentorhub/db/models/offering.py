"""
Offering model - mentor-published session templates
"""
from sqlalchemy import (
    Column, Integer, String, Boolean, Text, JSON, Table,
    ForeignKey, CheckConstraint
)
from sqlalchemy.orm import relationship
from enum import Enum

from mentorhub.db.base import Base, TimestampMixin, enum_column


class OfferingType(str, Enum):
    """Offering type enumeration"""
    ONE_ON_ONE = "one_on_one"
    GROUP = "group"
    COHORT = "cohort"
    OFFICE_HOURS = "office_hours"


GROUP_TYPES = frozenset({OfferingType.GROUP, OfferingType.COHORT, OfferingType.OFFICE_HOURS})

MIN_DURATION_MINUTES = 15
MAX_DURATION_MINUTES = 480
MIN_GROUP_PARTICIPANTS = 2
MAX_GROUP_PARTICIPANTS = 50


offering_skills = Table(
    "offering_skills",
    Base.metadata,
    Column("offering_id", Integer, ForeignKey("offerings.id", ondelete="CASCADE"), primary_key=True),
    Column("skill_id", Integer, ForeignKey("skills.id", ondelete="CASCADE"), primary_key=True),
)


class Offering(TimestampMixin, Base):
    """Bookable session template owned by a mentor"""

    __tablename__ = "offerings"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    mentor_id = Column(
        Integer,
        ForeignKey("users.id"),
        nullable=False,
        index=True
    )
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    type = Column(
        enum_column(OfferingType, "offering_type"),
        default=OfferingType.ONE_ON_ONE,
        nullable=False
    )
    duration_minutes = Column(Integer, nullable=False)
    price_cents = Column(Integer, nullable=False, default=0)
    currency = Column(String(3), nullable=False, default="USD")
    max_participants = Column(Integer, nullable=False, default=1)
    tags = Column(JSON, nullable=True)  # Array of tags
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    # Relationships
    mentor = relationship("User", back_populates="offerings")
    skills = relationship("Skill", secondary=offering_skills, lazy="selectin")
    bookings = relationship("Booking", back_populates="offering")

    __table_args__ = (
        CheckConstraint(
            f"duration_minutes BETWEEN {MIN_DURATION_MINUTES} AND {MAX_DURATION_MINUTES}",
            name="ck_offerings_duration"
        ),
        CheckConstraint("price_cents >= 0", name="ck_offerings_price"),
        CheckConstraint("max_participants >= 1", name="ck_offerings_participants"),
    )

    @property
    def is_group(self) -> bool:
        return self.type in GROUP_TYPES

    def __repr__(self):
        return (
            f"<Offering(id={self.id}, "
            f"mentor_id={self.mentor_id}, "
            f"title={self.title[:30]})>"
        )
