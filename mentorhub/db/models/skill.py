"""
Skill reference data and user skills
"""
from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Text,
    ForeignKey, UniqueConstraint, CheckConstraint
)
from sqlalchemy.orm import relationship

from mentorhub.db.base import Base


class Skill(Base):
    """Global skill catalog"""

    __tablename__ = "skills"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    slug = Column(String(100), unique=True, nullable=False, index=True)
    name = Column(String(100), nullable=False)
    category = Column(String(100), nullable=False, index=True)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Skill(id={self.id}, slug={self.slug})>"


class UserSkill(Base):
    """Skill held by a user, optionally verified by an admin"""

    __tablename__ = "user_skills"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    skill_id = Column(
        Integer,
        ForeignKey("skills.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    level = Column(Integer, default=1, nullable=False)
    years_of_experience = Column(Integer, default=0, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)
    verified_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    verified_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    user = relationship("User", back_populates="skills", foreign_keys=[user_id])
    skill = relationship("Skill", lazy="joined")

    __table_args__ = (
        UniqueConstraint("user_id", "skill_id", name="uq_user_skills_user_skill"),
        CheckConstraint("level BETWEEN 1 AND 5", name="ck_user_skills_level"),
        CheckConstraint("years_of_experience >= 0", name="ck_user_skills_years"),
    )

    def __repr__(self):
        return (
            f"<UserSkill(user_id={self.user_id}, "
            f"skill_id={self.skill_id}, "
            f"level={self.level})>"
        )
