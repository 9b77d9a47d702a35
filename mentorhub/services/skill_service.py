"""
Skill catalog and user skill service
"""
from datetime import datetime
from typing import Callable, List
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
import logging

from mentorhub.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    SkillNotFoundError,
    ValidationError
)
from mentorhub.core.timezone import utcnow
from mentorhub.db.models.user import User
from mentorhub.db.models.skill import Skill, UserSkill
from mentorhub.schemas.skill import SkillCreate, UserSkillCreate

logger = logging.getLogger(__name__)


class SkillService:
    """Service for skills and the skills users hold"""

    def __init__(self, db: Session, clock: Callable[[], datetime] = utcnow):
        self.db = db
        self.clock = clock

    def list_skills(self) -> List[Skill]:
        return self.db.query(Skill).filter(
            Skill.is_active == True  # noqa: E712
        ).order_by(Skill.category.asc(), Skill.name.asc()).all()

    def create_skill(self, data: SkillCreate) -> Skill:
        existing = self.db.query(Skill.id).filter(Skill.slug == data.slug).first()
        if existing:
            raise ConflictError(
                message="Skill with this slug already exists",
                error_code="SKILL_EXISTS",
                details={"slug": data.slug}
            )

        skill = Skill(
            slug=data.slug,
            name=data.name,
            category=data.category,
            description=data.description
        )
        self.db.add(skill)
        self.db.commit()
        self.db.refresh(skill)

        logger.info(f"Created skill {skill.slug}")
        return skill

    def list_user_skills(self, user_id: int) -> List[UserSkill]:
        return self.db.query(UserSkill).filter(
            UserSkill.user_id == user_id
        ).order_by(UserSkill.level.desc(), UserSkill.id.asc()).all()

    def add_user_skill(self, user_id: int, data: UserSkillCreate) -> UserSkill:
        """
        Add a skill to a user's profile

        Raises:
            SkillNotFoundError: If the skill is missing or inactive
            ValidationError: If level or years are out of range
            ConflictError: If the user already has this skill
        """
        if not 1 <= data.level <= 5:
            raise ValidationError(message="Skill level must be between 1 and 5", field="level")
        if data.years_of_experience < 0:
            raise ValidationError(
                message="Years of experience cannot be negative",
                field="years_of_experience"
            )

        skill = self.db.query(Skill).filter(
            Skill.id == data.skill_id,
            Skill.is_active == True  # noqa: E712
        ).first()
        if skill is None:
            raise SkillNotFoundError(data.skill_id)

        user_skill = UserSkill(
            user_id=user_id,
            skill_id=skill.id,
            level=data.level,
            years_of_experience=data.years_of_experience
        )
        self.db.add(user_skill)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError(
                message="You already have this skill on your profile",
                error_code="SKILL_ALREADY_ADDED",
                details={"skill_id": data.skill_id}
            )

        self.db.refresh(user_skill)
        return user_skill

    def remove_user_skill(self, user_id: int, skill_id: int) -> None:
        user_skill = self.db.query(UserSkill).filter(
            UserSkill.user_id == user_id,
            UserSkill.skill_id == skill_id
        ).first()
        if user_skill is None:
            raise NotFoundError(resource="User skill", resource_id=skill_id)

        self.db.delete(user_skill)
        self.db.commit()

    def verify_user_skill(self, user_skill_id: int, admin_id: int) -> UserSkill:
        """Mark a user's skill as verified by an admin"""
        admin = self.db.query(User).filter(User.id == admin_id).first()
        if admin is None or not admin.is_admin or not admin.is_active:
            raise AuthorizationError(
                message="Admin access required",
                error_code="INSUFFICIENT_PERMISSIONS"
            )

        user_skill = self.db.query(UserSkill).filter(UserSkill.id == user_skill_id).first()
        if user_skill is None:
            raise NotFoundError(resource="User skill", resource_id=user_skill_id)

        if not user_skill.is_verified:
            user_skill.is_verified = True
            user_skill.verified_by = admin_id
            user_skill.verified_at = self.clock()
            self.db.commit()
            self.db.refresh(user_skill)
            logger.info(f"User skill {user_skill_id} verified by admin {admin_id}")

        return user_skill
