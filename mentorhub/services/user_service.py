"""
User and profile service
Provisioning, profile edits, visibility and the public mentor page
"""
from datetime import datetime
from typing import Callable, Optional
from sqlalchemy import String, cast, func, or_
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
import logging

from mentorhub.core.exceptions import (
    AuthorizationError,
    ConflictError,
    MentorNotFoundError,
    UserNotFoundError,
    ValidationError
)
from mentorhub.core.timezone import utcnow
from mentorhub.db.models.user import (
    User,
    Profile,
    MentorProfile,
    MatchPreferences,
    UserRole,
    UserStatus
)
from mentorhub.db.models.offering import Offering
from mentorhub.db.models.review import Review
from mentorhub.db.models.skill import Skill, UserSkill
from mentorhub.schemas.user import (
    UserCreate,
    ProfilePatch,
    ProfileResponse,
    MentorProfileResponse
)
from mentorhub.schemas.offering import OfferingResponse
from mentorhub.schemas.mentor import (
    MentorDetailResponse,
    MentorFilter,
    MentorListItem,
    MentorPage,
    MentorReview,
    MentorSkill
)

logger = logging.getLogger(__name__)

MENTOR_PAGE_REVIEW_LIMIT = 5


class UserService:
    """Service for users and their profiles"""

    def __init__(self, db: Session, clock: Callable[[], datetime] = utcnow):
        self.db = db
        self.clock = clock

    def get_user(self, user_id: int) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    def _require_admin(self, admin_id: int) -> User:
        admin = self.db.query(User).filter(User.id == admin_id).first()
        if admin is None or not admin.is_admin or not admin.is_active:
            raise AuthorizationError(
                message="Admin access required",
                error_code="INSUFFICIENT_PERMISSIONS"
            )
        return admin

    def create_user(self, data: UserCreate) -> User:
        """
        Provision a user with a profile and the role-specific profile

        Raises:
            ConflictError: If the email is already registered
        """
        existing = self.db.query(User.id).filter(User.email == data.email).first()
        if existing:
            raise ConflictError(
                message="This email address is already registered",
                error_code="EMAIL_ALREADY_EXISTS",
                details={"field": "email"}
            )

        user = User(
            email=data.email,
            role=data.role,
            status=data.status
        )
        user.profile = Profile(
            display_name=data.display_name,
            timezone=data.timezone,
            languages=[],
            rating=0.0,
            total_reviews=0
        )
        if data.role == UserRole.MENTOR:
            user.mentor_profile = MentorProfile(is_public=False, specializations=[])
        elif data.role == UserRole.MENTEE:
            user.match_preferences = MatchPreferences(goals=[], skills_to_develop=[])

        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError(
                message="This email address is already registered",
                error_code="EMAIL_ALREADY_EXISTS",
                details={"field": "email"}
            )

        self.db.refresh(user)
        logger.info(f"Created {user.role.value} user {user.id}")
        return user

    def update_profile(self, user_id: int, patch: ProfilePatch) -> User:
        """
        Apply a closed patch to the user's profile sections

        Raises:
            UserNotFoundError: If the user doesn't exist
            ValidationError: If a section doesn't apply to the user's role
        """
        user = self.get_user(user_id)

        if patch.mentor is not None and user.role != UserRole.MENTOR:
            raise ValidationError(
                message="Only mentors have a mentor profile",
                field="mentor"
            )
        if patch.preferences is not None and user.role != UserRole.MENTEE:
            raise ValidationError(
                message="Only mentees have match preferences",
                field="preferences"
            )

        if patch.profile is not None:
            changes = patch.profile.model_dump(exclude_unset=True)
            if "display_name" in changes and not changes["display_name"]:
                raise ValidationError(message="Display name is required", field="display_name")
            if user.profile is None:
                user.profile = Profile(
                    display_name=changes.get("display_name") or user.email,
                    rating=0.0,
                    total_reviews=0
                )
            for key, value in changes.items():
                setattr(user.profile, key, value)
            user.profile.updated_at = self.clock()

        if patch.mentor is not None:
            if user.mentor_profile is None:
                user.mentor_profile = MentorProfile(is_public=False)
            for key, value in patch.mentor.model_dump(exclude_unset=True).items():
                setattr(user.mentor_profile, key, value)

        if patch.preferences is not None:
            if user.match_preferences is None:
                user.match_preferences = MatchPreferences()
            for key, value in patch.preferences.model_dump(exclude_unset=True).items():
                setattr(user.match_preferences, key, value)

        self.db.commit()
        self.db.refresh(user)

        logger.info(f"Updated profile for user {user_id}")
        return user

    def set_profile_visibility(self, user_id: int, is_public: bool) -> User:
        """Publish or hide a mentor's profile (and with it their offerings)"""
        user = self.get_user(user_id)

        if user.role != UserRole.MENTOR:
            raise AuthorizationError(
                message="Only mentors can change profile visibility",
                error_code="MENTOR_REQUIRED"
            )
        if user.mentor_profile is None:
            raise MentorNotFoundError(user_id)

        user.mentor_profile.is_public = is_public
        self.db.commit()
        self.db.refresh(user)

        logger.info(f"Mentor {user_id} profile is now {'public' if is_public else 'private'}")
        return user

    def set_user_status(self, user_id: int, admin_id: int, status: UserStatus) -> User:
        """Soft status change by an admin; users are never hard-deleted"""
        self._require_admin(admin_id)
        user = self.get_user(user_id)

        if user_id == admin_id and status != UserStatus.ACTIVE:
            raise ValidationError(
                message="Admins cannot deactivate their own account",
                field="status"
            )

        previous = user.status
        user.status = status
        self.db.commit()
        self.db.refresh(user)

        logger.info(
            f"User {user_id} status {previous.value} -> {status.value} by admin {admin_id}",
            extra={'user_id': admin_id}
        )
        return user

    def search_mentors(self, filters: Optional[MentorFilter] = None) -> MentorPage:
        """
        Mentor directory: active mentors with a public profile

        Search matches display name, headline and specializations. Ordered
        by rating, then completed sessions.
        """
        filters = filters or MentorFilter()

        query = self.db.query(User, Profile, MentorProfile).join(
            Profile, Profile.user_id == User.id
        ).join(
            MentorProfile, MentorProfile.user_id == User.id
        ).filter(
            User.role == UserRole.MENTOR,
            User.status == UserStatus.ACTIVE,
            MentorProfile.is_public == True  # noqa: E712
        )

        if filters.search and filters.search.strip():
            search_term = f"%{filters.search.strip()}%"
            query = query.filter(
                or_(
                    Profile.display_name.ilike(search_term),
                    MentorProfile.headline.ilike(search_term),
                    cast(MentorProfile.specializations, String).ilike(search_term)
                )
            )

        wanted = [s.strip().lower() for s in filters.skills if s.strip()]
        if wanted:
            query = query.filter(
                User.skills.any(
                    UserSkill.skill.has(
                        or_(Skill.slug.in_(wanted), func.lower(Skill.name).in_(wanted))
                    )
                )
            )

        if filters.min_experience_years is not None:
            query = query.filter(MentorProfile.experience_years >= filters.min_experience_years)

        total = query.count()

        rows = query.order_by(
            Profile.rating.desc(),
            MentorProfile.total_sessions.desc(),
            User.id.asc()
        ).offset(filters.offset).limit(filters.limit).all()

        items = [
            MentorListItem(
                id=user.id,
                display_name=profile.display_name,
                avatar_url=profile.avatar_url,
                headline=mentor_profile.headline,
                specializations=mentor_profile.specializations or [],
                experience_years=mentor_profile.experience_years,
                hourly_rate_cents=mentor_profile.hourly_rate_cents,
                rating=profile.rating,
                total_reviews=profile.total_reviews,
                total_sessions=mentor_profile.total_sessions
            )
            for user, profile, mentor_profile in rows
        ]

        return MentorPage(
            items=items,
            total=total,
            limit=filters.limit,
            offset=filters.offset,
            has_more=filters.offset + filters.limit < total
        )

    def get_mentor(self, mentor_id: int) -> MentorDetailResponse:
        """
        Public mentor page: profile, skills, active offerings and recent reviews

        Raises:
            MentorNotFoundError: If the user isn't an active mentor with a profile
        """
        mentor = self.db.query(User).filter(
            User.id == mentor_id,
            User.role == UserRole.MENTOR,
            User.status == UserStatus.ACTIVE
        ).first()
        if mentor is None or mentor.profile is None or mentor.mentor_profile is None:
            raise MentorNotFoundError(mentor_id)

        offerings = self.db.query(Offering).filter(
            Offering.mentor_id == mentor_id,
            Offering.is_active == True  # noqa: E712
        ).order_by(Offering.created_at.desc()).all()

        reviews = self.db.query(Review).filter(
            Review.ratee_id == mentor_id
        ).order_by(
            Review.created_at.desc(),
            Review.id.desc()
        ).limit(MENTOR_PAGE_REVIEW_LIMIT).all()

        return MentorDetailResponse(
            id=mentor.id,
            profile=ProfileResponse.model_validate(mentor.profile),
            mentor_profile=MentorProfileResponse.model_validate(mentor.mentor_profile),
            skills=[
                MentorSkill(
                    name=user_skill.skill.name,
                    category=user_skill.skill.category,
                    level=user_skill.level,
                    is_verified=user_skill.is_verified
                )
                for user_skill in mentor.skills
            ],
            offerings=[OfferingResponse.model_validate(o) for o in offerings],
            reviews=[
                MentorReview(
                    id=review.id,
                    rating=review.rating,
                    comment=review.comment,
                    created_at=review.created_at,
                    rater_id=review.rater_id,
                    rater_name=review.rater.display_name if review.rater else None
                )
                for review in reviews
            ]
        )
