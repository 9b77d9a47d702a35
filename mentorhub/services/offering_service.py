"""
Offering catalog service
Mentor-authored session templates and their discovery listing
"""
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import String, cast, or_
import logging

from mentorhub.core.exceptions import (
    AuthorizationError,
    OfferingNotFoundError,
    ValidationError
)
from mentorhub.db.models.user import User, Profile, MentorProfile, UserRole, UserStatus
from mentorhub.db.models.skill import Skill
from mentorhub.db.models.offering import (
    Offering,
    OfferingType,
    MIN_DURATION_MINUTES,
    MAX_DURATION_MINUTES,
    MIN_GROUP_PARTICIPANTS,
    MAX_GROUP_PARTICIPANTS
)
from mentorhub.schemas.offering import (
    OfferingCreate,
    OfferingUpdate,
    OfferingFilter,
    OfferingListItem,
    OfferingPage,
    OfferingResponse
)

logger = logging.getLogger(__name__)


def resolve_max_participants(offering_type: OfferingType, max_participants: Optional[int]) -> int:
    """Apply the per-type participant rules, returning the value to store"""
    if offering_type == OfferingType.ONE_ON_ONE:
        if max_participants not in (None, 1):
            raise ValidationError(
                message="One-on-one offerings have exactly one participant",
                field="max_participants"
            )
        return 1

    if max_participants is None:
        if offering_type == OfferingType.OFFICE_HOURS:
            return MAX_GROUP_PARTICIPANTS
        raise ValidationError(
            message=f"{offering_type.value} offerings require max_participants",
            field="max_participants"
        )

    if not MIN_GROUP_PARTICIPANTS <= max_participants <= MAX_GROUP_PARTICIPANTS:
        raise ValidationError(
            message=(
                f"max_participants must be between {MIN_GROUP_PARTICIPANTS} "
                f"and {MAX_GROUP_PARTICIPANTS}"
            ),
            field="max_participants"
        )
    return max_participants


def validate_offering_values(
    title: str,
    duration_minutes: int,
    price_cents: int,
    currency: str
) -> None:
    """Check the scalar offering invariants"""
    if not title or not title.strip():
        raise ValidationError(message="Title is required", field="title")

    if not MIN_DURATION_MINUTES <= duration_minutes <= MAX_DURATION_MINUTES:
        raise ValidationError(
            message=(
                f"Duration must be between {MIN_DURATION_MINUTES} "
                f"and {MAX_DURATION_MINUTES} minutes"
            ),
            field="duration_minutes"
        )

    if price_cents < 0:
        raise ValidationError(message="Price cannot be negative", field="price_cents")

    if not currency or len(currency) != 3 or not currency.isalpha() or not currency.isupper():
        raise ValidationError(
            message="Currency must be a 3-letter ISO 4217 code",
            field="currency"
        )


class OfferingService:
    """Service for the offering catalog"""

    def __init__(self, db: Session):
        self.db = db

    def _require_active_mentor(self, mentor_id: int) -> User:
        mentor = self.db.query(User).filter(User.id == mentor_id).first()
        if (
            mentor is None
            or mentor.role != UserRole.MENTOR
            or mentor.status != UserStatus.ACTIVE
        ):
            raise AuthorizationError(
                message="Only active mentors can publish offerings",
                error_code="MENTOR_REQUIRED"
            )
        return mentor

    def _load_skills(self, skill_ids: List[int]) -> List[Skill]:
        if not skill_ids:
            return []
        wanted = set(skill_ids)
        skills = self.db.query(Skill).filter(
            Skill.id.in_(wanted),
            Skill.is_active == True  # noqa: E712
        ).all()
        missing = wanted - {skill.id for skill in skills}
        if missing:
            raise ValidationError(
                message="Unknown or inactive skills",
                field="skill_ids",
                details={"missing": sorted(missing)}
            )
        return skills

    def _get_owned(self, offering_id: int, mentor_id: int) -> Offering:
        offering = self.db.query(Offering).filter(
            Offering.id == offering_id,
            Offering.mentor_id == mentor_id
        ).first()
        if not offering:
            raise OfferingNotFoundError(offering_id)
        return offering

    def create_offering(self, mentor_id: int, data: OfferingCreate) -> Offering:
        """
        Create a new offering for a mentor

        Args:
            mentor_id: Owning mentor's user ID
            data: Offering fields

        Returns:
            Created Offering, active

        Raises:
            AuthorizationError: If the caller is not an active mentor
            ValidationError: If duration, price, currency or participant rules fail
        """
        self._require_active_mentor(mentor_id)

        validate_offering_values(
            data.title, data.duration_minutes, data.price_cents, data.currency
        )
        max_participants = resolve_max_participants(data.type, data.max_participants)
        skills = self._load_skills(data.skill_ids)

        offering = Offering(
            mentor_id=mentor_id,
            title=data.title.strip(),
            description=data.description,
            type=data.type,
            duration_minutes=data.duration_minutes,
            price_cents=data.price_cents,
            currency=data.currency,
            max_participants=max_participants,
            tags=data.tags,
            is_active=True
        )
        offering.skills = skills

        self.db.add(offering)
        self.db.commit()
        self.db.refresh(offering)

        logger.info(f"Created offering {offering.id} for mentor {mentor_id}")
        return offering

    def update_offering(self, offering_id: int, mentor_id: int, patch: OfferingUpdate) -> Offering:
        """
        Apply a partial update to an offering owned by the mentor

        Raises:
            OfferingNotFoundError: If the offering is missing or owned by someone else
            ValidationError: If the merged values violate offering rules
        """
        offering = self._get_owned(offering_id, mentor_id)
        changes = patch.model_dump(exclude_unset=True)

        for key in ("title", "type", "duration_minutes", "price_cents", "currency"):
            if key in changes and changes[key] is None:
                raise ValidationError(message=f"{key} cannot be cleared", field=key)

        offering_type = changes.get("type", offering.type)
        if "max_participants" in changes:
            max_participants = changes["max_participants"]
        elif "type" in changes and offering_type != offering.type:
            max_participants = None
        else:
            max_participants = offering.max_participants

        validate_offering_values(
            changes.get("title", offering.title),
            changes.get("duration_minutes", offering.duration_minutes),
            changes.get("price_cents", offering.price_cents),
            changes.get("currency", offering.currency)
        )
        offering.max_participants = resolve_max_participants(offering_type, max_participants)

        if "skill_ids" in changes:
            offering.skills = self._load_skills(changes.pop("skill_ids") or [])
        changes.pop("max_participants", None)

        for key, value in changes.items():
            if key == "title":
                value = value.strip()
            setattr(offering, key, value)

        self.db.commit()
        self.db.refresh(offering)

        logger.info(f"Updated offering {offering.id}: {sorted(patch.model_fields_set)}")
        return offering

    def deactivate_offering(self, offering_id: int, mentor_id: int) -> Offering:
        """Hide an offering from discovery; existing bookings are untouched"""
        offering = self._get_owned(offering_id, mentor_id)

        if offering.is_active:
            offering.is_active = False
            self.db.commit()
            self.db.refresh(offering)
            logger.info(f"Deactivated offering {offering.id}")

        return offering

    def get_offering(self, offering_id: int) -> Offering:
        offering = self.db.query(Offering).filter(Offering.id == offering_id).first()
        if not offering:
            raise OfferingNotFoundError(offering_id)
        return offering

    def list_mentor_offerings(self, mentor_id: int, include_inactive: bool = False) -> List[Offering]:
        query = self.db.query(Offering).filter(Offering.mentor_id == mentor_id)
        if not include_inactive:
            query = query.filter(Offering.is_active == True)  # noqa: E712
        return query.order_by(Offering.created_at.desc(), Offering.id.desc()).all()

    def list_offerings(self, filters: Optional[OfferingFilter] = None) -> OfferingPage:
        """
        Discovery listing of active offerings from public, active mentors

        Ordered by mentor rating, then mentor's completed sessions.
        """
        filters = filters or OfferingFilter()

        query = self.db.query(Offering, Profile, MentorProfile).join(
            User, Offering.mentor_id == User.id
        ).join(
            Profile, Profile.user_id == User.id
        ).join(
            MentorProfile, MentorProfile.user_id == User.id
        ).filter(
            Offering.is_active == True,  # noqa: E712
            User.status == UserStatus.ACTIVE,
            MentorProfile.is_public == True  # noqa: E712
        )

        if filters.search:
            search_term = f"%{filters.search.strip()}%"
            query = query.filter(
                or_(
                    Offering.title.ilike(search_term),
                    Offering.description.ilike(search_term),
                    Profile.display_name.ilike(search_term),
                    MentorProfile.headline.ilike(search_term)
                )
            )

        if filters.skills:
            slugs = [slug.strip().lower() for slug in filters.skills if slug.strip()]
            if slugs:
                query = query.filter(
                    or_(
                        Offering.skills.any(Skill.slug.in_(slugs)),
                        *[cast(Offering.tags, String).like(f'%"{slug}"%') for slug in slugs]
                    )
                )

        if filters.max_price_cents is not None:
            query = query.filter(Offering.price_cents <= filters.max_price_cents)

        if filters.min_experience_years is not None:
            query = query.filter(MentorProfile.experience_years >= filters.min_experience_years)

        total = query.count()

        rows = query.order_by(
            Profile.rating.desc(),
            MentorProfile.total_sessions.desc(),
            Offering.id.asc()
        ).offset(filters.offset).limit(filters.limit).all()

        items = [
            OfferingListItem(
                **OfferingResponse.model_validate(offering).model_dump(),
                mentor_name=profile.display_name,
                mentor_headline=mentor_profile.headline,
                mentor_experience_years=mentor_profile.experience_years,
                mentor_rating=profile.rating,
                mentor_total_sessions=mentor_profile.total_sessions
            )
            for offering, profile, mentor_profile in rows
        ]

        return OfferingPage(
            items=items,
            total=total,
            limit=filters.limit,
            offset=filters.offset,
            has_more=filters.offset + filters.limit < total
        )
