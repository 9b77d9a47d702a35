"""
Dashboard aggregation service
Read-only projections over the booking and review ledgers
"""
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import func, distinct
import logging

from mentorhub.core.exceptions import UserNotFoundError
from mentorhub.db.models.user import User, Profile, UserRole
from mentorhub.db.models.booking import Booking
from mentorhub.db.models.offering import Offering
from mentorhub.db.models.review import Review
from mentorhub.schemas.dashboard import DashboardStats, ActivityItem

logger = logging.getLogger(__name__)


class DashboardService:
    """Service computing dashboard numbers on demand"""

    def __init__(self, db: Session, recent_activity_limit: int = 5):
        self.db = db
        self.recent_activity_limit = recent_activity_limit

    def _resolve_role(self, user_id: int, role: Optional[UserRole]) -> UserRole:
        if role is not None:
            return role
        user = self.db.query(User).filter(User.id == user_id).first()
        if user is None:
            raise UserNotFoundError(user_id)
        return user.role

    def _party_columns(self, role: UserRole):
        """(own column, counterpart column) on Booking for the role"""
        if role == UserRole.MENTOR:
            return Booking.mentor_id, Booking.mentee_id
        return Booking.mentee_id, Booking.mentor_id

    def get_stats(self, user_id: int, role: Optional[UserRole] = None) -> DashboardStats:
        """
        Compute dashboard stats for a user

        Store failures fall back to zero-valued stats so the dashboard always
        renders; a missing user is still reported.
        """
        try:
            role = self._resolve_role(user_id, role)
            own, counterpart = self._party_columns(role)

            total_sessions, active_connections, total_minutes = self.db.query(
                func.count(Booking.id),
                func.count(distinct(counterpart)),
                func.coalesce(func.sum(Booking.duration_minutes), 0)
            ).filter(own == user_id).one()

            average_rating = self.db.query(
                func.avg(Review.rating)
            ).filter(Review.ratee_id == user_id).scalar()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.warning(
                f"Dashboard stats unavailable for user {user_id}, returning zeros: {e}",
                extra={'user_id': user_id}
            )
            return DashboardStats(role=role or UserRole.MENTEE)

        return DashboardStats(
            total_sessions=total_sessions or 0,
            active_connections=active_connections or 0,
            total_hours=round((total_minutes or 0) / 60, 2),
            average_rating=round(float(average_rating or 0), 1),
            role=role
        )

    def get_recent_activity(
        self,
        user_id: int,
        role: Optional[UserRole] = None,
        limit: Optional[int] = None
    ) -> List[ActivityItem]:
        """Latest bookings with the counterpart's name; empty on store failure"""
        limit = limit or self.recent_activity_limit

        try:
            role = self._resolve_role(user_id, role)
            own, counterpart = self._party_columns(role)

            rows = self.db.query(
                Booking, Offering.title, Profile.display_name, User.email
            ).outerjoin(
                Offering, Booking.offering_id == Offering.id
            ).join(
                User, User.id == counterpart
            ).outerjoin(
                Profile, Profile.user_id == User.id
            ).filter(
                own == user_id
            ).order_by(
                Booking.created_at.desc(),
                Booking.id.desc()
            ).limit(limit).all()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.warning(
                f"Recent activity unavailable for user {user_id}: {e}",
                extra={'user_id': user_id}
            )
            return []

        return [
            ActivityItem(
                id=booking.id,
                title=title or "Direct session",
                date=booking.starts_at,
                status=booking.status,
                with_name=display_name or email
            )
            for booking, title, display_name, email in rows
        ]
