"""
Profile service
"""
import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.exceptions import InvalidInputError, NotFoundError, PersistenceError
from app.models import Profile
from app.schemas.profile import ProfileUpsert

logger = logging.getLogger(__name__)


class ProfileService:

    def upsert_profile(self, db: Session, user_id: UUID, data: ProfileUpsert) -> Profile:
        """Create the caller's profile or update it in place"""
        profile = db.query(Profile).filter(Profile.id == user_id).first()

        if not profile:
            profile = Profile(id=user_id)
            db.add(profile)

        profile.email = data.email
        profile.full_name = data.full_name
        profile.avatar_url = data.avatar_url

        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            raise InvalidInputError("Email is already used by another profile") from e
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to save profile {user_id}: {str(e)}")
            raise PersistenceError("Failed to save profile") from e

        db.refresh(profile)
        logger.info(f"Profile saved: {user_id}")

        return profile

    def get_profile(self, db: Session, user_id: UUID) -> Profile:
        profile = db.query(Profile).filter(Profile.id == user_id).first()
        if not profile:
            raise NotFoundError("Profile", user_id)
        return profile


# Global instance
profile_service = ProfileService()
