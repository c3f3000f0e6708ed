import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.context import SessionContext, AuthEvent, auth_events
from app.core.errors import ValidationFailed
from app.models.users import Profile
from app.schemas.user import ProfileUpdate

logger = logging.getLogger(__name__)


class ProfileService:
    def __init__(self, db: Session, ctx: SessionContext):
        self.db = db
        self.ctx = ctx

    def load(self) -> Profile:
        """Re-read the caller's profile from the store"""
        profile = self.ctx.require_user()
        self.db.refresh(profile)
        return profile

    def update(self, data: ProfileUpdate) -> Profile:
        """Apply the caller's own changes; stats and role are not editable here"""
        profile = self.ctx.require_user()
        update_data = data.model_dump(exclude_unset=True)

        username = update_data.get("username")
        if username and username != profile.username and self._username_taken(username, profile.id):
            raise ValidationFailed("This username is already taken")

        for field, value in update_data.items():
            if field in ("username", "in_game_name") and value is None:
                continue  # required columns
            setattr(profile, field, value)

        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ValidationFailed("This username is already taken")
        self.db.refresh(profile)

        auth_events.publish(AuthEvent.USER_UPDATED, self.ctx.session)
        logger.info(f"Profile updated: {profile.username} ({', '.join(update_data) or 'no fields'})")
        return profile

    def _username_taken(self, username: str, profile_id: UUID) -> bool:
        return self.db.query(Profile).filter(
            Profile.username == username,
            Profile.id != profile_id,
        ).first() is not None
