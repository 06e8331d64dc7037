"""User provisioning, onboarding status and profile updates"""
import asyncio
from typing import Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from sensai.config import get_settings
from sensai.errors import StorageError, UnauthorizedError, ValidationError
from sensai.models.industry_insight import IndustryInsight
from sensai.models.user import User
from sensai.services.identity import Identity
from sensai.services.insight_generator import InsightGenerator
from sensai.services.insight_service import InsightService
from sensai.utils.logger import log

settings = get_settings()


def require_identity(identity: Optional[Identity]) -> Identity:
    if identity is None:
        raise UnauthorizedError("Unauthorized")
    return identity


class UserService:
    """Service for user rows keyed by the identity provider's user id"""

    def __init__(self, db: Session, generator: Optional[InsightGenerator] = None):
        self.db = db
        self.generator = generator

    def find_user(self, identity: Identity) -> Optional[User]:
        return self.db.query(User).filter(User.external_user_id == identity.user_id).first()

    def ensure_user(self, identity: Optional[Identity]) -> User:
        """
        Return the user for this identity, creating the row on first sight.

        Two requests for a brand-new user may race on the insert; the loser
        re-reads by external id, then by email.
        """
        identity = require_identity(identity)

        user = self.find_user(identity)
        if user:
            return user

        if not identity.email:
            raise ValidationError(
                f"Identity provider did not supply an email address ({settings.identity_email_header} header)"
            )

        user = User(
            external_user_id=identity.user_id,
            email=identity.email.lower(),
            name=identity.name,
            image_url=identity.image_url,
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            existing = self.find_user(identity) or (
                self.db.query(User).filter(User.email == identity.email.lower()).first()
            )
            if existing is None:
                raise StorageError("Failed to create or find user")
            log.info(f"User {identity.user_id} was created concurrently, using id={existing.id}")
            return existing

        self.db.refresh(user)
        log.info(f"Created user {user.id} for identity {identity.user_id}")
        return user

    def get_onboarding_status(self, identity: Optional[Identity]) -> Dict[str, bool]:
        identity = require_identity(identity)
        user = self.find_user(identity)
        return {"is_onboarded": bool(user and user.industry)}

    async def update_profile(
        self,
        identity: Optional[Identity],
        industry: Optional[str],
        experience: Optional[int] = None,
        bio: Optional[str] = None,
        skills: Optional[List[str]] = None,
    ) -> Dict:
        """
        Update the profile and make sure the chosen industry has an insight.

        Insight creation and the user update commit together; if the insight
        cannot be produced (or the timeout expires) neither is saved. A new
        insight is generated before the write transaction opens.
        """
        identity = require_identity(identity)
        if not industry or not industry.strip():
            raise ValidationError("Industry is required before updating the user.")
        industry = industry.strip()

        user = self.ensure_user(identity)
        user_id = user.id
        timeout = settings.profile_transaction_timeout_seconds

        try:
            insight = await asyncio.wait_for(
                self._apply_profile_update(user, industry, experience, bio, skills),
                timeout=timeout,
            )
            self.db.commit()
        except asyncio.TimeoutError as e:
            self.db.rollback()
            log.error(f"Profile update for user {user_id} exceeded {timeout:.0f}s, rolled back")
            raise StorageError(f"Profile update timed out after {timeout:.0f}s") from e
        except Exception as e:
            self.db.rollback()
            log.error(f"Error updating user and industry: {str(e)}")
            raise

        self.db.refresh(user)
        return {"success": True, "updated_user": user, "industry_insight": insight}

    async def _apply_profile_update(
        self,
        user: User,
        industry: str,
        experience: Optional[int],
        bio: Optional[str],
        skills: Optional[List[str]],
    ) -> IndustryInsight:
        insight = await InsightService(self.db, self.generator).ensure_insight(industry)

        user.industry = industry
        user.experience = experience
        user.bio = bio
        user.skills = skills or []
        self.db.flush()

        return insight
