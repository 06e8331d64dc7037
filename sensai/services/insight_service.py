"""
Industry Insight Service

Resolves the insight for a user's industry, generating it the first time
anyone asks for an industry nobody has onboarded into yet.
"""
from typing import Optional

from sqlalchemy.orm import Session

from sensai.errors import NotFoundError, StorageConflictError, StorageError, UnauthorizedError, ValidationError
from sensai.models.industry_insight import IndustryInsight
from sensai.models.user import User
from sensai.services.identity import Identity
from sensai.services.insight_generator import InsightGenerator
from sensai.services.insight_store import InsightStore
from sensai.utils.logger import log


class InsightService:
    """On-demand insight resolution"""

    def __init__(self, db: Session, generator: InsightGenerator):
        self.db = db
        self.generator = generator
        self.store = InsightStore(db)

    async def ensure_insight(self, industry: str) -> IndustryInsight:
        """
        Return the insight for an industry, creating it if absent.

        Does not commit. The read transaction is ended before the AI call,
        so callers must not hold pending changes. A concurrent create of the
        same industry is resolved by returning the row that won.
        """
        insight = self.store.find_by_industry(industry)
        if insight:
            return insight

        # No database lock may be held across the AI round-trip
        self.db.rollback()

        log.info(f"No insight for {industry} yet, generating on demand")
        payload = await self.generator.generate(industry)

        try:
            return self.store.create(industry, payload)
        except StorageConflictError:
            winner = self.store.find_by_industry(industry)
            if winner is None:
                raise StorageError(f"Insight for {industry} conflicted but could not be re-read")
            log.info(f"Using concurrently created insight for {industry} (id={winner.id})")
            return winner

    async def get_industry_insights(self, identity: Optional[Identity]) -> IndustryInsight:
        """
        Dashboard read: the current user's industry insight.

        Generation failures propagate to the caller.
        """
        if identity is None:
            raise UnauthorizedError("Unauthorized")

        user = self.db.query(User).filter(User.external_user_id == identity.user_id).first()
        if not user:
            raise NotFoundError("User not found")

        if not user.industry:
            raise ValidationError("User industry is not set. Please update your profile first.")

        if user.industry_insight:
            return user.industry_insight

        industry = user.industry
        try:
            insight = await self.ensure_insight(industry)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        return insight
