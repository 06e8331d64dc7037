"""
Industry Insight persistence

Thin wrapper over the industry_insights table. The store never commits:
callers own the surrounding transaction.
"""
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from sensai.config import get_settings
from sensai.errors import NotFoundError, StorageConflictError, StorageError
from sensai.models.industry_insight import IndustryInsight
from sensai.services.insight_generator import IndustryInsightPayload
from sensai.utils.logger import log

settings = get_settings()


def next_update_after(moment: datetime) -> datetime:
    return moment + timedelta(days=settings.insight_refresh_days)


class InsightStore:
    """Persistence for one IndustryInsight per industry"""

    def __init__(self, db: Session):
        self.db = db

    def find_by_industry(self, industry: str) -> Optional[IndustryInsight]:
        return (
            self.db.query(IndustryInsight)
            .filter(IndustryInsight.industry == industry)
            .first()
        )

    def list_industries(self) -> List[str]:
        rows = self.db.query(IndustryInsight.industry).order_by(IndustryInsight.industry).all()
        return [row.industry for row in rows]

    def create(
        self,
        industry: str,
        payload: IndustryInsightPayload,
        now: Optional[datetime] = None
    ) -> IndustryInsight:
        """
        Insert a new insight row.

        The insert runs in a SAVEPOINT so a lost uniqueness race only undoes
        the insert, not the caller's other pending changes.

        Raises:
            StorageConflictError: another transaction already created this industry
            StorageError: any other database failure
        """
        now = now or datetime.utcnow()
        insight = IndustryInsight(
            industry=industry,
            last_updated=now,
            next_update=next_update_after(now),
            **payload.to_columns(),
        )

        try:
            with self.db.begin_nested():
                self.db.add(insight)
                self.db.flush()
        except IntegrityError as e:
            log.warning(f"Insight for {industry} was created concurrently")
            raise StorageConflictError(f"Industry insight already exists: {industry}") from e
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to create insight for {industry}: {e}") from e

        log.info(f"Created industry insight for {industry} (next update {insight.next_update:%Y-%m-%d})")
        return insight

    def update(
        self,
        industry: str,
        payload: IndustryInsightPayload,
        now: Optional[datetime] = None
    ) -> IndustryInsight:
        """Overwrite every insight field and restart the refresh cycle."""
        insight = self.find_by_industry(industry)
        if insight is None:
            raise NotFoundError(f"No insight row for industry: {industry}")

        now = now or datetime.utcnow()
        for column, value in payload.to_columns().items():
            setattr(insight, column, value)
        insight.last_updated = now
        insight.next_update = next_update_after(now)

        try:
            self.db.flush()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to update insight for {industry}: {e}") from e

        return insight
