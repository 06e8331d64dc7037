"""
Weekly Industry Insight Refresh

Regenerates every industry that already has an insight row. Industries are
processed one at a time; a failure for one industry is recorded and the batch
moves on.
"""
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from sensai.services.insight_generator import InsightGenerator
from sensai.services.insight_store import InsightStore
from sensai.utils.logger import log


@dataclass
class IndustryRefreshResult:
    industry: str
    success: bool
    error: Optional[str] = None


@dataclass
class RefreshSummary:
    started_at: datetime
    completed_at: Optional[datetime] = None
    duration_seconds: float = 0.0
    results: List[IndustryRefreshResult] = field(default_factory=list)

    @property
    def succeeded(self) -> List[str]:
        return [r.industry for r in self.results if r.success]

    @property
    def failed(self) -> List[IndustryRefreshResult]:
        return [r for r in self.results if not r.success]

    def to_dict(self) -> dict:
        return {
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_seconds": round(self.duration_seconds, 2),
            "total": len(self.results),
            "succeeded": self.succeeded,
            "failed": [{"industry": r.industry, "error": r.error} for r in self.failed],
        }


class InsightRefreshService:
    """Batch regeneration of stored industry insights"""

    def __init__(self, db: Session, generator: InsightGenerator):
        self.db = db
        self.generator = generator
        self.store = InsightStore(db)

    async def refresh_industry(self, industry: str) -> IndustryRefreshResult:
        try:
            payload = await self.generator.generate(industry)
            self.store.update(industry, payload)
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            log.error(f"Error generating/updating insights for industry={industry}: {str(e)}")
            return IndustryRefreshResult(industry=industry, success=False, error=str(e))

        log.info(f"Refreshed insights for {industry}")
        return IndustryRefreshResult(industry=industry, success=True)

    async def refresh_all(self) -> RefreshSummary:
        """Refresh every known industry. Never creates rows."""
        start = time.time()
        summary = RefreshSummary(started_at=datetime.utcnow())

        industries = self.store.list_industries()
        # End the read transaction before the long-running AI calls
        self.db.rollback()
        log.info(f"Refreshing insights for {len(industries)} industries")

        for industry in industries:
            summary.results.append(await self.refresh_industry(industry))

        summary.completed_at = datetime.utcnow()
        summary.duration_seconds = time.time() - start

        if summary.failed:
            log.warning(
                f"Insight refresh finished with {len(summary.failed)} failure(s): "
                f"{', '.join(r.industry for r in summary.failed)}"
            )
        log.info(
            f"Insight refresh completed: {len(summary.succeeded)}/{len(summary.results)} "
            f"industries in {summary.duration_seconds:.1f}s"
        )
        return summary
