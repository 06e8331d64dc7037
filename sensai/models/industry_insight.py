"""
Industry Insight Models

One AI-generated market analysis per industry, regenerated weekly.
"""
import enum

from sqlalchemy import Column, Integer, String, Float, DateTime, JSON
from sqlalchemy.sql import func

from sensai.models.base import Base


class DemandLevel(str, enum.Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class MarketOutlook(str, enum.Enum):
    POSITIVE = "POSITIVE"
    NEUTRAL = "NEUTRAL"
    NEGATIVE = "NEGATIVE"


class IndustryInsight(Base):
    """
    Structured analysis for a single industry

    Rows are created on demand when a user onboards into an industry and
    fully overwritten by the weekly refresh job.
    """
    __tablename__ = "industry_insights"

    id = Column(Integer, primary_key=True, index=True)
    industry = Column(String, unique=True, index=True, nullable=False)

    salary_ranges = Column(JSON, nullable=False, default=list)
    """
    [
        {"role": "Data Engineer", "min": 90000, "max": 160000,
         "median": 125000, "location": "US"}
    ]
    """
    growth_rate = Column(Float, nullable=False, default=0.0)  # Percentage
    demand_level = Column(String(16), nullable=False)  # DemandLevel
    top_skills = Column(JSON, nullable=False, default=list)
    market_outlook = Column(String(16), nullable=False)  # MarketOutlook
    key_trends = Column(JSON, nullable=False, default=list)
    recommended_skills = Column(JSON, nullable=False, default=list)

    last_updated = Column(DateTime, nullable=False, server_default=func.now())
    next_update = Column(DateTime, nullable=False, index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "industry": self.industry,
            "salary_ranges": self.salary_ranges or [],
            "growth_rate": self.growth_rate,
            "demand_level": self.demand_level,
            "top_skills": self.top_skills or [],
            "market_outlook": self.market_outlook,
            "key_trends": self.key_trends or [],
            "recommended_skills": self.recommended_skills or [],
            "last_updated": self.last_updated.isoformat() if self.last_updated else None,
            "next_update": self.next_update.isoformat() if self.next_update else None,
        }
