"""Database models for SENSAI"""

from sensai.models.user import User

from sensai.models.industry_insight import (
    IndustryInsight,
    DemandLevel,
    MarketOutlook
)

from sensai.models.assessment import Assessment
from sensai.models.resume import Resume

__all__ = [
    "User",
    "IndustryInsight",
    "DemandLevel",
    "MarketOutlook",
    "Assessment",
    "Resume",
]
