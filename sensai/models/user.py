"""User model, provisioned from the upstream identity provider"""
from sqlalchemy import Column, Integer, String, DateTime, Text, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from sensai.models.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    external_user_id = Column(String, unique=True, index=True, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=True)
    image_url = Column(String, nullable=True)

    # Profile (set during onboarding)
    industry = Column(String, nullable=True, index=True)
    experience = Column(Integer, nullable=True)  # Years
    bio = Column(Text, nullable=True)
    skills = Column(JSON, nullable=True)  # List of skill names

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Matched on the industry name, not a foreign key
    industry_insight = relationship(
        "IndustryInsight",
        primaryjoin="foreign(User.industry) == IndustryInsight.industry",
        viewonly=True,
        uselist=False,
    )
    assessments = relationship(
        "Assessment",
        back_populates="user",
        order_by="Assessment.created_at",
    )
    resume = relationship("Resume", back_populates="user", uselist=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "external_user_id": self.external_user_id,
            "email": self.email,
            "name": self.name,
            "image_url": self.image_url,
            "industry": self.industry,
            "experience": self.experience,
            "bio": self.bio,
            "skills": self.skills or [],
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
