"""Interview quiz assessment model"""
from sqlalchemy import Column, Integer, String, Float, DateTime, JSON, Text, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from sensai.models.base import Base


class Assessment(Base):
    """A scored technical quiz attempt"""
    __tablename__ = "assessments"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    quiz_score = Column(Float, nullable=False)  # 0-100
    questions = Column(JSON, nullable=False)
    """
    [
        {"question": "...", "answer": "...", "user_answer": "...",
         "is_correct": false, "explanation": "..."}
    ]
    """
    category = Column(String, nullable=False, default="Technical")
    improvement_tip = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now(), index=True)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="assessments")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "quiz_score": self.quiz_score,
            "questions": self.questions or [],
            "category": self.category,
            "improvement_tip": self.improvement_tip,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
