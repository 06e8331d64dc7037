"""
Resume Service

Stores the user's resume and rewrites individual entries with the AI model.
Improvement never fails because of the AI: when the model is unavailable the
text is polished by a local heuristic instead.
"""
import random
import re
from typing import Optional

from sqlalchemy.orm import Session

from sensai.errors import NotFoundError, StorageError
from sensai.models.resume import Resume
from sensai.models.user import User
from sensai.services.ai_client import TextModel, complete
from sensai.services.identity import Identity
from sensai.services.user_service import require_identity
from sensai.utils.logger import log

ACTION_VERBS = [
    "Achieved", "Accelerated", "Built", "Created", "Delivered", "Designed",
    "Developed", "Drove", "Enabled", "Enhanced", "Engineered", "Expanded",
    "Implemented", "Improved", "Increased", "Innovated", "Optimized", "Orchestrated",
    "Pioneered", "Scaled", "Streamlined", "Transformed",
]

_PASSIVE_LEAD_RE = re.compile(r"^(?:was|were|is|are)\s+", re.IGNORECASE)
_ACTION_VERB_LEAD_RE = re.compile(
    r"^(?:" + "|".join(verb.lower() for verb in ACTION_VERBS) + r")\b",
    re.IGNORECASE,
)

IMPROVE_PROMPT_TEMPLATE = """
As an expert resume writer, improve the following {section} description for a {industry} professional.
Make it more impactful, quantifiable, and aligned with industry standards.
Current content: "{current}"

Requirements:
1. Use action verbs
2. Include metrics and results where possible
3. Highlight relevant technical skills
4. Keep it concise but detailed
5. Focus on achievements over responsibilities
6. Use industry-specific keywords

Format the response as a single paragraph without any additional text or explanations.
"""


def polish_content_locally(content: str, rng: Optional[random.Random] = None) -> str:
    """
    Deterministic-shape polish used when the AI is unavailable.

    Drops a leading passive "was/were/is/are", leads with an action verb,
    ends with terminal punctuation and capitalizes the first letter.
    """
    rng = rng or random
    improved = (content or "").strip()
    improved = _PASSIVE_LEAD_RE.sub("", improved)

    if improved and not _ACTION_VERB_LEAD_RE.match(improved):
        verb = rng.choice(ACTION_VERBS)
        improved = f"{verb} {improved[0].lower()}{improved[1:]}"

    if not improved.endswith((".", "!")):
        improved += "."

    return improved[0].upper() + improved[1:]


class ResumeService:
    """Service for resume storage and AI-assisted rewriting"""

    def __init__(self, db: Session, model: Optional[TextModel] = None):
        self.db = db
        self.model = model

    def _get_user(self, identity: Optional[Identity]) -> User:
        identity = require_identity(identity)
        user = self.db.query(User).filter(User.external_user_id == identity.user_id).first()
        if not user:
            raise NotFoundError("User not found")
        return user

    def save_resume(self, identity: Optional[Identity], content: str) -> Resume:
        """Create or replace the user's resume."""
        user = self._get_user(identity)

        resume = self.db.query(Resume).filter(Resume.user_id == user.id).first()
        if resume:
            resume.content = content
        else:
            resume = Resume(user_id=user.id, content=content)
            self.db.add(resume)

        try:
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            log.error(f"Error saving resume for user {user.id}: {str(e)}")
            raise StorageError("Failed to save resume") from e

        self.db.refresh(resume)
        return resume

    def get_resume(self, identity: Optional[Identity]) -> Optional[Resume]:
        user = self._get_user(identity)
        return self.db.query(Resume).filter(Resume.user_id == user.id).first()

    async def improve_with_ai(self, identity: Optional[Identity], current: str, section: str) -> str:
        """Rewrite one resume entry; falls back to the local polish on AI failure."""
        user = self._get_user(identity)

        prompt = IMPROVE_PROMPT_TEMPLATE.format(
            section=section,
            industry=user.industry or "general",
            current=current,
        )
        # No database lock may be held across the AI round-trip
        self.db.rollback()

        try:
            improved = await complete(self.model, prompt, label="resume_improve")
            if improved:
                return improved
            log.warning("AI returned empty resume improvement, using local fallback")
        except Exception as e:
            log.error(f"Error improving content with AI: {str(e)}")
            log.info("AI service unavailable, using local fallback")

        fallback = polish_content_locally(current)
        log.info(f"Fallback improvement: {fallback}")
        return fallback
