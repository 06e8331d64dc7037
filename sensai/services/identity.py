"""
Identity supplied by the upstream authentication proxy

Session handling lives in the identity provider; this app only reads the
authenticated user's id and profile from request headers.
"""
from dataclasses import dataclass
from typing import Mapping, Optional

from sensai.config import get_settings


@dataclass(frozen=True)
class Identity:
    user_id: str
    email: Optional[str] = None
    name: Optional[str] = None
    image_url: Optional[str] = None


def identity_from_headers(headers: Mapping[str, str]) -> Optional[Identity]:
    """Build an Identity from request headers, or None if unauthenticated."""
    settings = get_settings()
    user_id = (headers.get(settings.identity_user_id_header) or "").strip()
    if not user_id:
        return None

    return Identity(
        user_id=user_id,
        email=(headers.get(settings.identity_email_header) or "").strip() or None,
        name=(headers.get(settings.identity_name_header) or "").strip() or None,
        image_url=(headers.get(settings.identity_image_header) or "").strip() or None,
    )
