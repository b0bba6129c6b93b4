"""Per-user X (Twitter) credentials."""

from sqlalchemy import Column, String, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from database import Base


class SocialProfile(Base):
    """Linked social account tokens, encrypted at rest.

    The link counts as connected only when the account id, both tokens and
    the expiry are all present.
    """

    __tablename__ = "social_profiles"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("users.id"), nullable=False, unique=True, index=True)
    twitter_id = Column(String, nullable=True, index=True)
    twitter_token_encrypted = Column(Text, nullable=True)
    twitter_refresh_token_encrypted = Column(Text, nullable=True)
    twitter_token_expires_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="social_profile")
