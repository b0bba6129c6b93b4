"""User model."""

from sqlalchemy import Boolean, Column, String, DateTime, Integer
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from database import Base
from models.enums import MastodonVisibility, StatusVisibility


class User(Base):
    """User model for authenticated users."""

    __tablename__ = "users"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    username = Column(String(25), unique=True, nullable=False, index=True)
    display_name = Column(String(50), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    email_verified_at = Column(DateTime(timezone=True), nullable=True)
    # Null for accounts created through a social login only
    password_hash = Column(String(255), nullable=True)
    avatar_path = Column(String, nullable=True)
    private_profile = Column(Boolean, nullable=False, default=False)
    prevent_index = Column(Boolean, nullable=False, default=False)
    privacy_hide_days = Column(Integer, nullable=True)
    default_status_visibility = Column(Integer, nullable=False, default=int(StatusVisibility.PUBLIC))
    mastodon_visibility = Column(Integer, nullable=False, default=int(MastodonVisibility.UNLISTED))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    social_profile = relationship(
        "SocialProfile", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
    statuses = relationship("Status", back_populates="user", cascade="all, delete-orphan")
    notifications = relationship("Notification", back_populates="user", cascade="all, delete-orphan")
