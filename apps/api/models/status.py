"""Status model: one check-in on one trip."""

from sqlalchemy import Column, String, DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from database import Base
from models.enums import Business, StatusVisibility


class Status(Base):
    """A user's check-in with the trip data needed for exports."""

    __tablename__ = "statuses"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    body = Column(Text, nullable=True)
    visibility = Column(Integer, nullable=False, default=int(StatusVisibility.PUBLIC))
    business = Column(Integer, nullable=False, default=int(Business.PRIVATE))

    category = Column(String, nullable=False)  # TransportCategory value
    line_name = Column(String, nullable=False)
    origin_name = Column(String, nullable=False)
    destination_name = Column(String, nullable=False)
    departure_planned = Column(DateTime(timezone=True), nullable=False, index=True)
    departure_real = Column(DateTime(timezone=True), nullable=True)
    arrival_planned = Column(DateTime(timezone=True), nullable=False)
    arrival_real = Column(DateTime(timezone=True), nullable=True)
    distance_meters = Column(Integer, nullable=False, default=0)
    duration_minutes = Column(Integer, nullable=False, default=0)

    tweet_id = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="statuses")
