import enum

from sqlalchemy import Column, String, DateTime
from property_lister.core.database import Base, new_object_id, utcnow

class RecommendationStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"

class Recommendation(Base):
    __tablename__ = "recommendations"

    id = Column(String(24), primary_key=True, default=new_object_id)
    property_id = Column(String, index=True, nullable=False)
    sender_id = Column(String(24), index=True, nullable=False)
    recipient_email = Column(String, index=True, nullable=False)
    message = Column(String, nullable=True)
    status = Column(String, nullable=False, default=RecommendationStatus.PENDING.value)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
