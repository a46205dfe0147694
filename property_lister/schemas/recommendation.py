from pydantic import BaseModel, ConfigDict, EmailStr
from typing import Optional
from datetime import datetime

class RecommendationCreate(BaseModel):
    """Schema for sending a property recommendation to a registered user."""
    property_id: str
    recipient_email: EmailStr
    message: Optional[str] = None

class Recommendation(BaseModel):
    """Schema for reading a recommendation, as served and as cached."""
    id: str
    property_id: str
    sender_id: str
    recipient_email: str
    message: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
