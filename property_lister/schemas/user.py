from pydantic import BaseModel, EmailStr, field_validator, ConfigDict
from typing import Optional
from datetime import datetime

class UserBase(BaseModel):
    """Base user schema with common fields."""
    email: EmailStr
    first_name: str
    last_name: str
    phone: Optional[str] = None

class UserCreate(UserBase):
    """Schema for registering a new user, includes password."""
    password: str

    @field_validator("password")
    def validate_password(cls, v):
        if not v or not v.strip():
            raise ValueError("Password cannot be empty or contain only whitespace.")
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters long.")
        return v

    @field_validator("first_name", "last_name")
    def not_empty(cls, v):
        if not v or not v.strip():
            raise ValueError("Name cannot be empty")
        return v

class User(UserBase):
    """Main user schema for reading user data."""
    id: str
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)

class AuthContext(BaseModel):
    """Identity extracted from a verified access token."""
    user_id: str
    email: str
