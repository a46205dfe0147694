from pydantic import BaseModel, EmailStr

from .user import User

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class TokenPayload(BaseModel):
    user_id: str | None = None
    email: str | None = None
    iat: int | None = None
    exp: int | None = None

class AuthData(BaseModel):
    """Response for the register and login endpoints."""
    user: User
    token: str
