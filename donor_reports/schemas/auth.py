"""
Pydantic schemas for authentication endpoints.
"""
from pydantic import BaseModel, Field


class UserLogin(BaseModel):
    """Login with email and password."""
    identity: str = Field(..., description="User email")
    password: str


class UserResponse(BaseModel):
    """User profile response."""
    id: str
    email: str
    name: str
    is_admin: bool = False

    class Config:
        from_attributes = True


class TokenResponse(BaseModel):
    """Auth response with token and user record."""
    token: str
    record: UserResponse
