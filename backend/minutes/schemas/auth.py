# minutes/schemas/auth.py
"""
Pydantic schemas for authentication endpoints.
Defines request/response models for registration, login and user information.
"""
from typing import Optional

from pydantic import BaseModel

from minutes.models.user import User

class RegisterIn(BaseModel):
    """Request model for account registration."""
    username: str
    email: Optional[str] = None
    password: str  # Plain text, hashed server-side

class LoginRequest(BaseModel):
    """
    Request model for user login endpoint.
    Contains credentials for authentication.
    """
    username: str  # User login name
    password: str  # User password (plain text, will be hashed server-side)

class UserOut(BaseModel):
    """
    User information model returned in authentication responses.
    Contains basic user details without sensitive information.
    """
    id: str  # User unique identifier
    username: str  # User login name
    email: Optional[str] = None
    role: str = "user"  # User role (default: "user", can be "admin")

    @classmethod
    def from_user(cls, user: User) -> "UserOut":
        return cls(id=str(user.id), username=user.username, email=user.email, role=user.role)

class LoginResponse(BaseModel):
    """
    Response model for successful login.
    Returns user information and access token for authenticated requests.
    """
    user: UserOut  # User information object
    accessToken: str  # JWT access token for API authentication
