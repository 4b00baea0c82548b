from typing import Optional
from pydantic import BaseModel, EmailStr, Field

from classpass.models.enums import UserRole


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str


class Token(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    role: UserRole
    user_id: str
    school_id: Optional[str] = None


class RegisterSchoolRequest(BaseModel):
    """Self-service signup: creates a free-plan school and its owner."""
    email: EmailStr
    password: str
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    school_name: str = Field(..., min_length=1, description="School name cannot be empty")
    phone: Optional[str] = None


class PasswordResetEmailRequest(BaseModel):
    email: EmailStr


class PasswordResetRequest(BaseModel):
    token: str
    new_password: str


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str
