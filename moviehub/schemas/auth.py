from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from datetime import datetime
from typing import Optional

from moviehub.schemas.common import CamelModel


def ensure_password_length(password: str) -> str:
    """bcrypt only looks at the first 72 bytes"""
    if len(password.encode('utf-8')) > 72:
        raise ValueError('Password cannot be longer than 72 bytes')
    return password


# Schema for user registration
class UserRegister(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6)

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        return v.lower()

    @field_validator('password')
    @classmethod
    def validate_password(cls, v):
        return ensure_password_length(v)


# Schema for user login
class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        return v.lower()


# Schema for user response (password hash is never part of it)
class UserResponse(CamelModel):
    id: int
    name: str
    email: str
    role: str
    created_at: Optional[datetime] = None


# Compact user reference embedded in movies and comments
class UserBrief(CamelModel):
    id: int
    name: str
    email: str


class AuthPayload(BaseModel):
    user: UserResponse
    token: str
