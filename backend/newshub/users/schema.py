from pydantic import EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime

from ..models import CustomModel
from .models import Role


class Location(CustomModel):
    city: str = ""
    state: str = ""
    country: str = ""


class UserCreate(CustomModel):
    username: str = Field(..., min_length=3, max_length=50, json_schema_extra={"example": "alice"})
    email: EmailStr = Field(..., json_schema_extra={"example": "alice@example.com"})
    password: str = Field(..., min_length=6, json_schema_extra={"example": "secret1"})

    @field_validator("username", mode="before")
    @classmethod
    def _strip_username(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("email", mode="before")
    @classmethod
    def _normalise_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


class ProfileUpdate(CustomModel):
    """Only these keys are writable through the profile endpoint."""
    avatar: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[Location] = None


class PasswordChange(CustomModel):
    current_password: str = Field(..., json_schema_extra={"example": "secret1"})
    new_password: str = Field(..., min_length=6, json_schema_extra={"example": "secret2"})


class RoleUpdate(CustomModel):
    role: str

    @field_validator("role")
    @classmethod
    def _known_role(cls, v):
        if v not in {r.value for r in Role}:
            raise ValueError("Invalid role")
        return v


class AuthorSummary(CustomModel):
    id: int
    username: str
    avatar: str
    credibility_score: int


class AuthorProfile(AuthorSummary):
    bio: str
    joined_date: datetime
    location: Location
    followers_count: int
    following_count: int


class UserOut(AuthorProfile):
    email: str
    role: str
    created_at: datetime
    updated_at: datetime
