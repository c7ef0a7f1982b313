from typing import Optional

from pydantic import Field

from ..models import CustomModel
from ..users.schema import UserOut


class LoginRequest(CustomModel):
    """Any one of identifier, email or username names the account."""
    identifier: Optional[str] = None
    email: Optional[str] = None
    username: Optional[str] = None
    password: str = Field(..., json_schema_extra={"example": "secret1"})

    @property
    def login_value(self) -> str:
        return self.identifier or self.email or self.username or ""


class AuthResponse(CustomModel):
    user: UserOut
    token: str


class MeResponse(CustomModel):
    user: UserOut
