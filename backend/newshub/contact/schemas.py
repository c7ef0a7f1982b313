from pydantic import EmailStr, Field, field_validator

from ..models import CustomModel


class ContactRequest(CustomModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    subject: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1, max_length=10000)

    @field_validator("name", "subject")
    @classmethod
    def _single_line(cls, v: str, info) -> str:
        # Both end up in mail headers.
        if "\r" in v or "\n" in v:
            raise ValueError(f"{info.field_name.capitalize()} must be a single line")
        return v
