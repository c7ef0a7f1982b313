import json
from functools import lru_cache
from typing import Annotated, List, Optional

from fastapi import Depends
from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

INSECURE_DEFAULT_SECRET = "newshub-secret-key"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file="../.env", env_file_encoding="utf-8", extra="ignore")

    # FastAPI application
    ENVIRONMENT: str = "development"
    APP_HOST: str = "0.0.0.0"
    APP_PORT: int = 5000
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "postgresql+asyncpg://newshub:newshub@db:5432/newshub"
    POSTGRES_SSLMODE: str = "disable"

    # JWT
    JWT_SECRET_KEY: str = INSECURE_DEFAULT_SECRET
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_DAYS: int = 7

    CORS_ORIGINS: Annotated[List[str], NoDecode] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]

    # Outbound mail (contact form)
    SMTP_HOST: str = "localhost"
    SMTP_PORT: int = 587
    SMTP_USER: str | None = None
    SMTP_PASSWORD: str | None = None
    SMTP_USE_TLS: bool = True
    SMTP_TIMEOUT: float = 10.0
    ADMIN_EMAIL: str = "admin@newshub.local"

    # Pagination
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    # Include exception text in 500 responses; unset means "not in production"
    EXPOSE_ERROR_DETAILS: Optional[bool] = None

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _normalise_cors(cls, value):
        if isinstance(value, list):
            return value
        if isinstance(value, str):
            raw = value.strip()
            if raw.startswith("[") and raw.endswith("]"):
                try:
                    parsed = json.loads(raw)
                    if isinstance(parsed, list):
                        return parsed
                except json.JSONDecodeError:
                    pass
            return [item.strip() for item in raw.split(",") if item.strip()]
        raise ValueError("CORS_ORIGINS must be a string or list of strings")

    @model_validator(mode="after")
    def _default_error_details(self):
        if self.EXPOSE_ERROR_DETAILS is None:
            self.EXPOSE_ERROR_DETAILS = self.ENVIRONMENT.lower() != "production"
        return self

    @property
    def uses_insecure_secret(self) -> bool:
        return self.JWT_SECRET_KEY == INSECURE_DEFAULT_SECRET


@lru_cache
def get_settings() -> Settings:
    return Settings()


# `settings: SettingsDep` injects the process configuration into a route.
SettingsDep = Annotated[Settings, Depends(get_settings)]
