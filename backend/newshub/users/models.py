# backend/newshub/users/models.py
from enum import Enum as PyEnum

from passlib.context import CryptContext
from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

DEFAULT_AVATAR = "https://images.pexels.com/photos/220453/pexels-photo-220453.jpeg?auto=compress&cs=tinysrgb&w=150"


class Role(str, PyEnum):
    USER = "user"
    ADMIN = "admin"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    avatar = Column(String(1024), nullable=False, default=DEFAULT_AVATAR)
    bio = Column(Text, nullable=False, default="")
    credibility_score = Column(Integer, nullable=False, default=50)
    joined_date = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    location_city = Column(String(100), nullable=False, default="")
    location_state = Column(String(100), nullable=False, default="")
    location_country = Column(String(100), nullable=False, default="")
    followers_count = Column(Integer, nullable=False, default=0)
    following_count = Column(Integer, nullable=False, default=0)
    role = Column(String(20), nullable=False, default=Role.USER.value)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    news = relationship("News", back_populates="author")

    @property
    def password(self):
        raise AttributeError("password is write-only")

    @password.setter
    def password(self, raw: str) -> None:
        # Hashing happens only when a new password is assigned.
        self.hashed_password = pwd_context.hash(raw)

    def verify_password(self, raw: str) -> bool:
        if not raw or not self.hashed_password:
            return False
        return pwd_context.verify(raw, self.hashed_password)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value

    @property
    def location(self) -> dict:
        return {
            "city": self.location_city or "",
            "state": self.location_state or "",
            "country": self.location_country or "",
        }

    @location.setter
    def location(self, value: dict) -> None:
        value = value or {}
        self.location_city = value.get("city") or ""
        self.location_state = value.get("state") or ""
        self.location_country = value.get("country") or ""

    def __repr__(self) -> str:
        return f"User(id={self.id}, username={self.username!r}, email={self.email!r}, role={self.role!r})"
    def __str__(self) -> str:
        return f"{self.username} ({self.email})"
