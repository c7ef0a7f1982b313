# backend/newshub/news/models.py
from enum import Enum as PyEnum
from sqlalchemy import (
    Column, Integer, String, Text, DateTime, ForeignKey, Boolean, Float, Index
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base


class NewsType(str, PyEnum):
    ARTICLE = "article"
    VIDEO = "video"


class News(Base):
    __tablename__ = "news"
    __table_args__ = (
        Index("ix_news_created_at", "created_at"),
        Index("ix_news_author_created", "author_id", "created_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(300), nullable=False)
    description = Column(Text, nullable=False)
    content = Column(Text, nullable=True)
    thumbnail = Column(String(1024), nullable=True)
    type = Column(String(20), nullable=False, default=NewsType.ARTICLE.value)
    video_url = Column(String(1024), nullable=False, default="")

    location_city = Column(String(100), nullable=False, default="")
    location_state = Column(String(100), nullable=False, default="")
    location_country = Column(String(100), nullable=False, default="")
    location_lat = Column(Float, nullable=True)
    location_lng = Column(Float, nullable=True)

    author_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    upvotes = Column(Integer, nullable=False, default=0)
    downvotes = Column(Integer, nullable=False, default=0)
    view_count = Column(Integer, nullable=False, default=0)
    is_moderated = Column(Boolean, nullable=False, default=False, index=True)
    comments = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    author = relationship("User", back_populates="news")
    category_rows = relationship(
        "NewsCategory",
        back_populates="news",
        cascade="all, delete-orphan",
        order_by="NewsCategory.position",
        lazy="selectin",
    )
    comment_rows = relationship(
        "Comment",
        back_populates="news",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def categories(self) -> list[str]:
        return [row.name for row in self.category_rows]

    @categories.setter
    def categories(self, names: list[str]) -> None:
        self.category_rows = [NewsCategory(name=name, position=i) for i, name in enumerate(names)]

    @property
    def location(self) -> dict:
        loc = {
            "city": self.location_city or "",
            "state": self.location_state or "",
            "country": self.location_country or "",
        }
        if self.location_lat is not None and self.location_lng is not None:
            loc["coordinates"] = {"lat": self.location_lat, "lng": self.location_lng}
        return loc

    @location.setter
    def location(self, value: dict) -> None:
        value = value or {}
        self.location_city = value.get("city") or ""
        self.location_state = value.get("state") or ""
        self.location_country = value.get("country") or ""
        coords = value.get("coordinates") or {}
        self.location_lat = coords.get("lat")
        self.location_lng = coords.get("lng")

    def __repr__(self) -> str:
        return f"News(id={self.id}, title={self.title!r}, type={self.type!r}, author_id={self.author_id})"
    def __str__(self) -> str:
        return f"{self.title} ({self.type})"


class NewsCategory(Base):
    __tablename__ = "news_categories"
    __table_args__ = (
        Index("ix_news_categories_name", "name"),
    )

    id = Column(Integer, primary_key=True)
    news_id = Column(Integer, ForeignKey("news.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    position = Column(Integer, nullable=False, default=0)

    news = relationship("News", back_populates="category_rows")

    def __repr__(self) -> str:
        return f"NewsCategory(news_id={self.news_id}, name={self.name!r})"


class Comment(Base):
    __tablename__ = "comments"
    __table_args__ = (
        Index("ix_comments_news_created", "news_id", "created_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    content = Column(Text, nullable=False)
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    news_id = Column(Integer, ForeignKey("news.id", ondelete="CASCADE"), nullable=False)
    parent_id = Column(Integer, ForeignKey("comments.id", ondelete="CASCADE"), nullable=True)
    upvotes = Column(Integer, nullable=False, default=0)
    downvotes = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    author = relationship("User")
    news = relationship("News", back_populates="comment_rows")

    def __repr__(self) -> str:
        return f"Comment(id={self.id}, news_id={self.news_id}, author_id={self.author_id})"
