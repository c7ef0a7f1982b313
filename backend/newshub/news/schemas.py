# backend/newshub/news/schemas.py
from datetime import datetime
from typing import Annotated, List, Literal, Optional

from pydantic import AfterValidator, Field, field_validator, model_validator

from ..models import CustomModel
from ..users.schema import AuthorProfile, AuthorSummary
from .models import NewsType

TITLE_MIN_LENGTH = 10
DESCRIPTION_MIN_LENGTH = 20
ARTICLE_CONTENT_MIN_LENGTH = 100


def _check_title(v: str) -> str:
    v = v.strip()
    if len(v) < TITLE_MIN_LENGTH:
        raise ValueError(f"Title must be at least {TITLE_MIN_LENGTH} characters long")
    return v


def _check_description(v: str) -> str:
    v = v.strip()
    if len(v) < DESCRIPTION_MIN_LENGTH:
        raise ValueError(f"Description must be at least {DESCRIPTION_MIN_LENGTH} characters long")
    return v


def _check_categories(v: List[str]) -> List[str]:
    cleaned = [c.strip() for c in v if isinstance(c, str) and c.strip()]
    if not cleaned:
        raise ValueError("At least one category is required")
    return cleaned


Title = Annotated[str, AfterValidator(_check_title)]
Description = Annotated[str, AfterValidator(_check_description)]
Categories = Annotated[List[str], AfterValidator(_check_categories)]


class Coordinates(CustomModel):
    lat: float
    lng: float


class NewsLocation(CustomModel):
    city: str = ""
    state: str = ""
    country: str = ""
    coordinates: Optional[Coordinates] = None


class NewsCreate(CustomModel):
    """Write-time rules for a new article or video."""
    title: Title
    description: Description
    content: Optional[str] = None
    thumbnail: Optional[str] = None
    type: NewsType = NewsType.ARTICLE
    video_url: Optional[str] = None
    location: NewsLocation
    categories: Categories

    @model_validator(mode="after")
    def _type_requirements(self):
        if self.type == NewsType.ARTICLE:
            if not self.content:
                raise ValueError("Content is required for articles")
            if len(self.content) < ARTICLE_CONTENT_MIN_LENGTH:
                raise ValueError(f"Content must be at least {ARTICLE_CONTENT_MIN_LENGTH} characters long")
            if not self.thumbnail:
                raise ValueError("Thumbnail is required for articles")
        elif not self.video_url:
            raise ValueError("Video URL is required for video news")
        return self


class NewsUpdate(CustomModel):
    """Partial update: each supplied field is checked on its own."""
    title: Optional[Title] = None
    description: Optional[Description] = None
    content: Optional[str] = None
    thumbnail: Optional[str] = None
    type: Optional[NewsType] = None
    video_url: Optional[str] = None
    location: Optional[NewsLocation] = None
    categories: Optional[Categories] = None


class VoteRequest(CustomModel):
    vote: Literal["up", "down"]


class VoteResult(CustomModel):
    upvotes: int
    downvotes: int


class ModerationRequest(CustomModel):
    is_moderated: bool


class CommentCreate(CustomModel):
    content: str
    parent_id: Optional[int] = None

    @field_validator("content")
    @classmethod
    def _non_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Comment content is required")
        return v


class CommentOut(CustomModel):
    id: int
    content: str
    author: AuthorSummary
    news_id: int
    parent_id: Optional[int] = None
    upvotes: int
    downvotes: int
    created_at: datetime
    updated_at: datetime


class NewsOut(CustomModel):
    id: int
    title: str
    description: str
    content: Optional[str] = None
    thumbnail: Optional[str] = None
    type: NewsType
    video_url: str = ""
    location: NewsLocation
    categories: List[str] = Field(default_factory=list)
    author: AuthorSummary
    upvotes: int
    downvotes: int
    view_count: int
    is_moderated: bool
    comments: int
    created_at: datetime
    updated_at: datetime


class NewsDetail(NewsOut):
    author: AuthorProfile


class NewsPage(CustomModel):
    news: List[NewsOut]
    total_pages: int
    current_page: int


class ModerationResult(CustomModel):
    message: str
    news: NewsOut
