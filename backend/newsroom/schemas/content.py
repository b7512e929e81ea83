"""
Schemas for news and video endpoints.

Create/update bodies are loosely typed: ``ContentLifecycle`` validates them
against the content rules and reports every bad field at once, unknown
keys included. An explicit null on update clears an optional column.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class NewsCreate(BaseModel):
    title: Optional[str] = None
    summary: Optional[str] = None
    content: Optional[str] = None
    category: Optional[str] = None
    image_url: Optional[str] = None
    status: Optional[str] = None
    tags: Optional[List[str]] = None
    featured: Optional[bool] = None
    author: Optional[str] = None

    class Config:
        extra = "allow"
        json_schema_extra = {
            "example": {
                "title": "Council approves budget",
                "summary": "The city council passed the annual budget.",
                "content": "After a lengthy session the council voted to approve the annual budget.",
                "category": "Politics",
                "status": "draft",
            }
        }


class NewsUpdate(NewsCreate):
    """Partial update: only supplied fields are validated and written."""


class VideoCreate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    youtube_url: Optional[str] = None
    category: Optional[str] = None
    thumbnail_url: Optional[str] = None
    status: Optional[str] = None
    duration: Optional[str] = None
    tags: Optional[List[str]] = None
    featured: Optional[bool] = None

    class Config:
        extra = "allow"


class VideoUpdate(VideoCreate):
    """Partial update: only supplied fields are validated and written."""


class ContentView(BaseModel):
    id: str
    title: str
    category: str
    status: str
    views: int = 0
    shares: int = 0
    tags: List[str] = Field(default_factory=list)
    featured: bool = False
    published_at: Optional[datetime] = None
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class NewsView(ContentView):
    summary: str
    content: str
    image_url: Optional[str] = None
    author: str
    reading_time: int


class VideoView(ContentView):
    description: Optional[str] = None
    youtube_url: str
    youtube_id: str
    thumbnail_url: Optional[str] = None
    duration: Optional[str] = None
    likes: int = 0
    embed_url: str
