from datetime import datetime
from typing import Optional

from moviehub.schemas.auth import UserBrief
from moviehub.schemas.common import CamelModel


class MovieBrief(CamelModel):
    id: int
    title: str


class CommentResponse(CamelModel):
    id: int
    content: str
    movie_id: int
    user: Optional[UserBrief] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CommentDetailResponse(CommentResponse):
    """Single comment with the movie it belongs to"""
    movie: Optional[MovieBrief] = None
