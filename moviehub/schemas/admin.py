"""
Admin dashboard and user management schemas
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel

from moviehub.schemas.common import CamelModel
from moviehub.schemas.movie import TopMovie


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


class RoleUpdate(BaseModel):
    role: UserRole


class RecentUser(CamelModel):
    id: int
    name: str
    email: str
    role: str
    created_at: Optional[datetime] = None


class VoteTotals(CamelModel):
    total_upvotes: int = 0
    total_downvotes: int = 0


class AdminStats(CamelModel):
    total_users: int
    total_movies: int
    total_comments: int
    total_votes: VoteTotals
    recent_users: List[RecentUser]
    top_movies: List[TopMovie]
