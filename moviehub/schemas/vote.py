"""
Vote Schemas - Pydantic models for vote request/response validation
"""

from enum import Enum
from typing import Optional

from moviehub.schemas.common import CamelModel


class VoteType(str, Enum):
    UP = "up"
    DOWN = "down"


class VoteRequest(CamelModel):
    """Schema for casting a vote"""
    vote_type: VoteType


class VoteResult(CamelModel):
    """
    Outcome of a vote mutation

    vote_type is None when the vote was toggled off.
    """
    vote_type: Optional[VoteType] = None
    upvotes: int
    downvotes: int
    score: int


class UserVote(CamelModel):
    """Caller's current vote on a movie"""
    vote_type: Optional[VoteType] = None
