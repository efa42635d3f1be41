"""
Import all models to ensure they are registered with SQLAlchemy
"""
from moviehub.models.user import User
from moviehub.models.movie import Movie, compute_score
from moviehub.models.vote import Vote
from moviehub.models.comment import Comment

__all__ = [
    "User",
    "Movie",
    "Vote",
    "Comment",
    "compute_score",
]
