"""
Movie catalog schemas
"""
from pydantic import ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from datetime import datetime
from typing import Optional
from enum import Enum

from moviehub.schemas.auth import UserBrief
from moviehub.schemas.common import CamelModel

MIN_RELEASE_YEAR = 1888
FUTURE_RELEASE_YEARS = 5


# ============================================
# Enums for type-safe options
# ============================================

class Genre(str, Enum):
    """Fixed set of catalog genres"""
    ACTION = "Action"
    ADVENTURE = "Adventure"
    ANIMATION = "Animation"
    BIOGRAPHY = "Biography"
    COMEDY = "Comedy"
    CRIME = "Crime"
    DOCUMENTARY = "Documentary"
    DRAMA = "Drama"
    FAMILY = "Family"
    FANTASY = "Fantasy"
    FILM_NOIR = "Film-Noir"
    HISTORY = "History"
    HORROR = "Horror"
    MUSIC = "Music"
    MUSICAL = "Musical"
    MYSTERY = "Mystery"
    ROMANCE = "Romance"
    SCI_FI = "Sci-Fi"
    SPORT = "Sport"
    THRILLER = "Thriller"
    WAR = "War"
    WESTERN = "Western"


class SortField(str, Enum):
    """Sortable movie fields, named as on the wire"""
    SCORE = "score"
    CREATED_AT = "createdAt"
    TITLE = "title"
    RELEASE_YEAR = "releaseYear"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


def max_release_year() -> int:
    return datetime.now().year + FUTURE_RELEASE_YEARS


# ============================================
# Request / Response Schemas
# ============================================

class MovieCreate(CamelModel):
    """Fields accepted on create and on full update (PUT)"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        use_enum_values=True,
    )

    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=10, max_length=1000)
    genre: Genre
    release_year: int
    director: str = Field(..., min_length=2, max_length=100)

    @field_validator('release_year')
    @classmethod
    def validate_release_year(cls, v):
        upper = max_release_year()
        if v < MIN_RELEASE_YEAR or v > upper:
            raise ValueError(f'Release year must be between {MIN_RELEASE_YEAR} and {upper}')
        return v


class MovieResponse(CamelModel):
    id: int
    title: str
    description: str
    genre: str
    release_year: int
    director: str
    image: Optional[str] = None
    added_by: Optional[UserBrief] = None
    upvotes: int
    downvotes: int
    score: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TopMovie(CamelModel):
    """Movie summary used in the admin dashboard"""
    id: int
    title: str
    genre: str
    upvotes: int
    downvotes: int
    score: int
    added_by: Optional[UserBrief] = None
