"""
Movie Routes - catalog CRUD and voting
"""

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Request, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy.orm import Session
from starlette.datastructures import UploadFile
from typing import Optional, Tuple

from moviehub.database import get_db
from moviehub.models.movie import Movie
from moviehub.models.user import User
from moviehub.schemas.common import ERROR_RESPONSES, ApiResponse, MessageResponse, PaginatedResponse, paginated, success
from moviehub.schemas.movie import Genre, MovieCreate, MovieResponse, SortField, SortOrder
from moviehub.schemas.validation import validate_pagination
from moviehub.schemas.vote import UserVote, VoteRequest, VoteResult
from moviehub.services.movie_service import MovieService
from moviehub.services.vote_service import VoteService
from moviehub.utils.dependencies import ensure_can_modify, get_current_user

router = APIRouter(prefix="/api/movies", tags=["Movies"], responses=ERROR_RESPONSES)

VOTE_MESSAGES = {
    "added": "Vote added successfully",
    "removed": "Vote removed successfully",
    "updated": "Vote updated successfully",
}


async def movie_payload(request: Request) -> Tuple[MovieCreate, Optional[UploadFile]]:
    """
    Parse movie fields from a JSON body or a multipart form

    Every field error is reported at once, the same way as for JSON bodies.
    An optional poster comes in the multipart `image` field.
    """
    image = None
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            raw = await request.json()
        except ValueError:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Malformed JSON body")
        if not isinstance(raw, dict):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Request body must be an object")
    else:
        form = await request.form()
        raw = {key: value for key, value in form.items() if not isinstance(value, UploadFile)}
        upload = form.get("image")
        if isinstance(upload, UploadFile) and upload.filename:
            image = upload
        raw.pop("image", None)

    try:
        return MovieCreate.model_validate(raw), image
    except ValidationError as exc:
        raise RequestValidationError(exc.errors(), body=raw)


def editable_movie(
    movie_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Movie:
    """Owner-or-admin gate, resolved before the request body is parsed"""
    movie = MovieService.get_movie(db, movie_id)
    ensure_can_modify(current_user, movie.added_by_id, "update this movie")
    return movie


# ============================================
# Catalog
# ============================================

@router.get("", response_model=PaginatedResponse[MovieResponse])
def list_movies(
    page: Optional[str] = Query(None, description="Page number (default 1)"),
    limit: Optional[str] = Query(None, description="Movies per page (default 10, max 100)"),
    genre: Optional[Genre] = Query(None, description="Filter by genre"),
    sort_by: SortField = Query(SortField.SCORE, alias="sortBy"),
    sort_order: SortOrder = Query(SortOrder.DESC, alias="sortOrder"),
    db: Session = Depends(get_db)
):
    """
    List movies with pagination, genre filter and sorting

    - **sortBy**: score (default), createdAt, title, releaseYear
    - **sortOrder**: desc (default) or asc
    """
    page, limit = validate_pagination(page, limit)
    movies, total = MovieService.list_movies(
        db,
        genre=genre.value if genre else None,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit
    )
    return paginated("Movies retrieved successfully", movies, page, limit, total)


@router.get("/{movie_id}", response_model=ApiResponse[MovieResponse])
def get_movie(movie_id: int = Path(..., description="Movie ID"), db: Session = Depends(get_db)):
    return success("Movie retrieved successfully", MovieService.get_movie(db, movie_id))


@router.post("", response_model=ApiResponse[MovieResponse], status_code=status.HTTP_201_CREATED)
def create_movie(
    current_user: User = Depends(get_current_user),
    payload: Tuple[MovieCreate, Optional[UploadFile]] = Depends(movie_payload),
    db: Session = Depends(get_db)
):
    """
    Add a movie to the catalog

    Accepts JSON or multipart form data (title, description, genre,
    releaseYear, director, and an optional `image` file).
    """
    movie_data, image = payload
    movie = MovieService.create_movie(db, movie_data, current_user, image)
    return success("Movie created successfully", movie)


@router.put("/{movie_id}", response_model=ApiResponse[MovieResponse], dependencies=[Depends(editable_movie)])
def update_movie(
    movie_id: int,
    current_user: User = Depends(get_current_user),
    payload: Tuple[MovieCreate, Optional[UploadFile]] = Depends(movie_payload),
    db: Session = Depends(get_db)
):
    """
    Replace a movie's fields (owner or admin)

    The image is only replaced when a new file is uploaded.
    """
    movie_data, image = payload
    movie = MovieService.update_movie(db, movie_id, movie_data, current_user, image)
    return success("Movie updated successfully", movie)


@router.delete("/{movie_id}", response_model=MessageResponse)
def delete_movie(
    movie_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete a movie with its votes and comments (owner or admin)"""
    MovieService.delete_movie(db, movie_id, current_user)
    return success("Movie deleted successfully")


# ============================================
# Voting
# ============================================

@router.post("/{movie_id}/vote", response_model=ApiResponse[VoteResult])
def vote_movie(
    vote: VoteRequest,
    movie_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Vote on a movie

    Voting the same way twice withdraws the vote; voting the other way
    switches it.
    """
    action, result = VoteService.cast_vote(db, current_user.id, movie_id, vote.vote_type)
    return success(VOTE_MESSAGES[action], result)


@router.get("/{movie_id}/vote", response_model=ApiResponse[UserVote])
def get_user_vote(
    movie_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Current user's vote on a movie (voteType is null when not voted)"""
    vote_type = VoteService.get_user_vote(db, current_user.id, movie_id)
    return success("User vote retrieved successfully", {"vote_type": vote_type})
