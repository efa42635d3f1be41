"""
Admin Routes for user management and the dashboard

All endpoints require an authenticated admin (router-level dependency).
"""

from fastapi import APIRouter, Depends, Query
from typing import Optional
from sqlalchemy.orm import Session

from moviehub.database import get_db
from moviehub.models.user import User
from moviehub.schemas.admin import AdminStats, RoleUpdate
from moviehub.schemas.auth import UserResponse
from moviehub.schemas.common import ERROR_RESPONSES, ApiResponse, MessageResponse, PaginatedResponse, paginated, success
from moviehub.schemas.movie import MovieResponse
from moviehub.schemas.validation import validate_pagination
from moviehub.services.admin_service import AdminService
from moviehub.services.movie_service import MovieService
from moviehub.services.vote_service import VoteService
from moviehub.utils.dependencies import require_admin

router = APIRouter(
    prefix="/api/admin",
    tags=["Admin"],
    responses=ERROR_RESPONSES,
    dependencies=[Depends(require_admin)],
)


@router.get("/stats", response_model=ApiResponse[AdminStats])
def get_stats(db: Session = Depends(get_db)):
    """
    Dashboard statistics

    Totals for users, movies, comments and votes, plus the five newest
    users and the five most upvoted movies.
    """
    return success("Admin stats retrieved successfully", AdminService.get_stats(db))


@router.get("/users", response_model=PaginatedResponse[UserResponse])
def list_users(
    page: Optional[str] = Query(None, description="Page number (default 1)"),
    limit: Optional[str] = Query(None, description="Items per page (default 10, max 100)"),
    db: Session = Depends(get_db)
):
    page, limit = validate_pagination(page, limit)
    users, total = AdminService.list_users(db, page, limit)
    return paginated("Users retrieved successfully", users, page, limit, total)


@router.get("/users/{user_id}", response_model=ApiResponse[UserResponse])
def get_user(user_id: int, db: Session = Depends(get_db)):
    return success("User retrieved successfully", AdminService.get_user(db, user_id))


@router.put("/users/{user_id}", response_model=ApiResponse[UserResponse])
@router.put("/users/{user_id}/role", response_model=ApiResponse[UserResponse])
def update_user_role(user_id: int, role_data: RoleUpdate, db: Session = Depends(get_db)):
    """Set a user's role (user or admin)"""
    user = AdminService.update_role(db, user_id, role_data.role)
    return success("User role updated successfully", user)


@router.delete("/users/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: int,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """
    Delete a user with their movies, comments and votes

    Admins cannot delete their own account.
    """
    AdminService.delete_user(db, user_id, current_user)
    return success("User deleted successfully")


@router.post("/movies/{movie_id}/recalculate-votes", response_model=ApiResponse[MovieResponse])
def recalculate_votes(movie_id: int, db: Session = Depends(get_db)):
    """Rebuild a movie's upvote/downvote tallies from the individual votes"""
    VoteService.recalculate_tallies(db, movie_id)
    return success("Vote tallies recalculated successfully", MovieService.get_movie(db, movie_id))
