"""
Comment Routes - discussion on movies
"""

from fastapi import APIRouter, Depends, Query, status
from typing import Optional
from sqlalchemy.orm import Session

from moviehub.database import get_db
from moviehub.models.user import User
from moviehub.schemas.comment import CommentDetailResponse, CommentResponse
from moviehub.schemas.common import ERROR_RESPONSES, ApiResponse, MessageResponse, PaginatedResponse, paginated, success
from moviehub.schemas.validation import CommentSchema, validate_pagination
from moviehub.services.comment_service import CommentService
from moviehub.utils.dependencies import ensure_can_modify, get_current_user

router = APIRouter(prefix="/api/comments", tags=["Comments"], responses=ERROR_RESPONSES)


def editable_comment(
    comment_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Author-or-admin gate, resolved before the request body is validated"""
    comment = CommentService.get_comment(db, comment_id)
    ensure_can_modify(current_user, comment.user_id, "update this comment")
    return comment


@router.get("/movies/{movie_id}", response_model=PaginatedResponse[CommentResponse])
def list_movie_comments(
    movie_id: int,
    page: Optional[str] = Query(None, description="Page number (default 1)"),
    limit: Optional[str] = Query(None, description="Items per page (default 10, max 100)"),
    db: Session = Depends(get_db)
):
    """Comments on a movie, newest first"""
    page, limit = validate_pagination(page, limit)
    comments, total = CommentService.list_for_movie(db, movie_id, page, limit)
    return paginated("Comments retrieved successfully", comments, page, limit, total)


@router.post("/movies/{movie_id}", response_model=ApiResponse[CommentResponse], status_code=status.HTTP_201_CREATED)
def create_comment(
    movie_id: int,
    comment_data: CommentSchema,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    comment = CommentService.create_comment(db, movie_id, current_user, comment_data.content)
    return success("Comment created successfully", comment)


@router.get("/{comment_id}", response_model=ApiResponse[CommentDetailResponse])
def get_comment(comment_id: int, db: Session = Depends(get_db)):
    return success("Comment retrieved successfully", CommentService.get_comment(db, comment_id))


@router.put("/{comment_id}", response_model=ApiResponse[CommentResponse], dependencies=[Depends(editable_comment)])
def update_comment(
    comment_id: int,
    comment_data: CommentSchema,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Edit a comment (author or admin)"""
    comment = CommentService.update_comment(db, comment_id, current_user, comment_data.content)
    return success("Comment updated successfully", comment)


@router.delete("/{comment_id}", response_model=MessageResponse)
def delete_comment(
    comment_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete a comment (author or admin)"""
    CommentService.delete_comment(db, comment_id, current_user)
    return success("Comment deleted successfully")
