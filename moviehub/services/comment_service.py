"""
Comment Service - discussion threads attached to movies
"""

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload
from fastapi import HTTPException, status
from typing import List, Tuple
import logging

from moviehub.models.comment import Comment
from moviehub.models.movie import Movie
from moviehub.models.user import User
from moviehub.utils.dependencies import ensure_can_modify

logger = logging.getLogger(__name__)


class CommentService:
    """Service for comment operations"""

    @staticmethod
    def _ensure_movie_exists(db: Session, movie_id: int) -> None:
        if not db.query(Movie.id).filter(Movie.id == movie_id).first():
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Movie not found")

    @staticmethod
    def _commit(db: Session, message: str) -> None:
        try:
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception(message)
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message)

    @staticmethod
    def list_for_movie(db: Session, movie_id: int, page: int = 1, limit: int = 10) -> Tuple[List[Comment], int]:
        """Newest first"""
        CommentService._ensure_movie_exists(db, movie_id)

        query = db.query(Comment).filter(Comment.movie_id == movie_id)
        total = query.count()
        comments = (
            query.options(joinedload(Comment.user))
            .order_by(Comment.created_at.desc(), Comment.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return comments, total

    @staticmethod
    def get_comment(db: Session, comment_id: int) -> Comment:
        comment = db.query(Comment).options(
            joinedload(Comment.user),
            joinedload(Comment.movie)
        ).filter(Comment.id == comment_id).first()

        if not comment:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Comment not found")
        return comment

    @staticmethod
    def create_comment(db: Session, movie_id: int, author: User, content: str) -> Comment:
        CommentService._ensure_movie_exists(db, movie_id)

        comment = Comment(content=content, user_id=author.id, movie_id=movie_id)
        db.add(comment)
        CommentService._commit(db, "Failed to create comment")
        return CommentService.get_comment(db, comment.id)

    @staticmethod
    def update_comment(db: Session, comment_id: int, caller: User, content: str) -> Comment:
        comment = CommentService.get_comment(db, comment_id)
        ensure_can_modify(caller, comment.user_id, "update this comment")

        comment.content = content
        CommentService._commit(db, "Failed to update comment")
        return CommentService.get_comment(db, comment_id)

    @staticmethod
    def delete_comment(db: Session, comment_id: int, caller: User) -> None:
        comment = CommentService.get_comment(db, comment_id)
        ensure_can_modify(caller, comment.user_id, "delete this comment")

        db.delete(comment)
        CommentService._commit(db, "Failed to delete comment")
