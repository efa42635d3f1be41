"""
Admin Service - user management and dashboard statistics
"""

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload
from fastapi import HTTPException, status
from typing import List, Tuple
import logging

from moviehub.models.user import User
from moviehub.models.movie import Movie
from moviehub.models.vote import Vote
from moviehub.models.comment import Comment
from moviehub.schemas.admin import UserRole
from moviehub.services.movie_service import MovieService
from moviehub.services.vote_service import VoteService

logger = logging.getLogger(__name__)

DASHBOARD_LIST_SIZE = 5


class AdminService:
    """Service for admin-only operations"""

    @staticmethod
    def list_users(db: Session, page: int = 1, limit: int = 10) -> Tuple[List[User], int]:
        total = db.query(func.count(User.id)).scalar()
        users = (
            db.query(User)
            .order_by(User.created_at.desc(), User.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return users, total

    @staticmethod
    def get_user(db: Session, user_id: int) -> User:
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
        return user

    @staticmethod
    def update_role(db: Session, user_id: int, role: UserRole) -> User:
        user = AdminService.get_user(db, user_id)
        user.role = UserRole(role).value
        try:
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception(f"Updating role of user {user_id} failed")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to update user role"
            )
        db.refresh(user)
        logger.info(f"User {user_id} role set to {user.role}")
        return user

    @staticmethod
    def delete_user(db: Session, user_id: int, caller: User) -> None:
        """
        Delete a user and everything they own

        Removes their votes (re-deriving the tallies of the movies they voted
        on), their comments, and their movies with those movies' votes and
        comments.
        """
        if user_id == caller.id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot delete your own account")

        user = AdminService.get_user(db, user_id)

        try:
            own_movie_ids = [row.id for row in db.query(Movie.id).filter(Movie.added_by_id == user_id)]
            voted_movie_ids = {
                row.movie_id for row in db.query(Vote.movie_id).filter(Vote.user_id == user_id)
            }

            db.query(Vote).filter(Vote.user_id == user_id).delete(synchronize_session=False)
            db.query(Comment).filter(Comment.user_id == user_id).delete(synchronize_session=False)
            MovieService.purge_movies(db, own_movie_ids)

            for movie_id in voted_movie_ids.difference(own_movie_ids):
                VoteService.recalculate_tallies(db, movie_id, commit=False)

            db.delete(user)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception(f"Deleting user {user_id} failed")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to delete user"
            )

        logger.info(
            f"Admin {caller.id} deleted user {user_id} "
            f"({len(own_movie_ids)} movies, {len(voted_movie_ids)} votes)"
        )

    @staticmethod
    def get_stats(db: Session) -> dict:
        total_upvotes, total_downvotes = db.query(
            func.coalesce(func.sum(Movie.upvotes), 0),
            func.coalesce(func.sum(Movie.downvotes), 0)
        ).one()

        recent_users = (
            db.query(User)
            .order_by(User.created_at.desc(), User.id.desc())
            .limit(DASHBOARD_LIST_SIZE)
            .all()
        )
        top_movies = (
            db.query(Movie)
            .options(joinedload(Movie.added_by))
            .order_by(Movie.upvotes.desc(), Movie.created_at.desc(), Movie.id.desc())
            .limit(DASHBOARD_LIST_SIZE)
            .all()
        )

        return {
            "total_users": db.query(func.count(User.id)).scalar(),
            "total_movies": db.query(func.count(Movie.id)).scalar(),
            "total_comments": db.query(func.count(Comment.id)).scalar(),
            "total_votes": {
                "total_upvotes": int(total_upvotes),
                "total_downvotes": int(total_downvotes),
            },
            "recent_users": recent_users,
            "top_movies": top_movies,
        }
