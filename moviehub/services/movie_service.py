"""
Movie Service - catalog CRUD with owner/admin checks
"""

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload
from fastapi import HTTPException, UploadFile, status
from typing import List, Optional, Tuple
import logging

from moviehub.models.movie import Movie
from moviehub.models.vote import Vote
from moviehub.models.comment import Comment
from moviehub.models.user import User
from moviehub.schemas.movie import MovieCreate, SortField, SortOrder
from moviehub.utils.dependencies import ensure_can_modify
from moviehub.utils.uploads import save_image, delete_image

logger = logging.getLogger(__name__)

SORT_COLUMNS = {
    SortField.SCORE: Movie.score,
    SortField.CREATED_AT: Movie.created_at,
    SortField.TITLE: Movie.title,
    SortField.RELEASE_YEAR: Movie.release_year,
}


class MovieService:
    """Service for movie catalog operations"""

    @staticmethod
    def _store_error(db: Session, message: str) -> HTTPException:
        db.rollback()
        logger.exception(message)
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message)

    @staticmethod
    def list_movies(
        db: Session,
        genre: Optional[str] = None,
        sort_by: SortField = SortField.SCORE,
        sort_order: SortOrder = SortOrder.DESC,
        page: int = 1,
        limit: int = 10
    ) -> Tuple[List[Movie], int]:
        """
        Page through the catalog

        Score ordering is computed by the database from the tallies
        (upvotes - downvotes), so pages are consistent with the scores returned.
        Ties fall back to newest first.
        """
        query = db.query(Movie)
        if genre:
            query = query.filter(Movie.genre == genre)

        total = query.count()

        column = SORT_COLUMNS[SortField(sort_by)]
        ordering = column.asc() if SortOrder(sort_order) == SortOrder.ASC else column.desc()
        movies = (
            query.options(joinedload(Movie.added_by))
            .order_by(ordering, Movie.created_at.desc(), Movie.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return movies, total

    @staticmethod
    def get_movie(db: Session, movie_id: int) -> Movie:
        movie = db.query(Movie).options(joinedload(Movie.added_by)).filter(Movie.id == movie_id).first()
        if not movie:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Movie not found")
        return movie

    @staticmethod
    def create_movie(
        db: Session,
        movie_data: MovieCreate,
        owner: User,
        image: Optional[UploadFile] = None
    ) -> Movie:
        image_path = save_image(image) if image is not None else None

        movie = Movie(
            title=movie_data.title,
            description=movie_data.description,
            genre=movie_data.genre,
            release_year=movie_data.release_year,
            director=movie_data.director,
            image=image_path,
            added_by_id=owner.id,
            upvotes=0,
            downvotes=0,
        )
        db.add(movie)
        try:
            db.commit()
        except SQLAlchemyError:
            delete_image(image_path)
            raise MovieService._store_error(db, "Failed to create movie")

        logger.info(f"User {owner.id} added movie {movie.id}")
        return MovieService.get_movie(db, movie.id)

    @staticmethod
    def update_movie(
        db: Session,
        movie_id: int,
        movie_data: MovieCreate,
        caller: User,
        image: Optional[UploadFile] = None
    ) -> Movie:
        movie = MovieService.get_movie(db, movie_id)
        ensure_can_modify(caller, movie.added_by_id, "update this movie")

        old_image = movie.image
        new_image = save_image(image) if image is not None else None

        movie.title = movie_data.title
        movie.description = movie_data.description
        movie.genre = movie_data.genre
        movie.release_year = movie_data.release_year
        movie.director = movie_data.director
        if new_image:
            movie.image = new_image

        try:
            db.commit()
        except SQLAlchemyError:
            delete_image(new_image)
            raise MovieService._store_error(db, "Failed to update movie")

        if new_image and old_image != new_image:
            delete_image(old_image)
        return MovieService.get_movie(db, movie_id)

    @staticmethod
    def delete_movie(db: Session, movie_id: int, caller: User) -> None:
        """Delete a movie together with its votes and comments"""
        movie = MovieService.get_movie(db, movie_id)
        ensure_can_modify(caller, movie.added_by_id, "delete this movie")

        image = movie.image
        try:
            MovieService.purge_movies(db, [movie_id])
            db.commit()
        except SQLAlchemyError:
            raise MovieService._store_error(db, "Failed to delete movie")

        delete_image(image)
        logger.info(f"User {caller.id} deleted movie {movie_id}")

    @staticmethod
    def purge_movies(db: Session, movie_ids: List[int]) -> None:
        """Delete movies and everything hanging off them; caller commits"""
        if not movie_ids:
            return
        db.query(Vote).filter(Vote.movie_id.in_(movie_ids)).delete(synchronize_session=False)
        db.query(Comment).filter(Comment.movie_id.in_(movie_ids)).delete(synchronize_session=False)
        db.query(Movie).filter(Movie.id.in_(movie_ids)).delete(synchronize_session=False)
        db.expire_all()
