"""
Vote Service - up/down votes on movies

The Vote table is the ledger (one row per user and movie, enforced by a
unique constraint). Movie.upvotes / Movie.downvotes are a denormalized tally
of that ledger, kept in step inside the same transaction as the ledger write.
"""

import logging
import threading
from collections import defaultdict
from contextlib import contextmanager
from typing import Dict, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from moviehub.models.movie import Movie, compute_score
from moviehub.models.vote import Vote
from moviehub.schemas.vote import VoteType

logger = logging.getLogger(__name__)

TALLY_COLUMNS = {
    VoteType.UP: "upvotes",
    VoteType.DOWN: "downvotes",
}


class KeyedLock:
    """
    Per-key mutual exclusion

    Locks are reference counted and dropped once no thread holds or waits
    on them, so the registry only grows with in-flight keys.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[Tuple, threading.Lock] = {}
        self._waiters: Dict[Tuple, int] = defaultdict(int)

    @contextmanager
    def hold(self, key: Tuple):
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
            self._waiters[key] += 1
        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                self._waiters[key] -= 1
                if self._waiters[key] == 0:
                    del self._waiters[key]
                    del self._locks[key]


_vote_locks = KeyedLock()


class VoteService:
    """Service for movie vote operations"""

    @staticmethod
    def _adjust_tally(db: Session, movie_id: int, vote_type: VoteType, delta: int) -> None:
        """Atomic increment/decrement; decrements never take a tally below zero"""
        name = TALLY_COLUMNS[vote_type]
        column = getattr(Movie, name)
        stmt = update(Movie).where(Movie.id == movie_id)
        if delta < 0:
            stmt = stmt.where(column >= -delta)
        stmt = stmt.values({name: column + delta}).execution_options(synchronize_session=False)
        db.execute(stmt)

    @staticmethod
    def _apply_vote(db: Session, user_id: int, movie_id: int, vote_type: VoteType) -> Tuple[Optional[VoteType], str]:
        """
        Ledger + tally mutation for one vote request (not committed)

        Returns the caller's vote after the mutation (None when toggled off)
        and what happened to the ledger: added, removed or updated.
        """
        existing = db.query(Vote).filter(
            Vote.user_id == user_id,
            Vote.movie_id == movie_id
        ).first()

        if existing is None:
            db.add(Vote(user_id=user_id, movie_id=movie_id, vote_type=vote_type.value))
            db.flush()
            VoteService._adjust_tally(db, movie_id, vote_type, 1)
            return vote_type, "added"

        previous = VoteType(existing.vote_type)
        if previous == vote_type:
            # Same vote again: toggle off
            db.delete(existing)
            db.flush()
            VoteService._adjust_tally(db, movie_id, vote_type, -1)
            return None, "removed"

        existing.vote_type = vote_type.value
        db.flush()
        VoteService._adjust_tally(db, movie_id, vote_type, 1)
        VoteService._adjust_tally(db, movie_id, previous, -1)
        return vote_type, "updated"

    @staticmethod
    def _ensure_movie(db: Session, movie_id: int) -> Movie:
        movie = db.query(Movie).filter(Movie.id == movie_id).first()
        if not movie:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Movie not found")
        return movie

    @staticmethod
    def cast_vote(db: Session, user_id: int, movie_id: int, vote_type: VoteType) -> Tuple[str, dict]:
        """
        Cast, flip or withdraw a vote

        - no vote yet        -> record it, tally +1
        - same type again    -> remove it, tally -1
        - opposite type      -> flip it, new tally +1, old tally -1

        Requests for the same (user, movie) are serialized in-process; across
        processes the unique constraint makes the loser of an insert race
        retry against the row the winner wrote.
        """
        vote_type = VoteType(vote_type)
        movie = VoteService._ensure_movie(db, movie_id)

        with _vote_locks.hold((user_id, movie_id)):
            try:
                try:
                    result_type, action = VoteService._apply_vote(db, user_id, movie_id, vote_type)
                    db.commit()
                except IntegrityError:
                    db.rollback()
                    logger.info(f"Concurrent vote on movie {movie_id} by user {user_id}, retrying")
                    result_type, action = VoteService._apply_vote(db, user_id, movie_id, vote_type)
                    db.commit()
            except SQLAlchemyError:
                db.rollback()
                logger.exception(f"Vote on movie {movie_id} failed")
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail="Failed to vote on movie"
                )

        db.refresh(movie)
        return action, {
            "vote_type": result_type,
            "upvotes": movie.upvotes,
            "downvotes": movie.downvotes,
            "score": compute_score(movie.upvotes, movie.downvotes),
        }

    @staticmethod
    def get_user_vote(db: Session, user_id: int, movie_id: int) -> Optional[VoteType]:
        vote = db.query(Vote).filter(
            Vote.user_id == user_id,
            Vote.movie_id == movie_id
        ).first()
        return VoteType(vote.vote_type) if vote else None

    @staticmethod
    def recalculate_tallies(db: Session, movie_id: int, commit: bool = True) -> Movie:
        """
        Rebuild a movie's tallies from the ledger

        Repairs drift left by out-of-band edits or cascaded vote deletions.
        """
        movie = VoteService._ensure_movie(db, movie_id)
        counts = dict(
            db.query(Vote.vote_type, func.count(Vote.id))
            .filter(Vote.movie_id == movie_id)
            .group_by(Vote.vote_type)
            .all()
        )
        movie.upvotes = counts.get(VoteType.UP.value, 0)
        movie.downvotes = counts.get(VoteType.DOWN.value, 0)

        if commit:
            try:
                db.commit()
            except SQLAlchemyError:
                db.rollback()
                logger.exception(f"Recalculating tallies for movie {movie_id} failed")
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail="Failed to recalculate votes"
                )
            db.refresh(movie)
        return movie
