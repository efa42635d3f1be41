from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint, Index
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from moviehub.database import Base


class Vote(Base):
    """Ledger entry: one up/down vote per user per movie"""
    __tablename__ = "votes"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    movie_id = Column(Integer, ForeignKey("movies.id", ondelete="CASCADE"), nullable=False)
    vote_type = Column(String(4), nullable=False)  # 'up' or 'down'
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="votes")
    movie = relationship("Movie", back_populates="votes")

    # Ensure one vote per user per movie
    __table_args__ = (
        UniqueConstraint('user_id', 'movie_id', name='unique_user_movie_vote'),
        Index("ix_votes_movie_vote_type", "movie_id", "vote_type"),
    )

    def __repr__(self):
        return f"<Vote(user_id={self.user_id}, movie_id={self.movie_id}, vote_type='{self.vote_type}')>"
