from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index
from sqlalchemy.ext.hybrid import hybrid_property
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from moviehub.database import Base


def compute_score(upvotes, downvotes):
    """
    The one score formula.

    Works on plain ints and on SQLAlchemy column expressions, so the value
    returned to clients and the ORDER BY used for ranking can never disagree.
    """
    return upvotes - downvotes


class Movie(Base):
    __tablename__ = "movies"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    genre = Column(String(30), nullable=False)
    release_year = Column(Integer, nullable=False)
    director = Column(String(100), nullable=False)
    image = Column(String(255), nullable=True)  # Public path, e.g. /uploads/<name>
    added_by_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    upvotes = Column(Integer, nullable=False, default=0, server_default="0")
    downvotes = Column(Integer, nullable=False, default=0, server_default="0")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    added_by = relationship("User", back_populates="movies")
    votes = relationship("Vote", back_populates="movie", passive_deletes=True)
    comments = relationship("Comment", back_populates="movie", passive_deletes=True)

    __table_args__ = (
        Index("ix_movies_genre", "genre"),
        Index("ix_movies_added_by", "added_by_id"),
    )

    @hybrid_property
    def score(self):
        """Derived ranking signal, never persisted"""
        return compute_score(self.upvotes or 0, self.downvotes or 0)

    @score.expression
    def score(cls):
        return compute_score(cls.upvotes, cls.downvotes)

    def __repr__(self):
        return f"<Movie(id={self.id}, title='{self.title}', score={self.score})>"


# Ranking index on the derived score, newest first within equal scores
Index(
    "ix_movies_score_created_at",
    compute_score(Movie.upvotes, Movie.downvotes).desc(),
    Movie.created_at.desc(),
)
