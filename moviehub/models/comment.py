from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey, Index
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from moviehub.database import Base


class Comment(Base):
    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    movie_id = Column(Integer, ForeignKey("movies.id", ondelete="CASCADE"), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="comments")
    movie = relationship("Movie", back_populates="comments")

    __table_args__ = (
        Index("ix_comments_movie_created_at", "movie_id", "created_at"),
        Index("ix_comments_user_id", "user_id"),
    )

    def __repr__(self):
        return f"<Comment(id={self.id}, movie_id={self.movie_id}, user_id={self.user_id})>"
