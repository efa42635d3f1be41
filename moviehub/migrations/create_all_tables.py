"""
Migration script to create all database tables

Run this script to create all database tables:
    python -m moviehub.migrations.create_all_tables
"""

import logging

from moviehub.database import engine, Base
# Import all models to ensure they're registered with Base
from moviehub.models import User, Movie, Vote, Comment  # noqa: F401

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def create_tables():
    """Create all database tables (existing tables are left untouched)"""
    logger.info("=" * 60)
    logger.info("Creating all database tables...")
    logger.info("=" * 60)

    Base.metadata.create_all(bind=engine)

    logger.info("✅ All tables created successfully!")
    for table in Base.metadata.sorted_tables:
        logger.info(f"   - {table.name}")
    logger.info("=" * 60)


if __name__ == "__main__":
    create_tables()
