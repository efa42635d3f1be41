"""
Create an admin account, or promote an existing user to admin

Usage:
    python -m moviehub.scripts.create_admin --email admin@example.com --name "Admin User"

The password is read from --password, the ADMIN_PASSWORD environment
variable, or prompted for.
"""
import argparse
import getpass
import logging
import os

from moviehub.database import Base, engine, get_db_session
from moviehub.models.user import User
from moviehub.utils.security import hash_password

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def create_admin(email: str, name: str, password: str) -> User:
    """Idempotent: an existing account keeps its password and is promoted"""
    Base.metadata.create_all(bind=engine)
    email = email.strip().lower()

    db = get_db_session()
    try:
        user = db.query(User).filter(User.email == email).first()
        if user:
            if user.role == "admin":
                logger.info(f"Admin user {email} already exists")
                return user
            user.role = "admin"
            logger.info(f"Promoted {email} to admin")
        else:
            if len(password) < 6:
                raise ValueError("Password must be at least 6 characters long")
            user = User(name=name, email=email, password_hash=hash_password(password), role="admin")
            db.add(user)
            logger.info(f"Created admin user {email}")
        db.commit()
        db.refresh(user)
        return user
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def main(argv=None):
    parser = argparse.ArgumentParser(description="Create or promote a MovieHub admin account")
    parser.add_argument("--email", required=True, help="Admin email address")
    parser.add_argument("--name", default="Admin User", help="Display name for a new account")
    parser.add_argument("--password", help="Password for a new account")
    args = parser.parse_args(argv)

    password = args.password or os.getenv("ADMIN_PASSWORD") or getpass.getpass("Admin password: ")
    create_admin(args.email, args.name, password)


if __name__ == "__main__":
    main()
