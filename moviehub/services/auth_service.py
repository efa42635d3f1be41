from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from moviehub.models.user import User
from moviehub.schemas.auth import UserRegister, UserLogin
from moviehub.utils.security import hash_password, verify_password, create_user_token
from fastapi import HTTPException, status
import logging

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL = "User with this email already exists"
INVALID_CREDENTIALS = "Invalid email or password"


class AuthService:
    @staticmethod
    def find_by_email(db: Session, email: str):
        return db.query(User).filter(func.lower(User.email) == email.lower()).first()

    @staticmethod
    def register_user(db: Session, user_data: UserRegister) -> dict:
        # Check existing email
        if AuthService.find_by_email(db, user_data.email):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=DUPLICATE_EMAIL)

        # Create user
        new_user = User(
            name=user_data.name,
            email=user_data.email.lower(),
            password_hash=hash_password(user_data.password),
            role="user",
        )
        db.add(new_user)
        try:
            db.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration for the same email
            db.rollback()
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=DUPLICATE_EMAIL)
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Registration failed")
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Registration failed")
        db.refresh(new_user)

        logger.info(f"Registered user {new_user.id}")
        return {"user": new_user, "token": create_user_token(new_user)}

    @staticmethod
    def login_user(db: Session, credentials: UserLogin) -> dict:
        user = AuthService.find_by_email(db, credentials.email)

        # Same message for both cases to avoid account enumeration
        if not user:
            logger.warning("Login failed: unknown email")
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS)

        if not verify_password(credentials.password, str(user.password_hash)):
            logger.warning(f"Login failed: incorrect password for user {user.id}")
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS)

        return {"user": user, "token": create_user_token(user)}
