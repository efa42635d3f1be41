from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from moviehub.database import get_db
from moviehub.schemas.auth import UserRegister, UserLogin, UserResponse, AuthPayload
from moviehub.schemas.common import ERROR_RESPONSES, ApiResponse, success
from moviehub.services.auth_service import AuthService
from moviehub.utils.dependencies import get_current_user
from moviehub.models.user import User

# Define router
router = APIRouter(prefix="/api/auth", tags=["Authentication"], responses=ERROR_RESPONSES)


# Register a new user
@router.post("/register", response_model=ApiResponse[AuthPayload], status_code=status.HTTP_201_CREATED)
def register(user_data: UserRegister, db: Session = Depends(get_db)):
    """Register a new user and return it with a bearer token"""
    return success("User registered successfully", AuthService.register_user(db, user_data))


# Login endpoint
@router.post("/login", response_model=ApiResponse[AuthPayload])
def login(credentials: UserLogin, db: Session = Depends(get_db)):
    """Login with email and password"""
    return success("Login successful", AuthService.login_user(db, credentials))


# Get current authenticated user
@router.get("/profile", response_model=ApiResponse[UserResponse])
def get_profile(current_user: User = Depends(get_current_user)):
    """Get current authenticated user"""
    return success("Profile retrieved successfully", current_user)
