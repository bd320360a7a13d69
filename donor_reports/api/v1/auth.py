"""
Authentication endpoints.

Endpoints:
- POST /api/v1/auth/login - Login with email/password
- GET /api/v1/auth/me - Current user profile
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from donor_reports.db.base import get_db
from donor_reports.core.security import verify_and_update_password, create_access_token
from donor_reports.core.deps import get_current_user
from donor_reports.models.user import User
from donor_reports.schemas.auth import UserLogin, UserResponse, TokenResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login", response_model=TokenResponse)
async def login(
    credentials: UserLogin,
    db: AsyncSession = Depends(get_db)
):
    """Authenticate user with email/password."""
    result = await db.execute(select(User).where(User.email == credentials.identity))
    user = result.scalar_one_or_none()

    valid, new_hash = (False, None)
    if user is not None:
        valid, new_hash = verify_and_update_password(credentials.password, user.password_hash)

    if not valid:
        logger.info(f"Failed login for {credentials.identity}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid email or password"
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User is disabled"
        )

    if new_hash:
        user.password_hash = new_hash
        logger.info(f"Upgraded password hash for user {user.id}")

    token = create_access_token(subject=user.id)

    return TokenResponse(
        token=token,
        record=UserResponse.model_validate(user)
    )


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    """Get the authenticated user's profile."""
    return UserResponse.model_validate(current_user)
