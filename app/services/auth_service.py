# =============================================================================
# app/services/auth_service.py
# =============================================================================
from datetime import timedelta
from typing import Dict, Any
from sqlalchemy.orm import Session
import httpx
from pydantic import ValidationError
from app.core.config import settings
from app.core.security import create_access_token
from app.models.user import User
from app.schemas.user import UserCreate, UserUpdate, UserResponse, GoogleUserInfo
from app.schemas.token import TokenResponse
from app.services.user_service import UserService
from app.core.logger import get_module_logger

logger = get_module_logger(__name__, "auth_service.log")

GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"

class AuthService:
    """Service for handling authentication logic"""

    @staticmethod
    def issue_token(user: User) -> TokenResponse:
        """Create a bearer token for ``user``"""
        access_token = create_access_token(
            data={"sub": user.email},
            expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        )
        return TokenResponse(
            access_token=access_token,
            token_type="bearer",
            user=UserResponse.model_validate(user)
        )

    @staticmethod
    async def process_google_user(db: Session, user_info: Dict[str, Any]) -> TokenResponse:
        """Process Google user info and return token"""
        try:
            google_user = GoogleUserInfo(**user_info)
        except ValidationError as e:
            logger.error(f"Invalid Google user data: {e}")
            raise ValueError("Invalid user data from Google")

        email = google_user.email.lower()

        # Get or create user
        user = UserService.get_user_by_email(db, email)
        if not user:
            user = UserService.create_user(db, UserCreate(
                name=google_user.name or email.split('@')[0],
                email=email,
                profile_image=google_user.picture
            ))
            logger.info(f"🆕 New account created for {email}")
        else:
            user = UserService.update_user(db, user, UserUpdate(
                name=google_user.name or user.name,
                profile_image=google_user.picture or user.profile_image
            ))

        return AuthService.issue_token(user)

    @staticmethod
    async def get_google_user_info(token: str) -> Dict[str, Any]:
        """Get user info from Google API"""
        async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS) as client:
            response = await client.get(
                GOOGLE_USERINFO_URL,
                headers={'Authorization': f'Bearer {token}'}
            )
            response.raise_for_status()
            return response.json()
