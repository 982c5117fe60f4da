# =============================================================================
# app/api/v1/endpoints/auth.py
# =============================================================================
from fastapi import APIRouter, Depends, HTTPException, status, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session
from urllib.parse import urlencode
from datetime import datetime
from app.db.session import get_db
from app.services.auth_service import AuthService
from app.schemas.token import TokenResponse
from app.core.dependencies import get_current_user
from app.models.user import User
from app.utils.oauth import oauth
from app.core.config import settings
from app.core.logger import get_module_logger

logger = get_module_logger(__name__, "auth.log")

router = APIRouter()

def _google_client():
    client = oauth.create_client("google")
    if client is None:
        logger.error("Google OAuth2 client is not configured")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Google OAuth2 client is not configured"
        )
    return client

async def _exchange_google_token(request: Request, db: Session) -> TokenResponse:
    token = await _google_client().authorize_access_token(request)
    if not token or "error" in token:
        logger.error(f"Failed to retrieve token from Google: {token.get('error') if token else 'empty response'}")
        raise ValueError("Failed to retrieve token from Google")

    user_info = token.get('userinfo')
    if not user_info:
        user_info = await AuthService.get_google_user_info(token["access_token"])

    token_response = await AuthService.process_google_user(db, user_info)
    logger.info(f"User authenticated successfully: {token_response.user.email}")
    return token_response

@router.get("/google/login", status_code=status.HTTP_302_FOUND)
async def google_login(request: Request):
    """Initiate Google OAuth2 login"""
    redirect_uri = settings.GOOGLE_REDIRECT_URI
    if not redirect_uri.startswith("http"):
        logger.error("Invalid redirect URI format")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid redirect URI format"
        )

    logger.info("Redirecting to Google for authentication")
    return await _google_client().authorize_redirect(request, redirect_uri)

@router.get("/google/callback", status_code=status.HTTP_302_FOUND)
async def google_callback(request: Request, db: Session = Depends(get_db)):
    """Handle Google OAuth2 callback and redirect to the admin frontend"""
    try:
        token_response = await _exchange_google_token(request, db)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Authentication failed: {str(e)}")
        return _redirect_to_frontend({
            'success': 'false',
            'error': f"Authentication failed: {str(e)}",
            'timestamp': str(int(datetime.utcnow().timestamp()))
        })

    return _redirect_to_frontend({
        'success': 'true',
        'token': token_response.access_token,
        'user_id': str(token_response.user.id),
        'user_name': token_response.user.name,
        'user_email': token_response.user.email,
        'subscription_tier': token_response.user.subscription_tier.value,
    })

def _redirect_to_frontend(query_params: dict) -> RedirectResponse:
    redirect_url = f"{settings.FRONTEND_BASE_URL}/auth/callback?{urlencode(query_params)}"
    logger.info(f"Redirecting to frontend: {settings.FRONTEND_BASE_URL}/auth/callback (success={query_params['success']})")
    return RedirectResponse(url=redirect_url, status_code=302)

@router.post("/google/token", response_model=TokenResponse, status_code=status.HTTP_200_OK)
async def google_token_exchange(request: Request, db: Session = Depends(get_db)):
    """
    JSON variant of the callback for native clients
    """
    try:
        return await _exchange_google_token(request, db)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Authentication failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Authentication failed: {str(e)}"
        )

@router.post("/refresh", response_model=TokenResponse, status_code=status.HTTP_200_OK)
async def refresh_token(current_user: User = Depends(get_current_user)):
    """Refresh JWT token"""
    logger.info(f"Refreshing token for {current_user.email}")
    return AuthService.issue_token(current_user)
