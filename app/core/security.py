# =============================================================================
# app/core/security.py
# =============================================================================
from datetime import datetime, timedelta
from typing import Optional
import secrets
import string
from jose import JWTError, jwt
from fastapi import HTTPException, status
from app.core.config import settings
from app.core.logger import get_module_logger

logger = get_module_logger(__name__, "security.log")

API_KEY_PREFIX = "sf_"
API_KEY_LENGTH = 32
INVITE_CODE_LENGTH = 8

def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token"""
    to_encode = data.copy()
    if expires_delta:
        if not isinstance(expires_delta, timedelta):
            logger.error("Invalid type for expires_delta, expected timedelta")
            raise ValueError("expires_delta must be a timedelta object")
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

def verify_token(token: str) -> str:
    """Verify JWT token and return the subject email"""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        logger.error("JWT token verification failed")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    email: Optional[str] = payload.get("sub")
    if email is None:
        logger.error("Token does not contain 'sub' field with email")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return email

def generate_api_key() -> str:
    """Project API key used by the feedback SDK: ``sf_`` + 32 alphanumerics"""
    alphabet = string.ascii_letters + string.digits
    return API_KEY_PREFIX + "".join(secrets.choice(alphabet) for _ in range(API_KEY_LENGTH))

def generate_invite_code() -> str:
    """Short, human-typeable invite code"""
    alphabet = string.ascii_uppercase + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(INVITE_CODE_LENGTH))
