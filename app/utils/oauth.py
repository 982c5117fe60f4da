# =============================================================================
# app/utils/oauth.py
# =============================================================================
from authlib.integrations.starlette_client import OAuth
from app.core.config import settings
from app.core.logger import get_module_logger

logger = get_module_logger(__name__, 'oauth.log')

oauth = OAuth()

if settings.GOOGLE_CLIENT_ID and settings.GOOGLE_CLIENT_SECRET:
    oauth.register(
        name='google',
        client_id=settings.GOOGLE_CLIENT_ID,
        client_secret=settings.GOOGLE_CLIENT_SECRET,
        server_metadata_url='https://accounts.google.com/.well-known/openid-configuration',
        client_kwargs={
            'scope': 'openid email profile'
        }
    )
    logger.info("✅ Google OAuth registered")
else:
    logger.warning("❌ Google OAuth not registered - missing credentials")
