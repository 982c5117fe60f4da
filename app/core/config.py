# =============================================================================
# app/core/config.py
# =============================================================================
from typing import List, Optional
from pydantic import field_validator
from pydantic_settings import BaseSettings
import os
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseSettings):
    # Project Info
    PROJECT_NAME: str = "FeedbackKit Admin API"
    VERSION: str = "1.0.0"
    DESCRIPTION: str = "Admin backend for FeedbackKit projects, members, subscriptions and issue-tracker integrations"
    API_V1_STR: str = "/api/v1"

    # Security
    SECRET_KEY: str = os.getenv("SECRET_KEY", "your-secret-key-here")
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "720"))  # 12 hours

    # Frontend Configuration
    FRONTEND_BASE_URL: str = os.getenv("FRONTEND_BASE_URL", "http://localhost:3000")

    # Google OAuth2
    GOOGLE_CLIENT_ID: Optional[str] = os.getenv("GOOGLE_CLIENT_ID")
    GOOGLE_CLIENT_SECRET: Optional[str] = os.getenv("GOOGLE_CLIENT_SECRET")
    GOOGLE_REDIRECT_URI: str = os.getenv("GOOGLE_REDIRECT_URI", "http://localhost:8000/api/v1/auth/google/callback")

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./feedbackkit.db")
    DATABASE_POOL_SIZE: int = int(os.getenv("DATABASE_POOL_SIZE", "10"))
    DATABASE_MAX_OVERFLOW: int = int(os.getenv("DATABASE_MAX_OVERFLOW", "20"))

    # CORS
    ALLOWED_HOSTS: List[str] = ["*"]  # Configure for production

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    DEBUG: bool = ENVIRONMENT == "development"

    # Subscription gating: every tier requirement is met in these environments
    TIER_OVERRIDE_ENVIRONMENTS: List[str] = ["development", "staging"]

    # Logging
    LOG_DIR: str = os.getenv("LOG_DIR", "logs")

    # Third-party integrations
    HTTP_TIMEOUT_SECONDS: float = float(os.getenv("HTTP_TIMEOUT_SECONDS", "15"))
    GITHUB_API_URL: str = os.getenv("GITHUB_API_URL", "https://api.github.com")
    CLICKUP_API_URL: str = os.getenv("CLICKUP_API_URL", "https://api.clickup.com/api/v2")
    NOTION_API_URL: str = os.getenv("NOTION_API_URL", "https://api.notion.com/v1")
    NOTION_API_VERSION: str = os.getenv("NOTION_API_VERSION", "2022-06-28")
    MONDAY_API_URL: str = os.getenv("MONDAY_API_URL", "https://api.monday.com/v2")
    TRELLO_API_URL: str = os.getenv("TRELLO_API_URL", "https://api.trello.com/1")
    TRELLO_API_KEY: Optional[str] = os.getenv("TRELLO_API_KEY")
    LINEAR_API_URL: str = os.getenv("LINEAR_API_URL", "https://api.linear.app/graphql")

    # Scheduled feedback cleanup (non-production only)
    SCHEDULER_ENABLED: bool = os.getenv("SCHEDULER_ENABLED", "true").lower() == "true"
    FEEDBACK_RETENTION_DAYS: int = int(os.getenv("FEEDBACK_RETENTION_DAYS", "7"))
    CLEANUP_HOUR: int = int(os.getenv("CLEANUP_HOUR", "3"))

    # Render.com specific
    PORT: int = int(os.getenv("PORT", "8000"))

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def tier_override_active(self) -> bool:
        return self.ENVIRONMENT in self.TIER_OVERRIDE_ENVIRONMENTS

    @field_validator("GOOGLE_CLIENT_ID")
    @classmethod
    def validate_google_client_id(cls, v):
        if not v:
            print("⚠️  WARNING: GOOGLE_CLIENT_ID is not set")
        return v

    @field_validator("GOOGLE_CLIENT_SECRET")
    @classmethod
    def validate_google_client_secret(cls, v):
        if not v:
            print("⚠️  WARNING: GOOGLE_CLIENT_SECRET is not set")
        return v

    @field_validator("TRELLO_API_KEY")
    @classmethod
    def validate_trello_api_key(cls, v):
        if not v:
            print("⚠️  WARNING: TRELLO_API_KEY is not set, Trello discovery will fail")
        return v

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
