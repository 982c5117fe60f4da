# =============================================================================
# app/schemas/user.py
# =============================================================================
from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, EmailStr, ConfigDict, Field
from app.core.tiers import SubscriptionTier, SubscriptionStatus

class UserBase(BaseModel):
    name: str
    email: EmailStr

class UserCreate(UserBase):
    profile_image: Optional[str] = None

class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    profile_image: Optional[str] = None

class UserResponse(UserBase):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    profile_image: Optional[str] = None
    subscription_tier: SubscriptionTier
    subscription_status: Optional[SubscriptionStatus] = None
    subscription_expires_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

class GoogleUserInfo(BaseModel):
    email: EmailStr
    name: Optional[str] = None
    picture: Optional[str] = None
