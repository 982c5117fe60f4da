# =============================================================================
# app/models/user.py
# =============================================================================
from sqlalchemy import Column, String, DateTime, Enum
from sqlalchemy.orm import relationship
from app.db.base import BaseModel
from app.core.tiers import SubscriptionTier, SubscriptionStatus

class User(BaseModel):
    __tablename__ = "users"

    name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False, index=True)
    profile_image = Column(String, nullable=True)

    # Subscription state, written by the billing side and by developer tooling
    subscription_tier = Column(
        Enum(SubscriptionTier, values_callable=lambda e: [m.value for m in e], native_enum=False),
        default=SubscriptionTier.FREE,
        nullable=False,
    )
    subscription_status = Column(
        Enum(SubscriptionStatus, values_callable=lambda e: [m.value for m in e], native_enum=False),
        nullable=True,
    )
    subscription_expires_at = Column(DateTime, nullable=True)

    # Relationships
    owned_projects = relationship("Project", back_populates="owner", cascade="all, delete-orphan")
    memberships = relationship("ProjectMember", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User {self.email} ({self.subscription_tier.value if self.subscription_tier else 'free'})>"
