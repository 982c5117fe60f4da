# =============================================================================
# app/api/v1/api.py
# =============================================================================
from fastapi import APIRouter
from app.api.v1.endpoints import auth, users, subscription, projects, members, integrations, feedback, dashboard, developer

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(users.router, prefix="/users", tags=["Users"])
api_router.include_router(subscription.router, prefix="/subscription", tags=["Subscription"])
api_router.include_router(projects.router, prefix="/projects", tags=["Projects"])
api_router.include_router(members.router, tags=["Members"])
api_router.include_router(feedback.router, tags=["Feedback"])
api_router.include_router(integrations.router, tags=["Integrations"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["Dashboard"])
api_router.include_router(developer.router, prefix="/dev", tags=["Developer"])
