# =============================================================================
# app/api/v1/endpoints/dashboard.py
# =============================================================================
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.core.dependencies import get_current_user, get_project
from app.models.user import User
from app.models.project import Project
from app.services.dashboard_service import DashboardService
from app.schemas.dashboard import HomeDashboard, ProjectStats

router = APIRouter()

@router.get("/home", response_model=HomeDashboard)
async def home_dashboard(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Totals over every project the user owns or belongs to"""
    return DashboardService.home(db, current_user)

@router.get("/projects/{project_id}", response_model=ProjectStats)
async def project_dashboard(
    project: Project = Depends(get_project),
    current_user: User = Depends(get_current_user)
):
    """Per-project breakdown (402 below the advanced analytics tier)"""
    return DashboardService.project(project, current_user)
