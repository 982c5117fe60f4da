# =============================================================================
# app/api/v1/endpoints/projects.py
# =============================================================================
from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.core.dependencies import get_current_user, get_project
from app.models.user import User
from app.models.project import Project
from app.services.project_service import ProjectService
from app.schemas.project import ProjectCreate, ProjectUpdate, ProjectResponse, ProjectListItem, UpdateAllowedStatuses
from app.core.logger import get_module_logger

logger = get_module_logger(__name__, "projects.log")

router = APIRouter()

@router.get("", response_model=List[ProjectListItem], status_code=status.HTTP_200_OK)
async def list_projects(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Projects the current user owns or is a member of"""
    projects = ProjectService.list_projects(db, current_user)
    logger.info(f"Listing {len(projects)} project(s) for {current_user.email}")
    return [ProjectService.to_list_item(p, current_user) for p in projects]

@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    project_in: ProjectCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create a project (402 when the tier's project limit is reached)"""
    project = ProjectService.create_project(db, current_user, project_in)
    return ProjectService.to_response(project)

@router.get("/{project_id}", response_model=ProjectResponse, status_code=status.HTTP_200_OK)
async def get_project_detail(project: Project = Depends(get_project)):
    return ProjectService.to_response(project)

@router.patch("/{project_id}", response_model=ProjectResponse, status_code=status.HTTP_200_OK)
async def update_project(
    project_in: ProjectUpdate,
    project: Project = Depends(get_project),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    project = ProjectService.update_project(db, project, current_user, project_in)
    return ProjectService.to_response(project)

@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(
    project: Project = Depends(get_project),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete a project with its members, invites and feedback"""
    ProjectService.delete_project(db, project, current_user)

@router.post("/{project_id}/archive", response_model=ProjectResponse, status_code=status.HTTP_200_OK)
async def archive_project(
    project: Project = Depends(get_project),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    project = ProjectService.set_archived(db, project, current_user, True)
    return ProjectService.to_response(project)

@router.post("/{project_id}/unarchive", response_model=ProjectResponse, status_code=status.HTTP_200_OK)
async def unarchive_project(
    project: Project = Depends(get_project),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    project = ProjectService.set_archived(db, project, current_user, False)
    return ProjectService.to_response(project)

@router.post("/{project_id}/regenerate-key", response_model=ProjectResponse, status_code=status.HTTP_200_OK)
async def regenerate_api_key(
    project: Project = Depends(get_project),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    project = ProjectService.regenerate_api_key(db, project, current_user)
    return ProjectService.to_response(project)

@router.patch("/{project_id}/statuses", response_model=ProjectResponse, status_code=status.HTTP_200_OK)
async def update_allowed_statuses(
    statuses_in: UpdateAllowedStatuses,
    project: Project = Depends(get_project),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Choose which feedback statuses the project uses ('pending' is mandatory)"""
    project = ProjectService.update_allowed_statuses(db, project, current_user, statuses_in.allowed_statuses)
    return ProjectService.to_response(project)
