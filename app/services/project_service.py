# =============================================================================
# app/services/project_service.py
# =============================================================================
import random
from datetime import datetime
from typing import List
from uuid import UUID
from fastapi import HTTPException, status
from sqlalchemy.orm import Session
from app.core.security import generate_api_key
from app.core.tiers import Feature
from app.core.logger import get_module_logger
from app.integrations import registry
from app.models.user import User
from app.models.project import Project
from app.models.member import ProjectMember, ProjectRole
from app.models.feedback import FEEDBACK_STATUSES
from app.schemas.project import ProjectCreate, ProjectUpdate, ProjectResponse, ProjectListItem
from app.services.subscription_service import SubscriptionService

logger = get_module_logger(__name__, "project_service.log")

COLOR_COUNT = 8

class ProjectService:
    """Project CRUD and access control"""

    # -------------------------------------------------------------------------
    # Access
    # -------------------------------------------------------------------------

    @staticmethod
    def get_project_for_user(db: Session, project_id: UUID, user: User) -> Project:
        """Project visible to ``user`` (owner or member), 404 otherwise"""
        project = db.query(Project).filter(Project.id == project_id).first()
        if project is None or not project.user_has_access(user.id):
            logger.warning(f"Project {project_id} not found or not accessible for {user.email}")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
        return project

    @staticmethod
    def require_owner(project: Project, user: User) -> None:
        if not project.user_is_owner(user.id):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Only the project owner can perform this action"
            )

    @staticmethod
    def require_manager(project: Project, user: User) -> None:
        """Owner or admin member"""
        if project.user_is_owner(user.id):
            return
        membership = project.membership_for(user.id)
        if membership is None or membership.role != ProjectRole.ADMIN:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Only the project owner or an admin can perform this action"
            )

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    @staticmethod
    def to_response(project: Project) -> ProjectResponse:
        derived = {
            "owner_email": project.owner.email if project.owner else None,
            "feedback_count": len(project.feedbacks),
            "member_count": len(project.members),
        }
        for name, spec in registry.PROVIDERS.items():
            derived[f"{name}_configured"] = registry.is_configured(project, spec)
            derived[f"{name}_active"] = registry.is_active(project, spec)
        derived["has_any_integration"] = any(derived[f"{name}_configured"] for name in registry.PROVIDERS)
        derived["has_any_active_integration"] = any(derived[f"{name}_active"] for name in registry.PROVIDERS)
        return ProjectResponse.model_validate(project).model_copy(update=derived)

    @staticmethod
    def to_list_item(project: Project, user: User) -> ProjectListItem:
        membership = project.membership_for(user.id)
        return ProjectListItem(
            id=project.id,
            name=project.name,
            description=project.description,
            color_index=project.color_index,
            is_archived=project.is_archived,
            is_owner=project.user_is_owner(user.id),
            role=membership.role.value if membership else None,
            feedback_count=len(project.feedbacks),
            created_at=project.created_at,
        )

    # -------------------------------------------------------------------------
    # CRUD
    # -------------------------------------------------------------------------

    @staticmethod
    def list_projects(db: Session, user: User) -> List[Project]:
        """Owned and member projects, newest first"""
        owned = db.query(Project).filter(Project.owner_id == user.id).all()
        member_of = (
            db.query(Project)
            .join(ProjectMember, ProjectMember.project_id == Project.id)
            .filter(ProjectMember.user_id == user.id)
            .all()
        )
        projects = {p.id: p for p in owned + member_of}
        return sorted(projects.values(), key=lambda p: p.created_at, reverse=True)

    @staticmethod
    def create_project(db: Session, user: User, data: ProjectCreate) -> Project:
        SubscriptionService.require_project_slot(db, user)

        project = Project(
            name=data.name.strip(),
            description=data.description,
            owner_id=user.id,
            api_key=generate_api_key(),
            color_index=random.randrange(COLOR_COUNT),
        )
        db.add(project)
        db.commit()
        db.refresh(project)
        logger.info(f"📁 Project '{project.name}' ({project.id}) created by {user.email}")
        return project

    @staticmethod
    def update_project(db: Session, project: Project, user: User, data: ProjectUpdate) -> Project:
        ProjectService.require_manager(project, user)

        update_data = data.model_dump(exclude_unset=True, exclude_none=True)
        if "name" in update_data:
            update_data["name"] = update_data["name"].strip()
        for field, value in update_data.items():
            setattr(project, field, value)
        db.commit()
        db.refresh(project)
        logger.info(f"Project {project.id} updated by {user.email}: {list(update_data)}")
        return project

    @staticmethod
    def delete_project(db: Session, project: Project, user: User) -> None:
        ProjectService.require_owner(project, user)
        logger.info(f"🗑️ Project '{project.name}' ({project.id}) deleted by {user.email}")
        db.delete(project)
        db.commit()

    @staticmethod
    def set_archived(db: Session, project: Project, user: User, archived: bool) -> Project:
        ProjectService.require_owner(project, user)
        if project.is_archived == archived:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Project is already {'archived' if archived else 'active'}"
            )
        project.is_archived = archived
        project.archived_at = datetime.utcnow() if archived else None
        db.commit()
        db.refresh(project)
        logger.info(f"Project {project.id} {'archived' if archived else 'unarchived'} by {user.email}")
        return project

    @staticmethod
    def regenerate_api_key(db: Session, project: Project, user: User) -> Project:
        ProjectService.require_owner(project, user)
        project.api_key = generate_api_key()
        db.commit()
        db.refresh(project)
        logger.info(f"🔑 API key regenerated for project {project.id}")
        return project

    @staticmethod
    def update_allowed_statuses(db: Session, project: Project, user: User, statuses: List[str]) -> Project:
        ProjectService.require_manager(project, user)
        SubscriptionService.require_feature(user, Feature.CONFIGURABLE_STATUSES)

        cleaned: List[str] = []
        for value in statuses:
            value = value.strip()
            if value not in FEEDBACK_STATUSES:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Invalid status '{value}'. Valid statuses: {', '.join(FEEDBACK_STATUSES)}"
                )
            if value not in cleaned:
                cleaned.append(value)
        if "pending" not in cleaned:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="The 'pending' status is required"
            )

        project.allowed_statuses = cleaned
        db.commit()
        db.refresh(project)
        logger.info(f"Allowed statuses for project {project.id}: {cleaned}")
        return project
