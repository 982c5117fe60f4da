# =============================================================================
# app/api/v1/endpoints/integrations.py
# =============================================================================
"""
Per-provider routes, registered once for every provider in the registry:

    PATCH /projects/{project_id}/{provider}                       settings
    GET   /projects/{project_id}/{provider}/{level}[/{parent_id}] discovery
    POST  /projects/{project_id}/{provider}/push                  push feedback
    POST  /projects/{project_id}/slack/test                       test message
"""
from typing import List, Optional, Type
from fastapi import APIRouter, Depends, status
from pydantic import BaseModel
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.core.dependencies import get_current_user, get_project
from app.integrations.registry import PROVIDERS
from app.models.user import User
from app.models.project import Project
from app.services.integration_service import IntegrationService
from app.services.project_service import ProjectService
from app.services.slack_service import SlackService
from app.schemas.integration import (
    SETTINGS_SCHEMAS,
    HierarchyItem,
    PushFeedbackRequest,
    PushFeedbackResponse,
    SlackTestMessageRequest,
)
from app.schemas.project import ProjectResponse
from app.core.logger import get_module_logger

logger = get_module_logger(__name__, "integrations.log")

router = APIRouter()

def _settings_endpoint(provider: str, schema: Type[BaseModel]):
    async def update_settings(
        settings_in: schema,
        project: Project = Depends(get_project),
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
    ):
        project = IntegrationService.update_settings(db, project, current_user, provider, settings_in)
        return ProjectService.to_response(project)

    update_settings.__doc__ = (
        f"Update {PROVIDERS[provider].display_name} settings. "
        "Omitted fields are unchanged, empty strings clear a field."
    )
    return update_settings

def _hierarchy_endpoint(provider: str):
    async def list_resources(
        level: str,
        parent_id: Optional[str] = None,
        project: Project = Depends(get_project),
        current_user: User = Depends(get_current_user)
    ):
        return await IntegrationService.list_hierarchy(project, current_user, provider, level, parent_id)

    list_resources.__doc__ = f"List one level of {PROVIDERS[provider].display_name} resources using the saved token"
    return list_resources

def _push_endpoint(provider: str):
    async def push_feedback(
        push_in: PushFeedbackRequest,
        project: Project = Depends(get_project),
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
    ):
        return await IntegrationService.push_feedback(db, project, current_user, provider, push_in)

    push_feedback.__doc__ = f"Create {PROVIDERS[provider].display_name} items for feedback"
    return push_feedback

for _provider, _schema in SETTINGS_SCHEMAS.items():
    _prefix = f"/projects/{{project_id}}/{_provider}"
    router.add_api_route(
        _prefix,
        _settings_endpoint(_provider, _schema),
        methods=["PATCH"],
        response_model=ProjectResponse,
        name=f"update_{_provider}_settings",
    )
    if not PROVIDERS[_provider].levels:
        continue
    router.add_api_route(
        f"{_prefix}/push",
        _push_endpoint(_provider),
        methods=["POST"],
        response_model=PushFeedbackResponse,
        name=f"push_{_provider}_feedback",
    )
    for _path in (f"{_prefix}/{{level}}", f"{_prefix}/{{level}}/{{parent_id}}"):
        router.add_api_route(
            _path,
            _hierarchy_endpoint(_provider),
            methods=["GET"],
            response_model=List[HierarchyItem],
            name=f"list_{_provider}_resources",
        )

@router.post("/projects/{project_id}/slack/test", status_code=status.HTTP_200_OK)
async def send_slack_test_message(
    message_in: Optional[SlackTestMessageRequest] = None,
    project: Project = Depends(get_project),
    current_user: User = Depends(get_current_user)
):
    """Send a test message through the project's Slack webhook"""
    ProjectService.require_manager(project, current_user)
    IntegrationService.require_tier(current_user, PROVIDERS["slack"])
    await SlackService.send_test_message(project, message_in.message if message_in else None)
    return {"success": True, "message": "Test message sent to Slack"}
