# =============================================================================
# app/services/integration_service.py
# =============================================================================
"""
Per-provider integration settings, resource discovery and feedback push.

Settings are written with PATCH semantics so a client can persist a partial
configuration one step at a time (token first, then each selection):

* ``None`` / omitted  -> field unchanged
* ``""`` / ``[]``     -> field cleared (stored as NULL)
* anything else       -> stored
"""
from typing import Any, Dict, List, Optional
from fastapi import HTTPException, status
from pydantic import BaseModel
from sqlalchemy.orm import Session
from app.core.exceptions import IntegrationAPIError, IntegrationNotConfiguredError
from app.core.logger import get_module_logger
from app.integrations import registry
from app.integrations.clients import SLACK_WEBHOOK_PREFIX
from app.integrations.registry import ProviderSpec, LevelSpec
from app.models.user import User
from app.models.project import Project
from app.models.feedback import Feedback, IntegrationLink
from app.schemas.integration import HierarchyItem, PushFeedbackRequest, PushFeedbackResponse, PushedItem
from app.services.project_service import ProjectService
from app.services.subscription_service import SubscriptionService

logger = get_module_logger(__name__, "integration_service.log")

class IntegrationService:

    @staticmethod
    def get_spec(provider: str) -> ProviderSpec:
        spec = registry.get_provider(provider)
        if spec is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown integration: {provider}")
        return spec

    @staticmethod
    def require_tier(user: User, spec: ProviderSpec) -> None:
        SubscriptionService.require_tier(
            user, spec.required_tier,
            reason=f"The {spec.display_name} integration requires the {spec.required_tier.display_name} plan",
        )

    @staticmethod
    def _normalize(spec: ProviderSpec, field: str, value: Any) -> Any:
        if field in spec.list_fields:
            items = [str(v).strip() for v in value if str(v).strip()]
            return items or None
        if field in spec.string_fields:
            value = value.strip()
            return value or None
        return value

    @staticmethod
    def update_settings(db: Session, project: Project, user: User, provider: str, payload: BaseModel) -> Project:
        spec = IntegrationService.get_spec(provider)
        ProjectService.require_manager(project, user)
        IntegrationService.require_tier(user, spec)

        changes: Dict[str, Any] = {}
        for field, value in payload.model_dump(exclude_none=True).items():
            if field not in spec.fields:
                continue
            changes[field] = IntegrationService._normalize(spec, field, value)

        if spec.name == "slack":
            url = changes.get("slack_webhook_url")
            if url is not None and not url.startswith(SLACK_WEBHOOK_PREFIX):
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Invalid Slack webhook URL. It must start with {SLACK_WEBHOOK_PREFIX}"
                )

        merged = {f: changes.get(f, getattr(project, f)) for f in spec.fields}
        if not merged[spec.token_field] and any(merged[f] for f in spec.target_fields):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"A {spec.display_name} token is required before selecting a target"
            )

        for field, value in changes.items():
            setattr(project, field, value)
        db.commit()
        db.refresh(project)

        cleared = [f for f, v in changes.items() if v is None]
        logger.info(
            f"🔧 {spec.display_name} settings updated on project {project.id} by {user.email}: "
            f"{sorted(set(changes) - set(cleared))}" + (f", cleared {sorted(cleared)}" if cleared else "")
        )
        return project

    @staticmethod
    def _stored_parent_id(project: Project, spec: ProviderSpec, level: LevelSpec) -> Optional[str]:
        """Fall back to the id already saved for the parent level, if any"""
        for parent_name in level.parents:
            parent = spec.level(parent_name)
            for column, attribute in parent.fields.items():
                if attribute == "id" and getattr(project, column):
                    return getattr(project, column)
        return None

    @staticmethod
    async def list_hierarchy(
        project: Project,
        user: User,
        provider: str,
        level_name: str,
        parent_id: Optional[str] = None,
    ) -> List[HierarchyItem]:
        spec = IntegrationService.get_spec(provider)
        level = spec.level(level_name)
        if level is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"{spec.display_name} has no '{level_name}' resources"
            )
        IntegrationService.require_tier(user, spec)

        token = getattr(project, spec.token_field)
        if not token:
            raise IntegrationNotConfiguredError(provider, f"Save a {spec.display_name} token before browsing {level_name}")

        if level.parents and not parent_id:
            parent_id = IntegrationService._stored_parent_id(project, spec, level)
            if not parent_id:
                raise IntegrationNotConfiguredError(
                    provider, f"Select a {level.parents[0].replace('_', ' ')} before listing {level_name.replace('_', ' ')}"
                )

        client = registry.get_client(provider)
        items = await client.list_level(level.name, token, parent_id)
        logger.info(f"🔎 {spec.display_name} {level_name} for project {project.id}: {len(items)} item(s)")
        return items

    @staticmethod
    async def push_feedback(
        db: Session,
        project: Project,
        user: User,
        provider: str,
        request: PushFeedbackRequest,
    ) -> PushFeedbackResponse:
        """Create the external item for every requested feedback not yet linked"""
        spec = IntegrationService.get_spec(provider)
        if not spec.levels:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Feedback cannot be pushed to {spec.display_name}"
            )
        IntegrationService.require_tier(user, spec)
        if not registry.is_active(project, spec):
            raise IntegrationNotConfiguredError(provider, f"The {spec.display_name} integration is not active for this project")

        feedbacks = {
            fb.id: fb
            for fb in db.query(Feedback).filter(
                Feedback.project_id == project.id,
                Feedback.id.in_(request.feedback_ids),
            ).all()
        }

        client = registry.get_client(provider)
        created: List[PushedItem] = []
        skipped = []
        failed = []
        for feedback_id in request.feedback_ids:
            feedback = feedbacks.get(feedback_id)
            if feedback is None:
                failed.append(feedback_id)
                continue
            if feedback.link_for(provider) is not None:
                skipped.append(feedback_id)
                continue
            try:
                item = await client.create_item(project, feedback, request.additional_labels)
            except IntegrationAPIError as e:
                logger.error(f"❌ Failed to push feedback {feedback_id} to {spec.display_name}: {e.message}")
                failed.append(feedback_id)
                continue

            db.add(IntegrationLink(
                feedback_id=feedback.id,
                provider=provider,
                external_id=item.external_id,
                external_url=item.external_url,
            ))
            db.commit()
            created.append(PushedItem(feedback_id=feedback.id, external_id=item.external_id, external_url=item.external_url))

        logger.info(
            f"📤 Pushed to {spec.display_name} for project {project.id}: "
            f"{len(created)} created, {len(skipped)} skipped, {len(failed)} failed"
        )
        return PushFeedbackResponse(created=created, skipped=skipped, failed=failed)
