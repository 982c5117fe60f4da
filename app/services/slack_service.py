# =============================================================================
# app/services/slack_service.py
# =============================================================================
from typing import Optional, Dict, Any
from fastapi.concurrency import run_in_threadpool
from app.core.exceptions import IntegrationAPIError, IntegrationNotConfiguredError
from app.core.logger import get_module_logger
from app.integrations import registry
from app.models.project import Project
from app.models.feedback import Feedback, Comment

logger = get_module_logger(__name__, "slack_service.log")

SLACK = registry.PROVIDERS["slack"]

class SlackService:
    """Project notifications through a Slack incoming webhook"""

    @staticmethod
    async def _post(project: Project, text: str) -> Dict[str, Any]:
        # the webhook client uses requests, keep it off the event loop
        client = registry.get_client("slack")
        return await run_in_threadpool(client.send_message, project.slack_webhook_url, text)

    @staticmethod
    def _should_notify(project: Project, flag: str) -> bool:
        return registry.is_active(project, SLACK) and bool(getattr(project, flag))

    @staticmethod
    async def send_test_message(project: Project, message: Optional[str] = None) -> Dict[str, Any]:
        """Send a test notification, raising when the webhook rejects it"""
        if not project.slack_webhook_url:
            raise IntegrationNotConfiguredError("slack", "No Slack webhook URL configured for this project")

        text = message or f"🚀 Test notification from FeedbackKit! Slack is connected to *{project.name}*."
        result = await SlackService._post(project, text)
        if not result.get("success"):
            raise IntegrationAPIError("slack", result.get("error", "Unknown error"))
        logger.info(f"Test message sent to Slack for project {project.id}")
        return result

    @staticmethod
    async def notify_new_feedback(project: Project, feedback: Feedback) -> None:
        if not SlackService._should_notify(project, "slack_notify_new_feedback"):
            return
        text = f"""📬 New feedback on *{project.name}*

• **Title:** {feedback.title}
• **Category:** {feedback.category.replace('_', ' ').title()}
• **From:** {feedback.user_email or 'anonymous'}"""
        result = await SlackService._post(project, text)
        if not result.get("success"):
            logger.error(f"Failed to notify Slack about feedback {feedback.id}: {result.get('error')}")

    @staticmethod
    async def notify_new_comment(project: Project, feedback: Feedback, comment: Comment) -> None:
        if not SlackService._should_notify(project, "slack_notify_new_comments"):
            return
        text = f"💬 {comment.author_name} commented on *{feedback.title}*:\n> {comment.content[:500]}"
        result = await SlackService._post(project, text)
        if not result.get("success"):
            logger.error(f"Failed to notify Slack about comment {comment.id}: {result.get('error')}")

    @staticmethod
    async def notify_status_change(project: Project, feedback: Feedback, old_status: str) -> None:
        if not SlackService._should_notify(project, "slack_notify_status_changes"):
            return
        text = (
            f"🔄 *{feedback.title}* moved from "
            f"{old_status.replace('_', ' ')} to {feedback.status.replace('_', ' ')}"
        )
        result = await SlackService._post(project, text)
        if not result.get("success"):
            logger.error(f"Failed to notify Slack about status of {feedback.id}: {result.get('error')}")
