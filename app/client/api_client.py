# =============================================================================
# app/client/api_client.py
# =============================================================================
"""
Async client for the admin API, used by admin front-ends (and the wizard in
``app.client.wizard``). HTTP failures are raised as ``APIError`` subclasses so
callers can tell a paywall (402) from any other failure.
"""
import enum
from typing import Any, Dict, List, Optional
from urllib.parse import quote
from uuid import UUID
import httpx
from app.core.logger import get_module_logger
from app.schemas.integration import HierarchyItem

logger = get_module_logger(__name__, "admin_client.log")


class SaveResult(str, enum.Enum):
    SUCCESS = "success"
    PAYMENT_REQUIRED = "payment_required"
    OTHER_ERROR = "other_error"


class APIError(Exception):
    status_code: Optional[int] = None

    def __init__(self, detail: str, status_code: Optional[int] = None, body: Optional[Dict[str, Any]] = None):
        super().__init__(detail)
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code
        self.body = body or {}


class BadRequest(APIError):
    status_code = 400


class Unauthorized(APIError):
    status_code = 401


class PaymentRequired(APIError):
    status_code = 402

    @property
    def current_tier(self) -> Optional[str]:
        return self.body.get("current_tier")

    @property
    def required_tier(self) -> Optional[str]:
        return self.body.get("required_tier")

    @property
    def limit(self) -> Optional[int]:
        return self.body.get("limit")

    @property
    def current(self) -> Optional[int]:
        return self.body.get("current")


class Forbidden(APIError):
    status_code = 403


class NotFound(APIError):
    status_code = 404


class Conflict(APIError):
    status_code = 409


class ServerError(APIError):
    pass


_ERRORS = {cls.status_code: cls for cls in (BadRequest, Unauthorized, PaymentRequired, Forbidden, NotFound, Conflict)}


def _error_detail(body: Any, response: httpx.Response) -> str:
    if isinstance(body, dict):
        detail = body.get("detail") or body.get("reason")
        if isinstance(detail, list):
            # FastAPI validation errors
            return "; ".join(str(item.get("msg", item)) for item in detail)
        if detail:
            return str(detail)
    return response.text or f"HTTP {response.status_code}"


class AdminAPIClient:
    """Bearer-token client for ``/api/v1``.

    Use as an async context manager, or call ``aclose()`` when done.
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 15.0,
    ):
        self.token = token
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/") + "/api/v1",
            transport=transport,
            timeout=timeout,
        )

    async def __aenter__(self) -> "AdminAPIClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def request(self, method: str, path: str, json: Any = None, params: Optional[Dict[str, Any]] = None) -> Any:
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        try:
            response = await self._http.request(method, path, json=json, params=params, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"❌ {method} {path} failed: {str(e)}")
            raise ServerError(f"Could not reach the server: {str(e)}")

        if response.status_code == 204 or not response.content:
            body: Any = None
        else:
            try:
                body = response.json()
            except ValueError:
                body = None

        if response.status_code >= 400:
            detail = _error_detail(body, response)
            error_cls = _ERRORS.get(response.status_code, ServerError)
            logger.warning(f"{method} {path} -> {response.status_code}: {detail}")
            raise error_cls(detail, status_code=response.status_code, body=body if isinstance(body, dict) else None)
        return body

    # -------------------------------------------------------------------------
    # Account
    # -------------------------------------------------------------------------

    async def get_me(self) -> Dict[str, Any]:
        return await self.request("GET", "/users/me")

    async def get_subscription(self) -> Dict[str, Any]:
        return await self.request("GET", "/subscription")

    # -------------------------------------------------------------------------
    # Projects
    # -------------------------------------------------------------------------

    async def list_projects(self) -> List[Dict[str, Any]]:
        return await self.request("GET", "/projects")

    async def get_project(self, project_id: UUID) -> Dict[str, Any]:
        return await self.request("GET", f"/projects/{project_id}")

    async def create_project(self, name: str, description: Optional[str] = None) -> Dict[str, Any]:
        return await self.request("POST", "/projects", json={"name": name, "description": description})

    async def update_project(self, project_id: UUID, **fields) -> Dict[str, Any]:
        return await self.request("PATCH", f"/projects/{project_id}", json=fields)

    async def delete_project(self, project_id: UUID) -> None:
        await self.request("DELETE", f"/projects/{project_id}")

    async def archive_project(self, project_id: UUID) -> Dict[str, Any]:
        return await self.request("POST", f"/projects/{project_id}/archive")

    async def unarchive_project(self, project_id: UUID) -> Dict[str, Any]:
        return await self.request("POST", f"/projects/{project_id}/unarchive")

    async def regenerate_api_key(self, project_id: UUID) -> Dict[str, Any]:
        return await self.request("POST", f"/projects/{project_id}/regenerate-key")

    async def update_allowed_statuses(self, project_id: UUID, statuses: List[str]) -> Dict[str, Any]:
        return await self.request("PATCH", f"/projects/{project_id}/statuses", json={"allowed_statuses": statuses})

    # -------------------------------------------------------------------------
    # Members & invites
    # -------------------------------------------------------------------------

    async def list_members(self, project_id: UUID) -> List[Dict[str, Any]]:
        return await self.request("GET", f"/projects/{project_id}/members")

    async def add_member(self, project_id: UUID, email: str, role: str = "member") -> Dict[str, Any]:
        return await self.request("POST", f"/projects/{project_id}/members", json={"email": email, "role": role})

    async def update_member_role(self, project_id: UUID, member_id: UUID, role: str) -> Dict[str, Any]:
        return await self.request("PATCH", f"/projects/{project_id}/members/{member_id}", json={"role": role})

    async def remove_member(self, project_id: UUID, member_id: UUID) -> None:
        await self.request("DELETE", f"/projects/{project_id}/members/{member_id}")

    async def list_invites(self, project_id: UUID) -> List[Dict[str, Any]]:
        return await self.request("GET", f"/projects/{project_id}/invites")

    async def cancel_invite(self, project_id: UUID, invite_id: UUID) -> None:
        await self.request("DELETE", f"/projects/{project_id}/invites/{invite_id}")

    async def resend_invite(self, project_id: UUID, invite_id: UUID) -> Dict[str, Any]:
        return await self.request("POST", f"/projects/{project_id}/invites/{invite_id}/resend")

    async def preview_invite(self, code: str) -> Dict[str, Any]:
        return await self.request("GET", f"/invites/preview/{code}")

    async def accept_invite(self, code: str) -> Dict[str, Any]:
        return await self.request("POST", "/invites/accept", json={"code": code})

    # -------------------------------------------------------------------------
    # Integrations
    # -------------------------------------------------------------------------

    async def update_integration(self, project_id: UUID, provider: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self.request("PATCH", f"/projects/{project_id}/{provider}", json=payload)

    async def list_hierarchy(
        self,
        project_id: UUID,
        provider: str,
        level: str,
        parent_id: Optional[str] = None,
    ) -> List[HierarchyItem]:
        path = f"/projects/{project_id}/{provider}/{level}"
        if parent_id:
            path += f"/{quote(parent_id, safe='')}"
        items = await self.request("GET", path)
        return [HierarchyItem(**item) for item in items]

    async def push_feedback(self, project_id: UUID, provider: str, feedback_ids: List[UUID]) -> Dict[str, Any]:
        return await self.request(
            "POST", f"/projects/{project_id}/{provider}/push",
            json={"feedback_ids": [str(fid) for fid in feedback_ids]},
        )

    async def send_slack_test(self, project_id: UUID) -> Dict[str, Any]:
        return await self.request("POST", f"/projects/{project_id}/slack/test")

    # -------------------------------------------------------------------------
    # Feedback
    # -------------------------------------------------------------------------

    async def list_feedback(self, project_id: UUID, status: Optional[str] = None) -> List[Dict[str, Any]]:
        params = {"status": status} if status else None
        return await self.request("GET", f"/projects/{project_id}/feedback", params=params)

    async def create_feedback(self, project_id: UUID, title: str, **fields) -> Dict[str, Any]:
        return await self.request("POST", f"/projects/{project_id}/feedback", json={"title": title, **fields})

    async def update_feedback_status(self, project_id: UUID, feedback_id: UUID, status: str) -> Dict[str, Any]:
        return await self.request("PATCH", f"/projects/{project_id}/feedback/{feedback_id}/status", json={"status": status})

    async def get_feedback(self, project_id: UUID, feedback_id: UUID) -> Dict[str, Any]:
        return await self.request("GET", f"/projects/{project_id}/feedback/{feedback_id}")

    async def delete_feedback(self, project_id: UUID, feedback_id: UUID) -> None:
        await self.request("DELETE", f"/projects/{project_id}/feedback/{feedback_id}")

    async def merge_feedback(self, project_id: UUID, primary_id: UUID, secondary_ids: List[UUID]) -> Dict[str, Any]:
        return await self.request(
            "POST", f"/projects/{project_id}/feedback/merge",
            json={"primary_feedback_id": str(primary_id), "secondary_feedback_ids": [str(fid) for fid in secondary_ids]},
        )

    async def list_comments(self, project_id: UUID, feedback_id: UUID) -> List[Dict[str, Any]]:
        return await self.request("GET", f"/projects/{project_id}/feedback/{feedback_id}/comments")

    async def add_comment(self, project_id: UUID, feedback_id: UUID, content: str) -> Dict[str, Any]:
        return await self.request("POST", f"/projects/{project_id}/feedback/{feedback_id}/comments", json={"content": content})

    async def delete_comment(self, project_id: UUID, feedback_id: UUID, comment_id: UUID) -> None:
        await self.request("DELETE", f"/projects/{project_id}/feedback/{feedback_id}/comments/{comment_id}")

    async def vote(self, project_id: UUID, feedback_id: UUID, user_id: str, email: Optional[str] = None,
                   notify_status_change: bool = False) -> Dict[str, Any]:
        return await self.request(
            "POST", f"/projects/{project_id}/feedback/{feedback_id}/votes",
            json={"user_id": user_id, "email": email, "notify_status_change": notify_status_change},
        )

    async def unvote(self, project_id: UUID, feedback_id: UUID, user_id: str) -> Dict[str, Any]:
        return await self.request("DELETE", f"/projects/{project_id}/feedback/{feedback_id}/votes/{quote(user_id, safe='')}")

    # -------------------------------------------------------------------------
    # Dashboard
    # -------------------------------------------------------------------------

    async def get_home_dashboard(self) -> Dict[str, Any]:
        return await self.request("GET", "/dashboard/home")

    async def get_project_dashboard(self, project_id: UUID) -> Dict[str, Any]:
        return await self.request("GET", f"/dashboard/projects/{project_id}")

    # -------------------------------------------------------------------------
    # Developer commands
    # -------------------------------------------------------------------------

    async def get_dev_config(self) -> Dict[str, Any]:
        return await self.request("GET", "/dev/config")

    async def set_subscription_tier(self, tier: str, status: Optional[str] = "active") -> Dict[str, Any]:
        return await self.request("POST", "/dev/subscription-tier", json={"tier": tier, "status": status})

    async def run_cleanup(self) -> Dict[str, Any]:
        return await self.request("POST", "/dev/cleanup")
