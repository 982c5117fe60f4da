# =============================================================================
# app/client/wizard.py
# =============================================================================
"""
Step-by-step integration setup for one provider.

1. ``enter_token`` saves only the token, then lists the top of the hierarchy
   (discovery calls run server side with the saved token).
2. ``select`` records a choice, forgets every deeper choice and list, and loads
   the next level.
3. ``save`` persists the whole draft.

A 402 sets ``paywall_required`` instead of an error message. Any other failure
lands in ``error`` until ``dismiss_error`` is called.
"""
from typing import Any, Dict, List, Optional
from app.client.api_client import AdminAPIClient, APIError, PaymentRequired, SaveResult
from app.client.drafts import IntegrationDraft
from app.core.logger import get_module_logger
from app.integrations.registry import LevelSpec
from app.schemas.integration import HierarchyItem

logger = get_module_logger(__name__, "admin_client.log")


def resolve(item: HierarchyItem, attribute: str) -> Any:
    """Value of ``"id"``, ``"name"`` or ``"extra.<key>"`` on an item"""
    if attribute.startswith("extra."):
        return item.extra.get(attribute[len("extra."):])
    return getattr(item, attribute)


class HierarchyWizard:

    def __init__(self, client: AdminAPIClient, project: Dict[str, Any], provider: str):
        self.client = client
        self.project_id = project["id"]
        self.draft = IntegrationDraft.from_project(provider, project)
        self.spec = self.draft.spec
        self.collections: Dict[str, List[HierarchyItem]] = {}
        self.selections: Dict[str, HierarchyItem] = {}
        self.error: Optional[str] = None
        self.paywall_required = False
        self.is_loading = False

    def dismiss_error(self) -> None:
        self.error = None

    async def _persist(self, payload: Dict[str, Any]) -> SaveResult:
        try:
            project = await self.client.update_integration(self.project_id, self.spec.name, payload)
        except PaymentRequired:
            self.paywall_required = True
            return SaveResult.PAYMENT_REQUIRED
        except APIError as e:
            self.error = e.detail
            return SaveResult.OTHER_ERROR
        self.draft.mark_saved(project, fields=payload.keys())
        return SaveResult.SUCCESS

    async def enter_token(self, token: str) -> SaveResult:
        """Save the token alone, then load the first level"""
        token = token.strip()
        if not token:
            self.error = f"Enter a {self.spec.display_name} token"
            return SaveResult.OTHER_ERROR

        result = await self._persist({self.spec.token_field: token})
        if result is not SaveResult.SUCCESS:
            return result

        self.collections.clear()
        self.selections.clear()
        top = self.spec.top_level
        if top is not None:
            items = await self.load(top.name)
            if not items and self.error is None and not self.paywall_required:
                self.error = f"No {top.name.replace('_', ' ')} found for this {self.spec.display_name} token"
        return result

    async def load(self, level_name: str, parent_id: Optional[str] = None) -> List[HierarchyItem]:
        self.is_loading = True
        try:
            items = await self.client.list_hierarchy(self.project_id, self.spec.name, level_name, parent_id)
        except PaymentRequired:
            self.paywall_required = True
            return []
        except APIError as e:
            self.error = e.detail
            return []
        finally:
            self.is_loading = False

        self.collections[level_name] = items
        logger.info(f"{self.spec.name}: loaded {len(items)} {level_name}")
        return items

    def _forget(self, level: LevelSpec) -> None:
        self.selections.pop(level.name, None)
        self.collections.pop(level.name, None)
        for column in level.fields:
            self.draft[column] = None

    async def select(self, level_name: str, item: HierarchyItem) -> None:
        level = self.spec.level(level_name)
        if level is None:
            raise ValueError(f"{self.spec.display_name} has no '{level_name}' level")

        for descendant in self.spec.descendants(level_name):
            self._forget(descendant)

        self.selections[level_name] = item
        for column, attribute in level.fields.items():
            self.draft[column] = resolve(item, attribute)

        for child in self.spec.children(level_name):
            await self.load(child.name, item.id)

    async def save(self) -> SaveResult:
        return await self._persist(self.draft.to_payload())
