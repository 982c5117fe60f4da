# =============================================================================
# app/client/drafts.py
# =============================================================================
"""
Local, unsaved copy of one provider's settings.

A draft starts from the server's project, is edited field by field, and is
compared against the last saved state to drive a "dirty" indicator.
"""
from typing import Any, Dict, Iterable, Optional
from app.integrations.registry import ProviderSpec, get_provider


def normalize(spec: ProviderSpec, field: str, value: Any) -> Any:
    """Canonical form for comparison: blank strings and empty lists are None"""
    if value is None:
        return None
    if field in spec.list_fields:
        items = [str(v).strip() for v in value if str(v).strip()]
        return items or None
    if field in spec.string_fields:
        value = str(value).strip()
        return value or None
    return bool(value)


class IntegrationDraft:

    def __init__(self, spec: ProviderSpec, saved: Dict[str, Any]):
        self.spec = spec
        self.saved = {f: saved.get(f) for f in spec.fields}
        self.values = dict(self.saved)

    @classmethod
    def from_project(cls, provider: str, project: Dict[str, Any]) -> "IntegrationDraft":
        spec = get_provider(provider)
        if spec is None:
            raise ValueError(f"Unknown integration: {provider}")
        return cls(spec, project)

    def __getitem__(self, field: str) -> Any:
        return self.values[field]

    def __setitem__(self, field: str, value: Any) -> None:
        if field not in self.values:
            raise KeyError(f"{field} is not a {self.spec.display_name} setting")
        self.values[field] = value

    @property
    def token(self) -> Optional[str]:
        return normalize(self.spec, self.spec.token_field, self.values[self.spec.token_field])

    @property
    def has_changes(self) -> bool:
        return any(
            normalize(self.spec, f, self.values[f]) != normalize(self.spec, f, self.saved[f])
            for f in self.spec.fields
        )

    @property
    def is_configured(self) -> bool:
        return all(normalize(self.spec, f, self.values[f]) for f in self.spec.required_fields)

    def to_payload(self) -> Dict[str, Any]:
        """Full PATCH body; blank values become explicit clears"""
        payload: Dict[str, Any] = {}
        for field in self.spec.fields:
            value = normalize(self.spec, field, self.values[field])
            if field in self.spec.list_fields:
                payload[field] = value or []
            elif field in self.spec.string_fields:
                payload[field] = value or ""
            elif value is not None:
                payload[field] = value
        return payload

    def clear(self) -> None:
        """Blank every string and list field (removing the integration once saved)"""
        for field in self.spec.string_fields + self.spec.list_fields:
            self.values[field] = None

    def mark_saved(self, project: Dict[str, Any], fields: Optional[Iterable[str]] = None) -> None:
        """Adopt the server's values as the saved state.

        Only ``fields`` (default: all) are copied into the draft, so edits to
        other fields survive a partial save.
        """
        self.saved = {f: project.get(f) for f in self.spec.fields}
        for field in (fields if fields is not None else self.spec.fields):
            if field in self.values:
                self.values[field] = self.saved[field]
