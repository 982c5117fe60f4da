# =============================================================================
# app/core/exceptions.py
# =============================================================================
from typing import Optional, Dict, Any


class PaymentRequiredError(Exception):
    """Raised when the caller's subscription tier does not cover a feature or limit.

    Rendered as HTTP 402 with a structured body so clients can route to a paywall
    instead of showing a generic error.
    """

    def __init__(
        self,
        reason: str,
        current_tier: str,
        required_tier: str,
        limit: Optional[int] = None,
        current: Optional[int] = None,
    ):
        super().__init__(reason)
        self.reason = reason
        self.current_tier = current_tier
        self.required_tier = required_tier
        self.limit = limit
        self.current = current

    def to_dict(self) -> Dict[str, Any]:
        return {
            "detail": self.reason,
            "reason": self.reason,
            "current_tier": self.current_tier,
            "required_tier": self.required_tier,
            "limit": self.limit,
            "current": self.current,
        }


class IntegrationAPIError(Exception):
    """A third-party provider API call failed (rendered as 502)"""

    def __init__(self, provider: str, message: str, status_code: Optional[int] = None):
        super().__init__(f"{provider} API error: {message}")
        self.provider = provider
        self.message = message
        self.status_code = status_code


class IntegrationNotConfiguredError(Exception):
    """The project has no usable credentials/target for a provider (rendered as 400)"""

    def __init__(self, provider: str, message: Optional[str] = None):
        super().__init__(message or f"{provider} integration is not configured for this project")
        self.provider = provider
