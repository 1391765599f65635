"""Provider services."""

from .api_key import ApiKeyResolver

__all__ = ["ApiKeyResolver"]
