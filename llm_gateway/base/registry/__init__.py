"""Provider registry package (static catalog + lookup)."""

from .catalog import DEFAULT_CATALOG
from .provider_registry import ProviderRegistry, get_default_registry

__all__ = ["DEFAULT_CATALOG", "ProviderRegistry", "get_default_registry"]
