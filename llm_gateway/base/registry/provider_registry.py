"""Provider registry: read-only lookup over a descriptor table.

Purpose
-------
Answer "which provider is this and what does it accept" without side
effects. The default instance wraps the static catalog and is the only
object shared between concurrent requests; it is never mutated after
construction.

Failure modes
-------------
- :class:`UnknownProviderError` for identifiers not in the table.
- :class:`UnknownModelError` when a model id is not offered and the
  provider does not accept arbitrary ids.
"""
from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Optional, Tuple

from ..errors import UnknownModelError, UnknownProviderError
from ..models import ModelSpec, ProviderDescriptor
from .catalog import DEFAULT_CATALOG


class ProviderRegistry:
    """Immutable provider table keyed by lowercase provider id."""

    def __init__(self, descriptors: Iterable[ProviderDescriptor]) -> None:
        table = {}
        for descriptor in descriptors:
            key = descriptor.provider_id.lower().strip()
            if key in table:
                raise ValueError(f"duplicate provider descriptor '{key}'")
            table[key] = descriptor
        self._table: Mapping[str, ProviderDescriptor] = MappingProxyType(table)

    def describe(self, provider: str) -> ProviderDescriptor:
        """Return the descriptor for ``provider`` (case-insensitive).

        Raises
        ------
        UnknownProviderError
            When the identifier is not in the table.
        """
        key = (provider or "").lower().strip()
        try:
            return self._table[key]
        except KeyError:
            raise UnknownProviderError(provider) from None

    def providers(self) -> Tuple[ProviderDescriptor, ...]:
        """Descriptors in catalog order."""
        return tuple(self._table.values())

    def resolve_model(self, provider: str, model_id: Optional[str] = None) -> ModelSpec:
        """Return the model spec a request will use.

        ``model_id=None`` selects the provider's first listed model. Unlisted
        ids are accepted only for providers that allow custom models, with the
        provider's default output ceiling.
        """
        descriptor = self.describe(provider)
        if model_id is None:
            if descriptor.default_model is None:
                raise UnknownModelError(descriptor.provider_id, None)
            return descriptor.default_model
        spec = descriptor.find_model(model_id)
        if spec is not None:
            return spec
        if descriptor.allows_custom_models and model_id.strip():
            return ModelSpec(model_id, max_output_tokens=descriptor.default_max_output_tokens)
        raise UnknownModelError(descriptor.provider_id, model_id)

    def __contains__(self, provider: object) -> bool:
        return isinstance(provider, str) and provider.lower().strip() in self._table

    def __iter__(self) -> Iterator[ProviderDescriptor]:
        return iter(self._table.values())

    def __len__(self) -> int:
        return len(self._table)


_DEFAULT_REGISTRY = ProviderRegistry(DEFAULT_CATALOG)


def get_default_registry() -> ProviderRegistry:
    """Return the shared registry built from the static catalog."""
    return _DEFAULT_REGISTRY


__all__ = ["ProviderRegistry", "get_default_registry"]
