"""Generation parameter validation against the provider table.

Purpose
-------
Reject out-of-range or unsupported tunables before any network call, with
enough detail (field, offending value, allowed range) for the caller to
self-correct.

Rules
-----
- Fields are checked in a fixed order and the first violation is raised.
- A set field the provider does not declare is rejected (``allowed_range``
  is ``None``); it is never silently dropped.
- ``max_tokens`` is additionally capped by the model's output ceiling.
- Integer tunables (``max_tokens``, ``top_k``) reject non-integers; booleans
  are never accepted as numbers.

No I/O, no logging: the dispatcher owns reporting.
"""
from __future__ import annotations

from numbers import Real
from typing import Optional

from ..errors import ParameterValidationError
from ..models import GenerationParameters, ParameterRange, ProviderDescriptor
from ..registry import ProviderRegistry, get_default_registry


class ParameterValidator:
    """Validates :class:`GenerationParameters` for one provider/model."""

    def __init__(self, registry: Optional[ProviderRegistry] = None) -> None:
        self._registry = registry or get_default_registry()

    def validate(
        self,
        provider: str,
        params: Optional[GenerationParameters],
        *,
        model_id: Optional[str] = None,
    ) -> None:
        """Return ``None`` when every set field is acceptable.

        Raises
        ------
        UnknownProviderError
            Provider not in the registry.
        UnknownModelError
            ``max_tokens`` is set and ``model_id`` cannot be resolved.
        ParameterValidationError
            First offending field in validation order.
        """
        descriptor = self._registry.describe(provider)
        if params is None:
            return
        for name, value in params.items_set():
            rng = descriptor.parameters.get(name)
            if rng is None:
                raise ParameterValidationError(name, value, None, descriptor.provider_id, reason="unsupported")
            if name == "max_tokens":
                ceiling = self._output_ceiling(descriptor, model_id)
                if ceiling is not None:
                    rng = rng.capped(ceiling)
            self._check(descriptor, name, value, rng)

    def _output_ceiling(self, descriptor: ProviderDescriptor, model_id: Optional[str]) -> Optional[int]:
        if model_id is None and descriptor.default_model is None:
            return descriptor.default_max_output_tokens
        return self._registry.resolve_model(descriptor.provider_id, model_id).max_output_tokens

    @staticmethod
    def _check(descriptor: ProviderDescriptor, name: str, value, rng: ParameterRange) -> None:
        bounds = rng.as_tuple()
        if isinstance(value, bool) or not isinstance(value, Real):
            raise ParameterValidationError(name, value, bounds, descriptor.provider_id, reason="not_number")
        if rng.integer and not isinstance(value, int):
            raise ParameterValidationError(name, value, bounds, descriptor.provider_id, reason="not_integer")
        if not rng.contains(value):
            raise ParameterValidationError(name, value, bounds, descriptor.provider_id)


__all__ = ["ParameterValidator"]
