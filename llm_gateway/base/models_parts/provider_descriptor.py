"""
Immutable description of one provider family.

A descriptor is a row of the static provider table: it names the wire
format used to talk to the provider, its default endpoint, the models it
offers and the tunables it accepts. Adding a provider means adding a row;
the dispatcher has no per-provider branches beyond the wire adapter lookup.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Literal, Mapping, Optional, Tuple

from .model_spec import ModelSpec
from .parameter_range import ParameterRange

WireFormat = Literal["openai", "anthropic", "gemini", "ollama"]


@dataclass(frozen=True)
class ProviderDescriptor:
    """Provider catalog entry.

    Attributes:
        provider_id: Lowercase identifier (``"openai"``, ``"ollama"``, ...).
        display_name: Human-readable provider name.
        default_endpoint: Base URL used when the configuration has no
            override; ``None`` means an override is mandatory.
        wire_format: Which wire adapter encodes requests and decodes chunks.
        models: Offered models, first entry is the default.
        parameters: Accepted tunables and their legal ranges. A tunable
            absent from this mapping is rejected when set.
        allows_custom_models: Accept model ids not listed in ``models``.
        requires_credential: Whether a missing credential is fatal.
        default_max_output_tokens: Output ceiling for unlisted model ids.
    """

    provider_id: str
    display_name: str
    default_endpoint: Optional[str]
    wire_format: WireFormat
    models: Tuple[ModelSpec, ...] = ()
    parameters: Mapping[str, ParameterRange] = field(default_factory=dict)
    allows_custom_models: bool = False
    requires_credential: bool = True
    default_max_output_tokens: Optional[int] = None

    def __post_init__(self) -> None:
        # freeze the parameter table
        object.__setattr__(self, "parameters", MappingProxyType(dict(self.parameters)))
        object.__setattr__(self, "models", tuple(self.models))

    def find_model(self, model_id: str) -> Optional[ModelSpec]:
        for spec in self.models:
            if spec.model_id == model_id:
                return spec
        return None

    @property
    def default_model(self) -> Optional[ModelSpec]:
        return self.models[0] if self.models else None

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-friendly view for the read endpoints."""
        return {
            "id": self.provider_id,
            "name": self.display_name,
            "defaultEndpoint": self.default_endpoint,
            "wireFormat": self.wire_format,
            "allowsCustomModels": self.allows_custom_models,
            "requiresCredential": self.requires_credential,
            "parameters": {
                name: {"min": rng.minimum, "max": rng.maximum, "integer": rng.integer}
                for name, rng in self.parameters.items()
            },
            "models": [m.to_dict() for m in self.models],
        }


__all__ = ["ProviderDescriptor", "WireFormat"]
