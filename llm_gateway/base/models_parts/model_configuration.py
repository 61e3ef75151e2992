"""
Caller-owned choice of provider, model, endpoint and credential reference.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ModelConfiguration:
    """Selects where a chat request is sent.

    Attributes:
        provider: Provider identifier known to the registry.
        model_id: Model to use; ``None`` picks the provider's first listed model.
        endpoint_override: Base URL replacing the provider default.
        credential_ref: Key into the caller's credential store.
    """

    provider: str
    model_id: Optional[str] = None
    endpoint_override: Optional[str] = None
    credential_ref: Optional[str] = None


__all__ = ["ModelConfiguration"]
