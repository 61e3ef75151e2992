"""Credential and endpoint resolution for a model configuration.

Purpose
-------
Turn a :class:`ModelConfiguration` into the concrete ``(endpoint,
credential)`` pair a dispatch will use.

Resolution order
----------------
Credential:
    1. ``credential_ref`` looked up in the caller-supplied key store.
    2. Process-wide fallback for the provider family: environment variables
       (canonical name, then aliases; placeholders ignored), then the
       ``api_key`` entry of the layered provider config.
    3. Failure, unless the provider runs keyless (self-hosted families).
Endpoint (independent of the credential):
    1. ``endpoint_override`` on the configuration, sanitized.
    2. ``base_url`` from the layered provider config.
    3. The descriptor's default endpoint.

Security
--------
The credential value is excluded from ``repr`` and never logged; log events
carry only the *source* of the credential.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional, Tuple
from urllib.parse import urlparse

from ...config import get_provider_config
from ...config.env import get_env_var_candidates, is_placeholder, resolve_provider_key
from ..errors import UnresolvableCredentialError
from ..log_support import LogContext
from ..logging import get_logger, log_event
from ..models import ModelConfiguration, ProviderDescriptor
from ..registry import ProviderRegistry, get_default_registry

_ENDPOINT_SUFFIXES = (
    "/chat/completions",
    "/completions",
)


def sanitize_base_url(url: str) -> str:
    """Strip trailing slashes and pasted completion paths from a base URL.

    ``https://host/v1/chat/completions/`` becomes ``https://host/v1``; wire
    adapters append their own paths.
    """
    out = url.strip().rstrip("/")
    for suffix in _ENDPOINT_SUFFIXES:
        if out.lower().endswith(suffix):
            out = out[: -len(suffix)].rstrip("/")
            break
    return out


def _is_http_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


@dataclass(frozen=True)
class ResolvedTarget:
    """Where and with what credential a dispatch connects.

    Attributes:
        provider: Provider id.
        endpoint: Sanitized base URL.
        credential: Secret value, or ``None`` for keyless providers.
        source: ``"store"``, ``"env:<NAME>"``, ``"config"`` or ``"none"``.
        endpoint_source: ``"override"``, ``"config"`` or ``"default"``.
    """

    provider: str
    endpoint: str
    credential: Optional[str] = field(default=None, repr=False)
    source: str = "none"
    endpoint_source: str = "default"


class CredentialResolver:
    """Resolves endpoint and credential for a :class:`ModelConfiguration`.

    Parameters
    ----------
    registry:
        Provider table; defaults to the shared registry.
    store:
        Caller-owned mapping of credential references to secret values.
    environ:
        Environment mapping for the process-wide fallback (defaults to
        ``os.environ``).
    config_loader:
        ``provider -> dict`` returning layered provider config; defaults to
        :func:`llm_gateway.config.get_provider_config`.
    """

    def __init__(
        self,
        registry: Optional[ProviderRegistry] = None,
        *,
        store: Optional[Mapping[str, str]] = None,
        environ: Optional[Mapping[str, str]] = None,
        config_loader: Optional[Callable[[str], Dict[str, Any]]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._registry = registry or get_default_registry()
        self._store = store or {}
        self._environ = environ
        self._config_loader = config_loader or get_provider_config
        self._logger = logger or get_logger("gateway.credentials")

    def resolve(self, config: ModelConfiguration, ctx: Optional[LogContext] = None) -> ResolvedTarget:
        """Return the :class:`ResolvedTarget` for ``config``.

        Raises
        ------
        UnknownProviderError
            Provider not in the registry.
        UnresolvableCredentialError
            No endpoint, an invalid override, or no credential for a provider
            that requires one.
        """
        descriptor = self._registry.describe(config.provider)
        provider_cfg = self._config_loader(descriptor.provider_id) or {}
        endpoint, endpoint_source = self._resolve_endpoint(descriptor, config, provider_cfg)
        credential, source = self._resolve_credential(descriptor, config, provider_cfg, ctx)
        log_event(
            self._logger,
            "credential.resolved",
            ctx,
            source=source,
            endpoint=endpoint,
            endpoint_source=endpoint_source,
            has_credential=credential is not None,
            secrets=(credential,) if credential else (),
        )
        return ResolvedTarget(
            provider=descriptor.provider_id,
            endpoint=endpoint,
            credential=credential,
            source=source,
            endpoint_source=endpoint_source,
        )

    def _resolve_endpoint(
        self,
        descriptor: ProviderDescriptor,
        config: ModelConfiguration,
        provider_cfg: Mapping[str, Any],
    ) -> Tuple[str, str]:
        if config.endpoint_override and config.endpoint_override.strip():
            endpoint = sanitize_base_url(config.endpoint_override)
            if not _is_http_url(endpoint):
                raise UnresolvableCredentialError(descriptor.provider_id, "endpoint override is not an http(s) URL")
            return endpoint, "override"
        configured = provider_cfg.get("base_url")
        if isinstance(configured, str) and configured.strip():
            return sanitize_base_url(configured), "config"
        if descriptor.default_endpoint:
            return sanitize_base_url(descriptor.default_endpoint), "default"
        raise UnresolvableCredentialError(descriptor.provider_id, "no endpoint configured")

    def _resolve_credential(
        self,
        descriptor: ProviderDescriptor,
        config: ModelConfiguration,
        provider_cfg: Mapping[str, Any],
        ctx: Optional[LogContext],
    ) -> Tuple[Optional[str], str]:
        if config.credential_ref:
            stored = self._store.get(config.credential_ref)
            if stored:
                return stored, "store"
            log_event(
                self._logger,
                "credential.ref_missing",
                ctx,
                level=logging.WARNING,
                credential_ref=config.credential_ref,
            )

        value, env_name = resolve_provider_key(descriptor.provider_id, self._environ)
        if value:
            return value, f"env:{env_name}"

        configured = provider_cfg.get("api_key")
        if isinstance(configured, str) and configured.strip() and not is_placeholder(configured):
            return configured.strip(), "config"

        if descriptor.requires_credential:
            checked = ", ".join(get_env_var_candidates(descriptor.provider_id))
            raise UnresolvableCredentialError(
                descriptor.provider_id,
                f"no credential found (checked credential store, {checked})",
            )
        return None, "none"


__all__ = ["CredentialResolver", "ResolvedTarget", "sanitize_base_url"]
