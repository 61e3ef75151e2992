"""Credential resolution package."""

from .resolver import CredentialResolver, ResolvedTarget, sanitize_base_url

__all__ = ["CredentialResolver", "ResolvedTarget", "sanitize_base_url"]
