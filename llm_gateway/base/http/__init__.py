"""HTTP utilities package.

Exposes the per-dispatch httpx client factory and the cross-thread abort.
"""

from .client import ClientFactory, abort_response, build_stream_client, client_factory_for

__all__ = ["ClientFactory", "build_stream_client", "client_factory_for", "abort_response"]
