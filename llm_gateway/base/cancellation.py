"""Cooperative cancellation primitives (public API facade).

``CancellationToken`` lets a caller withdraw interest in a running dispatch;
``CancelledError`` is raised by code that observes the request.
"""

from .cancellation_parts.cancelled_error import CancelledError
from .cancellation_parts.cancellation_token import CancellationToken

__all__ = ["CancellationToken", "CancelledError"]
