"""Cancellation error type.

Raised by operations that observe a cancellation request. Kept in its own
module so callers can catch it without importing the token implementation.
"""

from __future__ import annotations


class CancelledError(RuntimeError):
    """Raised when an operation is cancelled cooperatively.

    Distinguishes a caller walking away from genuine failures so that it is
    never classified or reported as an upstream error.
    """

__all__ = ["CancelledError"]
