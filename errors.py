"""Error kinds raised by the order engine, branding store and catalog."""
from typing import Dict, Optional


class ValidationError(Exception):
    """User input failed a check. `errors` maps field name -> message."""

    def __init__(self, message: str, errors: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or {}


class InvalidArgument(ValidationError):
    """A value outside a fixed enumeration (e.g. unknown paper type)."""


class NotFound(Exception):
    pass


class TransientIOError(Exception):
    """Store, object storage or mail transport failed. Safe to retry."""


class HandoffError(Exception):
    """Submitting a previewed order failed; the draft is kept for retry."""
