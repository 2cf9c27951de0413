"""
Error types raised by the design critique core.

All of them propagate to the caller unchanged; the core never substitutes
default scores for a failed step.
"""

from typing import List, Optional


class DesignCritiqueError(Exception):
    """Base class for design critique errors"""

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = errors or []


class InvalidInput(DesignCritiqueError):
    """Raised for empty or out-of-range metric sets and malformed requests."""


class ModelUnavailable(DesignCritiqueError):
    """Raised when the inference backend fails to produce a result."""


class PersistenceError(DesignCritiqueError):
    """Raised when the history store cannot be read or written."""
