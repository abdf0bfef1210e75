"""Exceptions raised by the supplement engine.

Messy claim data never raises; it is recovered and recorded as warnings.
These exceptions are reserved for caller bugs and unusable configuration.
"""
from typing import Optional


class SupplementEngineError(Exception):
    """Base exception for supplement engine errors."""
    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class KnowledgeBaseError(SupplementEngineError):
    """Raised when a knowledge base catalogue cannot be loaded."""
    pass


class IllegalStatusTransition(SupplementEngineError):
    """Raised when a delta is moved to a status its current status cannot reach."""
    def __init__(self, delta_id: str, current: str, target: str):
        super().__init__(
            f"Illegal status transition for delta {delta_id}: {current} -> {target}"
        )
        self.delta_id = delta_id
        self.current = current
        self.target = target
