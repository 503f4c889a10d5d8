"""Exceptions raised by the UOR kernel."""

from typing import Any


class UORError(Exception):
    """Base class for every kernel error."""
    pass


class ValidationError(UORError, ValueError):
    """Raised when input fails validation."""
    pass


class InvalidRingWidth(ValidationError):
    """Raised when a quantum level does not describe a ring."""
    pass


class UnknownOperation(UORError, ValueError):
    """Raised when a term names an operator outside the signature."""
    pass


class UnboundVariable(UORError):
    """Raised when evaluating a term that still contains a variable."""

    def __init__(self, name: str):
        super().__init__(f"Cannot evaluate unbound variable: ?{name}")
        self.name = name


class HashUnavailable(UORError):
    """Raised when the configured digest algorithm cannot be used."""
    pass


class CoherenceViolation(UORError):
    """Raised when a ring law fails for a specific value."""

    def __init__(self, law: str, value: Any, expected: Any, actual: Any):
        super().__init__(
            f"Coherence violation [{law}] at x={value}: expected {expected}, got {actual}"
        )
        self.law = law
        self.value = value
        self.expected = expected
        self.actual = actual
