"""Exceptions raised by jaxexpansion."""

from typing import Optional


class ExpansionError(Exception):
    """Base class for all jaxexpansion errors."""


class InvalidStretchError(ExpansionError, ValueError):
    """The requested stretch values or grid bounds are not usable."""


class NonFiniteDensityError(ExpansionError, ArithmeticError):
    """E^2(s) became non-finite inside the requested range, or non-positive.

    This points at a model outside its valid domain (e.g. negative Omega_m or
    strong curvature). It is never raised for an overflow of E^2 on the way
    to infinity, which is the normal stopping condition there.
    """

    def __init__(self, stretch: float, message: Optional[str] = None):
        self.stretch = stretch
        if message is None:
            message = f"Density is not finite at stretch s = {stretch!r}"
        super().__init__(message)


class IntegrationError(ExpansionError, RuntimeError):
    """The integrator exceeded its step limit."""
