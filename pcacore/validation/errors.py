"""
Error taxonomy.

    PCAError            base class
    InvalidInput        malformed matrix, bad k, non-finite values
    DimensionMismatch   shape incompatibility at transform / reconstruct
    ConfigError         invalid run config (carries every problem found)
"""

from typing import List


class PCAError(Exception):
    """Base class for all pcacore errors."""


class InvalidInput(PCAError, ValueError):
    """Raised when a matrix, component count or eigenvalue vector is invalid."""


class DimensionMismatch(PCAError, ValueError):
    """Raised when matrix, components and means have incompatible shapes."""


class ConfigError(PCAError):
    """Raised when config.yaml validation fails."""

    def __init__(self, errors: List[str], warnings: List[str] = None):
        self.errors = errors
        self.warnings = warnings or []

        message = "Config validation failed:\n" + "\n".join(
            f"  ERROR: {e}" for e in errors
        )
        if warnings:
            message += "\n" + "\n".join(f"  WARNING: {w}" for w in warnings)

        super().__init__(message)
