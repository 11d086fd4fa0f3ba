"""
pcacore Validation Module

Validates matrices, component sets and run configs before computation.

Exports:
    - check_matrix: 2D, finite, enough rows
    - check_vector: 1D, finite, non-empty
    - check_n_components: resolve / range-check k
    - check_components: component set + means consistency
    - PCAError, InvalidInput, DimensionMismatch, ConfigError
"""

from .errors import (
    PCAError,
    InvalidInput,
    DimensionMismatch,
    ConfigError,
)

from .input_validation import (
    check_matrix,
    check_vector,
    check_n_components,
    check_components,
)

__all__ = [
    # Errors
    'PCAError',
    'InvalidInput',
    'DimensionMismatch',
    'ConfigError',
    # Checks
    'check_matrix',
    'check_vector',
    'check_n_components',
    'check_components',
]
