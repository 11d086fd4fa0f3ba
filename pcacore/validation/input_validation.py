"""
Input Validation

Shape and value checks shared by the engine entry points.
Every check raises immediately; nothing is repaired or dropped.

Usage:
    from pcacore.validation import check_matrix, check_n_components

    X = check_matrix(X)
    k = check_n_components(k, *X.shape)
"""

import numbers
from typing import Optional

import numpy as np

from pcacore.validation.errors import InvalidInput, DimensionMismatch


def check_matrix(
    X,
    name: str = "X",
    min_rows: int = 1,
) -> np.ndarray:
    """
    Coerce to a 2D float64 array and check it.

    Args:
        X: Array-like (n_samples, n_features)
        name: Name used in error messages
        min_rows: Minimum number of rows required

    Returns:
        2D float64 ndarray (a copy when conversion was needed)

    Raises:
        InvalidInput: not 2D, too few rows, no columns, or non-finite values
    """
    try:
        arr = np.asarray(X, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise InvalidInput(f"{name} is not numeric: {e}") from e

    if arr.ndim != 2:
        raise InvalidInput(f"{name} must be 2D, got {arr.ndim}D")

    n_rows, n_cols = arr.shape
    if n_rows < min_rows:
        raise InvalidInput(f"{name} needs at least {min_rows} rows, got {n_rows}")
    if n_cols < 1:
        raise InvalidInput(f"{name} has no columns")

    if not np.isfinite(arr).all():
        n_bad = int((~np.isfinite(arr)).sum())
        raise InvalidInput(f"{name} contains {n_bad} non-finite values")

    return arr


def check_vector(v, name: str) -> np.ndarray:
    """Coerce to a finite 1D float64 array."""
    try:
        arr = np.asarray(v, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise InvalidInput(f"{name} is not numeric: {e}") from e

    if arr.ndim != 1:
        raise InvalidInput(f"{name} must be 1D, got {arr.ndim}D")
    if arr.size == 0:
        raise InvalidInput(f"{name} is empty")
    if not np.isfinite(arr).all():
        raise InvalidInput(f"{name} contains non-finite values")

    return arr


def check_n_components(k: Optional[int], n_rows: int, n_cols: int) -> int:
    """
    Resolve the number of components to keep.

    None means all min(N, D) components. Anything else must be an
    integer in [1, min(N, D)]; bools are rejected.
    """
    max_k = min(n_rows, n_cols)

    if k is None:
        return max_k

    if isinstance(k, bool) or not isinstance(k, numbers.Integral):
        raise InvalidInput(f"n_components must be an integer, got {k!r}")

    k = int(k)
    if not 1 <= k <= max_k:
        raise InvalidInput(
            f"n_components must be in [1, {max_k}] for a {n_rows}x{n_cols} matrix, got {k}"
        )

    return k


def check_components(components, column_means) -> tuple:
    """
    Validate a component set against its means vector.

    Returns:
        (components (D x K), column_means (D,))
    """
    components = check_matrix(components, name="components")
    column_means = check_vector(column_means, name="column_means")

    if column_means.shape[0] != components.shape[0]:
        raise DimensionMismatch(
            f"column_means has length {column_means.shape[0]}, "
            f"components expect {components.shape[0]} features"
        )

    return components, column_means
