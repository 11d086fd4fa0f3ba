"""
Spectrum Metrics.

What a fitted spectrum says about the data, and how much is lost when it
is truncated:

    summarize                  explained ratios, effective_dim, entropy, condition number
    n_components_for_variance  smallest k reaching a cumulative variance threshold
    reconstruction_error       sum of squared errors of an approximation
    reconstruction_error_curve SSE for every k (compression / denoising)
    compression_ratio          stored floats of a rank-k model vs the raw matrix
    align_signs                flip components to agree with a reference set

Key insight: effective_dim (participation ratio) is the number of equally
weighted components that would carry the same total variance.
"""

import logging
from typing import Any, Dict, Optional, Sequence

import numpy as np
import polars as pl

from pcacore.config import DEFAULT_METHOD, EIGENVALUE_FLOOR
from pcacore.core.engine import fit, transform, reconstruct, explained_variance_ratio
from pcacore.core.normalization import inverse_normalize
from pcacore.validation import (
    InvalidInput,
    DimensionMismatch,
    check_matrix,
    check_vector,
)

logger = logging.getLogger(__name__)


def summarize(eigenvalues, total_variance: Optional[float] = None) -> Dict[str, Any]:
    """
    Derived metrics of an eigenvalue spectrum.

    Args:
        eigenvalues: Non-negative eigenvalues in fit order
        total_variance: Full-spectrum total when eigenvalues is truncated

    Returns:
        dict with explained_ratio, cumulative_ratio, total_variance,
        effective_dim, eigenvalue_entropy(_normalized), condition_number
    """
    eigenvalues = check_vector(eigenvalues, name="eigenvalues")
    cumulative = explained_variance_ratio(eigenvalues, total_variance=total_variance)
    total_var = float(eigenvalues.sum()) if total_variance is None else float(total_variance)

    if total_var > EIGENVALUE_FLOOR:
        explained_ratio = eigenvalues / total_var
        effective_dim = (eigenvalues.sum() ** 2) / (eigenvalues ** 2).sum()

        nonzero = eigenvalues[eigenvalues > EIGENVALUE_FLOOR]
        if len(nonzero) > 1:
            p = nonzero / nonzero.sum()
            entropy = float(-np.sum(p * np.log(p)))
            entropy_norm = entropy / float(np.log(len(nonzero)))
        else:
            entropy, entropy_norm = 0.0, 0.0

        condition_number = float(nonzero[0] / nonzero[-1]) if len(nonzero) >= 2 else 1.0
    else:
        explained_ratio = np.zeros_like(eigenvalues)
        effective_dim = 0.0
        entropy, entropy_norm = 0.0, 0.0
        condition_number = 1.0

    return {
        'eigenvalues': eigenvalues,
        'explained_ratio': explained_ratio,
        'cumulative_ratio': cumulative,
        'total_variance': total_var,
        'effective_dim': float(effective_dim),
        'eigenvalue_entropy': entropy,
        'eigenvalue_entropy_normalized': entropy_norm,
        'condition_number': condition_number,
        'n_components': len(eigenvalues),
    }


def n_components_for_variance(eigenvalues, threshold: float = 0.9) -> int:
    """
    Smallest k whose cumulative explained variance reaches threshold.

    Args:
        eigenvalues: Full spectrum in fit order
        threshold: Target fraction in (0, 1]

    Returns:
        k in [1, len(eigenvalues)]
    """
    if not 0.0 < threshold <= 1.0:
        raise InvalidInput(f"threshold must be in (0, 1], got {threshold}")

    cumulative = explained_variance_ratio(eigenvalues)
    if cumulative[-1] == 0.0:
        return 1

    # Tolerance so threshold=1.0 is reachable despite round-off
    k = int(np.searchsorted(cumulative, threshold - 1e-12)) + 1
    return min(k, len(cumulative))


def reconstruction_error(X, reconstruction) -> float:
    """Sum of squared differences between X and its reconstruction."""
    X = check_matrix(X, name="X")
    reconstruction = check_matrix(reconstruction, name="reconstruction")
    if X.shape != reconstruction.shape:
        raise DimensionMismatch(
            f"X is {X.shape}, reconstruction is {reconstruction.shape}"
        )
    return float(np.sum((X - reconstruction) ** 2))


def reconstruction_error_curve(
    X,
    ks: Optional[Sequence[int]] = None,
    method: str = DEFAULT_METHOD,
    norm_params: Optional[Dict[str, Any]] = None,
) -> pl.DataFrame:
    """
    Reconstruction error for each number of components.

    One full fit; each k reuses the leading k columns, which equals
    fitting with k directly.

    Args:
        X: Data matrix (n_samples, n_features)
        ks: Component counts to evaluate (default 1..min(N, D))
        method: Eigen solver passed to fit()
        norm_params: Parameters from normalize() if X is normalized. Errors
            are then measured in original units, after inverse_normalize().

    Returns:
        DataFrame with columns k, sse, relative_error, cumulative_ratio
    """
    X = check_matrix(X, name="X", min_rows=2)
    original = X if norm_params is None else inverse_normalize(X, norm_params)
    full = fit(X, method=method)
    max_k = full.n_components

    if ks is None:
        ks = range(1, max_k + 1)
    ks = sorted(set(int(k) for k in ks))
    if not ks or ks[0] < 1 or ks[-1] > max_k:
        raise InvalidInput(f"ks must lie in [1, {max_k}], got {ks}")

    cumulative = explained_variance_ratio(full.eigenvalues)
    total_ss = float(np.sum((original - original.mean(axis=0)) ** 2))

    rows = []
    for k in ks:
        components = full.components[:, :k]
        scores = transform(X, components, full.column_means)
        approx = reconstruct(scores, components, full.column_means)
        if norm_params is not None:
            approx = inverse_normalize(approx, norm_params)
        sse = reconstruction_error(original, approx)
        rows.append({
            'k': k,
            'sse': sse,
            'relative_error': sse / total_ss if total_ss > 0 else 0.0,
            'cumulative_ratio': float(cumulative[k - 1]),
        })

    logger.debug("reconstruction_error_curve: %d values of k", len(rows))
    return pl.DataFrame(rows)


def compression_ratio(n_rows: int, n_cols: int, k: int) -> float:
    """
    Floats stored by a rank-k model (scores + components + means) divided
    by floats in the raw N x D matrix. Below 1.0 means the model is smaller.
    """
    if n_rows < 1 or n_cols < 1:
        raise InvalidInput(f"Matrix shape must be positive, got {n_rows}x{n_cols}")
    if not 1 <= k <= min(n_rows, n_cols):
        raise InvalidInput(f"k must be in [1, {min(n_rows, n_cols)}], got {k}")

    stored = n_rows * k + n_cols * k + n_cols
    return stored / (n_rows * n_cols)


def align_signs(components, reference) -> np.ndarray:
    """
    Flip component signs to agree with a reference component set.

    Component signs are arbitrary, so results from two implementations can
    differ by a sign per column. Columns whose dot product with the
    matching reference column is negative are negated.

    Args:
        components: (D, K) component set
        reference: (D, K) reference component set

    Returns:
        Sign-aligned copy of components
    """
    components = check_matrix(components, name="components")
    reference = check_matrix(reference, name="reference")
    if components.shape != reference.shape:
        raise DimensionMismatch(
            f"components are {components.shape}, reference is {reference.shape}"
        )

    aligned = components.copy()
    for j in range(aligned.shape[1]):
        if np.dot(reference[:, j], aligned[:, j]) < 0:
            aligned[:, j] *= -1

    return aligned
