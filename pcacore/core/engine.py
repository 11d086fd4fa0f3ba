"""
PCA Engine.

Orthogonal low-rank factorization of a data matrix:

    fit          column means + covariance eigendecomposition -> (components, eigenvalues, means)
    transform    (X - means) @ components                       -> scores
    reconstruct  scores @ components.T + means                  -> approximation of X
    explained_variance_ratio   cumulative eigenvalue fractions

All functions are pure: inputs are never modified and every result is a
fresh array, so they can be called from any number of threads.

components is D x K with one component per column. Signs are fixed so the
largest-magnitude loading of every component is positive.
"""

import logging
from typing import Optional

import numpy as np
from scipy import linalg

from pcacore.config import DEFAULT_METHOD, METHODS
from pcacore.core.types import PCAFit
from pcacore.validation import (
    InvalidInput,
    DimensionMismatch,
    check_matrix,
    check_vector,
    check_n_components,
    check_components,
)

logger = logging.getLogger(__name__)


def covariance_matrix(X_centered: np.ndarray) -> np.ndarray:
    """Sample covariance (Xc.T @ Xc) / (N - 1) of an already-centered matrix."""
    n_samples = X_centered.shape[0]
    cov = (X_centered.T @ X_centered) / (n_samples - 1)
    # Exact symmetry for eigh
    return 0.5 * (cov + cov.T)


def _fix_signs(components: np.ndarray) -> np.ndarray:
    """Flip each column so its largest-magnitude entry is positive."""
    idx = np.argmax(np.abs(components), axis=0)
    signs = np.sign(components[idx, np.arange(components.shape[1])])
    signs[signs == 0] = 1.0
    return components * signs


def _eigh(X_centered: np.ndarray, k: int):
    cov = covariance_matrix(X_centered)
    D = cov.shape[0]
    # Only the top k eigenpairs are needed
    subset = [D - k, D - 1] if k < D else None
    eigenvalues, eigenvectors = linalg.eigh(cov, subset_by_index=subset, check_finite=False)
    order = np.argsort(-eigenvalues, kind='stable')
    return eigenvalues[order], eigenvectors[:, order]


def _svd(X_centered: np.ndarray):
    n_samples = X_centered.shape[0]
    _, S, Vt = np.linalg.svd(X_centered, full_matrices=False)
    return (S ** 2) / (n_samples - 1), Vt.T


def fit(X, k: Optional[int] = None, method: str = DEFAULT_METHOD) -> PCAFit:
    """
    Fit principal components to X.

    Args:
        X: Data matrix (n_samples, n_features), N >= 2
        k: Components to keep, 1 <= k <= min(N, D). None keeps min(N, D).
        method: 'eigh' (covariance eigendecomposition) or 'svd' (SVD of the
            centered matrix). Same spectrum, SVD is better conditioned when D >> N.

    Returns:
        PCAFit(components (D, K), eigenvalues (K,), column_means (D,))

    Raises:
        InvalidInput: fewer than 2 rows, non-finite values, k out of range,
            unknown method
    """
    X = check_matrix(X, name="X", min_rows=2)
    N, D = X.shape
    k = check_n_components(k, N, D)

    if method not in METHODS:
        raise InvalidInput(f"Unknown method '{method}', expected one of {METHODS}")

    column_means = X.mean(axis=0)
    X_centered = X - column_means

    try:
        if method == 'svd':
            eigenvalues, eigenvectors = _svd(X_centered)
        else:
            eigenvalues, eigenvectors = _eigh(X_centered, k)
    except linalg.LinAlgError as e:
        raise InvalidInput(f"Decomposition failed: {e}") from e

    # Round-off can leave tiny negatives on a PSD spectrum
    eigenvalues = np.clip(eigenvalues[:k], 0.0, None)
    components = _fix_signs(eigenvectors[:, :k])

    logger.debug(
        "fit %dx%d matrix (%s): kept %d components, lambda_1=%.4g",
        N, D, method, k, eigenvalues[0],
    )

    return PCAFit(
        components=np.ascontiguousarray(components),
        eigenvalues=eigenvalues,
        column_means=column_means,
    )


def transform(X, components, column_means) -> np.ndarray:
    """
    Project X onto components using the fit-time means.

    Args:
        X: Data matrix (n_samples, n_features)
        components: (n_features, K)
        column_means: (n_features,) from fit()

    Returns:
        Scores (n_samples, K)

    Raises:
        DimensionMismatch: X column count != components row count
    """
    components, column_means = check_components(components, column_means)
    X = check_matrix(X, name="X")

    if X.shape[1] != components.shape[0]:
        raise DimensionMismatch(
            f"X has {X.shape[1]} features, components expect {components.shape[0]}"
        )

    return (X - column_means) @ components


def reconstruct(scores, components, column_means) -> np.ndarray:
    """
    Map scores back to feature space: scores @ components.T + means.

    With K = min(N, D) this recovers the fitted matrix exactly (up to
    round-off); with fewer components it is the best rank-K approximation.

    Raises:
        DimensionMismatch: scores column count != number of components
    """
    components, column_means = check_components(components, column_means)
    scores = check_matrix(scores, name="scores")

    if scores.shape[1] != components.shape[1]:
        raise DimensionMismatch(
            f"scores have {scores.shape[1]} components, component set has {components.shape[1]}"
        )

    return scores @ components.T + column_means


def explained_variance_ratio(eigenvalues, total_variance: Optional[float] = None) -> np.ndarray:
    """
    Cumulative fraction of variance explained by the first i components.

    Args:
        eigenvalues: Non-negative eigenvalues in fit order
        total_variance: Total variance of the full spectrum. Pass it when
            eigenvalues is truncated; defaults to eigenvalues.sum().

    Returns:
        Non-decreasing array in [0, 1]; the last entry is 1.0 only when the
        whole spectrum is included. All zeros when total variance is zero.
    """
    eigenvalues = check_vector(eigenvalues, name="eigenvalues")
    if (eigenvalues < 0).any():
        raise InvalidInput("eigenvalues must be non-negative")

    retained = float(eigenvalues.sum())
    if total_variance is None:
        total = retained
    else:
        total = float(total_variance)
        if not np.isfinite(total) or total < retained * (1 - 1e-12):
            raise InvalidInput(
                f"total_variance {total} is smaller than the supplied eigenvalues ({retained})"
            )

    if total <= 0.0:
        return np.zeros_like(eigenvalues)

    cumulative = np.cumsum(eigenvalues) / total
    return np.clip(cumulative, 0.0, 1.0)
