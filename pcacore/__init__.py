"""
pcacore — PCA compression and reconstruction engine.

Public API:
    from pcacore import fit, transform, reconstruct, explained_variance_ratio

    components, eigenvalues, means = fit(X, k=2)
    scores = transform(X, components, means)
    X_hat = reconstruct(scores, components, means)

Layers:
    pcacore.core        Compute — arrays in, arrays out, no file I/O
    pcacore.validation  Input checks and the error taxonomy
    pcacore.io          Tables in (polars), parquet out, config.yaml
    pcacore.run         Orchestration + CLI (python -m pcacore)
"""

from pcacore.core import (
    DataMatrix,
    PCAFit,
    fit,
    transform,
    reconstruct,
    explained_variance_ratio,
)
from pcacore.validation import (
    PCAError,
    InvalidInput,
    DimensionMismatch,
    ConfigError,
)

__all__ = [
    'DataMatrix',
    'PCAFit',
    'fit',
    'transform',
    'reconstruct',
    'explained_variance_ratio',
    'PCAError',
    'InvalidInput',
    'DimensionMismatch',
    'ConfigError',
]
