"""
pcacore compute layer.

Arrays in, arrays out. No file I/O.

    types.py          DataMatrix, PCAFit
    engine.py         fit, transform, reconstruct, explained_variance_ratio
    normalization.py  explicit centering / z-score before fit
    spectrum.py       derived metrics of a fitted spectrum
"""

from pcacore.core.types import DataMatrix, PCAFit
from pcacore.core.engine import (
    fit,
    transform,
    reconstruct,
    explained_variance_ratio,
    covariance_matrix,
)
from pcacore.core.normalization import (
    NormMethod,
    normalize,
    inverse_normalize,
    center,
    zscore,
)
from pcacore.core.spectrum import (
    summarize,
    n_components_for_variance,
    reconstruction_error,
    reconstruction_error_curve,
    compression_ratio,
    align_signs,
)

__all__ = [
    'DataMatrix',
    'PCAFit',
    'fit',
    'transform',
    'reconstruct',
    'explained_variance_ratio',
    'covariance_matrix',
    'NormMethod',
    'normalize',
    'inverse_normalize',
    'center',
    'zscore',
    'summarize',
    'n_components_for_variance',
    'reconstruction_error',
    'reconstruction_error_curve',
    'compression_ratio',
    'align_signs',
]
