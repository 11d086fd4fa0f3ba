"""
pcacore defaults.

Single source of truth for constants shared by the engine, the
spectrum metrics and the run orchestration.
"""

from typing import Dict, List

# ============================================================
# ENGINE
# ============================================================

# Eigen solver: 'eigh' on the covariance matrix, or 'svd' of the centered data
DEFAULT_METHOD: str = 'eigh'
METHODS: List[str] = ['eigh', 'svd']

# Eigenvalues below this are treated as numerical zero by spectrum metrics
EIGENVALUE_FLOOR: float = 1e-10

# Warn when there are fewer than this many samples per feature
MIN_SAMPLES_PER_FEATURE: int = 3

# ============================================================
# RUN
# ============================================================

DEFAULT_NORMALIZE: str = 'center'
DEFAULT_OUTPUT_DIR: str = 'output'

# Output name -> description (one parquet file each)
OUTPUT_NAMES: Dict[str, str] = {
    'scores':               'Sample coordinates on each component (N x K)',
    'loadings':             'Feature weights per component (D x K)',
    'variance':             'Eigenvalue, explained and cumulative ratio per component',
    'reconstruction_error': 'Sum of squared reconstruction error for each k',
}
