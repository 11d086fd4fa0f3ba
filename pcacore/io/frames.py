"""
Frames — label engine arrays as polars DataFrames.

Components are named PC1..PCk everywhere.
"""

from typing import List, Optional, Sequence

import numpy as np
import polars as pl

from pcacore.core.spectrum import summarize
from pcacore.validation import DimensionMismatch


def component_names(k: int) -> List[str]:
    return [f"PC{i + 1}" for i in range(k)]


def scores_frame(
    scores: np.ndarray,
    sample_ids: Sequence[str],
    id_column: str = 'sample_id',
) -> pl.DataFrame:
    """One row per sample: id column + PC1..PCk."""
    scores = np.asarray(scores, dtype=np.float64)
    if scores.shape[0] != len(sample_ids):
        raise DimensionMismatch(
            f"{scores.shape[0]} score rows for {len(sample_ids)} sample ids"
        )

    data = {id_column: [str(s) for s in sample_ids]}
    for j, name in enumerate(component_names(scores.shape[1])):
        data[name] = scores[:, j]
    return pl.DataFrame(data)


def loadings_frame(
    components: np.ndarray,
    feature_ids: Sequence[str],
) -> pl.DataFrame:
    """One row per feature: feature_id + its weight on PC1..PCk."""
    components = np.asarray(components, dtype=np.float64)
    if components.shape[0] != len(feature_ids):
        raise DimensionMismatch(
            f"{components.shape[0]} loading rows for {len(feature_ids)} feature ids"
        )

    data = {'feature_id': [str(f) for f in feature_ids]}
    for j, name in enumerate(component_names(components.shape[1])):
        data[name] = components[:, j]
    return pl.DataFrame(data)


def variance_frame(
    eigenvalues: np.ndarray,
    total_variance: Optional[float] = None,
) -> pl.DataFrame:
    """One row per component: eigenvalue, explained_ratio, cumulative_ratio."""
    summary = summarize(eigenvalues, total_variance=total_variance)
    k = summary['n_components']
    return pl.DataFrame({
        'component': component_names(k),
        'eigenvalue': summary['eigenvalues'],
        'explained_ratio': summary['explained_ratio'],
        'cumulative_ratio': summary['cumulative_ratio'],
    })
