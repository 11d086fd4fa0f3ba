"""
Data containers.

DataMatrix is the numeric matrix plus its labels, kept as separate
fields so metadata is always joined by key, never by position.
PCAFit is what fit() returns: (components, eigenvalues, column_means).
"""

from dataclasses import dataclass
from typing import NamedTuple, Optional, Sequence, Tuple

import numpy as np

from pcacore.validation import check_matrix, InvalidInput


class PCAFit(NamedTuple):
    """Result of fit(). Unpacks as (components, eigenvalues, column_means)."""
    components: np.ndarray      # (D, K), columns orthonormal
    eigenvalues: np.ndarray     # (K,), non-increasing, >= 0
    column_means: np.ndarray    # (D,)

    @property
    def n_components(self) -> int:
        return self.components.shape[1]

    @property
    def n_features(self) -> int:
        return self.components.shape[0]


@dataclass(frozen=True, eq=False)
class DataMatrix:
    """
    Immutable N x D numeric matrix with explicit row and column labels.

    values is stored as a read-only float64 copy. Labels default to
    "sample_0..", "feature_0.." when not supplied.
    """
    values: np.ndarray
    sample_ids: Tuple[str, ...] = ()
    feature_ids: Tuple[str, ...] = ()

    def __post_init__(self):
        values = check_matrix(self.values, name="DataMatrix").copy()
        values.setflags(write=False)
        object.__setattr__(self, 'values', values)

        n_rows, n_cols = values.shape
        sample_ids = tuple(str(s) for s in self.sample_ids) or tuple(
            f"sample_{i}" for i in range(n_rows)
        )
        feature_ids = tuple(str(f) for f in self.feature_ids) or tuple(
            f"feature_{j}" for j in range(n_cols)
        )

        if len(sample_ids) != n_rows:
            raise InvalidInput(
                f"{len(sample_ids)} sample_ids for {n_rows} rows"
            )
        if len(feature_ids) != n_cols:
            raise InvalidInput(
                f"{len(feature_ids)} feature_ids for {n_cols} columns"
            )
        if len(set(sample_ids)) != n_rows:
            raise InvalidInput("sample_ids are not unique")
        if len(set(feature_ids)) != n_cols:
            raise InvalidInput("feature_ids are not unique")

        object.__setattr__(self, 'sample_ids', sample_ids)
        object.__setattr__(self, 'feature_ids', feature_ids)

    @property
    def shape(self) -> Tuple[int, int]:
        return self.values.shape

    def select_features(self, features: Sequence[str]) -> "DataMatrix":
        """Return a new DataMatrix restricted to the named features, in order."""
        index = {f: j for j, f in enumerate(self.feature_ids)}
        missing = [f for f in features if f not in index]
        if missing:
            raise InvalidInput(f"Unknown features: {missing}")
        cols = [index[f] for f in features]
        return DataMatrix(self.values[:, cols], self.sample_ids, tuple(features))

    def with_values(self, values: np.ndarray, feature_ids: Optional[Sequence[str]] = None) -> "DataMatrix":
        """Same samples, new values (e.g. after normalization or reconstruction)."""
        return DataMatrix(
            values,
            self.sample_ids,
            tuple(feature_ids) if feature_ids is not None else self.feature_ids,
        )
