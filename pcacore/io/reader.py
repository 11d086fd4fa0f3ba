"""
Reader — all table reads go through here.

No other module should call pl.read_parquet / pl.read_csv directly.
Numeric values become a DataMatrix; labels and metadata stay in polars
frames and are joined by key.
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence

import polars as pl

from pcacore.core.types import DataMatrix
from pcacore.validation import InvalidInput

logger = logging.getLogger(__name__)


def read_table(path: str) -> pl.DataFrame:
    """Read a .parquet or .csv file."""
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"No such file: {path}")

    if p.suffix == '.parquet':
        return pl.read_parquet(str(p))
    elif p.suffix in ('.csv', '.tsv'):
        return pl.read_csv(str(p), separator='\t' if p.suffix == '.tsv' else ',')

    raise InvalidInput(f"Unsupported file type '{p.suffix}' (expected .parquet, .csv or .tsv)")


def numeric_columns(df: pl.DataFrame, exclude: Sequence[str] = ()) -> List[str]:
    """Columns with a numeric dtype, in frame order."""
    return [
        col for col in df.columns
        if col not in exclude and df.schema[col].is_numeric()
    ]


def frame_to_matrix(
    df: pl.DataFrame,
    id_column: Optional[str] = None,
    feature_columns: Optional[Sequence[str]] = None,
) -> DataMatrix:
    """
    Build a DataMatrix from a frame with one row per sample.

    Args:
        df: Samples x (id + features)
        id_column: Column holding sample ids (row index used if None)
        feature_columns: Features to keep (all numeric columns if None)

    Returns:
        DataMatrix

    Raises:
        InvalidInput: missing / non-numeric feature columns, nulls
    """
    if id_column is not None and id_column not in df.columns:
        raise InvalidInput(f"id_column '{id_column}' not in columns {df.columns}")

    exclude = [id_column] if id_column else []

    if feature_columns is None:
        feature_columns = numeric_columns(df, exclude=exclude)
        if not feature_columns:
            raise InvalidInput("No numeric feature columns found")
    else:
        feature_columns = list(feature_columns)
        duplicated = sorted({c for c in feature_columns if feature_columns.count(c) > 1})
        if duplicated:
            raise InvalidInput(f"Feature columns listed more than once: {duplicated}")
        missing = [c for c in feature_columns if c not in df.columns]
        if missing:
            raise InvalidInput(f"Feature columns not found: {missing}")
        non_numeric = [c for c in feature_columns if not df.schema[c].is_numeric()]
        if non_numeric:
            raise InvalidInput(f"Feature columns are not numeric: {non_numeric}")

    features = df.select(feature_columns)
    null_counts = {c: features[c].null_count() for c in feature_columns}
    with_nulls = {c: n for c, n in null_counts.items() if n > 0}
    if with_nulls:
        raise InvalidInput(f"Null values in feature columns: {with_nulls}")

    if id_column is not None:
        sample_ids = tuple(str(v) for v in df[id_column].to_list())
    else:
        sample_ids = ()

    return DataMatrix(
        features.to_numpy().astype('float64'),
        sample_ids=sample_ids,
        feature_ids=tuple(feature_columns),
    )


def load_matrix(
    path: str,
    id_column: Optional[str] = None,
    feature_columns: Optional[Sequence[str]] = None,
) -> DataMatrix:
    """Load a samples x features table from .parquet / .csv into a DataMatrix."""
    df = read_table(path)
    matrix = frame_to_matrix(df, id_column=id_column, feature_columns=feature_columns)
    logger.info("Loaded %s: %d samples x %d features", path, *matrix.shape)
    return matrix


def join_metadata(
    frame: pl.DataFrame,
    metadata: pl.DataFrame,
    key: str,
) -> pl.DataFrame:
    """
    Left-join sample metadata onto a frame by key.

    Keys are compared as strings; the frame's key column keeps its dtype.
    Samples without metadata keep nulls; metadata rows without a matching
    sample are dropped.

    Raises:
        InvalidInput: key missing on either side, or duplicated in metadata
    """
    if key not in frame.columns:
        raise InvalidInput(f"Join key '{key}' not in frame columns {frame.columns}")
    if key not in metadata.columns:
        raise InvalidInput(f"Join key '{key}' not in metadata columns {metadata.columns}")

    metadata = metadata.with_columns(pl.col(key).cast(pl.Utf8).alias('__key')).drop(key)
    if metadata['__key'].n_unique() != metadata.height:
        raise InvalidInput(f"Metadata key '{key}' has duplicate values")

    # Keep the frame's row order regardless of join strategy
    return (
        frame
        .with_columns(pl.col(key).cast(pl.Utf8).alias('__key'))
        .with_row_index('__row')
        .join(metadata, on='__key', how='left')
        .sort('__row')
        .drop(['__row', '__key'])
    )
