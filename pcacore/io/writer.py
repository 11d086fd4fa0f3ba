"""
Writer — all parquet writes go through here.

No other module should call df.write_parquet directly.
"""

from pathlib import Path
from typing import Optional

import polars as pl


def _safe_write(df: pl.DataFrame, path: Path, verbose: bool = True) -> bool:
    """
    Guard against writing invalid parquet files.

    Returns True if a file was written, False if skipped.
    """
    if df is None:
        return False

    if len(df.columns) == 0:
        if verbose:
            print(f"  !! Skipped {path} (empty schema — 0 columns)")
        return False

    if df.height == 0:
        # Schema-only parquet: columns defined, 0 rows
        df.head(0).write_parquet(str(path))
        return True

    df.write_parquet(str(path))
    return True


def write_output(
    df: pl.DataFrame,
    output_dir: str,
    name: str,
    verbose: bool = True,
) -> Optional[Path]:
    """
    Write an output frame to <output_dir>/<name>.parquet.

    Args:
        df: DataFrame to write (None or empty-schema → skip)
        output_dir: Output directory (created if missing)
        name: Output name (e.g., 'scores', 'loadings')
        verbose: Print path on write

    Returns:
        Path to written file, or None if skipped
    """
    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)
    path = out / f"{name}.parquet"

    if not _safe_write(df, path, verbose=verbose):
        return None

    if verbose:
        print(f"  -> {path} ({len(df)} rows)")

    return path
