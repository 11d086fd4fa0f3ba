"""
pcacore Runner
==============

Load a samples x features table, preprocess, fit, project, reconstruct,
write results. Pure orchestration — the math lives in pcacore.core.

Outputs (one parquet each, in output_dir):
    scores.parquet                sample_id + PC1..PCk (+ metadata columns)
    loadings.parquet              feature_id + PC1..PCk
    variance.parquet              eigenvalue / explained / cumulative ratio per PC
    reconstruction_error.parquet  SSE for every k (compression curve)

Usage:
    python -m pcacore path/to/config_dir
    python -m pcacore path/to/config.yaml -k 3
"""

import argparse
import logging
import time
from typing import Any, Dict, Optional, Sequence

import numpy as np

from pcacore.config import (
    DEFAULT_METHOD,
    DEFAULT_NORMALIZE,
    MIN_SAMPLES_PER_FEATURE,
    OUTPUT_NAMES,
)
from pcacore.core.engine import fit, transform, reconstruct
from pcacore.core.types import PCAFit
from pcacore.core.normalization import normalize, inverse_normalize
from pcacore.core.spectrum import (
    n_components_for_variance,
    reconstruction_error,
    reconstruction_error_curve,
    summarize,
)
from pcacore.io.config import (
    load_config,
    check_config,
    get_data_path,
    get_metadata_path,
    get_output_dir,
)
from pcacore.io.frames import scores_frame, loadings_frame, variance_frame
from pcacore.io.reader import load_matrix, read_table, join_metadata
from pcacore.io.writer import write_output
from pcacore.validation import check_n_components

logger = logging.getLogger(__name__)


def run(
    data_path: str,
    output_dir: Optional[str] = None,
    id_column: Optional[str] = None,
    feature_columns: Optional[Sequence[str]] = None,
    n_components: Optional[int] = None,
    variance_threshold: Optional[float] = None,
    normalize_method: str = DEFAULT_NORMALIZE,
    method: str = DEFAULT_METHOD,
    metadata_path: Optional[str] = None,
    metadata_key: Optional[str] = None,
    verbose: bool = True,
) -> Dict[str, Any]:
    """
    Run PCA on one data table.

    Args:
        data_path: .parquet / .csv table, one row per sample
        output_dir: Where to write parquet outputs (None = don't write)
        id_column: Sample id column (row index if None)
        feature_columns: Features to use (all numeric columns if None)
        n_components: Components to keep; overrides variance_threshold
        variance_threshold: Keep the fewest components reaching this fraction
        normalize_method: 'none', 'center' or 'zscore'
        method: 'eigh' or 'svd'
        metadata_path: Optional sample metadata table joined onto scores
        metadata_key: Key column for the join (defaults to id_column)
        verbose: Print progress

    Returns:
        dict with 'scores', 'loadings', 'variance', 'reconstruction_error'
        frames plus 'summary' (spectrum metrics) and 'n_components'
    """
    start = time.time()

    if verbose:
        print("=" * 70)
        print("PCA - components, scores and reconstruction")
        print("=" * 70)

    matrix = load_matrix(data_path, id_column=id_column, feature_columns=feature_columns)
    N, D = matrix.shape

    if N < MIN_SAMPLES_PER_FEATURE * D:
        logger.warning(
            "Limited samples (%d) for %d features. Recommended: %d+",
            N, D, MIN_SAMPLES_PER_FEATURE * D,
        )

    X, norm_params = normalize(matrix.values, method=normalize_method)

    # Full spectrum first: total variance and threshold-based k need it
    full = fit(X, method=method)

    if n_components is None and variance_threshold is not None:
        n_components = n_components_for_variance(full.eigenvalues, variance_threshold)

    # Leading k columns of the full fit are the rank-k fit
    k = check_n_components(n_components, N, D)
    result = PCAFit(
        components=full.components[:, :k],
        eigenvalues=full.eigenvalues[:k],
        column_means=full.column_means,
    )
    total_variance = float(full.eigenvalues.sum())

    scores = transform(X, result.components, result.column_means)
    approx = inverse_normalize(
        reconstruct(scores, result.components, result.column_means),
        norm_params,
    )
    sse = reconstruction_error(matrix.values, approx)

    summary = summarize(full.eigenvalues)

    if verbose:
        kept = float(np.sum(result.eigenvalues)) / total_variance if total_variance > 0 else 0.0
        print(f"  {N} samples x {D} features, normalize={normalize_method}, method={method}")
        print(f"  Kept {k} of {full.n_components} components ({kept:.1%} of variance)")
        print(f"  effective_dim={summary['effective_dim']:.2f}, reconstruction SSE={sse:.4g}")

    id_name = id_column or 'sample_id'
    scores_df = scores_frame(scores, matrix.sample_ids, id_column=id_name)

    if metadata_path is not None:
        key = metadata_key or id_name
        scores_df = join_metadata(scores_df, read_table(metadata_path), key=key)

    outputs = {
        'scores': scores_df,
        'loadings': loadings_frame(result.components, matrix.feature_ids),
        'variance': variance_frame(result.eigenvalues, total_variance=total_variance),
        'reconstruction_error': reconstruction_error_curve(X, method=method, norm_params=norm_params),
    }

    if output_dir is not None:
        for name in OUTPUT_NAMES:
            write_output(outputs[name], output_dir, name, verbose=verbose)

    elapsed = time.time() - start
    logger.info("PCA run on %s: k=%d, %.2fs", data_path, k, elapsed)
    if verbose:
        print(f"  Done in {elapsed:.2f}s")
        print()

    return {
        **outputs,
        'summary': summary,
        'n_components': k,
        'reconstruction_sse': sse,
    }


def run_config(config_path: str, n_components: Optional[int] = None, verbose: bool = True) -> Dict[str, Any]:
    """Run from a config.yaml (directory or file). n_components overrides the config."""
    config = load_config(config_path)

    for warning in check_config(config):
        logger.warning(warning)

    return run(
        data_path=get_data_path(config),
        output_dir=get_output_dir(config),
        id_column=config.get('id_column'),
        feature_columns=config.get('features'),
        n_components=n_components if n_components is not None else config.get('n_components'),
        variance_threshold=config.get('variance_threshold'),
        normalize_method=config.get('normalize', DEFAULT_NORMALIZE),
        method=config.get('method', DEFAULT_METHOD),
        metadata_path=get_metadata_path(config),
        metadata_key=config.get('metadata_key'),
        verbose=verbose,
    )


def main(argv: Optional[Sequence[str]] = None):
    """CLI entry point. Resolves the config and calls run()."""
    parser = argparse.ArgumentParser(
        description="pcacore - PCA compression and reconstruction",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Outputs: scores, loadings, variance, reconstruction_error (parquet).

Usage:
  python -m pcacore ~/vignettes/cll
  python -m pcacore ~/vignettes/cll/config.yaml -k 3
"""
    )
    parser.add_argument('config_path', help='config.yaml or a directory containing one')
    parser.add_argument('-k', '--n-components', type=int, help='Components to keep (overrides config)')
    parser.add_argument('-q', '--quiet', action='store_true', help='Suppress output')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format='%(levelname)s %(name)s: %(message)s',
    )

    run_config(args.config_path, n_components=args.n_components, verbose=not args.quiet)


if __name__ == '__main__':
    main()
