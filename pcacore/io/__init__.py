"""
pcacore I/O — tables in, parquet out, config.yaml.
"""

from pcacore.io.reader import (
    read_table,
    numeric_columns,
    frame_to_matrix,
    load_matrix,
    join_metadata,
)
from pcacore.io.writer import write_output
from pcacore.io.frames import (
    component_names,
    scores_frame,
    loadings_frame,
    variance_frame,
)
from pcacore.io.config import (
    load_config,
    validate_config,
    check_config,
    get_data_path,
    get_metadata_path,
    get_output_dir,
)

__all__ = [
    'read_table',
    'numeric_columns',
    'frame_to_matrix',
    'load_matrix',
    'join_metadata',
    'write_output',
    'component_names',
    'scores_frame',
    'loadings_frame',
    'variance_frame',
    'load_config',
    'validate_config',
    'check_config',
    'get_data_path',
    'get_metadata_path',
    'get_output_dir',
]
