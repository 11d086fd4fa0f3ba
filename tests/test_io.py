"""
Tests for DataMatrix, table loading, metadata joins, frames, writer and config.
"""

import numpy as np
import polars as pl
import pytest
import yaml

from pcacore import DataMatrix, InvalidInput, DimensionMismatch, ConfigError
from pcacore.io import (
    load_matrix,
    frame_to_matrix,
    join_metadata,
    read_table,
    write_output,
    scores_frame,
    loadings_frame,
    variance_frame,
    load_config,
    validate_config,
    check_config,
    get_data_path,
    get_metadata_path,
    get_output_dir,
)


@pytest.fixture
def samples_df():
    return pl.DataFrame({
        'sample': ['s1', 's2', 's3', 's4'],
        'gene_a': [1.0, 2.0, 3.0, 4.0],
        'gene_b': [0.5, 0.1, 0.9, 0.3],
        'gene_c': [10, 12, 11, 13],
        'batch': ['x', 'y', 'x', 'y'],
    })


class TestDataMatrix:

    def test_default_labels(self):
        m = DataMatrix(np.zeros((2, 3)))
        assert m.sample_ids == ('sample_0', 'sample_1')
        assert m.feature_ids == ('feature_0', 'feature_1', 'feature_2')
        assert m.shape == (2, 3)

    def test_read_only_copy(self):
        values = np.ones((2, 2))
        m = DataMatrix(values)
        values[0, 0] = 5.0
        assert m.values[0, 0] == 1.0
        with pytest.raises(ValueError):
            m.values[0, 0] = 3.0

    def test_label_count_mismatch(self):
        with pytest.raises(InvalidInput):
            DataMatrix(np.zeros((2, 2)), sample_ids=('a',))

    def test_duplicate_labels(self):
        with pytest.raises(InvalidInput):
            DataMatrix(np.zeros((2, 2)), feature_ids=('g', 'g'))

    def test_non_finite(self):
        with pytest.raises(InvalidInput):
            DataMatrix(np.array([[1.0, np.nan]]))

    def test_select_features(self):
        m = DataMatrix(np.arange(6.0).reshape(2, 3), feature_ids=('a', 'b', 'c'))
        sub = m.select_features(['c', 'a'])
        assert sub.feature_ids == ('c', 'a')
        np.testing.assert_array_equal(sub.values, [[2.0, 0.0], [5.0, 3.0]])
        with pytest.raises(InvalidInput):
            m.select_features(['z'])

    def test_with_values(self):
        m = DataMatrix(np.zeros((2, 2)), sample_ids=('a', 'b'))
        other = m.with_values(np.ones((2, 1)), feature_ids=['PC1'])
        assert other.sample_ids == ('a', 'b')
        assert other.feature_ids == ('PC1',)


class TestReader:

    def test_numeric_columns_by_default(self, samples_df):
        m = frame_to_matrix(samples_df, id_column='sample')
        assert m.feature_ids == ('gene_a', 'gene_b', 'gene_c')
        assert m.sample_ids == ('s1', 's2', 's3', 's4')
        assert m.values.dtype == np.float64

    def test_selected_columns(self, samples_df):
        m = frame_to_matrix(samples_df, id_column='sample', feature_columns=['gene_c', 'gene_a'])
        np.testing.assert_array_equal(m.values[:, 0], [10.0, 12.0, 11.0, 13.0])

    def test_non_numeric_feature(self, samples_df):
        with pytest.raises(InvalidInput):
            frame_to_matrix(samples_df, feature_columns=['gene_a', 'batch'])

    def test_missing_feature(self, samples_df):
        with pytest.raises(InvalidInput):
            frame_to_matrix(samples_df, feature_columns=['gene_z'])

    def test_duplicate_feature_columns(self, samples_df):
        with pytest.raises(InvalidInput, match='more than once'):
            frame_to_matrix(samples_df, feature_columns=['gene_a', 'gene_b', 'gene_a'])

    def test_missing_id_column(self, samples_df):
        with pytest.raises(InvalidInput):
            frame_to_matrix(samples_df, id_column='patient')

    def test_nulls_rejected(self):
        df = pl.DataFrame({'a': [1.0, None, 3.0], 'b': [1.0, 2.0, 3.0]})
        with pytest.raises(InvalidInput):
            frame_to_matrix(df)

    def test_load_parquet(self, samples_df, tmp_path):
        path = tmp_path / 'data.parquet'
        samples_df.write_parquet(str(path))
        m = load_matrix(str(path), id_column='sample')
        assert m.shape == (4, 3)

    def test_load_csv(self, samples_df, tmp_path):
        path = tmp_path / 'data.csv'
        samples_df.write_csv(str(path))
        m = load_matrix(str(path), id_column='sample', feature_columns=['gene_a', 'gene_b'])
        assert m.shape == (4, 2)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_table(str(tmp_path / 'nope.parquet'))

    def test_unsupported_suffix(self, tmp_path):
        path = tmp_path / 'data.xlsx'
        path.write_text('')
        with pytest.raises(InvalidInput):
            read_table(str(path))


class TestJoinMetadata:

    def test_join_by_key(self):
        scores = pl.DataFrame({'sample': ['s2', 's1'], 'PC1': [0.1, -0.1]})
        meta = pl.DataFrame({'sample': ['s1', 's2', 's9'], 'IGHV': ['M', 'U', 'M']})
        joined = join_metadata(scores, meta, key='sample')

        assert joined.height == 2
        assert joined['sample'].to_list() == ['s2', 's1']
        assert joined['IGHV'].to_list() == ['U', 'M']

    def test_missing_metadata_gives_null(self):
        scores = pl.DataFrame({'sample': ['s1', 's3'], 'PC1': [0.1, 0.2]})
        meta = pl.DataFrame({'sample': ['s1'], 'IGHV': ['M']})
        joined = join_metadata(scores, meta, key='sample')
        assert joined['IGHV'].to_list() == ['M', None]

    def test_integer_keys(self):
        scores = pl.DataFrame({'sample': ['1', '2'], 'PC1': [0.1, 0.2]})
        meta = pl.DataFrame({'sample': [2, 1], 'age': [50, 60]})
        joined = join_metadata(scores, meta, key='sample')
        assert joined['age'].to_list() == [60, 50]

    def test_frame_key_keeps_dtype(self):
        scores = pl.DataFrame({'sample': [7, 3], 'PC1': [0.1, 0.2]})
        meta = pl.DataFrame({'sample': ['3', '7'], 'IGHV': ['M', 'U']})
        joined = join_metadata(scores, meta, key='sample')
        assert joined.schema['sample'] == scores.schema['sample']
        assert joined.columns == ['sample', 'PC1', 'IGHV']
        assert joined['sample'].to_list() == [7, 3]
        assert joined['IGHV'].to_list() == ['U', 'M']

    def test_duplicate_keys(self):
        scores = pl.DataFrame({'sample': ['s1'], 'PC1': [0.1]})
        meta = pl.DataFrame({'sample': ['s1', 's1'], 'IGHV': ['M', 'U']})
        with pytest.raises(InvalidInput):
            join_metadata(scores, meta, key='sample')

    def test_missing_key(self):
        scores = pl.DataFrame({'sample': ['s1'], 'PC1': [0.1]})
        meta = pl.DataFrame({'patient': ['s1']})
        with pytest.raises(InvalidInput):
            join_metadata(scores, meta, key='sample')


class TestFrames:

    def test_scores_frame(self):
        df = scores_frame(np.array([[1.0, 2.0], [3.0, 4.0]]), ['a', 'b'], id_column='sample')
        assert df.columns == ['sample', 'PC1', 'PC2']
        assert df['PC2'].to_list() == [2.0, 4.0]

    def test_scores_frame_mismatch(self):
        with pytest.raises(DimensionMismatch):
            scores_frame(np.zeros((3, 2)), ['a', 'b'])

    def test_loadings_frame(self):
        df = loadings_frame(np.eye(3)[:, :2], ['g1', 'g2', 'g3'])
        assert df.columns == ['feature_id', 'PC1', 'PC2']
        assert df.height == 3

    def test_loadings_frame_mismatch(self):
        with pytest.raises(DimensionMismatch):
            loadings_frame(np.eye(3), ['g1'])

    def test_variance_frame(self):
        df = variance_frame(np.array([3.0, 1.0]), total_variance=5.0)
        assert df['component'].to_list() == ['PC1', 'PC2']
        np.testing.assert_allclose(df['explained_ratio'].to_numpy(), [0.6, 0.2])
        np.testing.assert_allclose(df['cumulative_ratio'].to_numpy(), [0.6, 0.8])


class TestWriter:

    def test_write_output(self, samples_df, tmp_path):
        path = write_output(samples_df, str(tmp_path / 'out'), 'scores', verbose=False)
        assert path == tmp_path / 'out' / 'scores.parquet'
        assert pl.read_parquet(str(path)).shape == samples_df.shape

    def test_skips_empty_schema(self, tmp_path):
        assert write_output(pl.DataFrame(), str(tmp_path), 'empty', verbose=False) is None

    def test_skips_none(self, tmp_path):
        assert write_output(None, str(tmp_path), 'none', verbose=False) is None

    def test_zero_rows_keeps_schema(self, samples_df, tmp_path):
        path = write_output(samples_df.head(0), str(tmp_path), 'zero', verbose=False)
        assert pl.read_parquet(str(path)).columns == samples_df.columns


class TestConfig:

    def _write(self, directory, config):
        path = directory / 'config.yaml'
        path.write_text(yaml.safe_dump(config))
        return path

    def test_load_from_directory(self, samples_df, tmp_path):
        samples_df.write_parquet(str(tmp_path / 'data.parquet'))
        self._write(tmp_path, {'paths': {'data': 'data.parquet'}, 'n_components': 2})

        config = load_config(str(tmp_path))
        assert config['n_components'] == 2
        assert get_data_path(config) == str(tmp_path / 'data.parquet')
        assert get_output_dir(config) == str(tmp_path / 'output')
        assert get_metadata_path(config) is None
        assert validate_config(config) == ([], [])

    def test_load_from_file(self, tmp_path):
        path = tmp_path / 'run.yml'
        path.write_text(yaml.safe_dump({'paths': {'data': '/abs/data.csv'}}))
        config = load_config(str(path))
        assert get_data_path(config) == '/abs/data.csv'

    def test_missing_config(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path))

    def test_not_a_mapping(self, tmp_path):
        (tmp_path / 'config.yaml').write_text('- a\n- b\n')
        with pytest.raises(ConfigError):
            load_config(str(tmp_path))

    def test_validation_errors(self, tmp_path):
        self._write(tmp_path, {
            'paths': {'metadata': 'meta.csv'},
            'n_components': 0,
            'variance_threshold': 2.0,
            'normalize': 'minmax',
            'method': 'qr',
            'features': [],
        })
        errors, _ = validate_config(load_config(str(tmp_path)))
        joined = '\n'.join(errors)
        for fragment in ('paths.data', 'metadata file', 'metadata_key', 'n_components',
                         'variance_threshold', 'normalize', 'method', 'features'):
            assert fragment in joined

    def test_duplicate_features(self, samples_df, tmp_path):
        samples_df.write_parquet(str(tmp_path / 'data.parquet'))
        self._write(tmp_path, {
            'paths': {'data': 'data.parquet'},
            'features': ['gene_a', 'gene_a'],
        })
        errors, _ = validate_config(load_config(str(tmp_path)))
        assert any('duplicate' in e for e in errors)

    def test_check_config_raises(self, tmp_path):
        self._write(tmp_path, {'paths': {}})
        with pytest.raises(ConfigError) as exc:
            check_config(load_config(str(tmp_path)))
        assert exc.value.errors == ['paths.data is required']

    def test_both_k_and_threshold_warns(self, samples_df, tmp_path):
        samples_df.write_parquet(str(tmp_path / 'data.parquet'))
        self._write(tmp_path, {
            'paths': {'data': 'data.parquet'},
            'n_components': 2,
            'variance_threshold': 0.9,
        })
        warnings = check_config(load_config(str(tmp_path)))
        assert len(warnings) == 1
