"""
Unit tests for PySelectConfig.
"""

import pytest
from pyselect.config import PySelectConfig, CONFIG_ENV_VAR
from pyselect.exceptions import PySelectConfigError


class TestPySelectConfig:
    """Test suite for PySelectConfig class."""

    # ----- get_default_config -----

    def test_returns_dict(self):
        config = PySelectConfig.get_default_config()
        assert isinstance(config, dict)

    def test_required_keys_present(self):
        config = PySelectConfig.get_default_config()
        for key in ['default_vendor', 'excluded_vendors', 'probe_timeout_seconds',
                    'user_base_root', 'registry_manifest', 'include_arcgis',
                    'log_dir', 'log_level']:
            assert key in config, f"Missing key: {key}"

    def test_default_vendor_is_python_core(self):
        config = PySelectConfig.get_default_config()
        assert config['default_vendor'] == 'PythonCore'

    def test_launcher_excluded_by_default(self):
        config = PySelectConfig.get_default_config()
        assert 'PyLauncher' in config['excluded_vendors']

    def test_returns_copy(self):
        """Modifying one copy must not affect another."""
        c1 = PySelectConfig.get_default_config()
        c2 = PySelectConfig.get_default_config()
        c1['excluded_vendors'].append('Acme')
        assert 'Acme' not in c2['excluded_vendors']

    # ----- validate_config -----

    def test_validate_empty(self):
        assert PySelectConfig.validate_config({}) is True

    def test_validate_valid(self):
        assert PySelectConfig.validate_config(
            {'probe_timeout_seconds': 2.5, 'log_level': 'debug'}
        ) is True

    def test_validate_unknown_key(self):
        with pytest.raises(PySelectConfigError):
            PySelectConfig.validate_config({'nonexistent_key': 1})

    def test_validate_wrong_type_timeout(self):
        with pytest.raises(PySelectConfigError):
            PySelectConfig.validate_config({'probe_timeout_seconds': "10"})

    def test_validate_bool_is_not_a_timeout(self):
        with pytest.raises(PySelectConfigError):
            PySelectConfig.validate_config({'probe_timeout_seconds': True})

    def test_validate_wrong_type_include_arcgis(self):
        with pytest.raises(PySelectConfigError):
            PySelectConfig.validate_config({'include_arcgis': 1})

    def test_validate_timeout_zero_rejected(self):
        with pytest.raises(PySelectConfigError):
            PySelectConfig.validate_config({'probe_timeout_seconds': 0})

    def test_validate_empty_default_vendor_rejected(self):
        with pytest.raises(PySelectConfigError):
            PySelectConfig.validate_config({'default_vendor': ''})

    def test_validate_excluded_vendor_entries_must_be_str(self):
        with pytest.raises(PySelectConfigError):
            PySelectConfig.validate_config({'excluded_vendors': ['PyLauncher', 3]})

    def test_validate_log_level_invalid(self):
        with pytest.raises(PySelectConfigError):
            PySelectConfig.validate_config({'log_level': 'LOUD'})

    # ----- merge_config -----

    def test_merge_applies_overrides(self):
        base = PySelectConfig.get_default_config()
        merged = PySelectConfig.merge_config(base, {'probe_timeout_seconds': 3})
        assert merged['probe_timeout_seconds'] == 3

    def test_merge_does_not_mutate_base(self):
        base = PySelectConfig.get_default_config()
        PySelectConfig.merge_config(base, {'probe_timeout_seconds': 3})
        assert base['probe_timeout_seconds'] == 10

    def test_merge_rejects_invalid_overrides(self):
        base = PySelectConfig.get_default_config()
        with pytest.raises(PySelectConfigError):
            PySelectConfig.merge_config(base, {'bad_key': 'bad_value'})

    # ----- load_config -----

    def test_load_without_file_returns_defaults(self, monkeypatch):
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        assert PySelectConfig.load_config() == PySelectConfig.get_default_config()

    def test_load_yaml_file(self, tmp_path):
        path = tmp_path / 'pyselect.yaml'
        path.write_text("probe_timeout_seconds: 4\nexcluded_vendors: [PyLauncher, Acme]\n")
        config = PySelectConfig.load_config(path)
        assert config['probe_timeout_seconds'] == 4
        assert config['excluded_vendors'] == ['PyLauncher', 'Acme']
        assert config['default_vendor'] == 'PythonCore'

    def test_load_from_environment_variable(self, tmp_path, monkeypatch):
        path = tmp_path / 'env.yaml'
        path.write_text("include_arcgis: false\n")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(path))
        assert PySelectConfig.load_config()['include_arcgis'] is False

    def test_load_empty_file_returns_defaults(self, tmp_path):
        path = tmp_path / 'empty.yaml'
        path.write_text("")
        assert PySelectConfig.load_config(path) == PySelectConfig.get_default_config()

    def test_load_missing_file_raises(self, tmp_path):
        with pytest.raises(PySelectConfigError):
            PySelectConfig.load_config(tmp_path / 'missing.yaml')

    def test_load_non_mapping_raises(self, tmp_path):
        path = tmp_path / 'list.yaml'
        path.write_text("- a\n- b\n")
        with pytest.raises(PySelectConfigError):
            PySelectConfig.load_config(path)

    def test_load_unknown_key_raises(self, tmp_path):
        path = tmp_path / 'bad.yaml'
        path.write_text("colour: blue\n")
        with pytest.raises(PySelectConfigError):
            PySelectConfig.load_config(path)
