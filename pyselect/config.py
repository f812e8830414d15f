"""
pyselect Configuration Management

This module provides configuration management and validation for discovery
and activation.  Configuration can be merged from keyword overrides or read
from a YAML file (``--config`` on the CLI, or the ``PYSELECT_CONFIG``
environment variable).
"""

import copy
import os
from pathlib import Path
from typing import Dict, Any, Optional, Union

import yaml

from .exceptions import PySelectConfigError

CONFIG_ENV_VAR = 'PYSELECT_CONFIG'


class PySelectConfig:
    """
    Configuration manager for pyselect parameters.

    Example:
        >>> config = PySelectConfig.get_default_config()
        >>> PySelectConfig.validate_config({'probe_timeout_seconds': 5})
        True
    """

    DEFAULT_CONFIG: Dict[str, Any] = {
        # Vendor that always ranks first
        'default_vendor': 'PythonCore',
        # Vendors that are never interpreters (the py.exe launcher registers here)
        'excluded_vendors': ['PyLauncher'],
        # Seconds allowed for each interpreter probe
        'probe_timeout_seconds': 10,
        # Base for the namespaced PYTHONUSERBASE.  Empty = APPDATA or ~/.local
        'user_base_root': '',
        # YAML registry manifest.  Empty = read the live Windows registry
        'registry_manifest': '',
        # Whether to look for the ArcGIS Pro conda environment
        'include_arcgis': True,
        # Directory for log.txt / log.err.  Empty = console only
        'log_dir': '',
        # Console log level name
        'log_level': 'WARNING',
    }

    VALID_PARAMS: set = set(DEFAULT_CONFIG.keys())

    PARAM_TYPES: Dict[str, Any] = {
        'default_vendor': str,
        'excluded_vendors': list,
        'probe_timeout_seconds': (int, float),
        'user_base_root': str,
        'registry_manifest': str,
        'include_arcgis': bool,
        'log_dir': str,
        'log_level': str,
    }

    VALID_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')

    @classmethod
    def get_default_config(cls) -> Dict[str, Any]:
        """Return a deep copy of the default configuration."""
        return copy.deepcopy(cls.DEFAULT_CONFIG)

    @classmethod
    def validate_config(cls, config: Dict[str, Any]) -> bool:
        """
        Validate configuration parameters.

        Args:
            config: Configuration dict to validate.

        Returns:
            True if valid.

        Raises:
            PySelectConfigError: If any parameter is invalid.
        """
        for key, value in config.items():
            if key not in cls.VALID_PARAMS:
                raise PySelectConfigError(f"Unknown config parameter: '{key}'")
            expected_type = cls.PARAM_TYPES.get(key)
            # bool is an int subclass; keep it out of numeric params
            if expected_type and (
                not isinstance(value, expected_type)
                or (isinstance(value, bool) and expected_type is not bool)
            ):
                raise PySelectConfigError(
                    f"Parameter '{key}' must be {expected_type}, "
                    f"got {type(value).__name__}"
                )

        if 'default_vendor' in config and not config['default_vendor']:
            raise PySelectConfigError("default_vendor must not be empty")

        if 'excluded_vendors' in config:
            for vendor in config['excluded_vendors']:
                if not isinstance(vendor, str):
                    raise PySelectConfigError(
                        f"excluded_vendors entries must be str, got {type(vendor).__name__}"
                    )

        if 'probe_timeout_seconds' in config and config['probe_timeout_seconds'] <= 0:
            raise PySelectConfigError("probe_timeout_seconds must be > 0")

        if 'log_level' in config and config['log_level'].upper() not in cls.VALID_LOG_LEVELS:
            raise PySelectConfigError(
                f"log_level must be one of {cls.VALID_LOG_LEVELS}, "
                f"got '{config['log_level']}'"
            )

        return True

    @classmethod
    def merge_config(cls, base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge override values into base config.

        Args:
            base:      Base configuration dict.
            overrides: Values to override.

        Returns:
            Merged configuration dict.

        Raises:
            PySelectConfigError: If overrides contain invalid params.
        """
        cls.validate_config(overrides)
        merged = copy.deepcopy(base)
        merged.update(overrides)
        return merged

    @classmethod
    def load_config(cls, path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
        """
        Load configuration from a YAML file on top of the defaults.

        Args:
            path: YAML file.  When None, ``PYSELECT_CONFIG`` is consulted;
                  if that is unset too the defaults are returned.

        Returns:
            Merged configuration dict.

        Raises:
            PySelectConfigError: File unreadable, not a mapping, or invalid.
        """
        if path is None:
            path = os.environ.get(CONFIG_ENV_VAR) or None
        config = cls.get_default_config()
        if path is None:
            return config

        config_path = Path(path)
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except OSError as exc:
            raise PySelectConfigError(f"Cannot read config file {config_path}: {exc}") from exc
        except yaml.YAMLError as exc:
            raise PySelectConfigError(f"Invalid YAML in {config_path}: {exc}") from exc

        if data is None:
            return config
        if not isinstance(data, dict):
            raise PySelectConfigError(
                f"Config file {config_path} must contain a mapping, "
                f"got {type(data).__name__}"
            )
        return cls.merge_config(config, data)
