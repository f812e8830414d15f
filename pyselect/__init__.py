"""
pyselect Package

Finds the Python distributions installed on a machine and activates one in the
current process.

Discovery sources:
- PEP 514 registry tree (``Software\\Python``), per-user and per-machine,
  native and WOW6432Node
- The conda environment registered by Esri ArcGIS Pro

Main Components:
- list_distributions: Discover, filter and rank distributions
- activate / deactivate: Apply or undo an activation (process-wide manager)
- ActivationManager:  Backup/restore of PATH, PYTHONHOME, PYTHONUSERBASE and
                      conda variables
- PySelectConfig:     Configuration management and validation
- Custom exceptions for error handling

Usage::

    from pyselect import list_distributions, activate, deactivate

    for dist in list_distributions(version='3'):
        print(dist.display_name, dist.reported_version)

    activate(vendor='PythonCore', version='3.11')
    subprocess.run(['python', '-m', 'pip', 'list'])
    deactivate()
"""

from .activation import ActivationManager, get_manager
from .api import activate, deactivate, list_distributions, default_scanners
from .config import PySelectConfig
from .models import Distribution, InstallScope, PlatformWidth, RawCandidate
from .probe import InterpreterProbe
from .ranking import DistributionFilter, rank
from .registry import ManifestRegistrySource, RegistrationSource, WinRegistrySource
from .shell import ShellSession
from .exceptions import (
    PySelectError,
    PySelectConfigError,
    SourceUnavailableError,
    ProbeError,
    NoMatchError,
    NestedEnvironmentError,
)

__version__ = '1.0.0'

__all__ = [
    'ActivationManager',
    'get_manager',
    'activate',
    'deactivate',
    'list_distributions',
    'default_scanners',
    'PySelectConfig',
    'Distribution',
    'InstallScope',
    'PlatformWidth',
    'RawCandidate',
    'InterpreterProbe',
    'DistributionFilter',
    'rank',
    'ManifestRegistrySource',
    'RegistrationSource',
    'WinRegistrySource',
    'ShellSession',
    'PySelectError',
    'PySelectConfigError',
    'SourceUnavailableError',
    'ProbeError',
    'NoMatchError',
    'NestedEnvironmentError',
]
