"""
Public operations: list, activate, deactivate.

    from pyselect import api

    for dist in api.list_distributions(version='3'):
        print(dist.display_name)

    api.activate(vendor='PythonCore', version='3.11', platform_width=PlatformWidth.BIT64)
    ...
    api.deactivate()
"""

from typing import Any, Dict, Iterable, List, Optional

from .activation import ActivationManager, get_manager
from .config import PySelectConfig
from .exceptions import NoMatchError, SourceUnavailableError
from .logger import get_module_logger
from .models import Distribution, InstallScope, PlatformWidth
from .normalizer import Normalizer
from .probe import InterpreterProbe
from .ranking import DistributionFilter, rank
from .registry import ManifestRegistrySource, RegistrationSource, WinRegistrySource
from .scanners import ArcGisProScanner, Pep514Scanner, Scanner

logger = get_module_logger(__name__)


def _config(config: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    if config is None:
        return PySelectConfig.load_config()
    return PySelectConfig.merge_config(PySelectConfig.get_default_config(), config)


def registration_source(config: Dict[str, Any]) -> RegistrationSource:
    """Manifest when configured, otherwise the live registry."""
    if config['registry_manifest']:
        return ManifestRegistrySource.from_file(config['registry_manifest'])
    try:
        return WinRegistrySource()
    except SourceUnavailableError as exc:
        logger.debug(f"{exc}; discovering from an empty registry")
        return ManifestRegistrySource({})


def default_scanners(config: Optional[Dict[str, Any]] = None) -> List[Scanner]:
    """Scanners for this host, built from *config*."""
    config = _config(config)
    source = registration_source(config)
    scanners: List[Scanner] = [
        Pep514Scanner(source, excluded_vendors=config['excluded_vendors']),
    ]
    if config['include_arcgis']:
        scanners.append(ArcGisProScanner(source))
    return scanners


def discover(
    scanners: Optional[Iterable[Scanner]] = None,
    normalizer: Optional[Normalizer] = None,
    config: Optional[Dict[str, Any]] = None,
) -> List[Distribution]:
    """Run every scanner and normalize the results (unsorted)."""
    if scanners is None or normalizer is None:
        config = _config(config)
    if scanners is None:
        scanners = default_scanners(config)
    if normalizer is None:
        normalizer = Normalizer(InterpreterProbe(config['probe_timeout_seconds']))

    raws = []
    for scanner in scanners:
        found = scanner.scan()
        logger.debug(f"Scanner '{scanner.name}' returned {len(found)} candidate(s)")
        raws.extend(found)
    return normalizer.normalize_all(raws)


def list_distributions(
    vendor: Optional[str] = None,
    tag: Optional[str] = None,
    version: Optional[str] = None,
    platform_width: Optional[PlatformWidth] = None,
    install_scope: Optional[InstallScope] = None,
    *,
    scanners: Optional[Iterable[Scanner]] = None,
    normalizer: Optional[Normalizer] = None,
    config: Optional[Dict[str, Any]] = None,
) -> List[Distribution]:
    """
    Discover, filter and rank installed distributions.

    Returns:
        Ordered list, best match first.  Empty when nothing matches.
    """
    config = _config(config)
    filters = DistributionFilter(vendor, tag, version, platform_width, install_scope)
    found = discover(scanners, normalizer, config)
    return rank(found, filters, default_vendor=config['default_vendor'])


def activate(
    vendor: Optional[str] = None,
    tag: Optional[str] = None,
    version: Optional[str] = None,
    platform_width: Optional[PlatformWidth] = None,
    install_scope: Optional[InstallScope] = None,
    home: Optional[str] = None,
    no_user_base: bool = False,
    *,
    manager: Optional[ActivationManager] = None,
    scanners: Optional[Iterable[Scanner]] = None,
    normalizer: Optional[Normalizer] = None,
    config: Optional[Dict[str, Any]] = None,
) -> Distribution:
    """
    Activate the best distribution matching the filters.

    Raises:
        NoMatchError: Nothing matched.  The environment is left untouched.
    """
    config = _config(config)
    filters = DistributionFilter(vendor, tag, version, platform_width, install_scope)
    matches = rank(
        discover(scanners, normalizer, config),
        filters,
        default_vendor=config['default_vendor'],
    )
    if not matches:
        raise NoMatchError(filters)

    selected = matches[0]
    if len(matches) > 1:
        logger.info(
            f"Multiple matches found for {filters.describe()}; "
            f"using {selected.display_name}"
        )

    if manager is None:
        manager = get_manager()
        manager.configure(
            probe=InterpreterProbe(config['probe_timeout_seconds']),
            user_base_root=config['user_base_root'] or None,
        )
    return manager.activate(selected, home=home, no_user_base=no_user_base)


def deactivate(manager: Optional[ActivationManager] = None) -> None:
    """Undo the current activation; a no-op when nothing is active."""
    if manager is None:
        manager = get_manager()
    manager.deactivate()
