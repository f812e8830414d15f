"""
Source Scanners

Each scanner enumerates raw interpreter candidates from one registration
source and never raises for "nothing found":

  - Pep514Scanner:    the ``Software\\Python`` company/tag tree (PEP 514),
                      per-user and per-machine, native and WOW6432Node
  - ArcGisProScanner: the conda environment registered by Esri ArcGIS Pro

A missing or unreadable key skips the affected candidate only.
"""

import ntpath
import os
from pathlib import Path
from typing import Iterable, List, Optional

from .exceptions import SourceUnavailableError
from .logger import get_module_logger
from .models import RawCandidate, InstallScope, PlatformWidth
from .platform_info import is_64bit_host, default_executable_names
from .registry import RegistrationSource, join_path

logger = get_module_logger(__name__)

HKCU = 'HKEY_CURRENT_USER'
HKLM = 'HKEY_LOCAL_MACHINE'

PEP514_SUBKEY = r'Software\Python'
PEP514_WOW64_SUBKEY = r'Software\WOW6432Node\Python'
INSTALL_PATH_KEY = 'InstallPath'

LAUNCHER_VENDOR = 'PyLauncher'

ARCGIS_KEY = join_path(HKLM, r'SOFTWARE\ESRI\ArcGISPro')
ARCGIS_VENDOR = 'ArcGISPro'
ARCGIS_VENDOR_DISPLAY_NAME = 'Esri ArcGIS Pro'

_SYS_ARCHITECTURES = {
    '32bit': PlatformWidth.BIT32,
    '64bit': PlatformWidth.BIT64,
}


class RegistryRoot:
    """One walked root of the PEP 514 tree."""

    def __init__(self, path: str, scope: InstallScope, emulated: bool):
        self.path = path
        self.scope = scope
        self.emulated = emulated

    def width(self, host_is_64bit: bool) -> PlatformWidth:
        if host_is_64bit and not self.emulated:
            return PlatformWidth.BIT64
        return PlatformWidth.BIT32

    def __repr__(self) -> str:
        return f"RegistryRoot({self.path!r}, {self.scope.value}, emulated={self.emulated})"


def pep514_roots(host_is_64bit: bool) -> List[RegistryRoot]:
    """Roots to walk; the WOW6432Node roots exist only on a 64-bit host."""
    roots = [
        RegistryRoot(join_path(HKCU, PEP514_SUBKEY), InstallScope.CURRENT_USER, False),
        RegistryRoot(join_path(HKLM, PEP514_SUBKEY), InstallScope.ALL_USERS, False),
    ]
    if host_is_64bit:
        roots += [
            RegistryRoot(join_path(HKCU, PEP514_WOW64_SUBKEY), InstallScope.CURRENT_USER, True),
            RegistryRoot(join_path(HKLM, PEP514_WOW64_SUBKEY), InstallScope.ALL_USERS, True),
        ]
    return roots


class Scanner:
    """Base class: ``scan()`` returns a list of RawCandidate."""

    name = 'scanner'

    def scan(self) -> List[RawCandidate]:
        raise NotImplementedError


class Pep514Scanner(Scanner):
    """
    Walks ``Software\\Python\\<Company>\\<Tag>`` under each root.

    Args:
        source:           Registration source to read.
        host_is_64bit:    Host width.  None = detect.
        excluded_vendors: Company keys that never denote interpreters.

    Example:
        >>> scanner = Pep514Scanner(WinRegistrySource())
        >>> for raw in scanner.scan():
        ...     print(raw.vendor, raw.tag, raw.install_path)
    """

    name = 'pep514'

    def __init__(
        self,
        source: RegistrationSource,
        host_is_64bit: Optional[bool] = None,
        excluded_vendors: Iterable[str] = (LAUNCHER_VENDOR,),
    ):
        self.source = source
        self.host_is_64bit = is_64bit_host() if host_is_64bit is None else host_is_64bit
        self.excluded_vendors = {v.lower() for v in excluded_vendors}

    def scan(self) -> List[RawCandidate]:
        candidates = []
        for root in pep514_roots(self.host_is_64bit):
            candidates.extend(self._scan_root(root))
        logger.debug(f"PEP 514 scan found {len(candidates)} candidate(s)")
        return candidates

    def _scan_root(self, root: RegistryRoot) -> List[RawCandidate]:
        try:
            vendors = self.source.list_children(root.path)
        except SourceUnavailableError as exc:
            logger.debug(f"Skipping registry root: {exc}")
            return []

        candidates = []
        for vendor in vendors:
            if vendor.lower() in self.excluded_vendors:
                logger.debug(f"Skipping excluded vendor {vendor} under {root.path}")
                continue
            vendor_path = join_path(root.path, vendor)
            try:
                tags = self.source.list_children(vendor_path)
                vendor_display = self.source.read_value(vendor_path, 'DisplayName')
            except SourceUnavailableError as exc:
                logger.debug(f"Skipping vendor {vendor}: {exc}")
                continue
            for tag in tags:
                candidate = self._read_tag(root, vendor, vendor_display, tag)
                if candidate is not None:
                    candidates.append(candidate)
        return candidates

    def _read_tag(
        self,
        root: RegistryRoot,
        vendor: str,
        vendor_display: Optional[str],
        tag: str,
    ) -> Optional[RawCandidate]:
        tag_path = join_path(root.path, vendor, tag)
        install_key = join_path(tag_path, INSTALL_PATH_KEY)
        try:
            install_path = self.source.read_value(install_key)
            executable = self.source.read_value(install_key, 'ExecutablePath')
            tag_display = self.source.read_value(tag_path, 'DisplayName')
            sys_arch = self.source.read_value(tag_path, 'SysArchitecture')
        except SourceUnavailableError as exc:
            logger.debug(f"Skipping {vendor}\\{tag}: {exc}")
            return None

        if not install_path:
            logger.debug(f"Skipping {vendor}\\{tag}: empty InstallPath")
            return None

        width = _SYS_ARCHITECTURES.get((sys_arch or '').lower(), root.width(self.host_is_64bit))
        return RawCandidate(
            vendor=vendor,
            tag=tag,
            install_path=install_path,
            install_scope=root.scope,
            platform_width=width,
            executable_path=executable or None,
            vendor_display_name=vendor_display or None,
            tag_display_name=tag_display or None,
            source=self.name,
        )


class ArcGisProScanner(Scanner):
    """
    Reads the conda environment ArcGIS Pro registers under HKLM.

    ``PythonCondaEnv`` is either an environment name under
    ``<PythonCondaRoot>\\envs`` or an absolute path to a cloned environment.
    """

    name = 'arcgispro'

    def __init__(self, source: RegistrationSource, executable_names: Optional[Iterable[str]] = None):
        self.source = source
        self.executable_names = tuple(executable_names or default_executable_names())

    def scan(self) -> List[RawCandidate]:
        try:
            conda_root = self.source.read_value(ARCGIS_KEY, 'PythonCondaRoot')
            conda_env = self.source.read_value(ARCGIS_KEY, 'PythonCondaEnv')
        except SourceUnavailableError as exc:
            logger.debug(f"ArcGIS Pro not registered: {exc}")
            return []

        if not conda_root or not conda_env:
            logger.debug("ArcGIS Pro registration incomplete; skipping")
            return []

        if ntpath.isabs(conda_env) or os.path.isabs(conda_env):
            install_path = conda_env
            env_name = Path(conda_env).name or conda_env
        else:
            install_path = os.path.join(conda_root, 'envs', conda_env)
            env_name = conda_env

        executable = self._find_executable(install_path)
        if executable is None:
            logger.debug(f"ArcGIS Pro environment has no interpreter: {install_path}")
            return []

        return [RawCandidate(
            vendor=ARCGIS_VENDOR,
            tag='',
            install_path=install_path,
            install_scope=InstallScope.ALL_USERS,
            executable_path=str(executable),
            vendor_display_name=ARCGIS_VENDOR_DISPLAY_NAME,
            tag_display_name=env_name,
            source=self.name,
            probe_tag=True,
        )]

    def _find_executable(self, install_path: str) -> Optional[Path]:
        for name in self.executable_names:
            candidate = Path(install_path) / name
            if candidate.is_file():
                return candidate
        return None
