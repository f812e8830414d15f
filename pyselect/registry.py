"""
Registration sources

Hierarchical key/value stores that scanners walk.  Paths are backslash
separated and start with a hive name, e.g.::

    HKEY_LOCAL_MACHINE\\Software\\Python\\PythonCore\\3.11\\InstallPath

Two implementations are provided:
  - WinRegistrySource:      the live Windows registry (``winreg``)
  - ManifestRegistrySource: a YAML manifest mirroring the registry tree,
                            for non-Windows hosts and tests

Manifest layout::

    HKEY_CURRENT_USER:
      Software:
        Python:
          PythonCore:
            DisplayName: Python Software Foundation
            "3.11":
              InstallPath:
                (default): C:\\Users\\me\\AppData\\Local\\Programs\\Python\\Python311
                ExecutablePath: C:\\Users\\me\\...\\python.exe

Mappings are keys, scalars are named values and ``(default)`` is the key's
unnamed value.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .exceptions import SourceUnavailableError, PySelectConfigError
from .logger import get_module_logger

try:
    import winreg
except ImportError:  # not running on Windows
    winreg = None

logger = get_module_logger(__name__)

DEFAULT_VALUE_NAME = '(default)'


class _ManifestLoader(yaml.SafeLoader):
    """SafeLoader that keeps scalars as written (``3.10`` stays a string), except null."""


_ManifestLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag == 'tag:yaml.org,2002:null']
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}

_HIVE_NAMES = {
    'HKEY_CURRENT_USER': 'HKEY_CURRENT_USER',
    'HKCU': 'HKEY_CURRENT_USER',
    'HKEY_LOCAL_MACHINE': 'HKEY_LOCAL_MACHINE',
    'HKLM': 'HKEY_LOCAL_MACHINE',
}


def join_path(*parts: str) -> str:
    """Join registry path components with backslashes."""
    return '\\'.join(p.strip('\\') for p in parts if p)


def _split_path(path: str):
    parts = [p for p in path.split('\\') if p]
    if not parts:
        raise SourceUnavailableError("Empty registry path")
    hive = _HIVE_NAMES.get(parts[0].upper())
    if hive is None:
        raise SourceUnavailableError(f"Unknown registry hive in path: {path}")
    return hive, parts[1:]


class RegistrationSource:
    """
    Read-only hierarchical registration store.

    Subclasses implement ``list_children`` and ``read_value``.
    """

    def list_children(self, path: str) -> List[str]:
        """
        Return the names of the subkeys of *path*.

        Raises:
            SourceUnavailableError: The key is missing or unreadable.
        """
        raise NotImplementedError

    def read_value(self, path: str, name: Optional[str] = None) -> Optional[str]:
        """
        Return the value *name* of key *path* (None = the default value).

        Returns None when the key exists but the value does not.

        Raises:
            SourceUnavailableError: The key is missing or unreadable.
        """
        raise NotImplementedError

    def has_key(self, path: str) -> bool:
        try:
            self.list_children(path)
        except SourceUnavailableError:
            return False
        return True


class WinRegistrySource(RegistrationSource):
    """
    Live Windows registry.

    Args:
        use_64bit_view: Open keys with ``KEY_WOW64_64KEY`` so a 32-bit
                        interpreter on a 64-bit host sees the native view.
                        ``WOW6432Node`` paths stay readable explicitly.
    """

    def __init__(self, use_64bit_view: bool = True):
        if winreg is None:
            raise SourceUnavailableError("The Windows registry is not available on this host")
        self._access = winreg.KEY_READ
        if use_64bit_view:
            self._access |= winreg.KEY_WOW64_64KEY

    def _open(self, path: str):
        hive_name, parts = _split_path(path)
        hive = getattr(winreg, hive_name)
        try:
            return winreg.OpenKey(hive, '\\'.join(parts), 0, self._access)
        except OSError as exc:
            raise SourceUnavailableError(f"Cannot open registry key {path}: {exc}") from exc

    def list_children(self, path: str) -> List[str]:
        names = []
        with self._open(path) as key:
            index = 0
            while True:
                try:
                    names.append(winreg.EnumKey(key, index))
                except OSError:
                    break
                index += 1
        return names

    def read_value(self, path: str, name: Optional[str] = None) -> Optional[str]:
        with self._open(path) as key:
            try:
                value, _ = winreg.QueryValueEx(key, name or '')
            except OSError:
                return None
        if value is None:
            return None
        return str(value)


class ManifestRegistrySource(RegistrationSource):
    """
    Registry tree loaded from a mapping (or a YAML manifest file).

    Lookups are case-insensitive like the Windows registry.

    Example:
        >>> source = ManifestRegistrySource({'HKEY_CURRENT_USER': {'Software': {}}})
        >>> source.list_children('HKEY_CURRENT_USER')
        ['Software']
    """

    def __init__(self, tree: Dict[str, Any]):
        self._tree = tree or {}

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> 'ManifestRegistrySource':
        """
        Load a manifest from YAML.

        Raises:
            PySelectConfigError: File unreadable or not a mapping.
        """
        manifest_path = Path(path)
        try:
            with open(manifest_path, 'r', encoding='utf-8') as f:
                data = yaml.load(f, Loader=_ManifestLoader)
        except (OSError, yaml.YAMLError) as exc:
            raise PySelectConfigError(
                f"Cannot load registry manifest {manifest_path}: {exc}"
            ) from exc
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise PySelectConfigError(
                f"Registry manifest {manifest_path} must contain a mapping"
            )
        logger.debug(f"Loaded registry manifest: {manifest_path}")
        return cls(data)

    @staticmethod
    def _lookup(node: Dict[str, Any], name: str):
        if name in node:
            return node[name]
        lowered = name.lower()
        for key, value in node.items():
            if str(key).lower() == lowered:
                return value
        raise KeyError(name)

    def _node(self, path: str) -> Dict[str, Any]:
        hive, parts = _split_path(path)
        node = self._tree
        for part in [hive] + parts:
            if not isinstance(node, dict):
                raise SourceUnavailableError(f"Registry key not found: {path}")
            try:
                node = self._lookup(node, part)
            except KeyError:
                if part == hive:
                    # Allow short hive names in the manifest too
                    short = {v: k for k, v in _HIVE_NAMES.items() if k != v}[hive]
                    try:
                        node = self._lookup(node, short)
                        continue
                    except KeyError:
                        pass
                raise SourceUnavailableError(f"Registry key not found: {path}")
            if node is None:
                node = {}
        if not isinstance(node, dict):
            raise SourceUnavailableError(f"Registry path is a value, not a key: {path}")
        return node

    def list_children(self, path: str) -> List[str]:
        node = self._node(path)
        return [
            str(key) for key, value in node.items()
            if isinstance(value, dict) or value is None
        ]

    def read_value(self, path: str, name: Optional[str] = None) -> Optional[str]:
        node = self._node(path)
        try:
            value = self._lookup(node, name or DEFAULT_VALUE_NAME)
        except KeyError:
            return None
        if value is None or isinstance(value, dict):
            return None
        return str(value)
