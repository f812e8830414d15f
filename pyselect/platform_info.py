"""
Host platform queries used by discovery and activation.
"""

import os
import platform
from pathlib import Path
from typing import Mapping, Optional


def is_64bit_host(environ: Optional[Mapping[str, str]] = None) -> bool:
    """
    Return True when the operating system is 64-bit.

    A 32-bit interpreter on 64-bit Windows sees ``PROCESSOR_ARCHITECTURE=x86``
    but also gets ``PROCESSOR_ARCHITEW6432``, so both are checked before
    falling back to ``platform.machine()``.
    """
    if environ is None:
        environ = os.environ
    if environ.get('PROCESSOR_ARCHITEW6432'):
        return True
    arch = environ.get('PROCESSOR_ARCHITECTURE', '') or platform.machine()
    return '64' in arch


def default_executable_names() -> tuple:
    """Relative executable locations probed inside an install directory."""
    if os.name == 'nt':
        return ('python.exe',)
    return ('bin/python3', 'bin/python')


def default_user_base_root(environ: Optional[Mapping[str, str]] = None) -> Path:
    """``APPDATA`` on Windows, ``~/.local`` elsewhere."""
    if environ is None:
        environ = os.environ
    appdata = environ.get('APPDATA')
    if appdata:
        return Path(appdata)
    return Path.home() / '.local'
