"""
Interpreter Probe

Runs a candidate interpreter with a short inline query to learn its version,
its tag/width, or its user scripts directory.  Every run is bounded by a
timeout; any failure raises ProbeError so callers can drop the candidate.
"""

import re
import subprocess
from pathlib import Path
from typing import Mapping, Optional, Tuple, Union

from .exceptions import ProbeError
from .logger import get_module_logger
from .models import PlatformWidth

logger = get_module_logger(__name__)

# Must stay valid for Python 2.7 as well as 3.x
_VERSION_SNIPPET = "import sys; print('.'.join(map(str, sys.version_info[:3])))"

_IDENTITY_SNIPPET = (
    "import sys, struct\n"
    "print(getattr(sys, 'winver', '%d.%d' % sys.version_info[:2]))\n"
    "print('.'.join(map(str, sys.version_info[:3])))\n"
    "print(struct.calcsize('P') * 8)\n"
)

_USER_SCRIPTS_SNIPPET = (
    "import os, sysconfig\n"
    "try:\n"
    "    scheme = sysconfig.get_preferred_scheme('user')\n"
    "except AttributeError:\n"
    "    scheme = os.name + '_user'\n"
    "print(sysconfig.get_path('scripts', scheme))\n"
)

# Ignore PYTHON* variables, user site and site.py
_ISOLATION_FLAGS = ['-E', '-s', '-S']

_VERSION_RE = re.compile(r'^\d+\.\d+\.\d+$')


class InterpreterProbe:
    """
    Query metadata from an interpreter by running it.

    Args:
        timeout_seconds: Maximum seconds to wait for each run.

    Example:
        >>> probe = InterpreterProbe(timeout_seconds=5)
        >>> probe.query_version('C:/Python311/python.exe')
        '3.11.8'
    """

    def __init__(self, timeout_seconds: Union[int, float] = 10):
        self.timeout_seconds = timeout_seconds

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def query_version(self, executable: Union[str, Path]) -> str:
        """
        Return ``major.minor.micro`` of *executable*.

        Raises:
            ProbeError: Run failed or output was not a version.
        """
        output = self._run([str(executable)] + _ISOLATION_FLAGS + ['-c', _VERSION_SNIPPET])
        version = output.strip()
        if not _VERSION_RE.match(version):
            raise ProbeError(f"Unexpected version output from {executable}: {version!r}")
        return version

    def query_identity(self, executable: Union[str, Path]) -> Tuple[str, str, PlatformWidth]:
        """
        Return ``(tag, version, width)`` of *executable* in one run.

        The tag is ``sys.winver`` (e.g. ``3.9`` or ``3.9-32``) where available.

        Raises:
            ProbeError: Run failed or output was malformed.
        """
        output = self._run([str(executable)] + _ISOLATION_FLAGS + ['-c', _IDENTITY_SNIPPET])
        lines = [line.strip() for line in output.splitlines() if line.strip()]
        if len(lines) != 3:
            raise ProbeError(f"Unexpected identity output from {executable}: {output!r}")
        tag, version, bits = lines
        if not _VERSION_RE.match(version):
            raise ProbeError(f"Unexpected version output from {executable}: {version!r}")
        try:
            width = PlatformWidth(int(bits))
        except ValueError as exc:
            raise ProbeError(f"Unexpected pointer width from {executable}: {bits!r}") from exc
        return tag, version, width

    def query_user_scripts_dir(
        self,
        executable: Union[str, Path],
        env: Optional[Mapping[str, str]] = None,
    ) -> str:
        """
        Return the user-scheme scripts directory of *executable*.

        Runs without ``-E`` so that ``PYTHONUSERBASE`` in *env* is honoured.

        Raises:
            ProbeError: Run failed or printed nothing.
        """
        output = self._run([str(executable), '-c', _USER_SCRIPTS_SNIPPET], env=env)
        path = output.strip()
        if not path:
            raise ProbeError(f"No user scripts directory reported by {executable}")
        return path

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _run(self, cmd: list, env: Optional[Mapping[str, str]] = None) -> str:
        logger.debug(f"Probing interpreter: {cmd[0]}")
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout_seconds,
                env=dict(env) if env is not None else None,
            )
        except subprocess.TimeoutExpired as exc:
            raise ProbeError(
                f"Interpreter {cmd[0]} timed out after {self.timeout_seconds}s"
            ) from exc
        except OSError as exc:
            raise ProbeError(f"Cannot run interpreter {cmd[0]}: {exc}") from exc

        if result.returncode != 0:
            raise ProbeError(
                f"Interpreter {cmd[0]} exited with code {result.returncode}: "
                f"{(result.stderr or '').strip()}"
            )
        return result.stdout or ''
