"""
Pytest configuration and shared fixtures for pyselect unit tests.
"""

from pathlib import Path

import pytest

from pyselect.exceptions import ProbeError
from pyselect.models import Distribution, InstallScope, PlatformWidth
from pyselect.platform_info import default_executable_names


class FakeProbe:
    """
    InterpreterProbe stand-in that never spawns a process.

    ``versions`` maps executable path (str) -> version; a missing entry
    raises ProbeError, like an interpreter that fails to start.
    """

    def __init__(self, versions=None, identities=None, user_scripts=None):
        self.versions = versions or {}
        self.identities = identities or {}
        self.user_scripts = user_scripts
        self.user_scripts_env = None

    def query_version(self, executable):
        try:
            return self.versions[str(executable)]
        except KeyError:
            raise ProbeError(f"cannot run {executable}")

    def query_identity(self, executable):
        try:
            return self.identities[str(executable)]
        except KeyError:
            raise ProbeError(f"cannot run {executable}")

    def query_user_scripts_dir(self, executable, env=None):
        self.user_scripts_env = dict(env) if env is not None else None
        if self.user_scripts is None:
            raise ProbeError("no user scripts")
        return self.user_scripts


def make_install(root: Path, name: str, with_executable: bool = True) -> Path:
    """Create an install directory, optionally containing an interpreter file."""
    install = root / name
    install.mkdir(parents=True, exist_ok=True)
    if with_executable:
        exe = install / default_executable_names()[0]
        exe.parent.mkdir(parents=True, exist_ok=True)
        exe.write_text('')
    return install


def executable_of(install: Path) -> Path:
    return install / default_executable_names()[0]


def make_dist(
    vendor='PythonCore',
    tag='3.11',
    version='3.11.4',
    width=PlatformWidth.BIT64,
    scope=InstallScope.ALL_USERS,
    install_path=None,
) -> Distribution:
    install = Path(install_path) if install_path else Path('/opt') / vendor / tag
    return Distribution(
        vendor=vendor,
        tag=tag,
        install_path=install,
        executable_path=executable_of(install),
        reported_version=version,
        platform_width=width,
        install_scope=scope,
    )


@pytest.fixture
def fake_probe():
    return FakeProbe()


@pytest.fixture
def temp_root(tmp_path):
    """Temporary directory for fake installations."""
    return tmp_path


@pytest.fixture
def clean_environ():
    """Minimal environment dict for ActivationManager tests."""
    return {
        'PATH': '/usr/bin',
        'PYTHONHOME': '',
        'APPDATA': '/home/user/AppData/Roaming',
        'KEEP_ME': 'unchanged',
    }
