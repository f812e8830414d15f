"""
Conda Integration

Some distributions (Anaconda, Miniconda, the ArcGIS Pro environment) ship
conda.  When both the conda executable and its shell module sit inside the
selected installation, activation hands over to conda's own activation.

Conda is asked for its activation as JSON::

    conda shell.powershell+json activate <prefix>

which prints ``{"path": {"PATH": [...]}, "vars": {"export": {...},
"unset": [...], "set": {...}}, "scripts": {...}}``.
"""

import json
import os
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Union

from .exceptions import NestedEnvironmentError
from .logger import get_module_logger

logger = get_module_logger(__name__)

MODULE_NAME = 'Conda'

# Variables conda's activation may set; backed up before handing over
NESTED_VARIABLES = (
    'CONDA_DEFAULT_ENV',
    'CONDA_EXE',
    'CONDA_PREFIX',
    'CONDA_PROMPT_MODIFIER',
    'CONDA_PYTHON_EXE',
    'CONDA_SHLVL',
    '_CE_CONDA',
    '_CE_M',
    '_CONDA_EXE',
    '_CONDA_ROOT',
)

if os.name == 'nt':
    CONDA_EXECUTABLE = Path('Scripts') / 'conda.exe'
    CONDA_MODULE = Path('shell') / 'condabin' / 'Conda.psm1'
    CONDA_SHELL = 'powershell'
else:
    CONDA_EXECUTABLE = Path('bin') / 'conda'
    CONDA_MODULE = Path('etc') / 'profile.d' / 'conda.sh'
    CONDA_SHELL = 'posix'


@dataclass
class CondaArtifacts:
    """Conda executable and shell module found in an installation."""
    root: Path
    executable: Path
    module: Path


@dataclass
class CondaActivation:
    """Variables conda wants exported and unset."""
    exports: Dict[str, str] = field(default_factory=dict)
    unsets: List[str] = field(default_factory=list)

    def touched_variables(self) -> List[str]:
        return list(self.exports) + list(self.unsets)


def find_conda(install_path: Union[str, Path]) -> Optional[CondaArtifacts]:
    """Return the conda artifacts of *install_path*, or None if either is missing."""
    root = Path(install_path)
    executable = root / CONDA_EXECUTABLE
    module = root / CONDA_MODULE
    if executable.is_file() and module.is_file():
        return CondaArtifacts(root=root, executable=executable, module=module)
    return None


def bootstrap_variables(artifacts: CondaArtifacts) -> Dict[str, str]:
    """Variables conda's shell hook sets before the module is loaded."""
    return {
        'CONDA_EXE': str(artifacts.executable),
        '_CE_M': '',
        '_CE_CONDA': '',
        '_CONDA_ROOT': str(artifacts.root),
        '_CONDA_EXE': str(artifacts.executable),
    }


def conda_prompt(previous, environ: Mapping[str, str]):
    """Prompt that prefixes ``CONDA_PROMPT_MODIFIER`` to *previous*."""
    def prompt() -> str:
        return environ.get('CONDA_PROMPT_MODIFIER', '') + previous()
    return prompt


class CondaActivator:
    """
    Runs conda's own activation and parses the result.

    Args:
        timeout_seconds: Maximum seconds to wait for conda.
    """

    def __init__(self, timeout_seconds: Union[int, float] = 30):
        self.timeout_seconds = timeout_seconds

    def activate(
        self,
        artifacts: CondaArtifacts,
        prefix: Union[str, Path],
        env: Mapping[str, str],
    ) -> CondaActivation:
        """
        Ask conda how to activate *prefix*.

        Raises:
            NestedEnvironmentError: conda failed or printed unexpected output.
        """
        cmd = [str(artifacts.executable), f'shell.{CONDA_SHELL}+json', 'activate', str(prefix)]
        logger.info(f"Running conda activation: {' '.join(cmd)}")
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout_seconds,
                env=dict(env),
            )
        except subprocess.TimeoutExpired as exc:
            raise NestedEnvironmentError(
                f"conda activation timed out after {self.timeout_seconds}s"
            ) from exc
        except OSError as exc:
            raise NestedEnvironmentError(f"Cannot run conda: {exc}") from exc

        if result.returncode != 0:
            raise NestedEnvironmentError(
                f"conda activation exited with code {result.returncode}: "
                f"{(result.stderr or '').strip()}"
            )
        return self.parse(result.stdout)

    @staticmethod
    def parse(output: str) -> CondaActivation:
        """Parse conda's ``+json`` activation output."""
        try:
            data = json.loads(output)
        except ValueError as exc:
            raise NestedEnvironmentError(f"conda printed invalid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise NestedEnvironmentError("conda activation output is not an object")

        activation = CondaActivation()
        for name, entries in (data.get('path') or {}).items():
            activation.exports[name] = os.pathsep.join(str(e) for e in entries)

        variables = data.get('vars') or {}
        for name, value in (variables.get('export') or {}).items():
            activation.exports[name] = '' if value is None else str(value)
        activation.unsets.extend(variables.get('unset') or [])

        scripts = (data.get('scripts') or {}).get('activate') or []
        if scripts:
            logger.debug(f"Not running conda activate.d scripts: {scripts}")
        return activation
