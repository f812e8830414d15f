"""
Activation Manager

Owns every change pyselect makes to the process environment and to the host
shell session, together with the backup needed to undo them.

States:
    Inactive                     nothing applied, backup empty
    Active                       PATH / PYTHONHOME / PYTHONUSERBASE applied
    ActiveWithNestedEnvironment  Active, plus conda's own activation

activate() always deactivates first, so the backup never records a value
that pyselect itself produced.  deactivate() restores each backed-up
variable exactly, unsetting the ones that were unset before.
"""

import os
from pathlib import Path
from typing import Dict, MutableMapping, Optional, Union, Any

from .conda import (
    CondaActivator,
    MODULE_NAME as CONDA_MODULE_NAME,
    NESTED_VARIABLES,
    bootstrap_variables,
    conda_prompt,
    find_conda,
)
from .exceptions import NestedEnvironmentError, ProbeError
from .logger import get_module_logger
from .models import Distribution
from .platform_info import default_user_base_root
from .probe import InterpreterProbe
from .shell import ShellSession, default_prompt

logger = get_module_logger(__name__)

PATH_VAR = 'PATH'
HOME_VAR = 'PYTHONHOME'
USER_BASE_VAR = 'PYTHONUSERBASE'

# Shell function name other environment tools (virtualenv) define
GENERIC_DEACTIVATE = 'deactivate'


class ActivationManager:
    """
    Applies and reverts the activation of one Distribution.

    Args:
        environ:        Environment mapping to mutate.  Defaults to ``os.environ``.
        shell:          Host shell session (prompt, functions, modules).
        probe:          InterpreterProbe used to ask for the user scripts dir.
        conda:          CondaActivator for distributions that ship conda.
        user_base_root: Base of the namespaced PYTHONUSERBASE.
                        None = ``APPDATA`` or ``~/.local``.

    Example:
        >>> manager = ActivationManager()
        >>> manager.activate(dist)
        >>> subprocess.run(['python', '--version'])   # resolves to dist
        >>> manager.deactivate()
    """

    def __init__(
        self,
        environ: Optional[MutableMapping[str, str]] = None,
        shell: Optional[ShellSession] = None,
        probe: Optional[InterpreterProbe] = None,
        conda: Optional[CondaActivator] = None,
        user_base_root: Optional[Union[str, Path]] = None,
    ):
        self.environ = os.environ if environ is None else environ
        self.shell = shell if shell is not None else ShellSession()
        self.probe = probe if probe is not None else InterpreterProbe()
        self.conda = conda if conda is not None else CondaActivator()
        self.user_base_root = Path(user_base_root) if user_base_root else None

        # Backup state
        self._backup: Dict[str, Optional[str]] = {}
        self._saved_prompt = None
        self._prompt_saved = False
        self._nested_active = False
        self._active: Optional[Distribution] = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def is_active(self) -> bool:
        return self._active is not None

    @property
    def nested_active(self) -> bool:
        return self._nested_active

    @property
    def active_distribution(self) -> Optional[Distribution]:
        return self._active

    def configure(
        self,
        probe: Optional[InterpreterProbe] = None,
        user_base_root: Optional[Union[str, Path]] = None,
    ) -> None:
        """
        Apply per-call settings to this manager.

        ``probe`` is replaced only when given; ``user_base_root`` always is
        (None = ``APPDATA`` or ``~/.local``).  Takes effect on the next
        activate().
        """
        if probe is not None:
            self.probe = probe
        self.user_base_root = Path(user_base_root) if user_base_root else None

    def backup_state(self) -> Dict[str, Any]:
        """Snapshot of the backup (for diagnostics)."""
        return {
            'variables': dict(self._backup),
            'prompt_saved': self._prompt_saved,
            'nested_active': self._nested_active,
        }

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def activate(
        self,
        dist: Distribution,
        home: Optional[str] = None,
        no_user_base: bool = False,
    ) -> Distribution:
        """
        Activate *dist* in this process.

        Args:
            dist:         Distribution to activate.
            home:         Value for PYTHONHOME.  None = unset it.
            no_user_base: Leave PYTHONUSERBASE alone.

        Returns:
            The activated Distribution.
        """
        if self.is_active:
            logger.info(f"Deactivating {self._active.display_name} before re-activation")
            self.deactivate()

        logger.info(f"Activating {dist.display_name}")
        try:
            self._apply(dist, home, no_user_base)
        except Exception:
            logger.error(f"Activation of {dist.display_name} failed; restoring environment")
            self._restore()
            raise

        self._active = dist
        return dist

    def deactivate(self) -> None:
        """
        Undo the current activation.

        A ``deactivate`` function defined in the shell session (for instance
        by a virtual environment layered on top) is invoked first, even when
        nothing is active here.
        """
        if self.shell.has_function(GENERIC_DEACTIVATE):
            logger.info("Invoking shell 'deactivate' function")
            self.shell.invoke_function(GENERIC_DEACTIVATE)

        if not self.is_active and not self._backup and not self._nested_active:
            logger.debug("deactivate() called while inactive")
            return

        if self._active is not None:
            logger.info(f"Deactivating {self._active.display_name}")
        self._restore()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _apply(self, dist: Distribution, home: Optional[str], no_user_base: bool) -> None:
        self._prepend_path(str(dist.install_path), str(dist.scripts_path))
        self._set_variable(HOME_VAR, home)

        if not no_user_base:
            root = self.user_base_root or default_user_base_root(self.environ)
            user_base = root / 'Python' / f"{dist.platform_width.value}bit"
            self._set_variable(USER_BASE_VAR, str(user_base))

        try:
            user_scripts = self.probe.query_user_scripts_dir(
                dist.executable_path, env=dict(self.environ)
            )
        except ProbeError as exc:
            logger.warning(f"Could not determine user scripts directory: {exc}")
        else:
            self._prepend_path(user_scripts)

        self._activate_nested(dist)

    def _activate_nested(self, dist: Distribution) -> None:
        artifacts = find_conda(dist.install_path)
        if artifacts is None:
            logger.debug(f"No conda installation in {dist.install_path}")
            return

        logger.info(f"Found conda in {dist.install_path}; handing over activation")
        for name in NESTED_VARIABLES:
            self._backup_variable(name)
        self._saved_prompt = self.shell.prompt
        self._prompt_saved = True

        for name, value in bootstrap_variables(artifacts).items():
            self._set_variable(name, value)
        self.shell.load_module(CONDA_MODULE_NAME, artifacts.module)
        self._nested_active = True

        try:
            activation = self.conda.activate(artifacts, dist.install_path, self.environ)
        except NestedEnvironmentError as exc:
            logger.warning(f"conda activation failed: {exc}")
            return

        for name in activation.touched_variables():
            self._backup_variable(name)
        for name in activation.unsets:
            self.environ.pop(name, None)
        for name, value in activation.exports.items():
            self.environ[name] = value

        self.shell.prompt = conda_prompt(self._saved_prompt or default_prompt, self.environ)

    def _restore(self) -> None:
        if self._nested_active:
            self.shell.unload_module(CONDA_MODULE_NAME)
            self.shell.prompt = self._saved_prompt if self._saved_prompt else default_prompt
            self._nested_active = False

        for name, value in self._backup.items():
            if value is None:
                self.environ.pop(name, None)
            else:
                self.environ[name] = value

        self._backup.clear()
        self._saved_prompt = None
        self._prompt_saved = False
        self._active = None

    def _backup_variable(self, name: str) -> None:
        if name not in self._backup:
            self._backup[name] = self.environ.get(name)

    def _set_variable(self, name: str, value: Optional[str]) -> None:
        self._backup_variable(name)
        if value is None:
            self.environ.pop(name, None)
        else:
            self.environ[name] = value

    def _prepend_path(self, *directories: str) -> None:
        self._backup_variable(PATH_VAR)
        current = self.environ.get(PATH_VAR)
        entries = list(directories)
        if current:
            entries.append(current)
        self.environ[PATH_VAR] = os.pathsep.join(entries)
        logger.debug(f"Prepended to {PATH_VAR}: {', '.join(directories)}")


# ----------------------------------------------------------------------
# Process-wide instance
# ----------------------------------------------------------------------

_manager: Optional[ActivationManager] = None


def get_manager(**kwargs) -> ActivationManager:
    """
    Return the process-wide ActivationManager, creating it on first use.

    Keyword arguments are passed to the constructor on first use only.
    """
    global _manager
    if _manager is None:
        _manager = ActivationManager(**kwargs)
    return _manager
