"""
Shell Session

In-process model of the interactive shell that hosts pyselect: its prompt
renderer, the functions other tools define in it (a virtualenv ``deactivate``
for instance) and the modules loaded into it.  Only the ActivationManager
changes the prompt or loads modules.
"""

import os
from pathlib import Path
from typing import Callable, Dict, Optional, Union

from .logger import get_module_logger

logger = get_module_logger(__name__)

PromptFunction = Callable[[], str]


def default_prompt() -> str:
    """Minimal built-in prompt, e.g. ``PS C:\\work> ``."""
    return f"PS {os.getcwd()}> "


class ShellSession:
    """
    Prompt, function table and module table of the host shell.

    Example:
        >>> session = ShellSession()
        >>> session.define_function('deactivate', venv_deactivate)
        >>> session.has_function('deactivate')
        True
    """

    def __init__(self, prompt: Optional[PromptFunction] = None):
        self.prompt: Optional[PromptFunction] = prompt
        self._functions: Dict[str, Callable[[], None]] = {}
        self._modules: Dict[str, Path] = {}

    def render_prompt(self) -> str:
        return (self.prompt or default_prompt)()

    # ------------------------------------------------------------------
    # Functions
    # ------------------------------------------------------------------

    def define_function(self, name: str, func: Callable[[], None]) -> None:
        self._functions[name] = func

    def remove_function(self, name: str) -> None:
        self._functions.pop(name, None)

    def has_function(self, name: str) -> bool:
        return name in self._functions

    def invoke_function(self, name: str) -> None:
        """Call a defined function; KeyError if it does not exist."""
        logger.debug(f"Invoking shell function '{name}'")
        self._functions[name]()

    # ------------------------------------------------------------------
    # Modules
    # ------------------------------------------------------------------

    def load_module(self, name: str, path: Union[str, Path]) -> None:
        logger.debug(f"Loading shell module '{name}' from {path}")
        self._modules[name] = Path(path)

    def unload_module(self, name: str) -> None:
        if self._modules.pop(name, None) is not None:
            logger.debug(f"Unloaded shell module '{name}'")

    def is_module_loaded(self, name: str) -> bool:
        return name in self._modules
