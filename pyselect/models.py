"""
Distribution data model

Uniform records shared by scanners, the normalizer, ranking and activation.
"""

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

# Subdirectory holding console scripts inside an installation
SCRIPTS_DIRNAME = 'Scripts' if os.name == 'nt' else 'bin'


class PlatformWidth(Enum):
    """Pointer width of an interpreter build"""
    BIT32 = 32
    BIT64 = 64


class InstallScope(Enum):
    """Registration scope of an installation"""
    CURRENT_USER = 'CurrentUser'
    ALL_USERS = 'AllUsers'


@dataclass
class RawCandidate:
    """
    Unnormalized scanner output.

    Attributes:
        vendor:               Company key name (PEP 514) or integration sentinel.
        tag:                  Tag key name.  May be empty when ``probe_tag`` is set.
        install_path:         Registered installation directory.
        install_scope:        Scope derived from the root that was walked.
        platform_width:       Width derived from the root, or None when the
                              normalizer must probe it.
        executable_path:      Registered ``ExecutablePath`` value, if any.
        vendor_display_name:  Company ``DisplayName`` value, if any.
        tag_display_name:     Tag ``DisplayName`` value, if any.
        source:               Name of the scanner that produced the record.
        probe_tag:            Ask the interpreter for tag, version and width.
    """
    vendor: str
    tag: str
    install_path: str
    install_scope: InstallScope
    platform_width: Optional[PlatformWidth] = None
    executable_path: Optional[str] = None
    vendor_display_name: Optional[str] = None
    tag_display_name: Optional[str] = None
    source: str = ''
    probe_tag: bool = False


@dataclass(frozen=True)
class Distribution:
    """One normalized, activatable interpreter installation."""
    vendor: str
    tag: str
    install_path: Path
    executable_path: Path
    reported_version: str
    platform_width: PlatformWidth
    install_scope: InstallScope
    vendor_display_name: Optional[str] = None
    tag_display_name: Optional[str] = None

    @property
    def scripts_path(self) -> Path:
        return self.install_path / SCRIPTS_DIRNAME

    @property
    def display_name(self) -> str:
        """e.g. ``Python Software Foundation Python 3.11 (64-bit, AllUsers)``"""
        vendor = self.vendor_display_name or self.vendor
        tag = self.tag_display_name or self.tag
        return (
            f"{vendor} {tag} "
            f"({self.platform_width.value}-bit, {self.install_scope.value})"
        )
