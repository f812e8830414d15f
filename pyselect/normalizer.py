"""
Candidate Normalizer

Turns RawCandidate records into Distribution records.  A candidate is dropped
(never raised) when no executable resolves or when probing it fails.
"""

from pathlib import Path
from typing import Iterable, List, Optional

from .exceptions import ProbeError
from .logger import get_module_logger
from .models import Distribution, RawCandidate, PlatformWidth
from .platform_info import default_executable_names
from .probe import InterpreterProbe

logger = get_module_logger(__name__)


class Normalizer:
    """
    Resolve, probe and normalize raw candidates.

    Args:
        probe:            InterpreterProbe (or a compatible fake).
        executable_names: Relative names tried inside ``install_path`` when
                          no ``ExecutablePath`` was registered.
    """

    def __init__(
        self,
        probe: Optional[InterpreterProbe] = None,
        executable_names: Optional[Iterable[str]] = None,
    ):
        self.probe = probe if probe is not None else InterpreterProbe()
        self.executable_names = tuple(executable_names or default_executable_names())

    def resolve_executable(self, raw: RawCandidate) -> Optional[Path]:
        """Registered ExecutablePath first, then the default names."""
        if raw.executable_path:
            registered = Path(raw.executable_path)
            if registered.is_file():
                return registered
            logger.debug(f"Registered executable missing: {registered}")
        for name in self.executable_names:
            candidate = Path(raw.install_path) / name
            if candidate.is_file():
                return candidate
        return None

    def normalize(self, raw: RawCandidate) -> Optional[Distribution]:
        """
        Return a Distribution, or None when the candidate must be dropped.
        """
        if not raw.install_path:
            logger.debug(f"Dropping {raw.vendor}\\{raw.tag}: no install path")
            return None

        executable = self.resolve_executable(raw)
        if executable is None:
            logger.debug(
                f"Dropping {raw.vendor}\\{raw.tag}: no interpreter in {raw.install_path}"
            )
            return None

        tag = raw.tag
        width = raw.platform_width
        try:
            if raw.probe_tag:
                tag, version, width = self.probe.query_identity(executable)
            else:
                version = self.probe.query_version(executable)
        except ProbeError as exc:
            logger.debug(f"Dropping {raw.vendor}\\{raw.tag}: {exc}")
            return None

        if width is None:
            width = PlatformWidth.BIT64

        return Distribution(
            vendor=raw.vendor,
            tag=tag,
            install_path=Path(raw.install_path),
            executable_path=executable,
            reported_version=version,
            platform_width=width,
            install_scope=raw.install_scope,
            vendor_display_name=raw.vendor_display_name,
            tag_display_name=raw.tag_display_name,
        )

    def normalize_all(self, raws: Iterable[RawCandidate]) -> List[Distribution]:
        distributions = []
        for raw in raws:
            dist = self.normalize(raw)
            if dist is not None:
                distributions.append(dist)
        return distributions
