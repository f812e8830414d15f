"""
Ranking & Filter Engine

Filters distributions (all criteria optional, AND-combined) and sorts them
deterministically:

  1. install scope   CurrentUser before AllUsers
  2. vendor          ascending, case-insensitive
  3. version         descending, compared as versions
  4. platform width  64 before 32
  5. tag             ascending

The default vendor (``PythonCore``) is then moved in front of every other
vendor, keeping the order inside each group.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional

from packaging.version import InvalidVersion, Version

from .models import Distribution, InstallScope, PlatformWidth

DEFAULT_VENDOR = 'PythonCore'

_SCOPE_ORDER = {
    InstallScope.CURRENT_USER: 0,
    InstallScope.ALL_USERS: 1,
}

_ZERO_VERSION = Version('0')


@dataclass
class DistributionFilter:
    """
    Optional selection criteria.

    ``vendor`` is a case-insensitive prefix; ``tag`` and ``version`` are
    prefixes; ``platform_width`` and ``install_scope`` must match exactly.
    """
    vendor: Optional[str] = None
    tag: Optional[str] = None
    version: Optional[str] = None
    platform_width: Optional[PlatformWidth] = None
    install_scope: Optional[InstallScope] = None

    def matches(self, dist: Distribution) -> bool:
        if self.vendor and not dist.vendor.lower().startswith(self.vendor.lower()):
            return False
        if self.tag and not dist.tag.startswith(self.tag):
            return False
        if self.version and not dist.reported_version.startswith(self.version):
            return False
        if self.platform_width is not None and dist.platform_width != self.platform_width:
            return False
        if self.install_scope is not None and dist.install_scope != self.install_scope:
            return False
        return True

    def describe(self) -> str:
        """Human-readable summary of the requested values."""
        parts = []
        if self.vendor:
            parts.append(f"vendor '{self.vendor}'")
        if self.tag:
            parts.append(f"tag '{self.tag}'")
        if self.version:
            parts.append(f"version '{self.version}'")
        if self.platform_width is not None:
            parts.append(f"{self.platform_width.value}-bit")
        if self.install_scope is not None:
            parts.append(f"scope '{self.install_scope.value}'")
        return ', '.join(parts) if parts else 'any criteria'


def parse_version(text: str) -> Version:
    """Version for sorting; unparseable strings sort lowest."""
    try:
        return Version(text)
    except InvalidVersion:
        return _ZERO_VERSION


def sort_distributions(distributions: Iterable[Distribution]) -> List[Distribution]:
    """
    Sort by (scope asc, vendor asc, version desc, width desc, tag asc).

    Uses successive stable sorts from the least significant key up, since
    versions cannot be negated.
    """
    result = sorted(distributions, key=lambda d: d.tag)
    result.sort(key=lambda d: d.platform_width.value, reverse=True)
    result.sort(key=lambda d: parse_version(d.reported_version), reverse=True)
    result.sort(key=lambda d: (_SCOPE_ORDER[d.install_scope], d.vendor.casefold()))
    return result


def rank(
    distributions: Iterable[Distribution],
    filters: Optional[DistributionFilter] = None,
    default_vendor: str = DEFAULT_VENDOR,
) -> List[Distribution]:
    """
    Filter, sort, and move the default vendor to the front.

    Returns:
        Ordered list; empty when nothing matches.
    """
    if filters is not None:
        distributions = [d for d in distributions if filters.matches(d)]
    ordered = sort_distributions(distributions)
    default = default_vendor.casefold()
    preferred = [d for d in ordered if d.vendor.casefold() == default]
    others = [d for d in ordered if d.vendor.casefold() != default]
    return preferred + others
