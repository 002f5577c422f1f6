"""Version oracle: latest published content version vs. the stored one.

Versions are compared component-wise as integers (``3.10.0 > 3.9.99``);
missing trailing components count as 0 so ``3.9`` equals ``3.9.0``.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Protocol

from domain.models import ChangelogVersion
from parsing.changelog_parser import extract_latest_version

_log = logging.getLogger(__name__)


class ChangelogSource(Protocol):  # pragma: no cover - structural
    async def fetch_changelog(self) -> str: ...


def _components(version: str) -> List[int]:
    parts: List[int] = []
    for piece in version.strip().split("."):
        try:
            parts.append(int(piece))
        except ValueError:
            parts.append(0)
    return parts


def compare_versions(a: str, b: str) -> int:
    """Return -1, 0 or 1 as ``a`` is lower than, equal to or higher than ``b``."""
    pa, pb = _components(a), _components(b)
    width = max(len(pa), len(pb))
    pa += [0] * (width - len(pa))
    pb += [0] * (width - len(pb))
    return (pa > pb) - (pa < pb)


def is_version_different(stored: Optional[str], remote: str) -> bool:
    if stored is None:
        return True
    return compare_versions(stored, remote) != 0


class VersionOracle:
    def __init__(self, source: ChangelogSource) -> None:
        self._source = source

    async def fetch_latest_version(self) -> ChangelogVersion:
        """Fetch the changelog and extract its newest version.

        Raises ``FetchError`` for transport failures and
        ``VersionNotFoundError`` when the page has no version line.
        """
        html = await self._source.fetch_changelog()
        latest = extract_latest_version(html)
        _log.info("Latest published version: %s (%s)", latest.version, latest.date)
        return latest

    async def needs_refresh(self, stored: Optional[str]) -> tuple[bool, ChangelogVersion]:
        latest = await self.fetch_latest_version()
        return is_version_different(stored, latest.version), latest


__all__ = ["compare_versions", "is_version_different", "VersionOracle", "ChangelogSource"]
