"""Extraction of the latest published version from the changelog page."""

from __future__ import annotations
import re

from domain.models import ChangelogVersion
from .errors import VersionNotFoundError

VERSION_RE = re.compile(
    r"Eastern\s+Sun\s+Resurrected\s+(\d+\.\d+\.\d+)\s+-\s+(\d{2}/\d{2}/\d{4})"
)


def extract_latest_version(html: str) -> ChangelogVersion:
    """Return the first "<product> X.Y.Z - DD/MM/YYYY" occurrence.

    The changelog lists newest entries first, so the first match is the
    latest release. Raises ``VersionNotFoundError`` when nothing matches.
    """
    m = VERSION_RE.search(html)
    if not m:
        raise VersionNotFoundError(
            "Could not parse version from changelog", context={"length": len(html)}
        )
    return ChangelogVersion(version=m.group(1), full_string=m.group(0), date=m.group(2))
