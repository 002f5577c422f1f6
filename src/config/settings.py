"""Global configuration and constants for the ESR data sync pipeline."""

from __future__ import annotations

import os
from typing import Final

ESR_BASE_URL: Final = os.environ.get(
    "ESR_BASE_URL", "https://celestialrayone.github.io/Eastern_Sun_Resurrected/docs"
).rstrip("/")
CHANGELOG_URL: Final = f"{ESR_BASE_URL}/changelogs.html"
GEMS_URL: Final = f"{ESR_BASE_URL}/gems.htm"
RUNEWORDS_URL: Final = f"{ESR_BASE_URL}/runewords.htm"

DEFAULT_USER_AGENT: Final = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/115.0 Safari/537.36"
)
DEFAULT_TIMEOUT: Final = 15  # seconds
DEFAULT_RETRIES: Final = 3
DEFAULT_BACKOFF_FACTOR: Final = 0.6
DATA_DIR: Final = os.environ.get("ESR_DATA_DIR", "data")
DB_PATH: Final = os.environ.get("ESR_DB_PATH", os.path.join(DATA_DIR, "esr.sqlite"))

# TXT tables are read from a local mirror when ESR_TXT_DIR is set, otherwise
# from ESR_TXT_BASE_URL.
TXT_DIR: Final = os.environ.get("ESR_TXT_DIR") or None
TXT_BASE_URL: Final = os.environ.get("ESR_TXT_BASE_URL", f"{ESR_BASE_URL}/txt").rstrip("/")

# Logical table name -> file name
TXT_FILES: Final = {
    "properties": "properties.txt",
    "gems": "gems.txt",
    "runes": "runes.txt",
    "unique_items": "uniqueitems.txt",
    "sets": "sets.txt",
    "set_items": "setitems.txt",
    "weapons": "weapons.txt",
    "armor": "armor.txt",
    "misc": "misc.txt",
    "item_types": "itemtypes.txt",
    "cubemain": "cubemain.txt",
    "monstats": "monstats.txt",
    "skills": "skills.txt",
}

