"""Retrieval of every raw resource a sync round needs.

Three groups are fetched:
 - the changelog page (version check)
 - the two HTML reference pages (gems.htm, runewords.htm)
 - the TXT tables, read from a local mirror directory when one is configured
   and otherwise downloaded from ``txt_base_url``

All network access goes through one shared ``httpx.AsyncClient``; a failure
of any resource surfaces as ``FetchError`` carrying the resource name.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Dict, Mapping, Optional

import httpx

from config import settings
from core import async_http, filesystem
from core.async_http import FetchError

_log = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class ReferencePages:
    gems_html: str
    runewords_html: str


class RemoteSources:
    def __init__(
        self,
        *,
        client: Optional[httpx.AsyncClient] = None,
        changelog_url: str = settings.CHANGELOG_URL,
        gems_url: str = settings.GEMS_URL,
        runewords_url: str = settings.RUNEWORDS_URL,
        txt_dir: Optional[str] = settings.TXT_DIR,
        txt_base_url: str = settings.TXT_BASE_URL,
        txt_files: Mapping[str, str] = settings.TXT_FILES,
        retries: int | None = None,
        backoff: float | None = None,
    ) -> None:
        self._client = client
        self._owns_client = client is None
        self.changelog_url = changelog_url
        self.gems_url = gems_url
        self.runewords_url = runewords_url
        self.txt_dir = txt_dir
        self.txt_base_url = txt_base_url.rstrip("/")
        self.txt_files = dict(txt_files)
        self._retries = retries
        self._backoff = backoff

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = async_http.new_client()
        return self._client

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "RemoteSources":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    async def fetch_changelog(self) -> str:
        return await async_http.fetch(
            self.changelog_url,
            client=self.client,
            resource="changelog",
            retries=self._retries,
            backoff=self._backoff,
        )

    async def fetch_reference_pages(self) -> ReferencePages:
        pages = await async_http.fetch_many(
            {"gems.htm": self.gems_url, "runewords.htm": self.runewords_url},
            client=self.client,
            retries=self._retries,
            backoff=self._backoff,
        )
        return ReferencePages(gems_html=pages["gems.htm"], runewords_html=pages["runewords.htm"])

    async def fetch_txt_tables(self) -> Dict[str, str]:
        """Return ``{logical name: raw TSV text}`` for every configured TXT file."""
        if self.txt_dir:
            return self._read_txt_mirror(self.txt_dir)
        urls = {name: f"{self.txt_base_url}/{fname}" for name, fname in self.txt_files.items()}
        by_name = await async_http.fetch_many(
            urls, client=self.client, retries=self._retries, backoff=self._backoff
        )
        _log.info("Fetched %d TXT tables from %s", len(by_name), self.txt_base_url)
        return by_name

    def _read_txt_mirror(self, directory: str) -> Dict[str, str]:
        tables: Dict[str, str] = {}
        for name, fname in self.txt_files.items():
            path = os.path.join(directory, fname)
            try:
                tables[name] = filesystem.read_text(path)
            except OSError as e:
                raise FetchError(fname, reason=f"cannot read {path}: {e.strerror or e}") from e
        _log.info("Read %d TXT tables from mirror %s", len(tables), directory)
        return tables


__all__ = ["ReferencePages", "RemoteSources"]
