from __future__ import annotations

import asyncio

import httpx
import pytest

from config import settings
from core import async_http
from core.async_http import FetchError
from scraping.remote_sources import RemoteSources
from tests.factories import GEMS_HTML, TXT_TABLES, FakeSite, site_routes


def _sources(site: FakeSite, **kwargs) -> RemoteSources:
    kwargs.setdefault("txt_dir", None)
    return RemoteSources(client=site.client(), retries=0, backoff=0, **kwargs)


def test_fetch_retries_server_errors_then_succeeds():
    calls = {"n": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["n"] += 1
        if calls["n"] < 3:
            return httpx.Response(503)
        return httpx.Response(200, text="ok")

    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await async_http.fetch(
                "https://example.test/x", client=client, resource="x", retries=3, backoff=0
            )

    assert asyncio.run(run()) == "ok"
    assert calls["n"] == 3


def test_fetch_does_not_retry_client_errors():
    calls = {"n": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["n"] += 1
        return httpx.Response(404)

    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            await async_http.fetch("https://example.test/x", client=client, resource="x", retries=3, backoff=0)

    with pytest.raises(FetchError) as exc:
        asyncio.run(run())
    assert exc.value.status == 404 and exc.value.resource == "x"
    assert calls["n"] == 1


def test_fetch_transport_error_becomes_fetch_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            await async_http.fetch("https://example.test/x", client=client, resource="x", retries=1, backoff=0)

    with pytest.raises(FetchError) as exc:
        asyncio.run(run())
    assert exc.value.status is None
    assert "connection refused" in str(exc.value)


def test_fetch_many_cancels_pending_on_first_failure():
    cancelled = []

    async def slow():
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            cancelled.append(True)
            raise

    async def boom():
        raise FetchError("gems.htm", status=500)

    async def run():
        await async_http.gather_or_cancel(slow(), boom())

    with pytest.raises(FetchError):
        asyncio.run(run())
    assert cancelled == [True]


def test_fetch_changelog_and_reference_pages():
    site = FakeSite(site_routes("3.9.10"))

    async def run():
        async with _sources(site) as sources:
            return await sources.fetch_changelog(), await sources.fetch_reference_pages()

    changelog, pages = asyncio.run(run())
    assert "3.9.10" in changelog
    assert pages.gems_html == GEMS_HTML
    assert site.requests[settings.GEMS_URL] == 1


def test_txt_tables_downloaded_from_base_url():
    site = FakeSite(site_routes())

    async def run():
        async with _sources(site) as sources:
            return await sources.fetch_txt_tables()

    tables = asyncio.run(run())
    assert set(tables) == set(settings.TXT_FILES)
    assert tables["runes"] == TXT_TABLES["runes"]


def test_txt_table_missing_upstream_fails_round():
    routes = site_routes()
    del routes[f"{settings.TXT_BASE_URL}/skills.txt"]
    site = FakeSite(routes)

    async def run():
        async with _sources(site) as sources:
            return await sources.fetch_txt_tables()

    with pytest.raises(FetchError) as exc:
        asyncio.run(run())
    assert exc.value.resource == "skills"
    assert exc.value.status == 404


def test_txt_tables_from_local_mirror(tmp_path):
    for name, fname in settings.TXT_FILES.items():
        (tmp_path / fname).write_text("\ufeff" + TXT_TABLES[name], encoding="utf-8")
    site = FakeSite({})

    async def run():
        async with _sources(site, txt_dir=str(tmp_path)) as sources:
            return await sources.fetch_txt_tables()

    tables = asyncio.run(run())
    assert tables["gems"] == TXT_TABLES["gems"]
    assert site.total_requests() == 0


def test_local_mirror_missing_file(tmp_path):
    (tmp_path / "gems.txt").write_text(TXT_TABLES["gems"], encoding="utf-8")
    site = FakeSite({})

    async def run():
        async with _sources(site, txt_dir=str(tmp_path)) as sources:
            return await sources.fetch_txt_tables()

    with pytest.raises(FetchError) as exc:
        asyncio.run(run())
    assert exc.value.status is None
    assert exc.value.resource == "properties.txt"
