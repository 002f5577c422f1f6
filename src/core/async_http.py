"""Async HTTP utilities using httpx.

``fetch`` retrieves one named resource with retry/backoff; ``fetch_many``
fans several fetches out concurrently and fails fast: the first failure
cancels the remaining in-flight requests and propagates.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Dict, List, Mapping, Optional, TypeVar

import httpx

from config import settings

_log = logging.getLogger(__name__)

T = TypeVar("T")


class FetchError(RuntimeError):
    """Transport failure for a named resource (non-2xx status or network error)."""

    def __init__(self, resource: str, *, status: Optional[int] = None, reason: str = ""):
        detail = f"{status} {reason}".strip() if status is not None else reason
        super().__init__(f"Failed to fetch {resource}: {detail}")
        self.resource = resource
        self.status = status
        self.reason = reason


def new_client(timeout: float | None = None) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        headers={"User-Agent": settings.DEFAULT_USER_AGENT},
        timeout=timeout if timeout is not None else settings.DEFAULT_TIMEOUT,
        follow_redirects=True,
    )


def _retryable(exc: httpx.HTTPError) -> bool:
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code >= 500
    return True


async def fetch(
    url: str,
    *,
    client: Optional[httpx.AsyncClient] = None,
    resource: str | None = None,
    retries: int | None = None,
    backoff: float | None = None,
) -> str:
    resource = resource or url
    retries = retries if retries is not None else settings.DEFAULT_RETRIES
    backoff = backoff if backoff is not None else settings.DEFAULT_BACKOFF_FACTOR
    close_client = False
    if client is None:
        client = new_client()
        close_client = True
    try:
        attempt = 0
        while True:
            attempt += 1
            try:
                resp = await client.get(url)
                resp.raise_for_status()
                return resp.text
            except httpx.HTTPError as e:
                if attempt > retries or not _retryable(e):
                    if isinstance(e, httpx.HTTPStatusError):
                        raise FetchError(
                            resource,
                            status=e.response.status_code,
                            reason=e.response.reason_phrase,
                        ) from e
                    raise FetchError(resource, reason=str(e) or type(e).__name__) from e
                delay = backoff * (2 ** (attempt - 1))
                _log.debug("Retrying %s in %.2fs (attempt %d): %s", resource, delay, attempt, e)
                await asyncio.sleep(delay)
    finally:
        if close_client:
            await client.aclose()


async def gather_or_cancel(*aws: Awaitable[T]) -> List[T]:
    """``asyncio.gather`` that cancels the still-pending siblings on the first failure."""
    tasks = [asyncio.ensure_future(a) for a in aws]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


async def fetch_many(
    urls: Mapping[str, str],
    *,
    client: Optional[httpx.AsyncClient] = None,
    retries: int | None = None,
    backoff: float | None = None,
) -> Dict[str, str]:
    """Fetch ``{resource: url}`` concurrently and return ``{resource: text}``."""
    close_client = False
    if client is None:
        client = new_client()
        close_client = True
    try:
        results = await gather_or_cancel(
            *(
                fetch(url, client=client, resource=name, retries=retries, backoff=backoff)
                for name, url in urls.items()
            )
        )
        return dict(zip(urls.keys(), results))
    finally:
        if close_client:
            await client.aclose()


__all__ = ["FetchError", "new_client", "fetch", "gather_or_cancel", "fetch_many"]
