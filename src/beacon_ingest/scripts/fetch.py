# File: beacon_ingest/scripts/fetch.py
"""Download remote sheet exports to local files.

All downloads share one AsyncClient and run concurrently; each task owns its
destination file. Every task settles before the first failure is raised.
"""
from __future__ import annotations

import asyncio
from pathlib import Path
from typing import List, Sequence

import httpx
import typer

from beacon_ingest.scripts.errors import FetchError, FetchTimeout, IoError
from beacon_ingest.scripts.settings import Download

DEFAULT_HEADERS = {
    "User-Agent": "beacon-ingest/0.1 (+tourist beacon sheet export)",
    "Accept": "text/csv,application/vnd.openxmlformats-officedocument.spreadsheetml.sheet,*/*",
}


def ensure_parent(path: Path):
    path.parent.mkdir(parents=True, exist_ok=True)


async def fetch(url: str, dest: Path, client: httpx.AsyncClient) -> Path:
    """GET url and stream the body to dest, overwriting it."""
    dest = Path(dest)
    try:
        async with client.stream("GET", url) as response:
            response.raise_for_status()
            with open(dest, "wb") as out:
                async for chunk in response.aiter_bytes():
                    out.write(chunk)
    except httpx.TimeoutException as exc:
        raise FetchTimeout(url, exc) from exc
    except httpx.HTTPStatusError as exc:
        raise FetchError(url, f"HTTP {exc.response.status_code}") from exc
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise FetchError(url, exc) from exc
    except OSError as exc:
        raise FetchError(url, f"cannot write {dest}: {exc}") from exc
    return dest


async def fetch_all_async(
    downloads: Sequence[Download],
    timeout: float = 30.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> List[Path]:
    for item in downloads:
        try:
            ensure_parent(Path(item.path))
        except OSError as exc:
            raise IoError(f"Cannot create directory for {item.path}: {exc}") from exc

    async with httpx.AsyncClient(
        timeout=timeout,
        follow_redirects=True,  # sheet exports redirect to googleusercontent
        headers=DEFAULT_HEADERS,
        transport=transport,
    ) as client:
        outcomes = await asyncio.gather(
            *(fetch(item.url, Path(item.path), client) for item in downloads),
            return_exceptions=True,
        )

    failures = [o for o in outcomes if isinstance(o, BaseException)]
    if failures:
        for extra in failures[1:]:
            typer.echo(f"[error] {extra}", err=True)
        raise failures[0]
    return list(outcomes)


def fetch_all(
    downloads: Sequence[Download],
    timeout: float = 30.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> List[Path]:
    """Run every download concurrently and wait for all of them."""
    return asyncio.run(fetch_all_async(downloads, timeout=timeout, transport=transport))
