"""DocumentationFinder — best-effort documentation URL discovery over HTTP."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from urllib.parse import quote

import httpx
import structlog

from docpls.engines.docs.urls import (
    PackageMetadata,
    candidate_urls,
    fallback_url,
    normalize_url,
)
from docpls.models import DependencyRecord, Ecosystem

log = structlog.get_logger("docpls.docs")

NPM_REGISTRY_URL = "https://registry.npmjs.org/{name}"
PYPI_JSON_API = "https://pypi.org/pypi/{name}/json"

DEFAULT_TIMEOUT = 5.0
DEFAULT_CONCURRENCY = 8


def _npm_registry_url(data: dict) -> str | None:
    for key in ("homepage", "repository", "bugs"):
        value = data.get(key)
        if isinstance(value, dict):
            value = value.get("url")
        if isinstance(value, str) and value:
            return normalize_url(value)
    return None


def _pypi_registry_url(data: dict) -> str | None:
    info = data.get("info") or {}
    project_urls = info.get("project_urls") or {}
    for key in ("Documentation", "Homepage"):
        for pk, pv in project_urls.items():
            if pk.lower() == key.lower() and pv:
                return normalize_url(pv)
    home_page = info.get("home_page")
    return normalize_url(home_page) if home_page else None


class DocumentationFinder:
    """Find a documentation URL for a package.

    Candidates are tried in order and, when *verify* is set, each one must
    answer a HEAD request with a status below 400. Network errors only ever
    disqualify the candidate at hand.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        verify: bool = True,
        concurrency: int = DEFAULT_CONCURRENCY,
    ) -> None:
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout
        self._verify = verify
        self._concurrency = concurrency

    async def __aenter__(self) -> DocumentationFinder:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout, follow_redirects=True)
        return self

    async def __aexit__(self, *exc: object) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("DocumentationFinder must be used as an async context manager")
        return self._client

    # ── network primitives ───────────────────────────────────────────────

    async def is_reachable(self, url: str) -> bool:
        """HEAD *url*; a 405 is retried once as GET."""
        try:
            resp = await self.client.head(url, timeout=self._timeout)
            if resp.status_code == 405:
                resp = await self.client.get(url, timeout=self._timeout)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            log.debug("docs.unreachable", url=url, error=str(exc))
            return False
        return resp.status_code < 400

    async def registry_url(self, name: str, ecosystem: Ecosystem) -> str | None:
        """Look the package up in its registry; ``None`` on any failure."""
        if ecosystem is Ecosystem.PYTHON:
            url, extract = PYPI_JSON_API.format(name=quote(name)), _pypi_registry_url
        else:
            url, extract = NPM_REGISTRY_URL.format(name=quote(name, safe="@")), _npm_registry_url
        try:
            resp = await self.client.get(url, timeout=self._timeout)
            if resp.status_code != 200:
                return None
            data = resp.json()
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
            log.debug("docs.registry_failed", name=name, error=str(exc))
            return None
        return extract(data) if isinstance(data, dict) else None

    # ── discovery ────────────────────────────────────────────────────────

    async def _first_reachable(self, urls: list[str]) -> str | None:
        for url in urls:
            if await self.is_reachable(url):
                return url
        return None

    async def find(self, metadata: PackageMetadata) -> str | None:
        """Return the first acceptable documentation URL for *metadata*."""
        local = candidate_urls(metadata)
        fallback = fallback_url(metadata.name, metadata.ecosystem)
        local = [u for u in local if u != fallback]

        if not self._verify:
            if local:
                return local[0]
            return await self.registry_url(metadata.name, metadata.ecosystem) or fallback

        found = await self._first_reachable(local)
        if found:
            return found

        registry = await self.registry_url(metadata.name, metadata.ecosystem)
        tail = [u for u in (registry, fallback) if u and u not in local]
        return await self._first_reachable(tail)

    async def enrich(
        self, records: list[DependencyRecord], ecosystem: Ecosystem
    ) -> list[DependencyRecord]:
        """Fill ``documentation_url`` where absent; returns new records in order."""
        sem = asyncio.Semaphore(self._concurrency)

        async def _one(record: DependencyRecord) -> DependencyRecord:
            if record.documentation_url:
                return record
            metadata = PackageMetadata(
                name=record.name,
                ecosystem=ecosystem,
                homepage=record.homepage_url,
                repository=record.repository_url,
            )
            async with sem:
                url = await self.find(metadata)
            if url is None:
                return record
            return replace(record, documentation_url=url)

        enriched = await asyncio.gather(*(_one(r) for r in records))
        found = sum(1 for before, after in zip(records, enriched) if before is not after)
        log.info("docs.enriched", total=len(records), found=found)
        return list(enriched)
