"""Best-effort site-map discovery.

Discovery never fails a run: any error is logged and an empty list is
returned so the orchestrator falls back to homepage-derived links.
"""

import re
import time
from typing import List, Protocol
from urllib.parse import urljoin

import httpx
import logfire

from facelift.constants import DIRECT_FETCH_USER_AGENT, SITE_MAP_TIMEOUT_SECONDS

# Upper bound on URLs requested from the map endpoint
SITE_MAP_LIMIT = 100

_LOC_RE = re.compile(r"<loc>\s*([^<\s]+)\s*</loc>", re.IGNORECASE)


class SiteMapper(Protocol):
    """Protocol for discovering same-site URLs."""

    async def discover(self, url: str) -> List[str]:
        """Return URLs belonging to the site; never raises."""
        ...


class ScrapingServiceSiteMapper:
    """Use the scraping service's ``POST /v1/map`` endpoint."""

    def __init__(
        self,
        api_key: str,
        base_url: str,
        timeout: float = SITE_MAP_TIMEOUT_SECONDS,
    ):
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    async def discover(self, url: str) -> List[str]:
        start_time = time.time()
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(
                    f"{self._base_url}/v1/map",
                    json={"url": url, "limit": SITE_MAP_LIMIT},
                    headers={"Authorization": f"Bearer {self._api_key}"},
                )
                response.raise_for_status()
                payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logfire.warn(
                "Site-map discovery failed, using homepage links only",
                url=url,
                error=str(e),
                error_type=type(e).__name__,
            )
            return []

        links = payload.get("links") if isinstance(payload, dict) else None
        if not isinstance(links, list):
            logfire.warn(
                "Site-map discovery returned no link list, using homepage links only",
                url=url,
                response=str(payload)[:300],
            )
            return []

        urls = []
        for link in links:
            if isinstance(link, dict):
                link = link.get("url")
            if isinstance(link, str) and link:
                urls.append(link)
        logfire.info(
            "Site map discovered",
            url=url,
            url_count=len(urls),
            response_time_ms=(time.time() - start_time) * 1000,
        )
        return urls


class SitemapXmlMapper:
    """Read ``/sitemap.xml`` directly when no scraping service is configured."""

    def __init__(self, timeout: float = SITE_MAP_TIMEOUT_SECONDS):
        self._timeout = timeout

    async def discover(self, url: str) -> List[str]:
        sitemap_url = urljoin(url, "/sitemap.xml")
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                follow_redirects=True,
                headers={"User-Agent": DIRECT_FETCH_USER_AGENT},
            ) as client:
                response = await client.get(sitemap_url)
                response.raise_for_status()
        except httpx.HTTPError as e:
            logfire.info(
                "No sitemap.xml available",
                url=sitemap_url,
                error=str(e),
                error_type=type(e).__name__,
            )
            return []

        urls = _LOC_RE.findall(response.text)[:SITE_MAP_LIMIT]
        logfire.info("sitemap.xml parsed", url=sitemap_url, url_count=len(urls))
        return urls
