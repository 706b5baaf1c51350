"""Single-page retrieval with an ordered list of fetch strategies.

Components:
- FetchProfile: per-page limits (homepage vs. lighter subpage variant)
- ScrapingServiceStrategy: Firecrawl-compatible scraping API (primary)
- DirectFetchStrategy: plain HTTP GET with text stripping (fallback)
- PageFetcher: tries strategies in order, first success wins, then runs
  the extractors over whatever raw content was obtained

Each strategy can be mocked or replaced independently for testing.
"""

import re
import time
from dataclasses import dataclass, field
from typing import List, Protocol, Sequence
from urllib.parse import urlparse

import httpx
import logfire
from bs4 import BeautifulSoup

from facelift.config import Settings, get_settings
from facelift.constants import (
    DIRECT_FETCH_TIMEOUT_SECONDS,
    DIRECT_FETCH_USER_AGENT,
    HOMEPAGE_MAX_CHARS,
    SCRAPER_SERVICE_TIMEOUT_SECONDS,
    SCRAPER_WAIT_FOR_MS,
)
from facelift.models.scraper_models import PageScrapeResult
from facelift.services.extractors import (
    extract_colors,
    extract_image_urls,
    extract_internal_links,
    extract_og_images,
    extract_video_urls,
    filter_internal_links,
)


class FetchError(Exception):
    """Raised by a fetch strategy when it cannot produce page content."""


@dataclass(frozen=True)
class FetchProfile:
    """Limits for one page fetch.

    The homepage asks for a screenshot and link list and keeps more text;
    subpages use the lighter variant with shorter timeouts.
    """

    is_homepage: bool = True
    max_chars: int = HOMEPAGE_MAX_CHARS
    service_timeout: float = SCRAPER_SERVICE_TIMEOUT_SECONDS
    direct_timeout: float = DIRECT_FETCH_TIMEOUT_SECONDS


@dataclass
class RawPage:
    """Unprocessed content returned by a strategy."""

    markdown: str = ""
    raw_html: str = ""
    screenshot_url: str | None = None
    links: List[str] = field(default_factory=list)


class FetchStrategy(Protocol):
    """Protocol for one way of retrieving a page."""

    name: str

    async def fetch(self, url: str, profile: FetchProfile) -> RawPage:
        """Fetch raw content for ``url``.

        Raises:
            FetchError: If this strategy cannot produce content
        """
        ...


class ScrapingServiceStrategy:
    """Primary strategy: Firecrawl-compatible ``POST /v1/scrape``."""

    name = "scraping_service"

    def __init__(self, api_key: str | None, base_url: str):
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")

    async def fetch(self, url: str, profile: FetchProfile) -> RawPage:
        if not self._api_key:
            raise FetchError("Scraping service API key not configured")

        formats = ["markdown", "rawHtml"]
        if profile.is_homepage:
            formats += ["screenshot", "links"]

        try:
            async with httpx.AsyncClient(timeout=profile.service_timeout) as client:
                response = await client.post(
                    f"{self._base_url}/v1/scrape",
                    json={"url": url, "formats": formats, "waitFor": SCRAPER_WAIT_FOR_MS},
                    headers={"Authorization": f"Bearer {self._api_key}"},
                )
        except httpx.HTTPError as e:
            raise FetchError(f"Scraping service request failed: {e}") from e

        if not response.is_success:
            raise FetchError(
                f"Scraping service error ({response.status_code}): {response.text[:300]}"
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise FetchError(f"Scraping service returned invalid JSON: {e}") from e

        if not isinstance(payload, dict) or payload.get("success") is False:
            raise FetchError(f"Scraping service reported failure: {str(payload)[:300]}")
        data = payload.get("data") or {}
        if not isinstance(data, dict):
            raise FetchError(f"Scraping service returned malformed data: {str(data)[:300]}")

        markdown = data.get("markdown") or ""
        raw_html = data.get("rawHtml") or data.get("html") or ""
        if not isinstance(markdown, str) or not isinstance(raw_html, str):
            raise FetchError("Scraping service returned non-text content")
        if not markdown and not raw_html:
            raise FetchError("Scraping service returned no content")

        links = []
        for link in data.get("links") or []:
            if isinstance(link, dict):
                link = link.get("url")
            if isinstance(link, str) and link:
                links.append(link)
        screenshot = data.get("screenshot")
        return RawPage(
            markdown=markdown,
            raw_html=raw_html,
            screenshot_url=screenshot if isinstance(screenshot, str) and screenshot else None,
            links=links,
        )


class DirectFetchStrategy:
    """Fallback strategy: direct GET, text approximated by stripping markup."""

    name = "direct_fetch"

    DEFAULT_HEADERS = {
        "User-Agent": DIRECT_FETCH_USER_AGENT,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
    }

    def __init__(self, headers: dict[str, str] | None = None):
        self._headers = headers or self.DEFAULT_HEADERS.copy()

    async def fetch(self, url: str, profile: FetchProfile) -> RawPage:
        try:
            async with httpx.AsyncClient(
                timeout=profile.direct_timeout,
                follow_redirects=True,
                headers=self._headers,
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise FetchError(
                f"Failed to fetch URL: HTTP {e.response.status_code} from {url}"
            ) from e
        except httpx.HTTPError as e:
            raise FetchError(f"Failed to fetch URL: {type(e).__name__}: {e}") from e

        raw_html = response.text
        return RawPage(markdown=self.html_to_text(raw_html), raw_html=raw_html)

    @staticmethod
    def html_to_text(raw_html: str) -> str:
        """Plain-text approximation of a page with scripts and styles removed."""
        soup = BeautifulSoup(raw_html, "html.parser")
        for tag in soup(["script", "style", "noscript"]):
            tag.decompose()
        text = soup.get_text(" ")
        return re.sub(r"\s+", " ", text).strip()


def build_page_result(
    url: str,
    raw: RawPage,
    profile: FetchProfile,
    homepage_url: str | None = None,
    source: str | None = None,
) -> PageScrapeResult:
    """Run the extractors over raw content.

    Raw HTML is preferred for colors and links; markdown (capped) is the
    page text. Images and videos are searched in both.
    """
    parsed = urlparse(url)
    base_origin = f"{parsed.scheme}://{parsed.netloc}"
    combined = f"{raw.markdown}\n{raw.raw_html}"
    markup = raw.raw_html or raw.markdown
    soup = BeautifulSoup(markup, "html.parser")

    images = list(
        dict.fromkeys(
            extract_og_images(raw.raw_html, soup=soup)
            + extract_image_urls(combined, base_origin=base_origin, soup=soup)
        )
    )
    links = extract_internal_links(markup, url, homepage_url, soup=soup)
    if raw.links:
        links = list(
            dict.fromkeys(links + filter_internal_links(raw.links, url, homepage_url))
        )

    return PageScrapeResult(
        url=url,
        success=True,
        markdown=raw.markdown[: profile.max_chars],
        screenshot_url=raw.screenshot_url,
        images=images,
        videos=extract_video_urls(combined, soup=soup),
        colors=extract_colors(markup),
        internal_links=links,
        source=source,
    )


class PageFetcher:
    """Fetch one page by trying each strategy in order; first success wins."""

    def __init__(
        self,
        strategies: Sequence[FetchStrategy] | None = None,
        settings: Settings | None = None,
    ):
        """Initialize the page fetcher.

        Args:
            strategies: Ordered strategies (defaults to scraping service, then
                direct fetch)
            settings: Settings used to build the default strategies
        """
        if strategies is None:
            strategies = self.default_strategies(settings or get_settings())
        self._strategies = list(strategies)

    @staticmethod
    def default_strategies(settings: Settings) -> List[FetchStrategy]:
        """Scraping service (only when a key is configured), then direct fetch."""
        strategies: List[FetchStrategy] = []
        if settings.firecrawl_api_key:
            strategies.append(
                ScrapingServiceStrategy(
                    settings.firecrawl_api_key, settings.firecrawl_base_url
                )
            )
        strategies.append(DirectFetchStrategy())
        return strategies

    async def fetch_page(
        self,
        url: str,
        profile: FetchProfile | None = None,
        homepage_url: str | None = None,
    ) -> PageScrapeResult:
        """Fetch and extract a page.

        Never raises for fetch problems: when every strategy fails the result
        has ``success=False`` and the last strategy's error.
        """
        profile = profile or FetchProfile()
        last_error = "No fetch strategies configured"

        for strategy in self._strategies:
            start_time = time.time()
            try:
                raw = await strategy.fetch(url, profile)
            except FetchError as e:
                last_error = str(e)
                logfire.warn(
                    "Fetch strategy failed, trying next",
                    url=url,
                    strategy=strategy.name,
                    error=last_error,
                    response_time_ms=(time.time() - start_time) * 1000,
                )
                continue

            result = build_page_result(url, raw, profile, homepage_url, strategy.name)
            logfire.info(
                "Page fetched",
                url=url,
                strategy=strategy.name,
                is_homepage=profile.is_homepage,
                content_length=len(result.markdown),
                image_count=len(result.images),
                video_count=len(result.videos),
                link_count=len(result.internal_links),
                response_time_ms=(time.time() - start_time) * 1000,
            )
            return result

        logfire.error("All fetch strategies failed", url=url, error=last_error)
        return PageScrapeResult.failure(url, last_error)
