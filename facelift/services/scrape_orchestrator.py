"""Multi-page scrape: homepage, discovery, subpage selection, parallel fetch, aggregation.

The orchestrator drives a single run:
1. Fetch the homepage (required)
2. Discover links from the homepage plus a best-effort site map
3. Select the most relevant subpages
4. Fetch selected subpages concurrently
5. Aggregate text, media and colors, and record the unscraped remainder

Only a homepage failure fails the run; failed subpages are dropped.
"""

import asyncio
import time
from collections import Counter
from dataclasses import dataclass
from typing import List, Sequence

import logfire

from facelift.config import Settings, get_settings
from facelift.constants import (
    COMBINED_MAX_CHARS,
    DEFAULT_MAX_SUBPAGES,
    DIRECT_FETCH_TIMEOUT_SECONDS,
    HOMEPAGE_MAX_CHARS,
    MAX_COLORS,
    MAX_DISCOVERED_URLS,
    MAX_IMAGES,
    MAX_VIDEOS,
    SCRAPER_SERVICE_TIMEOUT_SECONDS,
    SUBPAGE_DIRECT_FETCH_TIMEOUT_SECONDS,
    SUBPAGE_MAX_CHARS,
    SUBPAGE_SCRAPER_SERVICE_TIMEOUT_SECONDS,
)
from facelift.models.scraper_models import (
    AggregatedScrapeResult,
    PageScrapeResult,
    RankedColor,
)
from facelift.services.cdn_normalizer import upscale_cdn_images
from facelift.services.extractors import filter_internal_links, normalize_link
from facelift.services.page_fetcher import FetchProfile, PageFetcher
from facelift.services.site_map import (
    ScrapingServiceSiteMapper,
    SiteMapper,
    SitemapXmlMapper,
)
from facelift.services.subpage_prioritizer import prioritize_links


@dataclass(frozen=True)
class ScrapeConfig:
    """Immutable limits for one scrape run."""

    max_subpages: int = DEFAULT_MAX_SUBPAGES
    homepage_max_chars: int = HOMEPAGE_MAX_CHARS
    subpage_max_chars: int = SUBPAGE_MAX_CHARS
    combined_max_chars: int = COMBINED_MAX_CHARS
    max_images: int = MAX_IMAGES
    max_videos: int = MAX_VIDEOS
    max_colors: int = MAX_COLORS
    max_discovered_urls: int = MAX_DISCOVERED_URLS
    homepage_service_timeout: float = SCRAPER_SERVICE_TIMEOUT_SECONDS
    homepage_direct_timeout: float = DIRECT_FETCH_TIMEOUT_SECONDS
    subpage_service_timeout: float = SUBPAGE_SCRAPER_SERVICE_TIMEOUT_SECONDS
    subpage_direct_timeout: float = SUBPAGE_DIRECT_FETCH_TIMEOUT_SECONDS

    @classmethod
    def from_settings(cls, settings: Settings) -> "ScrapeConfig":
        return cls(
            max_subpages=settings.max_subpages,
            homepage_service_timeout=settings.scraper_service_timeout_seconds,
            homepage_direct_timeout=settings.direct_fetch_timeout_seconds,
            subpage_service_timeout=settings.subpage_scraper_service_timeout_seconds,
            subpage_direct_timeout=settings.subpage_direct_fetch_timeout_seconds,
        )

    @property
    def homepage_profile(self) -> FetchProfile:
        return FetchProfile(
            is_homepage=True,
            max_chars=self.homepage_max_chars,
            service_timeout=self.homepage_service_timeout,
            direct_timeout=self.homepage_direct_timeout,
        )

    @property
    def subpage_profile(self) -> FetchProfile:
        return FetchProfile(
            is_homepage=False,
            max_chars=self.subpage_max_chars,
            service_timeout=self.subpage_service_timeout,
            direct_timeout=self.subpage_direct_timeout,
        )


def merge_colors(pages: Sequence[PageScrapeResult], limit: int) -> List[RankedColor]:
    """Sum per-page counts and re-rank; ties keep homepage-first order."""
    totals: Counter[str] = Counter()
    for page in pages:
        for color in page.colors:
            totals[color.hex] += color.count
    return [RankedColor(hex=c, count=n) for c, n in totals.most_common(limit)]


class ScrapeOrchestrator:
    """Coordinate a multi-page site scrape.

    Components (fetcher, site mapper) can be injected for testing.
    """

    def __init__(
        self,
        config: ScrapeConfig | None = None,
        fetcher: PageFetcher | None = None,
        site_mapper: SiteMapper | None = None,
        settings: Settings | None = None,
    ):
        """Initialize the orchestrator.

        Args:
            config: Scrape limits (defaults to values derived from settings)
            fetcher: Page fetcher (defaults to scraping service + direct fetch)
            site_mapper: Site-map discovery (defaults to the scraping service's
                map endpoint when configured, otherwise sitemap.xml)
        """
        settings = settings or get_settings()
        self._config = config or ScrapeConfig.from_settings(settings)
        self._fetcher = fetcher or PageFetcher(settings=settings)
        if site_mapper is None:
            if settings.firecrawl_api_key:
                site_mapper = ScrapingServiceSiteMapper(
                    settings.firecrawl_api_key,
                    settings.firecrawl_base_url,
                    settings.site_map_timeout_seconds,
                )
            else:
                site_mapper = SitemapXmlMapper(settings.site_map_timeout_seconds)
        self._site_mapper = site_mapper

    @property
    def config(self) -> ScrapeConfig:
        return self._config

    async def scrape(self, url: str) -> AggregatedScrapeResult:
        """Scrape the homepage and the most relevant subpages of ``url``."""
        start_time = time.time()
        logfire.info(
            "Starting site scrape",
            url=url,
            max_subpages=self._config.max_subpages,
        )

        homepage = await self._fetcher.fetch_page(url, self._config.homepage_profile)
        if not homepage.success or not homepage.markdown.strip():
            error = homepage.error or "Homepage returned no readable content."
            logfire.error("Homepage scrape failed", url=url, error=error)
            return AggregatedScrapeResult(success=False, url=url, error=error)

        discovered = await self._discover(url, homepage)
        selected = prioritize_links(discovered, self._config.max_subpages)
        subpages = await self._fetch_subpages(url, selected)

        result = self._aggregate(url, homepage, subpages, discovered)
        logfire.info(
            "Site scrape completed",
            url=url,
            pages_scraped=len(result.scraped_urls),
            subpages_selected=len(selected),
            subpages_failed=len(selected) - len(subpages),
            discovered_remaining=len(result.discovered_urls),
            image_count=len(result.images),
            video_count=len(result.videos),
            color_count=len(result.colors),
            combined_length=len(result.combined_markdown),
            total_time_ms=(time.time() - start_time) * 1000,
        )
        return result

    async def _discover(self, url: str, homepage: PageScrapeResult) -> List[str]:
        """Union of homepage links and site-map URLs, homepage links first."""
        try:
            mapped = await self._site_mapper.discover(url)
        except Exception as e:
            logfire.warn(
                "Site-map discovery raised, using homepage links only",
                url=url,
                error=str(e),
                error_type=type(e).__name__,
            )
            mapped = []
        mapped_links = filter_internal_links(mapped, url, url)
        return list(dict.fromkeys(homepage.internal_links + mapped_links))

    async def _fetch_subpages(
        self, url: str, selected: List[str]
    ) -> List[PageScrapeResult]:
        """Fetch subpages concurrently; results keep selection order."""
        if not selected:
            return []
        profile = self._config.subpage_profile
        results = await asyncio.gather(
            *(self._fetcher.fetch_page(link, profile, homepage_url=url) for link in selected),
            return_exceptions=True,
        )

        pages: List[PageScrapeResult] = []
        for link, result in zip(selected, results):
            if isinstance(result, BaseException):
                logfire.warn(
                    "Subpage fetch raised, dropping page",
                    url=link,
                    error=str(result),
                    error_type=type(result).__name__,
                )
                continue
            if not result.success or not result.markdown.strip():
                logfire.warn("Subpage dropped", url=link, error=result.error)
                continue
            pages.append(result)
        return pages

    def _aggregate(
        self,
        url: str,
        homepage: PageScrapeResult,
        subpages: List[PageScrapeResult],
        discovered: List[str],
    ) -> AggregatedScrapeResult:
        config = self._config
        pages = [homepage, *subpages]

        blocks = [f"=== HOMEPAGE: {url} ===\n{homepage.markdown[: config.homepage_max_chars]}"]
        blocks.extend(
            f"=== PAGE: {page.url} ===\n{page.markdown[: config.subpage_max_chars]}"
            for page in subpages
        )
        combined = "\n\n".join(blocks)[: config.combined_max_chars]

        images = list(dict.fromkeys(img for page in pages for img in page.images))
        images = list(dict.fromkeys(upscale_cdn_images(images)))[: config.max_images]
        videos = list(dict.fromkeys(vid for page in pages for vid in page.videos))

        scraped = [normalize_link(url)] + [normalize_link(p.url) for p in subpages]
        scraped_set = set(scraped)
        remaining = [link for link in discovered if link not in scraped_set]
        remaining = remaining[: config.max_discovered_urls]

        return AggregatedScrapeResult(
            success=True,
            url=url,
            combined_markdown=combined,
            screenshot_url=homepage.screenshot_url,
            images=images,
            videos=videos[: config.max_videos],
            colors=merge_colors(pages, config.max_colors),
            scraped_urls=scraped,
            discovered_urls=remaining,
        )
