"""Models for scraper results: per-page data and the aggregated site scrape."""

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class RankedColor:
    """A brand color candidate and how often it appeared in the page styles."""

    hex: str
    count: int


@dataclass
class PageScrapeResult:
    """Content and media extracted from a single fetched page."""

    url: str
    success: bool
    markdown: str = ""
    screenshot_url: str | None = None
    images: List[str] = field(default_factory=list)
    videos: List[str] = field(default_factory=list)
    colors: List[RankedColor] = field(default_factory=list)
    internal_links: List[str] = field(default_factory=list)
    error: str | None = None
    source: str | None = None  # name of the strategy that produced the page

    @classmethod
    def failure(cls, url: str, error: str) -> "PageScrapeResult":
        return cls(url=url, success=False, error=error)


@dataclass
class AggregatedScrapeResult:
    """Result of a multi-page scrape: combined text, media and unscraped links."""

    success: bool
    url: str
    combined_markdown: str = ""
    screenshot_url: str | None = None
    images: List[str] = field(default_factory=list)
    videos: List[str] = field(default_factory=list)
    colors: List[RankedColor] = field(default_factory=list)
    scraped_urls: List[str] = field(default_factory=list)
    discovered_urls: List[str] = field(default_factory=list)
    error: str | None = None
