"""Extraction of media, brand colors and links from page content.

Every function here is pure: it scans raw markup/markdown text and returns
candidates without any I/O, so it can be exercised against fixed fixtures.
Tag attributes are read from a BeautifulSoup parse; markdown, CSS and bare
URLs are matched with patterns. Results from every source are merged and
deduplicated in first-seen order.
"""

import html
import re
from collections import Counter
from typing import Iterable, List
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

from facelift.constants import (
    CDN_THUMBNAIL_MIN_WIDTH,
    EXTREME_BRIGHTNESS_MARGIN,
    EXTREME_SPREAD_THRESHOLD,
    MAX_COLORS,
    MAX_IMAGES_PER_PAGE,
    NEUTRAL_SPREAD_THRESHOLD,
)
from facelift.models.scraper_models import RankedColor

# =============================================================================
# Images
# =============================================================================

_MD_IMAGE_RE = re.compile(r"!\[[^\]]*\]\(\s*<?(https?://[^)\s>]+)")
_CSS_BG_RE = re.compile(
    r"background(?:-image)?\s*:[^;\"'{}]*?url\(\s*[\"']?([^\"')\s]+)[\"']?\s*\)",
    re.IGNORECASE,
)
_CDN_MEDIA_RE = re.compile(
    r"https?://static\.wixstatic\.com/media/[^\s\"'()<>\\]+", re.IGNORECASE
)
_BARE_IMAGE_URL_RE = re.compile(
    r"https?://[^\s\"'()<>]+?\.(?:jpe?g|png|webp|avif|gif|svg)"
    r"(?:\?[^\s\"'()<>]*)?(?=[\s\"'()<>]|$)",
    re.IGNORECASE,
)
_CDN_FILL_WIDTH_RE = re.compile(r"/v1/fill/[^/]*?\bw_(\d+)", re.IGNORECASE)

_IMG_SRC_ATTRS = ("src", "data-src")
_MEDIA_ATTRS = (
    "poster",
    "data-poster",
    "data-image",
    "data-bg",
    "data-background",
    "data-media",
    "data-lazy-src",
    "data-original",
)
_OG_IMAGE_KEYS = ("og:image",)

_JUNK_IMAGE_MARKERS = ("favicon", "tracking", "pixel", "1x1", "spacer")

# =============================================================================
# Videos
# =============================================================================

_VIDEO_FILE_RE = re.compile(
    r"https?://[^\s\"'()<>]+?\.(?:mp4|webm)(?:\?[^\s\"'()<>]*)?(?=[\s\"'()<>]|$)",
    re.IGNORECASE,
)
_CDN_VIDEO_RE = re.compile(
    r"https?://video\.wixstatic\.com/video/[^\s\"'()<>\\]+", re.IGNORECASE
)
_OG_VIDEO_KEYS = ("og:video", "og:video:url")

# =============================================================================
# Colors
# =============================================================================

_HEX_RE = re.compile(r"#([0-9a-fA-F]{3,8})\b")
_COLOR_DECL_RE = re.compile(
    r"(?<![\w-])(?:color|background(?:-color)?|border(?:-(?:top|right|bottom|left))?(?:-color)?"
    r"|fill|stroke)\s*[:=]\s*[\"']?([^;}\"'\n]+)",
    re.IGNORECASE,
)
_RGB_RE = re.compile(
    r"rgba?\(\s*(\d{1,3})\s*[, ]\s*(\d{1,3})\s*[, ]\s*(\d{1,3})\s*(?:[,/]\s*[\d.]+%?\s*)?\)",
    re.IGNORECASE,
)
_CUSTOM_PROPERTY_RE = re.compile(r"--[\w-]+\s*:\s*(#[0-9a-fA-F]{3,8})\b")

# =============================================================================
# Links
# =============================================================================

_MD_LINK_RE = re.compile(r"(?<!!)\[[^\]]*\]\(\s*<?([^)\s>]+)")
_EXCLUDED_LINK_EXTENSIONS = (
    ".js",
    ".css",
    ".xml",
    ".json",
    ".txt",
    ".rss",
    ".pdf",
    ".zip",
    ".ico",
    ".jpg",
    ".jpeg",
    ".png",
    ".gif",
    ".webp",
    ".svg",
    ".mp4",
    ".webm",
)
_IGNORED_SCHEMES = ("mailto:", "tel:", "javascript:", "data:", "sms:")

# CMS internals, auth/commerce flows, member areas and listing archives
_SKIPPED_PATH_RES = (
    re.compile(r"/wp-(?:admin|login|content|json)(?:[/.]|$)"),
    re.compile(r"/(?:login|signup|register|auth|logout|cart|checkout)(?:/|$)"),
    re.compile(r"/(?:admin|dashboard|account|profile|settings)(?:/|$)"),
    re.compile(r"/(?:search|tag|category|author|archive)/"),
)


def _dedupe(items: Iterable[str]) -> List[str]:
    """Deduplicate preserving first-seen order."""
    return list(dict.fromkeys(items))


def _origin(url: str) -> str:
    parsed = urlparse(url)
    return f"{parsed.scheme}://{parsed.netloc}"


def _parse_markup(content: str) -> BeautifulSoup:
    return BeautifulSoup(content, "html.parser")


def _attr(tag, name: str) -> str:
    """Attribute value as a string; multi-valued attributes are space-joined."""
    value = tag.get(name)
    if isinstance(value, list):
        value = " ".join(value)
    return (value or "").strip()


def _first_srcset_url(srcset: str) -> str:
    first = srcset.split(",")[0].strip()
    return first.split()[0] if first else ""


def _meta_urls(soup: BeautifulSoup, keys: Iterable[str]) -> List[str]:
    """Absolute ``content`` URLs of <meta> tags whose property or name is in ``keys``."""
    wanted = set(keys)
    urls: List[str] = []
    for meta in soup.find_all("meta"):
        key = (_attr(meta, "property") or _attr(meta, "name")).lower()
        if key not in wanted:
            continue
        content = _attr(meta, "content")
        if content.lower().startswith(("http://", "https://")):
            urls.append(content)
    return urls


def is_skipped_path(path: str) -> bool:
    """True for paths that never make useful pages (admin, login, cart, archives)."""
    lower = path.lower()
    return any(pattern.search(lower) for pattern in _SKIPPED_PATH_RES)


def _resolve_media_url(raw: str, base_origin: str | None) -> str | None:
    """Make a candidate absolute, or return None when it cannot be resolved."""
    candidate = html.unescape(raw.strip()).rstrip(".,;\\")
    if not candidate:
        return None
    lower = candidate.lower()
    if lower.startswith(("http://", "https://")):
        return candidate
    if lower.startswith("data:"):
        # Kept so the junk filter can reject it explicitly
        return candidate
    if candidate.startswith("//"):
        return f"https:{candidate}"
    if candidate.startswith("/") and base_origin:
        return urljoin(base_origin, candidate)
    return None


def is_cdn_thumbnail(url: str, min_width: int = CDN_THUMBNAIL_MIN_WIDTH) -> bool:
    """True for CDN fill-resized images narrower than ``min_width``.

    Only the documented fill pattern is recognized; URLs from any other CDN
    are never treated as thumbnails.
    """
    match = _CDN_FILL_WIDTH_RE.search(url)
    return bool(match) and int(match.group(1)) < min_width


def is_junk_image(url: str) -> bool:
    """Reject favicons, tracking pixels, spacers, inline data and decorative SVGs."""
    lower = url.lower()
    if lower.startswith("data:") or "data:image" in lower:
        return True
    if any(marker in lower for marker in _JUNK_IMAGE_MARKERS):
        return True
    path = urlparse(lower).path
    if path.endswith(".svg") and "logo" not in lower:
        return True
    return is_cdn_thumbnail(url)


def extract_og_images(content: str, soup: BeautifulSoup | None = None) -> List[str]:
    """Return ``og:image`` URLs from <meta property|name="og:image"> tags."""
    if soup is None:
        if not content:
            return []
        soup = _parse_markup(content)
    return _dedupe(u for u in _meta_urls(soup, _OG_IMAGE_KEYS) if not is_junk_image(u))


def _tag_image_candidates(soup: BeautifulSoup) -> List[str]:
    """img src/data-src, img/source srcset and media data attributes, in document order."""
    raw: List[str] = []
    for tag in soup.find_all(True):
        if tag.name == "img":
            raw.extend(_attr(tag, name) for name in _IMG_SRC_ATTRS)
        if tag.name in ("img", "source") and tag.has_attr("srcset"):
            raw.append(_first_srcset_url(_attr(tag, "srcset")))
        raw.extend(_attr(tag, name) for name in _MEDIA_ATTRS)
    return [candidate for candidate in raw if candidate]


def extract_image_urls(
    content: str,
    base_origin: str | None = None,
    limit: int = MAX_IMAGES_PER_PAGE,
    soup: BeautifulSoup | None = None,
) -> List[str]:
    """Extract candidate image URLs from markdown and/or raw HTML.

    Args:
        content: Markdown, HTML, or both concatenated
        base_origin: Origin used to resolve root-relative paths; when None,
            relative candidates are dropped
        limit: Maximum number of URLs returned
        soup: Pre-parsed markup to read tags from; parsed from ``content``
            when omitted

    Returns:
        Absolute image URLs, junk filtered, deduplicated in first-seen order
    """
    if not content:
        return []
    if soup is None:
        soup = _parse_markup(content)

    raw: List[str] = []
    raw.extend(_MD_IMAGE_RE.findall(content))
    raw.extend(_tag_image_candidates(soup))
    raw.extend(_CSS_BG_RE.findall(content))
    raw.extend(_CDN_MEDIA_RE.findall(content))
    raw.extend(_BARE_IMAGE_URL_RE.findall(content))

    resolved = (_resolve_media_url(candidate, base_origin) for candidate in raw)
    urls = _dedupe(u for u in resolved if u and not is_junk_image(u))
    return urls[:limit]


def extract_video_urls(content: str, soup: BeautifulSoup | None = None) -> List[str]:
    """Extract direct video files, CDN videos, <video>/<source> and og:video URLs."""
    if not content:
        return []
    if soup is None:
        soup = _parse_markup(content)

    urls: List[str] = []
    urls.extend(_VIDEO_FILE_RE.findall(content))
    urls.extend(_CDN_VIDEO_RE.findall(content))
    for tag in soup.find_all(["video", "source"], src=True):
        src = _attr(tag, "src")
        if src.lower().startswith(("http://", "https://")):
            urls.append(src)
    urls.extend(_meta_urls(soup, _OG_VIDEO_KEYS))
    return _dedupe(html.unescape(u).rstrip(".,;\\") for u in urls)


def normalize_hex(value: str) -> str | None:
    """Normalize #rgb, #rgba, #rrggbb or #rrggbbaa to lowercase #rrggbb."""
    digits = value.lstrip("#").lower()
    if len(digits) in (3, 4):
        digits = "".join(ch * 2 for ch in digits[:3])
    elif len(digits) in (6, 8):
        digits = digits[:6]
    else:
        return None
    if not re.fullmatch(r"[0-9a-f]{6}", digits):
        return None
    return f"#{digits}"


def rgb_to_hex(r: int, g: int, b: int) -> str | None:
    if not all(0 <= channel <= 255 for channel in (r, g, b)):
        return None
    return f"#{r:02x}{g:02x}{b:02x}"


def is_boring_color(hex_color: str) -> bool:
    """True for black, white and near-neutral grays.

    A color is boring when its channels are within ``NEUTRAL_SPREAD_THRESHOLD``
    of each other (any gray, including pure black and white), or when it sits
    within ``EXTREME_BRIGHTNESS_MARGIN`` of black or white with only a slight
    tint.
    """
    r = int(hex_color[1:3], 16)
    g = int(hex_color[3:5], 16)
    b = int(hex_color[5:7], 16)
    spread = max(r, g, b) - min(r, g, b)
    if spread <= NEUTRAL_SPREAD_THRESHOLD:
        return True
    brightness = (r + g + b) / 3
    near_extreme = (
        brightness <= EXTREME_BRIGHTNESS_MARGIN
        or brightness >= 255 - EXTREME_BRIGHTNESS_MARGIN
    )
    return near_extreme and spread <= EXTREME_SPREAD_THRESHOLD


def extract_colors(content: str, limit: int = MAX_COLORS) -> List[RankedColor]:
    """Rank non-neutral colors found in CSS declarations by frequency.

    Sources: hex values in color/background/border/fill/stroke declarations,
    every rgb()/rgba() value, and hex custom-property declarations.

    Returns:
        Up to ``limit`` colors sorted by descending count; ties keep
        first-seen order
    """
    if not content:
        return []

    found: List[str] = []
    for value in _COLOR_DECL_RE.findall(content):
        found.extend(filter(None, (normalize_hex(h) for h in _HEX_RE.findall(value))))
    for r, g, b in _RGB_RE.findall(content):
        hex_color = rgb_to_hex(int(r), int(g), int(b))
        if hex_color:
            found.append(hex_color)
    for value in _CUSTOM_PROPERTY_RE.findall(content):
        hex_color = normalize_hex(value)
        if hex_color:
            found.append(hex_color)

    counts = Counter(c for c in found if not is_boring_color(c))
    return [RankedColor(hex=c, count=n) for c, n in counts.most_common(limit)]


def normalize_link(url: str) -> str:
    """Drop the fragment and trailing slash; keep scheme, host, path and query."""
    parsed = urlparse(url)
    path = parsed.path.rstrip("/")
    normalized = f"{parsed.scheme}://{parsed.netloc}{path}"
    if parsed.query:
        normalized += "?" + parsed.query
    return normalized


def filter_internal_links(
    candidates: Iterable[str],
    page_url: str,
    homepage_url: str | None = None,
) -> List[str]:
    """Resolve link candidates and keep same-hostname page links only.

    Args:
        candidates: Raw href values or absolute URLs
        page_url: URL the candidates came from (relative links resolve against it)
        homepage_url: Homepage to exclude; defaults to ``page_url``

    Returns:
        Absolute, normalized links; never the homepage, assets or API paths
    """
    host = (urlparse(page_url).hostname or "").lower()
    excluded = {
        normalize_link(page_url),
        normalize_link(homepage_url or page_url),
        normalize_link(_origin(page_url)),
    }

    links: List[str] = []
    for href in candidates:
        href = html.unescape((href or "").strip())
        if not href or href.startswith("#") or href.lower().startswith(_IGNORED_SCHEMES):
            continue
        absolute = urljoin(page_url, href)
        parsed = urlparse(absolute)
        if parsed.scheme not in ("http", "https"):
            continue
        if (parsed.hostname or "").lower() != host:
            continue
        path = parsed.path.lower()
        if path.endswith(_EXCLUDED_LINK_EXTENSIONS) or "/_" in path or "/api/" in path:
            continue
        if is_skipped_path(path):
            continue
        normalized = normalize_link(absolute)
        if normalized in excluded:
            continue
        links.append(normalized)
    return _dedupe(links)


def extract_internal_links(
    content: str,
    page_url: str,
    homepage_url: str | None = None,
    soup: BeautifulSoup | None = None,
) -> List[str]:
    """Extract same-hostname page links from <a>/<area> hrefs and markdown link targets."""
    if not content:
        return []
    if soup is None:
        soup = _parse_markup(content)
    raw = [_attr(a, "href") for a in soup.find_all(["a", "area"], href=True)]
    raw.extend(_MD_LINK_RE.findall(content))
    return filter_internal_links(raw, page_url, homepage_url)
