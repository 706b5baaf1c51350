"""URL admissibility checks run before any scraping.

Rejects malformed addresses and domains whose pages cannot be meaningfully
reconstructed (marketplaces, social networks, web apps, developer and blog
platforms).
"""

import re
from typing import NamedTuple
from urllib.parse import urlparse

import logfire

INVALID_URL_REASON = "Invalid URL. Please enter a valid website address."

_SOCIAL_REASON = "Social media pages cannot be reconstructed."
_SOCIAL_TRY_SITE_REASON = (
    "Social media pages cannot be reconstructed. "
    "Try the business's actual website instead."
)

# Matched against the hostname exactly or as a parent domain. A pattern
# ending in "." matches that label under any suffix (amazon.co.uk).
BLOCKED_DOMAINS: tuple[tuple[str, str], ...] = (
    # E-commerce platforms
    ("myshopify.com", "Shopify stores are too complex to reconstruct (products, cart, checkout)."),
    ("shopify.com", "Shopify stores are too complex to reconstruct."),
    ("bigcommerce.com", "BigCommerce stores are too complex to reconstruct."),
    ("amazon.com", "Amazon pages cannot be reconstructed."),
    ("amazon.", "Amazon pages cannot be reconstructed."),
    ("ebay.com", "eBay pages cannot be reconstructed."),
    ("etsy.com", "Etsy pages cannot be reconstructed."),
    ("aliexpress.com", "AliExpress pages cannot be reconstructed."),
    ("walmart.com", "Walmart pages cannot be reconstructed."),
    # Social media
    ("facebook.com", _SOCIAL_TRY_SITE_REASON),
    ("instagram.com", _SOCIAL_TRY_SITE_REASON),
    ("twitter.com", _SOCIAL_REASON),
    ("x.com", _SOCIAL_REASON),
    ("linkedin.com", "LinkedIn pages cannot be reconstructed."),
    ("youtube.com", "YouTube pages cannot be reconstructed."),
    ("tiktok.com", "TikTok pages cannot be reconstructed."),
    ("reddit.com", "Reddit pages cannot be reconstructed."),
    ("pinterest.com", "Pinterest pages cannot be reconstructed."),
    # Web apps
    ("docs.google.com", "Google Docs cannot be reconstructed."),
    ("drive.google.com", "Google Drive cannot be reconstructed."),
    ("mail.google.com", "Web apps cannot be reconstructed."),
    ("notion.so", "Notion pages cannot be reconstructed."),
    ("figma.com", "Figma cannot be reconstructed."),
    ("canva.com", "Canva cannot be reconstructed."),
    # Developer platforms
    ("github.com", "GitHub pages cannot be reconstructed. Try the project's actual website instead."),
    ("gitlab.com", "GitLab pages cannot be reconstructed."),
    ("stackoverflow.com", "StackOverflow cannot be reconstructed."),
    ("npmjs.com", "npm cannot be reconstructed."),
    # Blog platforms
    ("medium.com", "Medium articles cannot be reconstructed. Try the business's own website instead."),
    ("substack.com", "Substack pages cannot be reconstructed."),
)

_HOSTNAME_RE = re.compile(r"^[a-z0-9]([a-z0-9-]*[a-z0-9])?(\.[a-z0-9]([a-z0-9-]*[a-z0-9])?)*$")


class UrlValidation(NamedTuple):
    """Result of URL admissibility check.

    Attributes:
        is_valid: Whether the URL may be scraped.
        reason: Human-readable rejection reason, None when valid.
        normalized_url: The URL with a scheme added, None when invalid.
    """

    is_valid: bool
    reason: str | None
    normalized_url: str | None = None


def normalize_url(url: str) -> str:
    """Trim whitespace and default the scheme to https."""
    url = url.strip()
    return url if url.lower().startswith("http") else f"https://{url}"


def _matches(hostname: str, pattern: str) -> bool:
    if pattern.endswith("."):
        return hostname.startswith(pattern) or f".{pattern}" in hostname
    return hostname == pattern or hostname.endswith(f".{pattern}")


def validate_url(url: str) -> UrlValidation:
    """Check that ``url`` is well formed and not on a blocked domain."""
    normalized = normalize_url(url or "")
    try:
        parsed = urlparse(normalized)
        hostname = (parsed.hostname or "").lower()
    except ValueError:
        return UrlValidation(False, INVALID_URL_REASON)

    if (
        parsed.scheme not in ("http", "https")
        or not _HOSTNAME_RE.match(hostname)
        or ("." not in hostname and hostname != "localhost")
    ):
        logfire.info("URL rejected as malformed", url=url)
        return UrlValidation(False, INVALID_URL_REASON)

    for pattern, reason in BLOCKED_DOMAINS:
        if _matches(hostname, pattern):
            logfire.info("URL rejected by blocklist", url=url, pattern=pattern)
            return UrlValidation(False, reason)

    return UrlValidation(True, None, normalized)
