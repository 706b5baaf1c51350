"""Application-wide constants.

This module centralizes the limits, timeouts and heuristics used by the
scrape-and-generate pipeline so there is a single source of truth.
Runtime-tunable values are surfaced through ``facelift.config.Settings``
and frozen into ``ScrapeConfig`` for each run.
"""

# =============================================================================
# Scraping Limits
# =============================================================================

# Maximum characters of text kept from the homepage
HOMEPAGE_MAX_CHARS = 25000

# Maximum characters of text kept from each subpage
SUBPAGE_MAX_CHARS = 15000

# Cap on the combined text across all scraped pages
COMBINED_MAX_CHARS = 40000

# Default number of subpages scraped in addition to the homepage
DEFAULT_MAX_SUBPAGES = 2

# Aggregated media caps
MAX_IMAGES = 20
MAX_VIDEOS = 5
MAX_COLORS = 15

# Unscraped pages carried forward for later generation
MAX_DISCOVERED_URLS = 20

# Per-page image cap applied by the extractor
MAX_IMAGES_PER_PAGE = 30

# =============================================================================
# HTTP Timeout Configuration (seconds)
# =============================================================================

# Primary scraping service (Firecrawl-compatible)
SCRAPER_SERVICE_TIMEOUT_SECONDS = 30.0
SUBPAGE_SCRAPER_SERVICE_TIMEOUT_SECONDS = 25.0

# Direct HTTP fallback
DIRECT_FETCH_TIMEOUT_SECONDS = 15.0
SUBPAGE_DIRECT_FETCH_TIMEOUT_SECONDS = 12.0

# Site-map discovery
SITE_MAP_TIMEOUT_SECONDS = 10.0

# Milliseconds the scraping service waits for client-side rendering
SCRAPER_WAIT_FOR_MS = 5000

DEFAULT_SCRAPER_BASE_URL = "https://api.firecrawl.dev"

DIRECT_FETCH_USER_AGENT = (
    "Mozilla/5.0 (compatible; WebFaceliftBot/1.0; +https://webfacelift.io)"
)

# =============================================================================
# CDN Normalization
# =============================================================================

# Resize profile requested for CDN "fill" images
CDN_FILL_WIDTH = 1440
CDN_FILL_HEIGHT = 900
CDN_FILL_QUALITY = 85

# CDN fill thumbnails narrower than this are dropped by the image extractor
CDN_THUMBNAIL_MIN_WIDTH = 300

# =============================================================================
# Subpage Prioritization
# =============================================================================

# Score added for each high-value keyword (matched as a whole path word)
KEYWORD_MATCH_WEIGHT = 3

# Score subtracted per path segment
PATH_DEPTH_PENALTY = 2

HIGH_VALUE_KEYWORDS = (
    "gallery",
    "pricing",
    "price",
    "service",
    "about",
    "contact",
    "book",
    "shop",
    "faq",
    "review",
    "testimonial",
    "team",
    "menu",
    "portfolio",
    "package",
    "rates",
    "class",
    "lesson",
    "activit",
    "membership",
    "schedule",
    "location",
)

# =============================================================================
# Color Extraction
# =============================================================================

# Channels within this spread of each other count as a neutral gray
NEUTRAL_SPREAD_THRESHOLD = 20

# Near-black / near-white: average brightness within this margin of 0 or 255
EXTREME_BRIGHTNESS_MARGIN = 20

# Tinted colors this close to black or white still count as boring up to this spread
EXTREME_SPREAD_THRESHOLD = 40

# =============================================================================
# Generation Configuration
# =============================================================================

# Number of content-analysis attempts (full input, then trimmed input)
ANALYSIS_MAX_ATTEMPTS = 2

# Output token ceilings per stage
ANALYSIS_MAX_TOKENS = 8192
BLUEPRINT_MAX_TOKENS = 16384
DESIGN_MAX_TOKENS = 8192

# Timeouts for AI calls (seconds)
ANALYSIS_TIMEOUT_SECONDS = 120.0
BLUEPRINT_TIMEOUT_SECONDS = 180.0
DESIGN_TIMEOUT_SECONDS = 60.0

# Trimmed-input profile for the second content-analysis attempt
TRIMMED_MAX_IMAGES = 8
TRIMMED_MAX_VIDEOS = 2
TRIMMED_MAX_MARKDOWN_CHARS = 15000
