"""Rewrite CDN resize URLs to request a high-resolution variant."""

import re

from facelift.constants import CDN_FILL_HEIGHT, CDN_FILL_QUALITY, CDN_FILL_WIDTH

# .../media/{id}/v1/fill/{params}/{filename}
_CDN_FILL_RE = re.compile(
    r"^(?P<prefix>https?://[^\s]+?/media/(?P<media_id>[^/]+)/v1/fill/)"
    r"(?P<params>[^/]+)/(?P<filename>[^/?#]+)(?P<suffix>[?#].*)?$",
    re.IGNORECASE,
)

HIGH_RES_FILL_PARAMS = (
    f"w_{CDN_FILL_WIDTH},h_{CDN_FILL_HEIGHT},al_c,q_{CDN_FILL_QUALITY}"
)


def upscale_cdn_image(url: str, params: str = HIGH_RES_FILL_PARAMS) -> str:
    """Replace the fill parameter segment, keeping media id and filename.

    URLs that do not follow the fill pattern (including every other CDN)
    are returned unchanged.
    """
    match = _CDN_FILL_RE.match(url)
    if not match:
        return url
    return f"{match.group('prefix')}{params}/{match.group('filename')}{match.group('suffix') or ''}"


def upscale_cdn_images(urls: list[str]) -> list[str]:
    """Apply ``upscale_cdn_image`` to every URL, preserving order."""
    return [upscale_cdn_image(url) for url in urls]
