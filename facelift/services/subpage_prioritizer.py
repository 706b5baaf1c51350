"""Rank discovered internal links so the most content-rich pages are scraped first."""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Iterable, List, Sequence
from urllib.parse import urlparse

from facelift.constants import (
    HIGH_VALUE_KEYWORDS,
    KEYWORD_MATCH_WEIGHT,
    PATH_DEPTH_PENALTY,
)

# Plural/verb endings, plus "us" for slugs like aboutus and contactus
_KEYWORD_SUFFIXES = ("s", "es", "ies", "y", "ing", "ings", "us")


@lru_cache(maxsize=128)
def _keyword_pattern(keyword: str) -> re.Pattern:
    """Match ``keyword`` as a whole word of the path, allowing common endings."""
    suffixes = "|".join(_KEYWORD_SUFFIXES)
    return re.compile(rf"(?<![a-z0-9]){re.escape(keyword)}(?:{suffixes})?(?![a-z0-9])")


@dataclass(frozen=True)
class PrioritizedLink:
    """A discovered URL with its relevance score."""

    url: str
    score: int


def path_depth(url: str) -> int:
    """Number of non-empty slash-delimited segments in the URL path."""
    return len([segment for segment in urlparse(url).path.split("/") if segment])


def score_link(
    url: str,
    keywords: Sequence[str] = HIGH_VALUE_KEYWORDS,
    keyword_weight: int = KEYWORD_MATCH_WEIGHT,
    depth_penalty: int = PATH_DEPTH_PENALTY,
) -> int:
    """Score = keyword_weight per keyword in the path - depth_penalty per segment.

    Keywords match whole path words (/services, /our-team, /activities),
    never fragments of unrelated words (/pirates, /classic-cars).
    """
    path = urlparse(url).path.lower()
    matches = sum(1 for keyword in keywords if _keyword_pattern(keyword).search(path))
    return matches * keyword_weight - path_depth(url) * depth_penalty


def rank_links(links: Iterable[str]) -> List[PrioritizedLink]:
    """Score and sort links, highest first; ties keep discovery order."""
    scored = [PrioritizedLink(url=url, score=score_link(url)) for url in links]
    # sorted() is stable, so equal scores stay in discovery order
    return sorted(scored, key=lambda link: link.score, reverse=True)


def prioritize_links(links: Iterable[str], max_count: int) -> List[str]:
    """Return the ``max_count`` most relevant links.

    Deterministic and side-effect free: the same input always yields the
    same ordered output.
    """
    if max_count <= 0:
        return []
    return [link.url for link in rank_links(links)[:max_count]]
