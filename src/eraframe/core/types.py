"""Core enums and type definitions."""

from enum import IntEnum, StrEnum


class ResolverMode(StrEnum):
    """How much work the resolver may do for one query."""

    FAST = "fast"  # search, metadata images, page-image lookup
    FULL = "full"  # all of the above plus link scraping


class ResolutionStatus(StrEnum):
    """Terminal status of one resolution request."""

    FOUND = "found"
    NONE = "none"
    ERROR = "error"


class Tier(StrEnum):
    """Resolver tiers, in the order they are attempted."""

    SEARCH = "search"
    DIRECT = "direct"
    METADATA = "metadata"
    PAGE_IMAGE = "page_image"
    SCRAPE = "scrape"
    CACHE = "cache"


class TraceOutcome(StrEnum):
    """Outcome of a single traced step."""

    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EMPTY = "empty"
    ERROR = "error"


class LinkPriority(IntEnum):
    """Ranking of scraped links (lower = tried first)."""

    ASSET = 0  # direct asset-host URL
    FILE_PAGE = 1  # file-description page
    OTHER = 2
