"""Query text and image URL normalization rules.

Everything here is pure: no network access. The async half of URL
normalization (following redirector URLs) lives in
``eraframe.resolution.normalizer``.
"""

import re
from urllib.parse import quote, unquote, urlsplit, urlunsplit

# Maximum pixel width of the thumbnail variant served to consumers
THUMB_WIDTH = 960

ASSET_HOST = "upload.wikimedia.org"
COMMONS_HOST = "commons.wikimedia.org"
KNOWLEDGE_DOMAIN = "wikipedia.org"
REDIRECTOR_PATH = "/wiki/Special:FilePath/"

# Audio, video, document and vector formats
NON_RASTER_EXTENSIONS = frozenset(
    {
        "mp3", "ogg", "oga", "wav", "flac", "aac", "m4a",
        "webm", "mp4", "ogv", "avi", "mov", "mkv",
        "pdf", "djvu", "tif", "tiff",
        "svg", "stl",
    }
)
RASTER_EXTENSIONS = frozenset({"jpg", "jpeg", "png", "webp", "gif"})

# Localized names of the file namespace on Wikipedia/Commons
FILE_NAMESPACES = ("File", "Image", "Bestand", "Datei", "Fichier", "Archivo", "Immagine")
# Namespaces that are never plain articles
NON_ARTICLE_NAMESPACES = frozenset(
    {ns.lower() for ns in FILE_NAMESPACES}
    | {"special", "speciaal", "spezial", "category", "categorie", "kategorie", "template",
       "help", "portal", "wikipedia", "talk", "user", "media", "overleg", "gebruiker"}
)

_FILE_PAGE_RE = re.compile(
    rf"^/wiki/(?:{'|'.join(FILE_NAMESPACES)}):(?P<name>.+)$", re.IGNORECASE
)
_MEDIA_FRAGMENT_RE = re.compile(
    rf"^/media/(?:{'|'.join(FILE_NAMESPACES)}):(?P<name>.+)$", re.IGNORECASE
)
_ARTICLE_HOST_RE = re.compile(r"^(?P<lang>[a-z][a-z\-]*)\.(?:m\.)?wikipedia\.org$")
# /<project>/<lang-or-commons>/<h>/<hh>/<name>
_ASSET_PATH_RE = re.compile(
    r"^/(?P<project>[^/]+/[^/]+)/(?P<h1>[0-9a-f])/(?P<h2>[0-9a-f]{2})/(?P<name>[^/]+)$"
)


# ============================================================================
# Query text
# ============================================================================


def normalize_query(query: str) -> str:
    """Lowercase, trim and collapse whitespace (used for cache lookups)."""
    return re.sub(r"\s+", " ", query.lower().strip())


def strip_decade_hints(query: str) -> str:
    """
    Remove decade hints already present in a query.

    Prevents search text like "Walkman 80s 1985" or "jaren 80 80s".
    """
    q = query
    # "jaren 80" first so no dangling "jaren" is left behind
    q = re.sub(r"\bjaren\s+['’]?\d{2,4}s?\b", "", q, flags=re.IGNORECASE)
    q = re.sub(r"\b(?:19|20)\d0s\b", "", q, flags=re.IGNORECASE)
    q = re.sub(r"(?<!\w)['’]?\d0s\b", "", q, flags=re.IGNORECASE)
    return re.sub(r"\s{2,}", " ", q).strip()


def build_search_query(query: str, year_hint: int | None = None, bias: str | None = None) -> str:
    """Combine the query with the year hint and the knowledge-site bias."""
    parts = [strip_decade_hints(query)]
    if year_hint is not None and str(year_hint) not in parts[0]:
        parts.append(str(year_hint))
    if bias and bias.lower() not in parts[0].lower():
        parts.append(bias)
    return " ".join(p for p in parts if p)


# ============================================================================
# URL classification
# ============================================================================


def _split(url: str):
    try:
        parts = urlsplit(url)
    except ValueError:
        return None
    if parts.scheme not in ("http", "https") or not parts.netloc:
        return None
    return parts


def _extension(path: str) -> str:
    last = path.rsplit("/", 1)[-1]
    if "." not in last:
        return ""
    return last.rsplit(".", 1)[-1].lower()


def host_of(url: str) -> str:
    parts = _split(url)
    return (parts.hostname or "").lower() if parts else ""


def is_rejected_url(url: str) -> bool:
    """
    Rejection predicate applied at every tier, independent of host.

    Rejects unparseable URLs, paths ending in a non-raster extension and
    paths containing a ``transcoded`` segment.
    """
    parts = _split(url)
    if parts is None:
        return True
    path = unquote(parts.path).lower()
    if "transcoded" in path.split("/"):
        return True
    return _extension(path) in NON_RASTER_EXTENSIONS


def is_raster_url(url: str) -> bool:
    """True when the URL path ends in a raster image extension."""
    parts = _split(url)
    if parts is None:
        return False
    return _extension(unquote(parts.path)) in RASTER_EXTENSIONS


def is_asset_host(url: str) -> bool:
    return host_of(url) == ASSET_HOST


def is_knowledge_host(url: str) -> bool:
    host = host_of(url)
    return host == KNOWLEDGE_DOMAIN or host.endswith("." + KNOWLEDGE_DOMAIN) or host == COMMONS_HOST


def is_redirector_url(url: str) -> bool:
    parts = _split(url)
    return (
        parts is not None
        and (parts.hostname or "").lower() == COMMONS_HOST
        and parts.path.startswith(REDIRECTOR_PATH)
    )


def file_page_name(url: str) -> str | None:
    """
    Return the file name if the URL is a file-description page.

    Handles ``/wiki/File:X`` (and localized namespaces) on Wikipedia or
    Commons, and the media viewer fragment ``/wiki/Article#/media/File:X``.
    """
    if not is_knowledge_host(url):
        return None
    parts = _split(url)
    if parts is None:
        return None
    if match := _MEDIA_FRAGMENT_RE.match(unquote(parts.fragment)):
        return match.group("name")
    if match := _FILE_PAGE_RE.match(unquote(parts.path)):
        return match.group("name")
    return None


def is_file_page(url: str) -> bool:
    return file_page_name(url) is not None


def to_redirector_url(url: str) -> str | None:
    """Rewrite a file-description page to the canonical redirector URL."""
    name = file_page_name(url)
    if not name:
        return None
    name = name.strip().replace(" ", "_")
    return f"https://{COMMONS_HOST}{REDIRECTOR_PATH}{quote(name, safe='')}"


def to_thumbnail_url(url: str, width: int = THUMB_WIDTH) -> str:
    """
    Rewrite an asset-host original to its width-capped thumbnail variant.

    ``/wikipedia/commons/a/ab/Name.jpg`` becomes
    ``/wikipedia/commons/thumb/a/ab/Name.jpg/960px-Name.jpg``. URLs already
    under ``/thumb/`` and URLs that do not follow the hashed directory layout
    are returned unchanged.
    """
    parts = _split(url)
    if parts is None or (parts.hostname or "").lower() != ASSET_HOST:
        return url
    if "/thumb/" in parts.path:
        return url
    match = _ASSET_PATH_RE.match(parts.path)
    if not match:
        return url
    name = match.group("name")
    path = (
        f"/{match.group('project')}/thumb/{match.group('h1')}/{match.group('h2')}"
        f"/{name}/{width}px-{name}"
    )
    return urlunsplit((parts.scheme, parts.netloc, path, "", ""))


def parse_article(url: str) -> tuple[str, str] | None:
    """
    Parse a root knowledge-site article page into ``(title, lang)``.

    Returns None for asset hosts, Commons, namespaced pages (``File:``,
    ``Special:``, ``Category:``...) and anything that is not ``/wiki/<Title>``.
    """
    parts = _split(url)
    if parts is None:
        return None
    match = _ARTICLE_HOST_RE.match((parts.hostname or "").lower())
    if not match or not parts.path.startswith("/wiki/"):
        return None
    title = unquote(parts.path[len("/wiki/"):]).replace("_", " ").strip()
    if not title:
        return None
    if ":" in title and title.split(":", 1)[0].strip().lower() in NON_ARTICLE_NAMESPACES:
        return None
    return title, match.group("lang")
