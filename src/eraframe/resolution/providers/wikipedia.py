"""Wikipedia page-image lookup."""

from __future__ import annotations

from typing import ClassVar

from eraframe.core.normalization import THUMB_WIDTH
from eraframe.resolution.base import AbstractProvider


class WikipediaPageImageProvider(AbstractProvider):
    """
    Looks up the lead image of a Wikipedia article.

    Uses the PageImages extension of the MediaWiki action API. The
    request goes to the language edition the article was found on.
    """

    SOURCE_NAME: ClassVar[str] = "wikipedia"

    async def page_image(self, title: str, lang: str = "en") -> str | None:
        """Return the article's thumbnail URL, or None if it has no page image."""
        response = await self._request(
            "GET",
            f"https://{lang}.wikipedia.org/w/api.php",
            params={
                "action": "query",
                "prop": "pageimages",
                "titles": title,
                "pithumbsize": THUMB_WIDTH,
                "redirects": 1,
                "format": "json",
                "formatversion": 2,
            },
        )
        data = self._json(response)

        query = data.get("query")
        pages = query.get("pages") if isinstance(query, dict) else None
        for page in pages or []:
            if not isinstance(page, dict) or page.get("missing"):
                continue
            thumbnail = page.get("thumbnail")
            if isinstance(thumbnail, dict) and isinstance(thumbnail.get("source"), str):
                return thumbnail["source"]
        return None
