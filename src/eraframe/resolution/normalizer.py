"""Candidate URL normalization, including redirector resolution."""

from __future__ import annotations

import logging
from typing import ClassVar

from eraframe.core.exceptions import CandidateRejectedError, NetworkError
from eraframe.core.normalization import (
    ASSET_HOST,
    is_asset_host,
    is_file_page,
    is_raster_url,
    is_redirector_url,
    is_rejected_url,
    to_redirector_url,
    to_thumbnail_url,
)
from eraframe.resolution.base import AbstractProvider

logger = logging.getLogger(__name__)


class CandidateNormalizer(AbstractProvider):
    """
    Turns a discovered URL into a directly fetchable image URL.

    Rules, applied in order:
    - the rejection predicate (non-raster extension, ``transcoded`` segment)
    - file-description page -> redirector URL
    - redirector -> final location, which must be on the asset host
    - asset-host original -> width-capped thumbnail
    - raster URL on any other host -> accepted unchanged
    """

    SOURCE_NAME: ClassVar[str] = "wikimedia"

    def _headers(self) -> dict[str, str]:
        headers = super()._headers()
        headers["Accept"] = "image/*,*/*;q=0.8"
        return headers

    async def normalize(self, url: str) -> str:
        """
        Normalize a candidate URL.

        Raises:
            CandidateRejectedError: If the candidate is not an acceptable image
            NetworkError: If the redirector could not be followed
        """
        url = url.strip()
        if is_rejected_url(url):
            raise CandidateRejectedError("Rejected by extension or path", url=url)

        if is_file_page(url):
            redirector = to_redirector_url(url)
            if redirector is None:
                raise CandidateRejectedError("Unparseable file page", url=url)
            url = redirector

        if is_redirector_url(url):
            final = await self.resolve_redirect(url)
            if not is_asset_host(final):
                raise CandidateRejectedError(
                    f"Redirect did not land on {ASSET_HOST}",
                    url=url,
                    details={"final": final},
                )
            if is_rejected_url(final):
                raise CandidateRejectedError("Rejected by extension or path", url=final)
            url = final

        if is_asset_host(url):
            thumbnail = to_thumbnail_url(url)
            if not is_raster_url(thumbnail):
                raise CandidateRejectedError("Asset is not a raster image", url=url)
            return thumbnail

        if is_raster_url(url):
            return url

        raise CandidateRejectedError("Not a direct image URL", url=url)

    async def resolve_redirect(self, url: str) -> str:
        """Follow redirects to the final location (HEAD first, GET fallback)."""
        try:
            response = await self._request("HEAD", url)
            return str(response.url)
        except NetworkError as e:
            logger.debug(f"HEAD {url} failed ({e.message}), retrying with GET")

        # Stream so the body is never downloaded
        with self._transport_errors():
            async with self._http.stream("GET", url) as response:
                self._check_status(response)
                return str(response.url)
