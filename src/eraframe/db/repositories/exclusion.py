"""Exclusion repository."""

from collections.abc import Sequence

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from eraframe.db.models.exclusion import ImageExclusionModel


class ExclusionRepository:
    """Queries over the image_exclusions table. The caller owns the transaction."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_url(self, image_url: str) -> ImageExclusionModel | None:
        """Find an exclusion by its exact URL."""
        stmt = select(ImageExclusionModel).where(ImageExclusionModel.image_url == image_url)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def is_excluded(self, image_url: str) -> bool:
        stmt = select(ImageExclusionModel.id).where(ImageExclusionModel.image_url == image_url)
        result = await self._session.execute(stmt)
        return result.scalar() is not None

    async def count(self) -> int:
        result = await self._session.execute(select(func.count(ImageExclusionModel.id)))
        return result.scalar_one()

    async def list_urls(self) -> Sequence[str]:
        """All excluded URLs, oldest first."""
        stmt = select(ImageExclusionModel.image_url).order_by(ImageExclusionModel.created_at)
        result = await self._session.execute(stmt)
        return result.scalars().all()

    async def add(
        self,
        image_url: str,
        *,
        title_hint: str | None = None,
        query_hint: str | None = None,
    ) -> ImageExclusionModel:
        """
        Insert an exclusion, tolerating duplicates.

        Returns the stored row; for a duplicate URL that is the existing row
        with its original hints.
        """
        stmt = (
            insert(ImageExclusionModel)
            .values(image_url=image_url, title_hint=title_hint, query_hint=query_hint)
            .on_conflict_do_nothing(index_elements=[ImageExclusionModel.image_url])
        )
        await self._session.execute(stmt)

        row = await self.get_by_url(image_url)
        if row is None:
            raise RuntimeError(f"Exclusion for {image_url} vanished after insert")
        return row
