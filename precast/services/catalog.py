"""
Catalog reader - fetches products from the record store and keeps the
last successful listing in an explicit cache.
"""
import asyncio
import logging
from datetime import datetime
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from precast.models.product import Product
from precast.schemas import CatalogSnapshot, ProductRead
from precast.services.errors import NotFoundError, StoreError

logger = logging.getLogger(__name__)

LOADING = "loading"
READY = "ready"
ERROR = "error"


async def fetch_products(db: AsyncSession) -> List[ProductRead]:
    """Full catalog, newest first"""
    try:
        result = await db.execute(
            select(Product).order_by(Product.created_at.desc(), Product.id)
        )
        rows = result.scalars().all()
    except SQLAlchemyError as e:
        logger.error(f"Catalog fetch failed: {e}")
        await db.rollback()
        raise StoreError("Could not load products") from e
    return [ProductRead.model_validate(row) for row in rows]


async def fetch_product(db: AsyncSession, product_id: str) -> ProductRead:
    try:
        product = await db.get(Product, product_id)
    except SQLAlchemyError as e:
        logger.error(f"Product fetch failed for {product_id}: {e}")
        await db.rollback()
        raise StoreError("Could not load product") from e
    if product is None:
        raise NotFoundError(product_id)
    return ProductRead.model_validate(product)


class CatalogCache:
    """
    Holds the most recent successful catalog listing.

    load() fetches on first use and then serves the cached snapshot;
    refresh() invalidates it and refetches. A failed fetch leaves an
    error snapshot with no products rather than a partial list.
    """

    def __init__(self):
        self._snapshot = CatalogSnapshot(status=LOADING)
        self._loaded = False
        self._lock = asyncio.Lock()

    @property
    def snapshot(self) -> CatalogSnapshot:
        return self._snapshot

    def invalidate(self) -> None:
        self._loaded = False

    async def load(self, db: AsyncSession) -> CatalogSnapshot:
        if self._loaded:
            return self._snapshot
        return await self._fetch(db, force=False)

    async def refresh(self, db: AsyncSession) -> CatalogSnapshot:
        """Always refetch, even if a concurrent load() finished while we waited"""
        self.invalidate()
        return await self._fetch(db, force=True)

    async def _fetch(self, db: AsyncSession, force: bool) -> CatalogSnapshot:
        async with self._lock:
            # A load() that queued behind another fetch can reuse its result.
            # A refresh() never does: that fetch may predate the write.
            if self._loaded and not force:
                return self._snapshot

            if self._snapshot.status != READY:
                self._snapshot = CatalogSnapshot(status=LOADING)

            try:
                products = await fetch_products(db)
            except StoreError as e:
                self._snapshot = CatalogSnapshot(status=ERROR, error=e.message)
                return self._snapshot

            self._snapshot = CatalogSnapshot(
                status=READY,
                products=products,
                fetched_at=datetime.utcnow(),
            )
            self._loaded = True
            logger.debug(f"Catalog refreshed: {len(products)} products")
            return self._snapshot


catalog_cache = CatalogCache()


def get_catalog() -> CatalogCache:
    """Dependency returning the process-wide catalog cache"""
    return catalog_cache
