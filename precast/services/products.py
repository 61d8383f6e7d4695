"""
Product mutator - create, update and delete catalog records.
Every successful write refreshes the catalog cache.
"""
import logging
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from precast.models.product import Product
from precast.schemas import ProductRead
from precast.services.catalog import READY, CatalogCache, fetch_product
from precast.services.errors import NotFoundError, StoreError, ValidationError
from precast.utils.validators import coerce_amount, normalize_description, validate_product_name

logger = logging.getLogger(__name__)

AMOUNT_FIELDS = ("base_price", "transport_cost")
MUTABLE_FIELDS = ("name", "description", "base_price", "transport_cost", "images", "is_available")


def _clean_fields(fields: Dict[str, Any], partial: bool) -> Dict[str, Any]:
    """Validate and coerce incoming values; unknown keys are dropped"""
    cleaned = {k: v for k, v in fields.items() if k in MUTABLE_FIELDS}
    if partial:
        # null means "leave unchanged"; only description can be cleared
        cleaned = {k: v for k, v in cleaned.items() if v is not None or k == "description"}

    try:
        if not partial or "name" in cleaned:
            cleaned["name"] = validate_product_name(cleaned.get("name"))
        for key in AMOUNT_FIELDS:
            if not partial or key in cleaned:
                cleaned[key] = coerce_amount(cleaned.get(key))
    except ValueError as e:
        raise ValidationError(str(e)) from e

    if "description" in cleaned:
        cleaned["description"] = normalize_description(cleaned["description"])

    if "images" in cleaned or not partial:
        cleaned["images"] = [str(url) for url in (cleaned.get("images") or [])]

    if "is_available" in cleaned or not partial:
        value = cleaned.get("is_available")
        cleaned["is_available"] = True if value is None else bool(value)

    return cleaned


class ProductService:
    def __init__(self, db: AsyncSession, catalog: Optional[CatalogCache] = None):
        self.db = db
        self.catalog = catalog

    async def get(self, product_id: str) -> ProductRead:
        return await fetch_product(self.db, product_id)

    async def create(self, fields: Dict[str, Any]) -> ProductRead:
        values = _clean_fields(fields, partial=False)
        product = Product(**values)

        try:
            self.db.add(product)
            await self.db.commit()
            await self.db.refresh(product)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Create product failed: {e}")
            raise StoreError("Could not save product") from e

        logger.info(f"Created product {product.id} ({product.name})")
        created = ProductRead.model_validate(product)
        await self._refresh_catalog()
        return created

    async def update(self, product_id: str, fields: Dict[str, Any]) -> ProductRead:
        """Apply only the given fields; everything else keeps its stored value"""
        values = _clean_fields(fields, partial=True)

        try:
            product = await self.db.get(Product, product_id)
            if product is None:
                raise NotFoundError(product_id)

            for key, value in values.items():
                setattr(product, key, value)

            await self.db.commit()
            await self.db.refresh(product)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Update product {product_id} failed: {e}")
            raise StoreError("Could not save product") from e

        logger.info(f"Updated product {product_id}: {sorted(values)}")
        updated = ProductRead.model_validate(product)
        await self._refresh_catalog()
        return updated

    async def delete(self, product_id: str) -> None:
        """Permanently remove a product. Deleting an unknown id raises NotFoundError."""
        try:
            product = await self.db.get(Product, product_id)
            if product is None:
                raise NotFoundError(product_id)

            await self.db.delete(product)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Delete product {product_id} failed: {e}")
            raise StoreError("Could not delete product") from e

        # Stored images are left in object storage
        logger.info(f"Deleted product {product_id}")
        await self._refresh_catalog()

    async def _refresh_catalog(self) -> None:
        if self.catalog is None:
            return
        snapshot = await self.catalog.refresh(self.db)
        if snapshot.status != READY:
            logger.warning(f"Catalog refresh after write failed: {snapshot.error}")
