"""
Public product API - read-only catalog listing and product detail
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from precast.database import get_db
from precast.schemas import ProductRead
from precast.services.catalog import ERROR, CatalogCache, fetch_product, get_catalog
from precast.services.errors import CatalogError
from precast.api.errors import http_error

router = APIRouter()


@router.get("/", response_model=List[ProductRead])
async def list_products(
    db: AsyncSession = Depends(get_db),
    catalog: CatalogCache = Depends(get_catalog),
):
    """List all products, newest first"""
    snapshot = await catalog.load(db)
    if snapshot.status == ERROR:
        raise HTTPException(status_code=503, detail=snapshot.error or "Catalog unavailable")
    return snapshot.products


@router.get("/{product_id}", response_model=ProductRead)
async def get_product(
    product_id: str,
    db: AsyncSession = Depends(get_db),
):
    """Get a single product"""
    try:
        return await fetch_product(db, product_id)
    except CatalogError as e:
        raise http_error(e)
