"""
Landing page API - featured products plus the static marketing copy
"""
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from precast.config import get_settings
from precast.database import get_db
from precast.schemas import CatalogSnapshot, ProductRead
from precast.services.catalog import READY, CatalogCache, get_catalog

router = APIRouter()

FALLBACK_MESSAGE = "Products coming soon. Contact us for a custom quote."

HERO = {
    "tagline": "Premium Precast Solutions",
    "heading": "Durable. Precision-Built. Precast Concrete Solutions.",
    "subheading": (
        "Building Kenya's future with superior precast concrete products. "
        "Quality engineering meets unmatched durability."
    ),
}

TRUST_INDICATORS = [
    {"label": "Quality Guaranteed", "value": "ISO Certified"},
    {"label": "Years Experience", "value": "5+"},
    {"label": "Projects Completed", "value": "50+"},
    {"label": "Delivery Service", "value": "Nationwide"},
]

WHY_CHOOSE_US = [
    "Factory-controlled quality assurance",
    "Faster installation than cast-in-place",
    "Custom designs to meet your specifications",
    "Nationwide delivery and installation support",
]

CALL_TO_ACTION = {
    "heading": "Ready to Start Your Project?",
    "text": (
        "Get in touch with our team for a free consultation and quote "
        "on your precast concrete needs."
    ),
    "link": "/contact",
}


class FeaturedProduct(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    base_price: float
    cover_image: Optional[str] = None


class LandingResponse(BaseModel):
    hero: dict
    trust_indicators: List[dict]
    featured: List[FeaturedProduct]
    fallback_message: Optional[str] = None
    why_choose_us: List[str]
    call_to_action: dict
    whatsapp_url: str


def featured_products(snapshot: CatalogSnapshot, count: int) -> List[ProductRead]:
    """First `count` products of a ready snapshot; nothing while loading or failed"""
    if snapshot.status != READY:
        return []
    return snapshot.products[:count]


def whatsapp_url(number: str) -> str:
    return f"https://wa.me/{number}"


@router.get("", response_model=LandingResponse)
async def get_landing(
    db: AsyncSession = Depends(get_db),
    catalog: CatalogCache = Depends(get_catalog),
):
    settings = get_settings()
    snapshot = await catalog.load(db)
    featured = featured_products(snapshot, settings.FEATURED_PRODUCT_COUNT)

    return LandingResponse(
        hero=HERO,
        trust_indicators=TRUST_INDICATORS,
        featured=[
            FeaturedProduct(
                id=p.id,
                name=p.name,
                description=p.description,
                base_price=p.base_price,
                cover_image=p.images[0] if p.images else None,
            )
            for p in featured
        ],
        fallback_message=None if featured else FALLBACK_MESSAGE,
        why_choose_us=WHY_CHOOSE_US,
        call_to_action=CALL_TO_ACTION,
        whatsapp_url=whatsapp_url(settings.WHATSAPP_NUMBER),
    )
