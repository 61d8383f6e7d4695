"""
Admin API - product CRUD, image uploads and the product editor session.
Authentication is handled in front of this router.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, UploadFile
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from precast.api.errors import http_error
from precast.database import get_db
from precast.schemas import DraftUpdate, ProductCreate, ProductDraft, ProductRead, ProductUpdate
from precast.services.catalog import CatalogCache, get_catalog
from precast.services.editor import AdminEditor, get_editor
from precast.services.errors import CatalogError
from precast.services.products import ProductService
from precast.services.uploads import ImageFile, ImageUploader, get_uploader

logger = logging.getLogger(__name__)

router = APIRouter()


# ─── Schemas ───

class AdminProductRow(ProductRead):
    status_label: str = "In Stock"


class AdminCatalogResponse(BaseModel):
    status: str
    products: List[AdminProductRow]
    error: Optional[str] = None


class UploadFailureResponse(BaseModel):
    filename: str
    message: str


class UploadBatchResponse(BaseModel):
    urls: List[str]
    failures: List[UploadFailureResponse]


class NotificationResponse(BaseModel):
    title: str
    description: str = ""
    variant: str = "default"


class EditorResponse(BaseModel):
    state: str
    draft: Optional[ProductDraft] = None
    uploading: bool = False
    saving: bool = False
    notifications: List[NotificationResponse] = []
    product: Optional[ProductRead] = None


def _editor_response(editor: AdminEditor, product: Optional[ProductRead] = None) -> EditorResponse:
    return EditorResponse(
        state=editor.state.value,
        draft=editor.draft,
        uploading=editor.uploading,
        saving=editor.saving,
        notifications=[
            NotificationResponse(title=n.title, description=n.description, variant=n.variant)
            for n in editor.drain_notifications()
        ],
        product=product,
    )


async def _read_files(files: List[UploadFile]) -> List[ImageFile]:
    images = []
    for f in files:
        images.append(ImageFile(
            filename=f.filename or "file",
            content=await f.read(),
            content_type=f.content_type,
        ))
    return images


# ─── Products ───

@router.get("/products", response_model=AdminCatalogResponse)
async def list_admin_products(
    db: AsyncSession = Depends(get_db),
    catalog: CatalogCache = Depends(get_catalog),
):
    """Catalog table for the admin screen, including load status"""
    snapshot = await catalog.load(db)
    rows = [
        AdminProductRow(
            **p.model_dump(),
            status_label="In Stock" if p.is_available else "Out of Stock",
        )
        for p in snapshot.products
    ]
    return AdminCatalogResponse(status=snapshot.status, products=rows, error=snapshot.error)


@router.post("/products", response_model=ProductRead)
async def create_product(
    data: ProductCreate,
    db: AsyncSession = Depends(get_db),
    catalog: CatalogCache = Depends(get_catalog),
):
    """Create a new product"""
    try:
        return await ProductService(db, catalog).create(data.model_dump())
    except CatalogError as e:
        raise http_error(e)


@router.put("/products/{product_id}", response_model=ProductRead)
async def update_product(
    product_id: str,
    data: ProductUpdate,
    db: AsyncSession = Depends(get_db),
    catalog: CatalogCache = Depends(get_catalog),
):
    """Update only the fields present in the request body"""
    try:
        return await ProductService(db, catalog).update(product_id, data.model_dump(exclude_unset=True))
    except CatalogError as e:
        raise http_error(e)


@router.delete("/products/{product_id}")
async def delete_product(
    product_id: str,
    db: AsyncSession = Depends(get_db),
    catalog: CatalogCache = Depends(get_catalog),
):
    """Permanently delete a product"""
    try:
        await ProductService(db, catalog).delete(product_id)
    except CatalogError as e:
        raise http_error(e)
    return {"success": True, "message": "Product deleted"}


@router.post("/uploads", response_model=UploadBatchResponse)
async def upload_images(
    files: List[UploadFile] = File(...),
    uploader: ImageUploader = Depends(get_uploader),
):
    """Upload a batch of images; failed files are listed, not fatal"""
    result = await uploader.upload_batch(await _read_files(files))
    return UploadBatchResponse(
        urls=result.urls,
        failures=[UploadFailureResponse(filename=f.filename, message=f.message) for f in result.failures],
    )


# ─── Editor session ───

@router.get("/editor", response_model=EditorResponse)
async def get_editor_state(editor: AdminEditor = Depends(get_editor)):
    return _editor_response(editor)


@router.post("/editor/new", response_model=EditorResponse)
async def open_new_product(editor: AdminEditor = Depends(get_editor)):
    """Start composing a new product"""
    try:
        editor.open_create()
    except CatalogError as e:
        raise http_error(e)
    return _editor_response(editor)


@router.post("/editor/edit/{product_id}", response_model=EditorResponse)
async def open_existing_product(
    product_id: str,
    db: AsyncSession = Depends(get_db),
    editor: AdminEditor = Depends(get_editor),
):
    """Start editing an existing product; the draft is seeded from the stored record"""
    try:
        product = await ProductService(db).get(product_id)
        editor.open_edit(product)
    except CatalogError as e:
        raise http_error(e)
    return _editor_response(editor)


@router.patch("/editor/draft", response_model=EditorResponse)
async def update_draft(
    data: DraftUpdate,
    editor: AdminEditor = Depends(get_editor),
):
    try:
        editor.update_draft(data.model_dump(exclude_unset=True))
    except CatalogError as e:
        raise http_error(e)
    return _editor_response(editor)


@router.post("/editor/images", response_model=EditorResponse)
async def upload_draft_images(
    files: List[UploadFile] = File(...),
    editor: AdminEditor = Depends(get_editor),
    uploader: ImageUploader = Depends(get_uploader),
):
    """Upload images and append their URLs to the draft"""
    try:
        await editor.upload_images(uploader, await _read_files(files))
    except CatalogError as e:
        raise http_error(e)
    return _editor_response(editor)


@router.delete("/editor/images/{index}", response_model=EditorResponse)
async def remove_draft_image(
    index: int,
    editor: AdminEditor = Depends(get_editor),
):
    """Remove an image from the draft (the stored file is kept)"""
    try:
        editor.remove_image(index)
    except CatalogError as e:
        raise http_error(e)
    return _editor_response(editor)


@router.post("/editor/save", response_model=EditorResponse)
async def save_draft(
    db: AsyncSession = Depends(get_db),
    catalog: CatalogCache = Depends(get_catalog),
    editor: AdminEditor = Depends(get_editor),
):
    """Submit the draft; failures come back as notifications"""
    try:
        saved = await editor.save(ProductService(db, catalog))
    except CatalogError as e:
        raise http_error(e)
    return _editor_response(editor, product=saved)


@router.post("/editor/cancel", response_model=EditorResponse)
async def cancel_editor(editor: AdminEditor = Depends(get_editor)):
    editor.cancel()
    return _editor_response(editor)
