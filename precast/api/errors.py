"""
Mapping from catalog service errors to HTTP responses
"""
from fastapi import HTTPException

from precast.services.errors import (
    CatalogError,
    EditorStateError,
    NotFoundError,
    StoreError,
    ValidationError,
)


def http_error(error: CatalogError) -> HTTPException:
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=404, detail="Product not found")
    if isinstance(error, ValidationError):
        return HTTPException(status_code=422, detail=error.message)
    if isinstance(error, EditorStateError):
        return HTTPException(status_code=409, detail=error.message)
    if isinstance(error, StoreError):
        return HTTPException(status_code=503, detail=error.message)
    return HTTPException(status_code=400, detail=error.message)
