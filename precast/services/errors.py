"""
Error taxonomy shared by the catalog services
"""


class CatalogError(Exception):
    """Base class for catalog service errors"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(CatalogError):
    """Input rejected locally before any store call"""


class StoreError(CatalogError):
    """The record store rejected or failed a read/write"""


class NotFoundError(CatalogError):
    """A product id that does not exist (or no longer exists)"""

    def __init__(self, product_id: str):
        super().__init__(f"Product {product_id} not found")
        self.product_id = product_id


class UploadError(CatalogError):
    """A single file could not be stored"""

    def __init__(self, filename: str, message: str):
        super().__init__(message)
        self.filename = filename


class EditorStateError(CatalogError):
    """Operation not allowed in the editor's current state"""
