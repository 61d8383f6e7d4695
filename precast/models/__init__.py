from precast.models.product import Product

__all__ = [
    "Product",
]
