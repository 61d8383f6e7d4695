"""
Input validation utilities
"""
import math
from typing import Any, Optional


def coerce_amount(value: Any) -> float:
    """
    Coerce a price-like input to a float.
    Missing, non-numeric, NaN, infinite and out-of-range values become 0.
    Negative numbers are rejected.
    """
    if value is None or isinstance(value, bool):
        return 0.0

    if isinstance(value, str):
        value = value.strip()
        if not value:
            return 0.0

    try:
        amount = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0.0

    if math.isnan(amount) or math.isinf(amount):
        return 0.0
    if amount < 0:
        raise ValueError("Amount must not be negative")
    return amount


def validate_product_name(name: Optional[str]) -> str:
    """Validate that a product name is present"""
    if name is None or not str(name).strip():
        raise ValueError("Product name is required")
    return str(name).strip()


def normalize_description(description: Optional[str]) -> Optional[str]:
    """Empty descriptions are stored as null"""
    if description is None:
        return None
    description = str(description).strip()
    return description or None
