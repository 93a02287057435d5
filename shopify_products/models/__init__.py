"""Data models for Shopify products and creation payloads."""

from .shopify_models import (
    ShopifyProduct,
    ShopifyVariant,
    ShopifyImage,
)
from .payload import (
    ProductPayload,
    build_payload,
    normalize_inventory_policy,
)

__all__ = [
    "ShopifyProduct",
    "ShopifyVariant",
    "ShopifyImage",
    "ProductPayload",
    "build_payload",
    "normalize_inventory_policy",
]
