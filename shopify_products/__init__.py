"""
Shopify products client

List and create products in a Shopify store through the Admin REST API,
authenticated with HTTP Basic credentials.
"""

__version__ = "0.1.0"

from .client import ShopifyProductClient, list_products, create_product
from .config import StoreConfig, StoreCredentials, AppConfig, DuplicateIdentity, UNLIMITED
from .exceptions import (
    ShopifyProductsError,
    AuthenticationError,
    NetworkError,
    ShopifyAPIError,
    DuplicateProduct,
    ValidationError,
)
from .models import ShopifyProduct, ProductPayload
from .mock_client import MockShopifyStore

__all__ = [
    "ShopifyProductClient",
    "list_products",
    "create_product",
    "StoreConfig",
    "StoreCredentials",
    "AppConfig",
    "DuplicateIdentity",
    "UNLIMITED",
    "ShopifyProductsError",
    "AuthenticationError",
    "NetworkError",
    "ShopifyAPIError",
    "DuplicateProduct",
    "ValidationError",
    "ShopifyProduct",
    "ProductPayload",
    "MockShopifyStore",
]
