"""Exceptions raised by the Shopify products client."""

from typing import Any, Optional


class ShopifyProductsError(Exception):
    """Base class for all errors raised by this package."""


class AuthenticationError(ShopifyProductsError):
    """Raised when the store rejects the supplied credentials (HTTP 401/403)."""

    def __init__(self, store: str, status_code: int):
        self.store = store
        self.status_code = status_code
        super().__init__(f"Authentication failed for store '{store}' (HTTP {status_code})")


class NetworkError(ShopifyProductsError):
    """Raised when the store cannot be reached or the request times out."""


class ShopifyAPIError(ShopifyProductsError):
    """Raised for unexpected non-success responses from the Admin API."""

    def __init__(self, status_code: int, detail: Any = None):
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"Shopify API request failed: {status_code} {detail}")


class DuplicateProduct(ShopifyProductsError):
    """Raised when a product with the same identity already exists."""

    def __init__(self, field: str, value: str, product_id: Optional[int] = None):
        self.field = field
        self.value = value
        self.product_id = product_id
        message = f"A product with {field} '{value}' already exists"
        if product_id is not None:
            message += f" (id {product_id})"
        super().__init__(message)


class ValidationError(ShopifyProductsError):
    """Raised when an argument is rejected before any request is made."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"{field}: {message}")
