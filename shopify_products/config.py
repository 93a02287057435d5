"""Configuration management for the Shopify products client."""

from enum import Enum
from typing import Optional, Union, Literal
from urllib.parse import urlparse
from pydantic import BaseModel, Field, ConfigDict, SecretStr, field_validator

UNLIMITED = "unlimited"
MAX_PAGE_SIZE = 250

ResultSize = Union[int, Literal["unlimited"]]


class DuplicateIdentity(str, Enum):
    """Field used to decide whether a product already exists."""
    TITLE = "title"
    SKU = "sku"


def normalize_store(value: str) -> str:
    """
    Reduce a store identifier to its myshopify subdomain.

    Accepts ``mystore``, ``mystore.myshopify.com`` or a full store URL.
    """
    store = (value or "").strip()
    if "://" in store:
        store = urlparse(store).netloc
    store = store.strip("/").lower()
    if store.endswith(".myshopify.com"):
        store = store[: -len(".myshopify.com")]
    return store


class StoreCredentials(BaseModel):
    """HTTP Basic credentials for a private app."""
    username: str = Field(..., min_length=1, description="Private app API key")
    password: SecretStr = Field(..., description="Private app password")


class StoreConfig(BaseModel):
    """Connection settings for one store, passed into every operation."""
    store: str = Field(..., description="Store subdomain (e.g., 'mystore')")
    credentials: StoreCredentials
    api_version: Optional[str] = Field(
        None,
        description="Admin API version; unversioned /admin/products.json when omitted"
    )
    timeout: float = Field(30.0, gt=0, description="HTTP timeout in seconds")
    duplicate_identity: DuplicateIdentity = Field(
        DuplicateIdentity.TITLE,
        description="Field compared against the catalog before creating a product"
    )

    @field_validator("store")
    @classmethod
    def _normalize_store(cls, value: str) -> str:
        store = normalize_store(value)
        if not store:
            raise ValueError("store must not be empty")
        return store

    @property
    def base_url(self) -> str:
        return f"https://{self.store}.myshopify.com"

    @property
    def products_path(self) -> str:
        if self.api_version:
            return f"/admin/api/{self.api_version}/products.json"
        return "/admin/products.json"


class AppConfig(BaseModel):
    """Main configuration file for the command-line tool."""
    shopify: StoreConfig
    default_result_size: ResultSize = Field(
        UNLIMITED,
        description="Result size used by `list` when --limit is not given"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "shopify": {
                    "store": "mystore",
                    "credentials": {
                        "username": "your_api_key",
                        "password": "your_api_password"
                    },
                    "api_version": None,
                    "timeout": 30.0,
                    "duplicate_identity": "title"
                },
                "default_result_size": "unlimited"
            }
        }
    )
