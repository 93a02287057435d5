"""Pydantic models for Shopify Admin REST product records."""

from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict


class ShopifyImage(BaseModel):
    """Product image, either a remote src or an inline base64 attachment."""
    id: Optional[int] = None
    src: Optional[str] = None
    attachment: Optional[str] = None
    filename: Optional[str] = None
    alt: Optional[str] = None
    position: Optional[int] = None

    model_config = ConfigDict(extra="allow")


class ShopifyVariant(BaseModel):
    """Product variant with its inventory fields."""
    id: Optional[int] = None
    title: Optional[str] = None
    sku: Optional[str] = None
    price: Optional[str] = None
    inventory_quantity: Optional[int] = None
    inventory_policy: Optional[str] = None
    inventory_management: Optional[str] = None
    weight: Optional[float] = None
    weight_unit: Optional[str] = None

    model_config = ConfigDict(extra="allow")


class ShopifyProduct(BaseModel):
    """Shopify product as returned by /admin/products.json."""
    id: Optional[int] = None
    title: str
    body_html: Optional[str] = None
    vendor: Optional[str] = None
    product_type: Optional[str] = None
    handle: Optional[str] = None
    tags: Optional[str] = None
    published: Optional[bool] = None
    weight: Optional[float] = None
    weight_unit: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    published_at: Optional[datetime] = None
    images: List[ShopifyImage] = Field(default_factory=list)
    variants: List[ShopifyVariant] = Field(default_factory=list)

    model_config = ConfigDict(extra="allow")

    @property
    def skus(self) -> List[str]:
        """SKUs of all variants that carry one."""
        return [v.sku for v in self.variants if v.sku]
