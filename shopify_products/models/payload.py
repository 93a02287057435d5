"""Immutable builder for product creation payloads."""

import base64
from typing import Any, Dict, Mapping, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field

from ..exceptions import ValidationError

WEIGHT_UNIT = "lb"
INVENTORY_POLICIES = ("deny", "continue")


def normalize_inventory_policy(value: str) -> str:
    """Return the wire value for an inventory policy, or raise ValidationError."""
    policy = (value or "").strip().lower()
    if policy not in INVENTORY_POLICIES:
        raise ValidationError(
            "inventory_policy",
            f"'{value}' is not one of Deny, Continue"
        )
    return policy


class ProductPayload(BaseModel):
    """
    Product payload for ``POST /admin/products.json``.

    Every ``with_*`` method returns a new payload; only the attributes that
    were supplied end up in the serialized product.

    Example:
        payload = (
            ProductPayload.for_title("Widget")
            .with_vendor("Acme")
            .with_weight(2.5)
        )
        payload.to_request()
        # {"product": {"title": "Widget", "vendor": "Acme",
        #              "weight": 2.5, "weight_unit": "lb"}}
    """
    title: str
    attributes: Mapping[str, Any] = Field(default_factory=dict)
    variant: Mapping[str, Any] = Field(default_factory=dict)
    images: Tuple[Dict[str, str], ...] = ()

    model_config = ConfigDict(frozen=True)

    @classmethod
    def for_title(cls, title: str) -> "ProductPayload":
        if not title or not title.strip():
            raise ValidationError("title", "a product title is required")
        return cls(title=title)

    def _with_field(self, name: str, value: Any) -> "ProductPayload":
        return self.model_copy(update={"attributes": {**self.attributes, name: value}})

    def _with_variant_field(self, name: str, value: Any) -> "ProductPayload":
        return self.model_copy(update={"variant": {**self.variant, name: value}})

    def with_vendor(self, vendor: str) -> "ProductPayload":
        return self._with_field("vendor", vendor)

    def with_product_type(self, product_type: str) -> "ProductPayload":
        return self._with_field("product_type", product_type)

    def with_body_html(self, body_html: str) -> "ProductPayload":
        return self._with_field("body_html", body_html)

    def with_weight(self, weight: float) -> "ProductPayload":
        """
        Weight is always expressed in pounds.

        It is sent on the product only; the REST API keeps weight per
        variant, so the created variant may not carry it.
        """
        if weight < 0:
            raise ValidationError("weight", "must not be negative")
        return self._with_field("weight", weight)._with_field("weight_unit", WEIGHT_UNIT)

    def with_published(self, published: bool = False) -> "ProductPayload":
        return self._with_field("published", bool(published))

    def with_sku(self, sku: str) -> "ProductPayload":
        return self._with_variant_field("sku", sku)

    def with_inventory_quantity(self, quantity: int) -> "ProductPayload":
        return self._with_variant_field("inventory_quantity", quantity)

    def with_inventory_policy(self, policy: str) -> "ProductPayload":
        return self._with_variant_field("inventory_policy", normalize_inventory_policy(policy))

    def with_inventory_management(self, management: str) -> "ProductPayload":
        return self._with_variant_field("inventory_management", management)

    def with_image(self, data: bytes, filename: Optional[str] = None) -> "ProductPayload":
        """Attach raw image bytes; they are base64-encoded here."""
        return self.with_encoded_image(base64.b64encode(data).decode("ascii"), filename)

    def with_encoded_image(self, attachment: str, filename: Optional[str] = None) -> "ProductPayload":
        """Attach an image that is already base64-encoded."""
        try:
            base64.b64decode(attachment, validate=True)
        except ValueError:
            raise ValidationError("images", "attachment is not valid base64")
        image = {"attachment": attachment}
        if filename:
            image["filename"] = filename
        return self.model_copy(update={"images": self.images + (image,)})

    @property
    def sku(self) -> Optional[str]:
        return self.variant.get("sku")

    def to_product(self) -> Dict[str, Any]:
        """Serialize to the ``product`` object."""
        product: Dict[str, Any] = {"title": self.title}
        product.update(self.attributes)
        if self.variant:
            variant = {"inventory_quantity": 0}
            variant.update(self.variant)
            product["variants"] = [variant]
        if self.images:
            product["images"] = [dict(image) for image in self.images]
        return product

    def to_request(self) -> Dict[str, Any]:
        """Serialize to the request body ``{"product": {...}}``."""
        return {"product": self.to_product()}


def build_payload(
    title: str,
    vendor: Optional[str] = None,
    weight: Optional[float] = None,
    product_type: Optional[str] = None,
    body_html: Optional[str] = None,
    published: Optional[bool] = None,
    inventory_quantity: Optional[int] = None,
    inventory_policy: Optional[str] = None,
    inventory_management: Optional[str] = None,
    sku: Optional[str] = None,
    images: Optional[list] = None,
) -> ProductPayload:
    """
    Build a payload from keyword attributes, skipping the ones left as None.

    Args:
        images: Raw ``bytes`` or ``(filename, bytes)`` tuples

    Raises:
        ValidationError: On a blank title, negative weight or an
            inventory policy other than Deny/Continue
    """
    payload = ProductPayload.for_title(title)
    if vendor is not None:
        payload = payload.with_vendor(vendor)
    if weight is not None:
        payload = payload.with_weight(weight)
    if product_type is not None:
        payload = payload.with_product_type(product_type)
    if body_html is not None:
        payload = payload.with_body_html(body_html)
    if published is not None:
        payload = payload.with_published(published)
    if inventory_quantity is not None:
        payload = payload.with_inventory_quantity(inventory_quantity)
    if inventory_policy is not None:
        payload = payload.with_inventory_policy(inventory_policy)
    if inventory_management is not None:
        payload = payload.with_inventory_management(inventory_management)
    if sku is not None:
        payload = payload.with_sku(sku)
    for image in images or []:
        if isinstance(image, tuple):
            filename, data = image
            payload = payload.with_image(data, filename)
        else:
            payload = payload.with_image(image)
    return payload
