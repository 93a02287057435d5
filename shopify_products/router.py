"""FastAPI router exposing product listing and creation."""

from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional
from time import perf_counter
import logging
import httpx
from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel, Field

from .client import ShopifyProductClient
from .config import StoreConfig, UNLIMITED
from .exceptions import (
    AuthenticationError,
    DuplicateProduct,
    NetworkError,
    ShopifyAPIError,
    ShopifyProductsError,
    ValidationError,
)
from .models.payload import build_payload
from .telemetry import get_request_duration_histogram

logger = logging.getLogger(__name__)


class ImageAttachment(BaseModel):
    attachment: str = Field(..., description="Base64-encoded image bytes")
    filename: Optional[str] = None


class CreateProductRequest(BaseModel):
    title: str
    vendor: Optional[str] = None
    weight: Optional[float] = None
    product_type: Optional[str] = None
    body_html: Optional[str] = None
    published: Optional[bool] = None
    inventory_quantity: Optional[int] = None
    inventory_policy: Optional[str] = Field(None, description="Deny or Continue")
    inventory_management: Optional[str] = None
    sku: Optional[str] = None
    images: List[ImageAttachment] = Field(default_factory=list)


def _to_http_error(exc: ShopifyProductsError) -> HTTPException:
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    if isinstance(exc, DuplicateProduct):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    if isinstance(exc, AuthenticationError):
        return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc))
    if isinstance(exc, (NetworkError, ShopifyAPIError)):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


def get_products_router(
    config: StoreConfig,
    client_factory: Optional[Callable[[], httpx.Client]] = None,
) -> APIRouter:
    """
    Create a FastAPI router for product endpoints.

    Args:
        config: Store connection settings
        client_factory: Optional factory for the HTTP client used per request

    Returns:
        APIRouter with list and create endpoints
    """
    router = APIRouter(prefix="/products", tags=["products"])
    duration_histogram = get_request_duration_histogram()

    @contextmanager
    def open_client() -> Iterator[ShopifyProductClient]:
        if client_factory is None:
            with ShopifyProductClient(config) as client:
                yield client
            return
        with client_factory() as http:
            yield ShopifyProductClient(config, client=http)

    @router.get("")
    def list_products(
        sku_filter: Optional[str] = Query(None, alias="filter", description="Substring matched against variant SKUs"),
        limit: Optional[int] = Query(None, ge=1, description="Number of products; all when omitted"),
    ):
        """List products, optionally filtered by SKU."""
        start = perf_counter()
        try:
            with open_client() as client:
                products = client.list_products(sku_filter, limit if limit is not None else UNLIMITED)
        except ShopifyProductsError as exc:
            raise _to_http_error(exc)

        duration_ms = (perf_counter() - start) * 1000
        duration_histogram.record(duration_ms, attributes={"operation": "list"})
        return [p.model_dump(mode="json", exclude_none=True) for p in products]

    @router.post("", status_code=status.HTTP_201_CREATED)
    def create_product(request: CreateProductRequest):
        """Create a product unless it already exists."""
        start = perf_counter()
        try:
            payload = build_payload(**request.model_dump(exclude={"images"}))
            for image in request.images:
                payload = payload.with_encoded_image(image.attachment, image.filename)
            with open_client() as client:
                response = client.submit(payload)
        except ShopifyProductsError as exc:
            logger.warning("product_create_failed", extra={"title": request.title, "error": str(exc)})
            raise _to_http_error(exc)

        if "errors" in response:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=response["errors"])

        duration_ms = (perf_counter() - start) * 1000
        duration_histogram.record(duration_ms, attributes={"operation": "create"})
        logger.info("product_created", extra={"title": request.title, "duration_ms": duration_ms})
        return response

    return router
