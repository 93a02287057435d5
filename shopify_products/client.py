"""Shopify Admin REST client for listing and creating products."""

import fnmatch
import logging
from time import perf_counter
from typing import List, Optional, Dict, Any

import httpx

from .config import (
    StoreConfig,
    StoreCredentials,
    DuplicateIdentity,
    ResultSize,
    UNLIMITED,
    MAX_PAGE_SIZE,
)
from .exceptions import (
    AuthenticationError,
    DuplicateProduct,
    NetworkError,
    ShopifyAPIError,
    ValidationError,
)
from .models.payload import ProductPayload, build_payload
from .models.shopify_models import ShopifyProduct
from .telemetry import get_page_fetch_histogram

logger = logging.getLogger(__name__)


def resolve_page_size(result_size: ResultSize) -> int:
    """
    Validate a result size and return the page size to request.

    Raises:
        ValidationError: If the size is neither a positive integer nor UNLIMITED
    """
    if result_size == UNLIMITED:
        return MAX_PAGE_SIZE
    if isinstance(result_size, bool) or not isinstance(result_size, int) or result_size < 1:
        raise ValidationError(
            "result_size",
            f"expected a positive integer or '{UNLIMITED}', got {result_size!r}"
        )
    return min(result_size, MAX_PAGE_SIZE)


def filter_by_sku(products: List[ShopifyProduct], identity_filter: Optional[str]) -> List[ShopifyProduct]:
    """
    Keep products with at least one variant SKU containing the filter.

    The match is case-insensitive and wildcard characters (``*``, ``?``)
    inside the filter are honored.
    """
    if not identity_filter:
        return list(products)
    pattern = f"*{identity_filter.casefold()}*"
    return [
        p for p in products
        if any(fnmatch.fnmatchcase(sku.casefold(), pattern) for sku in p.skus)
    ]


def find_duplicate(
    catalog: List[ShopifyProduct],
    payload: ProductPayload,
    identity: DuplicateIdentity,
) -> Optional[ShopifyProduct]:
    """Return the first catalog entry sharing the payload's identity, if any."""
    if identity == DuplicateIdentity.SKU:
        wanted = payload.sku.strip().casefold()
        for product in catalog:
            if any(sku.strip().casefold() == wanted for sku in product.skus):
                return product
        return None

    wanted = payload.title.strip().casefold()
    for product in catalog:
        if product.title.strip().casefold() == wanted:
            return product
    return None


class ShopifyProductClient:
    """
    Client for the products endpoint of one store.

    This class handles:
    - Paginated product listing with a result-size bound
    - SKU filtering of the listed catalog
    - Duplicate detection before product creation
    - Mapping HTTP failures to the package exceptions
    """

    def __init__(self, config: StoreConfig, client: Optional[httpx.Client] = None):
        """
        Initialize the client.

        Args:
            config: Store connection settings
            client: Optional HTTP client (e.g., one from MockShopifyStore.client())
        """
        self.config = config
        self.page_fetch_histogram = get_page_fetch_histogram()

        if client is not None:
            self.client = client
            self._owns_client = False
        else:
            self.client = httpx.Client(
                base_url=config.base_url,
                auth=httpx.BasicAuth(
                    config.credentials.username,
                    config.credentials.password.get_secret_value(),
                ),
                headers={"Content-Type": "application/json"},
                timeout=config.timeout,
            )
            self._owns_client = True

    def close(self):
        """Close HTTP client."""
        if self._owns_client:
            self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def _make_request(self, method: str, **kwargs) -> httpx.Response:
        """
        Send a request to the products endpoint.

        Raises:
            AuthenticationError: On HTTP 401/403
            NetworkError: On connection failures and timeouts
        """
        try:
            response = self.client.request(method, self.config.products_path, **kwargs)
        except httpx.TransportError as exc:
            logger.error("%s %s failed for store %s: %s", method, self.config.products_path, self.config.store, exc)
            raise NetworkError(f"Could not reach store '{self.config.store}': {exc}") from exc

        if response.status_code in (401, 403):
            raise AuthenticationError(self.config.store, response.status_code)
        return response

    def _fetch_page(self, page: int, page_size: int) -> List[Dict[str, Any]]:
        start = perf_counter()
        response = self._make_request("GET", params={"limit": page_size, "page": page})
        if not response.is_success:
            raise ShopifyAPIError(response.status_code, _error_detail(response))
        try:
            items = response.json()["products"]
        except (ValueError, KeyError, TypeError):
            raise ShopifyAPIError(response.status_code, f"unexpected products response: {response.text[:200]}")
        if not isinstance(items, list):
            raise ShopifyAPIError(response.status_code, "'products' is not a list")

        duration_ms = (perf_counter() - start) * 1000
        self.page_fetch_histogram.record(duration_ms, attributes={"store": self.config.store})
        logger.debug(
            "Fetched page %d of %s (limit=%d, received=%d, %.0f ms)",
            page, self.config.store, page_size, len(items), duration_ms,
        )
        return items

    def list_products(
        self,
        identity_filter: Optional[str] = None,
        result_size: ResultSize = UNLIMITED,
    ) -> List[ShopifyProduct]:
        """
        Fetch products page by page.

        Args:
            identity_filter: Substring matched against variant SKUs
            result_size: Positive number of products wanted, or UNLIMITED

        Returns:
            Products in page order, filtered when a filter is given
        """
        page_size = resolve_page_size(result_size)
        wanted = None if result_size == UNLIMITED else result_size

        items: List[Dict[str, Any]] = []
        page = 0
        while True:
            page += 1
            batch = self._fetch_page(page, page_size)
            items.extend(batch)
            if len(batch) < page_size:
                break
            if wanted is not None and len(items) >= wanted:
                break

        if wanted is not None:
            items = items[:wanted]

        products = [ShopifyProduct(**item) for item in items]
        logger.info("Fetched %d products from %s in %d page(s)", len(products), self.config.store, page)

        filtered = filter_by_sku(products, identity_filter)
        if identity_filter:
            logger.info("%d of %d products match SKU filter '%s'", len(filtered), len(products), identity_filter)
        return filtered

    def create_product(self, title: str, **attributes) -> Dict[str, Any]:
        """
        Create a product unless one with the same identity already exists.

        Without ``published`` the flag is omitted and Shopify publishes the
        product.

        Args:
            title: Product title
            **attributes: Optional attributes accepted by ``build_payload``

        Returns:
            The decoded response body, as returned by Shopify

        Raises:
            ValidationError: Before any request, for invalid attributes
            DuplicateProduct: If the catalog already holds the product
        """
        payload = build_payload(title, **attributes)
        return self.submit(payload)

    def submit(self, payload: ProductPayload) -> Dict[str, Any]:
        """Check the catalog for a duplicate of ``payload`` and POST it."""
        identity = self.config.duplicate_identity
        if identity == DuplicateIdentity.SKU and not payload.sku:
            raise ValidationError("sku", "a SKU is required when duplicates are detected by SKU")

        catalog = self.list_products(result_size=UNLIMITED)
        existing = find_duplicate(catalog, payload, identity)
        if existing is not None:
            value = payload.sku if identity == DuplicateIdentity.SKU else payload.title
            logger.warning("Refusing to create %s '%s' on %s: already exists", identity.value, value, self.config.store)
            raise DuplicateProduct(identity.value, value, existing.id)

        response = self._make_request("POST", json=payload.to_request())
        if response.status_code >= 500:
            raise ShopifyAPIError(response.status_code, _error_detail(response))

        try:
            body = response.json()
        except ValueError:
            raise ShopifyAPIError(response.status_code, response.text)

        if response.is_success:
            logger.info("Created product '%s' on %s", payload.title, self.config.store)
        else:
            logger.warning("Shopify rejected product '%s' (HTTP %d): %s", payload.title, response.status_code, body)
        return body


def _error_detail(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


def list_products(
    store: str,
    credentials: StoreCredentials,
    identity_filter: Optional[str] = None,
    result_size: ResultSize = UNLIMITED,
    **settings,
) -> List[ShopifyProduct]:
    """
    List products of a store.

    Args:
        store: Store subdomain or domain
        credentials: Basic auth credentials
        identity_filter: Substring matched against variant SKUs
        result_size: Positive number of products wanted, or UNLIMITED
        **settings: Extra StoreConfig fields (api_version, timeout, ...)
    """
    config = StoreConfig(store=store, credentials=credentials, **settings)
    with ShopifyProductClient(config) as client:
        return client.list_products(identity_filter, result_size)


def create_product(
    title: str,
    store: str,
    credentials: StoreCredentials,
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
    **settings,
) -> Dict[str, Any]:
    """
    Create a product in a store after checking it does not exist yet.

    Leaving ``published`` as None omits the flag, and Shopify then publishes
    the product; pass ``published=False`` to keep it hidden. Weight is sent
    at product level only, so it does not reach variants created here.

    Args:
        title: Product title
        store: Store subdomain or domain
        credentials: Basic auth credentials
        images: Raw image ``bytes`` or ``(filename, bytes)`` tuples
        **settings: Extra StoreConfig fields (duplicate_identity, api_version, ...)

    Returns:
        The decoded response body
    """
    payload = build_payload(
        title,
        vendor=vendor,
        weight=weight,
        product_type=product_type,
        body_html=body_html,
        published=published,
        inventory_quantity=inventory_quantity,
        inventory_policy=inventory_policy,
        inventory_management=inventory_management,
        sku=sku,
        images=images,
    )
    config = StoreConfig(store=store, credentials=credentials, **settings)
    with ShopifyProductClient(config) as client:
        return client.submit(payload)
