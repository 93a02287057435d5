"""In-memory Shopify store for sandbox mode and tests."""

import base64
import json
from typing import Any, Dict, List, Optional

import httpx

from .config import StoreConfig, MAX_PAGE_SIZE


def sample_products() -> List[Dict[str, Any]]:
    """A couple of products in the shape returned by /admin/products.json."""
    return [
        {
            "id": 1001,
            "title": "Mock T-Shirt",
            "body_html": "<p>Soft cotton t-shirt</p>",
            "vendor": "MockBrand",
            "product_type": "Apparel",
            "handle": "mock-t-shirt",
            "variants": [
                {"id": 2001, "sku": "TS-RED-S", "inventory_quantity": 10, "inventory_policy": "deny"},
                {"id": 2002, "sku": "TS-RED-M", "inventory_quantity": 4, "inventory_policy": "deny"},
            ],
        },
        {
            "id": 1002,
            "title": "Mock Mug",
            "vendor": "MockBrand",
            "product_type": "Kitchen",
            "handle": "mock-mug",
            "variants": [
                {"id": 2003, "sku": "MUG-100", "inventory_quantity": 0, "inventory_policy": "continue"},
            ],
        },
    ]


class MockShopifyStore:
    """
    Fake products endpoint served through ``httpx.MockTransport``.

    GET honors ``limit`` (capped at 250) and the 1-based ``page`` parameter;
    POST appends the posted product and answers 201. When ``username`` is set,
    requests without matching Basic credentials get a 401.
    """

    def __init__(
        self,
        products: Optional[List[Dict[str, Any]]] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
    ):
        self.products: List[Dict[str, Any]] = list(sample_products() if products is None else products)
        self.requests: List[httpx.Request] = []
        self._expected_auth = None
        if username is not None:
            token = base64.b64encode(f"{username}:{password or ''}".encode()).decode()
            self._expected_auth = f"Basic {token}"
        self._next_id = max((p.get("id") or 0 for p in self.products), default=0) + 1

    @property
    def posts(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == "POST"]

    @property
    def gets(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == "GET"]

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if self._expected_auth and request.headers.get("Authorization") != self._expected_auth:
            return httpx.Response(401, json={"errors": "[API] Invalid API key or access token"})
        if not request.url.path.endswith("/products.json"):
            return httpx.Response(404, json={"errors": "Not Found"})

        if request.method == "GET":
            limit = min(int(request.url.params.get("limit", 50)), MAX_PAGE_SIZE)
            page = int(request.url.params.get("page", 1))
            start = (page - 1) * limit
            return httpx.Response(200, json={"products": self.products[start:start + limit]})

        if request.method == "POST":
            product = json.loads(request.content)["product"]
            if not product.get("title"):
                return httpx.Response(422, json={"errors": {"title": ["can't be blank"]}})
            created = dict(product, id=self._next_id)
            self._next_id += 1
            self.products.append(created)
            return httpx.Response(201, json={"product": created})

        return httpx.Response(405, json={"errors": "Method Not Allowed"})

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def client(self, config: StoreConfig) -> httpx.Client:
        """HTTP client for ``config`` that talks to this store instead of Shopify."""
        return httpx.Client(
            base_url=config.base_url,
            auth=httpx.BasicAuth(
                config.credentials.username,
                config.credentials.password.get_secret_value(),
            ),
            headers={"Content-Type": "application/json"},
            transport=self.transport(),
        )
