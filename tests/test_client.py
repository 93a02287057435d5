import json

import httpx
import pytest

from shopify_products.client import ShopifyProductClient, filter_by_sku, resolve_page_size
from shopify_products.config import StoreConfig, DuplicateIdentity, UNLIMITED, MAX_PAGE_SIZE
from shopify_products.exceptions import (
    AuthenticationError,
    DuplicateProduct,
    NetworkError,
    ShopifyAPIError,
    ValidationError,
)
from shopify_products.mock_client import MockShopifyStore
from shopify_products.models.shopify_models import ShopifyProduct


def make_config(**overrides):
    settings = {
        "store": "mystore",
        "credentials": {"username": "api_key", "password": "secret"},
    }
    settings.update(overrides)
    return StoreConfig(**settings)


def make_products(count, start=1):
    return [
        {
            "id": i,
            "title": f"Product {i}",
            "variants": [{"id": 10000 + i, "sku": f"SKU-{i:04d}"}],
        }
        for i in range(start, start + count)
    ]


def make_client(store, **overrides):
    config = make_config(**overrides)
    return ShopifyProductClient(config, client=store.client(config))


def test_unlimited_stops_on_short_page():
    store = MockShopifyStore(make_products(600))
    with make_client(store) as client:
        products = client.list_products(result_size=UNLIMITED)

    assert len(products) == 600
    assert [p.id for p in products] == list(range(1, 601))
    assert len(store.gets) == 3
    assert [r.url.params["page"] for r in store.gets] == ["1", "2", "3"]
    assert all(r.url.params["limit"] == "250" for r in store.gets)


def test_unlimited_exact_multiple_needs_an_empty_page():
    store = MockShopifyStore(make_products(500))
    with make_client(store) as client:
        products = client.list_products()

    assert len(products) == 500
    assert len(store.gets) == 3


def test_finite_size_uses_it_as_page_size():
    store = MockShopifyStore(make_products(40))
    with make_client(store) as client:
        products = client.list_products(result_size=10)

    assert [p.id for p in products] == list(range(1, 11))
    assert len(store.gets) == 1
    assert store.gets[0].url.params["limit"] == "10"


def test_finite_size_returns_whole_smaller_catalog():
    store = MockShopifyStore(make_products(3))
    with make_client(store) as client:
        products = client.list_products(result_size=10)

    assert len(products) == 3
    assert len(store.gets) == 1


def test_finite_size_above_page_maximum_is_truncated():
    store = MockShopifyStore(make_products(700))
    with make_client(store) as client:
        products = client.list_products(result_size=300)

    assert len(products) == 300
    assert products[-1].id == 300
    assert len(store.gets) == 2
    assert all(r.url.params["limit"] == str(MAX_PAGE_SIZE) for r in store.gets)


def test_oversized_page_from_server_is_truncated():
    def handler(request):
        return httpx.Response(200, json={"products": make_products(8)})

    config = make_config()
    http = httpx.Client(base_url=config.base_url, transport=httpx.MockTransport(handler))
    client = ShopifyProductClient(config, client=http)
    assert len(client.list_products(result_size=5)) == 5


@pytest.mark.parametrize("size", [0, -3, 2.5, "all", True, None])
def test_invalid_result_size_is_rejected(size):
    with pytest.raises(ValidationError):
        resolve_page_size(size)


def test_invalid_result_size_makes_no_request():
    store = MockShopifyStore(make_products(3))
    with make_client(store) as client:
        with pytest.raises(ValidationError):
            client.list_products(result_size=0)
    assert store.requests == []


def test_sku_filter_keeps_matching_products_only():
    store = MockShopifyStore([
        {"id": 1, "title": "Alpha", "variants": [{"sku": "ABC-100"}]},
        {"id": 2, "title": "Beta", "variants": [{"sku": "XYZ-200"}]},
    ])
    with make_client(store) as client:
        products = client.list_products("100")

    assert [p.id for p in products] == [1]


def test_sku_filter_is_case_insensitive_and_order_preserving():
    products = [
        ShopifyProduct(title="a", variants=[{"sku": "tee-red"}]),
        ShopifyProduct(title="b", variants=[{"sku": "MUG"}]),
        ShopifyProduct(title="c", variants=[{"sku": "x"}, {"sku": "TEE-BLUE"}]),
        ShopifyProduct(title="d", variants=[]),
    ]
    assert [p.title for p in filter_by_sku(products, "TEE")] == ["a", "c"]
    assert [p.title for p in filter_by_sku(products, "tee-*e")] == ["a", "c"]
    assert len(filter_by_sku(products, None)) == 4


def test_basic_auth_header_is_sent():
    store = MockShopifyStore(make_products(1), username="api_key", password="secret")
    with make_client(store) as client:
        assert len(client.list_products()) == 1
    assert store.gets[0].headers["Authorization"] == "Basic YXBpX2tleTpzZWNyZXQ="


def test_bad_credentials_raise_authentication_error():
    store = MockShopifyStore(make_products(1), username="api_key", password="other")
    with make_client(store) as client:
        with pytest.raises(AuthenticationError) as exc_info:
            client.list_products()
    assert exc_info.value.status_code == 401
    assert "secret" not in str(exc_info.value)


def test_failure_on_later_page_returns_nothing():
    def handler(request):
        if request.url.params["page"] == "2":
            raise httpx.ConnectTimeout("timed out", request=request)
        return httpx.Response(200, json={"products": make_products(250)})

    config = make_config()
    http = httpx.Client(base_url=config.base_url, transport=httpx.MockTransport(handler))
    with pytest.raises(NetworkError):
        ShopifyProductClient(config, client=http).list_products()


def test_server_error_on_list_raises_api_error():
    def handler(request):
        return httpx.Response(503, text="Service Unavailable")

    config = make_config()
    http = httpx.Client(base_url=config.base_url, transport=httpx.MockTransport(handler))
    with pytest.raises(ShopifyAPIError) as exc_info:
        ShopifyProductClient(config, client=http).list_products()
    assert exc_info.value.status_code == 503


def test_versioned_path_is_used_when_configured():
    store = MockShopifyStore(make_products(1))
    with make_client(store, api_version="2024-01") as client:
        client.list_products()
    assert store.gets[0].url.path == "/admin/api/2024-01/products.json"
    assert str(store.gets[0].url).startswith("https://mystore.myshopify.com/")


def test_create_posts_payload_and_returns_response():
    store = MockShopifyStore(make_products(2))
    with make_client(store) as client:
        response = client.create_product("Widget", vendor="Acme", sku="W-1")

    assert len(store.posts) == 1
    body = json.loads(store.posts[0].content)
    assert body == {
        "product": {
            "title": "Widget",
            "vendor": "Acme",
            "variants": [{"inventory_quantity": 0, "sku": "W-1"}],
        }
    }
    assert response["product"]["id"] == 3
    assert response["product"]["title"] == "Widget"


def test_create_checks_the_full_catalog_first():
    store = MockShopifyStore(make_products(260))
    with make_client(store) as client:
        client.create_product("Widget")

    assert [r.method for r in store.requests] == ["GET", "GET", "POST"]


def test_duplicate_title_raises_without_post():
    store = MockShopifyStore([{"id": 7, "title": "Widget", "variants": []}])
    with make_client(store) as client:
        with pytest.raises(DuplicateProduct) as exc_info:
            client.create_product("widget ")

    assert exc_info.value.field == "title"
    assert exc_info.value.product_id == 7
    assert store.posts == []


def test_duplicate_sku_strategy():
    store = MockShopifyStore([{"id": 7, "title": "Widget", "variants": [{"sku": "W-1"}]}])
    with make_client(store, duplicate_identity=DuplicateIdentity.SKU) as client:
        with pytest.raises(DuplicateProduct) as exc_info:
            client.create_product("Another Widget", sku="w-1")
        assert exc_info.value.field == "sku"

        client.create_product("Widget", sku="W-2")

    assert len(store.posts) == 1


def test_sku_strategy_requires_a_sku():
    store = MockShopifyStore([])
    with make_client(store, duplicate_identity="sku") as client:
        with pytest.raises(ValidationError):
            client.create_product("Widget")
    assert store.requests == []


def test_invalid_inventory_policy_makes_no_request():
    store = MockShopifyStore(make_products(1))
    with make_client(store) as client:
        with pytest.raises(ValidationError) as exc_info:
            client.create_product("Widget", inventory_policy="Maybe")
    assert exc_info.value.field == "inventory_policy"
    assert store.requests == []


def test_rejected_create_returns_error_body():
    def handler(request):
        if request.method == "GET":
            return httpx.Response(200, json={"products": []})
        return httpx.Response(422, json={"errors": {"title": ["is too long"]}})

    config = make_config()
    http = httpx.Client(base_url=config.base_url, transport=httpx.MockTransport(handler))
    response = ShopifyProductClient(config, client=http).create_product("Widget")
    assert response == {"errors": {"title": ["is too long"]}}


def test_store_identifier_is_normalized():
    assert make_config(store="https://MyStore.myshopify.com/").store == "mystore"
    assert make_config(store="mystore.myshopify.com").base_url == "https://mystore.myshopify.com"


def make_http(config, handler):
    return httpx.Client(base_url=config.base_url, transport=httpx.MockTransport(handler))


@pytest.mark.parametrize("response", [
    httpx.Response(302, headers={"Location": "https://mystore.myshopify.com/password"}, text="<html>Redirecting</html>"),
    httpx.Response(200, text="<html>Store unavailable</html>"),
    httpx.Response(200, json={"shop": {}}),
    httpx.Response(200, json={"products": {"id": 1}}),
])
def test_unexpected_list_response_raises_api_error(response):
    config = make_config()
    client = ShopifyProductClient(config, client=make_http(config, lambda request: response))
    with pytest.raises(ShopifyAPIError) as exc_info:
        client.list_products()
    assert exc_info.value.status_code == response.status_code


def test_forbidden_raises_authentication_error():
    config = make_config()
    client = ShopifyProductClient(config, client=make_http(config, lambda request: httpx.Response(403)))
    with pytest.raises(AuthenticationError) as exc_info:
        client.list_products()
    assert exc_info.value.status_code == 403


def post_failing_with(post_handler):
    def handler(request):
        if request.method == "GET":
            return httpx.Response(200, json={"products": []})
        return post_handler(request)
    return handler


def test_network_failure_on_create_raises_network_error():
    def fail(request):
        raise httpx.ConnectError("connection refused", request=request)

    config = make_config()
    client = ShopifyProductClient(config, client=make_http(config, post_failing_with(fail)))
    with pytest.raises(NetworkError):
        client.create_product("Widget")


def test_server_error_on_create_raises_api_error():
    config = make_config()
    handler = post_failing_with(lambda request: httpx.Response(503, json={"errors": "unavailable"}))
    client = ShopifyProductClient(config, client=make_http(config, handler))
    with pytest.raises(ShopifyAPIError) as exc_info:
        client.create_product("Widget")
    assert exc_info.value.status_code == 503


def test_non_json_create_response_raises_api_error():
    config = make_config()
    handler = post_failing_with(lambda request: httpx.Response(201, text="<html>ok</html>"))
    client = ShopifyProductClient(config, client=make_http(config, handler))
    with pytest.raises(ShopifyAPIError) as exc_info:
        client.create_product("Widget")
    assert exc_info.value.status_code == 201
