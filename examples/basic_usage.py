"""Example usage of the Shopify products client."""

import json
from shopify_products import (
    StoreCredentials,
    DuplicateProduct,
    UNLIMITED,
    list_products,
    create_product,
)


def main():
    """Example: list products, then create one."""

    # Load credentials
    with open('config.json') as f:
        config_data = json.load(f)

    store = config_data["shopify"]["store"]
    credentials = StoreCredentials(**config_data["shopify"]["credentials"])

    # First page of 10 products
    print("Fetching 10 products...")
    for product in list_products(store, credentials, result_size=10):
        print(f"- {product.title} ({', '.join(product.skus) or 'no SKU'})")

    # Whole catalog, filtered by SKU
    matches = list_products(store, credentials, identity_filter="TS-", result_size=UNLIMITED)
    print(f"\n{len(matches)} product(s) with a SKU containing 'TS-'")

    # Create a product
    try:
        response = create_product(
            "Example Widget",
            store,
            credentials,
            vendor="Acme",
            weight=2.5,
            product_type="Gadget",
            inventory_quantity=5,
            inventory_policy="Deny",
            sku="EX-WIDGET-1",
        )
    except DuplicateProduct as e:
        print(f"\nSkipped: {e}")
        return

    print("\nShopify response:")
    print(json.dumps(response, indent=2))


if __name__ == "__main__":
    main()
