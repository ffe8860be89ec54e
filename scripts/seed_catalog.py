"""Replace the catalog of a running instance with the default packs."""

import argparse

import httpx


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed default categories and products.")
    parser.add_argument("--base-url", default="http://localhost:5000")
    args = parser.parse_args()

    resp = httpx.post(f"{args.base_url}/api/products/seed", timeout=10.0)
    if resp.status_code >= 400:
        raise SystemExit(f"seed failed status={resp.status_code} body={resp.text}")
    data = resp.json()["data"]
    print(f"Seeded categories={data['categories']} products={data['products']}")

    listing = httpx.get(f"{args.base_url}/api/products", timeout=10.0).json()
    for product in listing.get("data", []):
        print(f"  {product['id']:<4} {product['name']:<20} {product['price']:>8}")


if __name__ == "__main__":
    main()
