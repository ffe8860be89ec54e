"""Check the bot wiring of a running relay instance.

Calls the bot connectivity test (which sends one sample notification per
product type) and prints the current webhook registration.
"""

import argparse
import json

import httpx


def main() -> None:
    """Parse CLI args and run the checks against one instance."""

    parser = argparse.ArgumentParser(description="Verify bot token, sample notifications and webhook.")
    parser.add_argument("--base-url", default="http://localhost:5000")
    parser.add_argument("--set-webhook", action="store_true", help="Register the webhook before checking it")
    parser.add_argument("--timeout", type=float, default=30.0)
    args = parser.parse_args()

    with httpx.Client(base_url=args.base_url, timeout=args.timeout) as client:
        resp = client.get("/api/payments/test-telegram")
        body = resp.json()
        print(f"test-telegram status={resp.status_code} success={body.get('success')} message={body.get('message')}")
        if body.get("data"):
            print(json.dumps(body["data"], indent=2))

        if args.set_webhook:
            resp = client.post("/api/telegram/set-webhook")
            body = resp.json()
            print(f"set-webhook success={body.get('success')} url={(body.get('data') or {}).get('url')}")

        resp = client.get("/api/telegram/webhook-info")
        print(json.dumps(resp.json(), indent=2))

    if resp.status_code >= 400:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
