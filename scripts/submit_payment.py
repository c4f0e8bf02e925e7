"""Submit one JSON payment request to the payment service and print the reply.

Useful for smoke-testing a deployment against the gateway sandbox.
"""

import argparse
import json
from pathlib import Path
from uuid import uuid4

import httpx


def submit(
    api_url: str,
    api_key: str,
    payload: dict,
    trace_id: str | None = None,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Response:
    """POST one payment payload and return the raw response."""

    with httpx.Client(timeout=30.0, transport=transport) as client:
        return client.post(
            f"{api_url.rstrip('/')}/payments",
            json=payload,
            headers={"x-api-key": api_key, "x-trace-id": trace_id or str(uuid4())},
        )


def main(argv: list[str] | None = None) -> int:
    """Parse CLI args, submit the payload, print the JSON reply."""

    parser = argparse.ArgumentParser(description="Submit a payment request JSON file.")
    parser.add_argument("--api-url", default="http://localhost:8000")
    parser.add_argument("--api-key", required=True)
    parser.add_argument("--file", dest="json_file", required=True, help="Path to JSON payment request")
    parser.add_argument("--trace-id", default=None)
    args = parser.parse_args(argv)

    payload = json.loads(Path(args.json_file).read_text())
    resp = submit(args.api_url, args.api_key, payload, trace_id=args.trace_id)
    try:
        body = resp.json()
    except ValueError:
        body = resp.text
    print(json.dumps({"status_code": resp.status_code, "body": body}, indent=2, ensure_ascii=False))
    return 0 if resp.status_code < 400 else 1


if __name__ == "__main__":
    raise SystemExit(main())
