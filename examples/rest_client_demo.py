#!/usr/bin/env python3
"""
REST Client Demonstration

Walks through the token flow and a create/read/update/delete cycle against
a running demo server:

    collrest serve -d examples/collections.toml -c examples/collrest.toml
    python examples/rest_client_demo.py --username admin --password changeme
"""

import argparse
import json
import logging
from typing import Any

import httpx


logger = logging.getLogger(__name__)


def setup_logging(debug: bool = False) -> None:
    """Setup logging configuration.

    Args:
        debug: Whether to enable debug logging
    """
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    logging.getLogger("httpx").setLevel(logging.DEBUG if debug else logging.WARNING)


def show(label: str, response: httpx.Response) -> dict[str, Any]:
    body: dict[str, Any] = response.json()
    print(f"\n{label}: HTTP {response.status_code}")
    print(json.dumps(body, indent=2))
    return body


def get_token(client: httpx.Client, username: str, password: str) -> str | None:
    """Exchange Basic credentials for a bearer token."""
    response = client.get("/token", auth=(username, password))
    if response.status_code == 404:
        logger.info("Server runs without authentication")
        return None
    body = show("Token", response)
    return str(body["token"])


def run_demo(base_url: str, username: str, password: str) -> None:
    with httpx.Client(base_url=base_url, timeout=10.0) as client:
        token = get_token(client, username, password)
        if token:
            client.headers["Authorization"] = f"Bearer {token}"

        show("Definitions", client.get("/definitions"))

        user = show(
            "Create user",
            client.post(
                "/collection/users",
                json={"username": "demo", "email": "demo@example.com"},
            ),
        )["data"]
        post = show(
            "Create post",
            client.post(
                "/collection/posts", json={"title": "Hello", "author": user["_id"]}
            ),
        )["data"]

        show(
            "Read posts by author",
            client.get("/collection/posts", params={"author": user["_id"]}),
        )
        show("Read title", client.get(f"/collection/posts/{post['_id']}/title"))
        show(
            "Update post",
            client.put(f"/collection/posts/{post['_id']}", json={"content": "World"}),
        )
        show(
            "Validation failure",
            client.post("/collection/posts", json={"content": "untitled"}),
        )
        show("Delete post", client.delete(f"/collection/posts/{post['_id']}"))
        show("Read deleted post", client.get(f"/collection/posts/{post['_id']}"))


def main() -> None:
    parser = argparse.ArgumentParser(description="collrest REST client demo")
    parser.add_argument("--base-url", default="http://127.0.0.1:8000/api")
    parser.add_argument("--username", default="admin")
    parser.add_argument("--password", default="changeme")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    setup_logging(args.debug)
    try:
        run_demo(args.base_url, args.username, args.password)
    except httpx.HTTPError as e:
        logger.error(f"Request failed: {e}")
        raise SystemExit(1) from e


if __name__ == "__main__":
    main()
