#!/usr/bin/env python3
"""
EdgeGrid Python SDK - Basic Usage Example

Signs requests with literal credentials, first offline to show the
Authorization header and then through EdgeGridHttpClient.
"""

import logging
import sys

from edgegrid_sdk import (
    EdgeGridConfig,
    EdgeGridHttpClient,
    EdgeGridSDKError,
    EdgeGridSigner,
    HttpStatusError,
    SignableRequest,
)


def offline_signing_example(config):
    """Sign a request without sending it"""
    print("=== Offline Signing ===")

    signer = EdgeGridSigner(config, headers_to_sign=["X-Request-Id"])
    request = SignableRequest(
        method="POST",
        url=f"{config.host}/some/api/endpoint?dryRun=true",
        headers={"X-Request-Id": "example-1", "Content-Type": "application/json"},
        body='{"key": "value", "number": 42}',
    )
    result = signer.sign_request(request)

    print(f"Timestamp:    {result.timestamp}")
    print(f"Nonce:        {result.nonce}")
    print(f"Content hash: {result.content_hash}")
    print(f"Authorization: {result.authorization}")


def client_example(config):
    """Send signed requests"""
    print("\n=== Signed Requests ===")

    with EdgeGridHttpClient(config) as client:
        print("Making GET request...")
        response = client.get("/billing-usage/v1/reportSources")
        print(f"Status: {response.status_code}")
        print(f"Response: {response.text}")

        print("\nMaking POST request...")
        response = client.post("/some/api/endpoint", json={"key": "value", "number": 42})
        print(f"Status: {response.status_code}")

        print("\nMaking request with query params...")
        try:
            data = client.send_json("GET", "/some/api/endpoint", params={"limit": "10", "offset": "0"})
            print(f"Items: {data}")
        except HttpStatusError as e:
            print(f"Request failed: {e.status_code} {e.reason}")


def main():
    logging.basicConfig(level=logging.INFO)

    config = EdgeGridConfig(
        client_token="your-client-token",
        client_secret="your-client-secret",
        access_token="your-access-token",
        host="your-host.luna.akamaiapis.net",
    )

    offline_signing_example(config)

    try:
        client_example(config)
    except EdgeGridSDKError as e:
        print(f"Error: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
