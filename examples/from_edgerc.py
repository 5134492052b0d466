#!/usr/bin/env python3
"""
EdgeGrid Python SDK - .edgerc Example

Loads credentials from an .edgerc file (or AKAMAI_* environment
variables) and calls two APIs. EDGERC_PATH and EDGERC_SECTION override
the file and section.
"""

import json
import logging
import os
import sys

from edgegrid_sdk import EdgeGridHttpClient, EdgeGridSDKError


def main():
    logging.basicConfig(level=logging.INFO)

    edgerc_path = os.environ.get("EDGERC_PATH", "~/.edgerc")
    section = os.environ.get("EDGERC_SECTION", "default")
    print(f"Loading credentials from {edgerc_path} [{section}]")

    try:
        run(EdgeGridHttpClient.from_edgerc(edgerc_path, section))
    except EdgeGridSDKError as e:
        print(f"Error: {e}")
        return 1
    return 0


def run(client):
    """Fetch properties and purge two URLs"""
    with client:
        print("Fetching properties...")
        response = client.get(
            "/papi/v1/properties",
            params={"contractId": "ctr_123456", "groupId": "grp_123456"},
        )
        if response.ok:
            print(f"Properties: {json.dumps(response.json(), indent=2)}")
        else:
            print(f"Error: {response.status_code} - {response.text}")

        print("\nPurging cache...")
        purge_body = {
            "objects": [
                "https://www.example.com/path/to/resource",
                "https://www.example.com/another/resource",
            ]
        }
        response = client.post("/ccu/v3/invalidate/url/production", json=purge_body)
        print(f"Purge status: {response.status_code}")
        if response.ok:
            print(f"Purge result: {json.dumps(response.json(), indent=2)}")


if __name__ == "__main__":
    sys.exit(main())
