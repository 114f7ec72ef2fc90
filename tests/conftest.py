"""Shared fixtures for credloc tests."""

from __future__ import annotations

import base64
import json

import pytest


def b64url(data: bytes | str) -> str:
    """Unpadded base64url, as JWT segments are written."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


@pytest.fixture
def jwt_payload_header():
    """A forwarded JWT payload header value carrying aud=["test"]."""
    return b64url(json.dumps({"aud": ["test"], "sub": "user-1"}))


@pytest.fixture
def credentials_config():
    """A config with an API key credential and an OIDC credential."""
    return {
        "credentials": [
            {
                "kind": "user_key",
                "locations": [
                    {"selector": "header", "args": ["x-api-key"]},
                    {"selector": "query_string", "args": ["api_key", "user_key"]},
                ],
            },
            {
                "kind": "oidc",
                "keys": ["test", "other-client"],
                "locations": [
                    {
                        "selector": "header",
                        "args": ["x-jwt-payload"],
                        "ops": [
                            {"decode": "base64url"},
                            {"decode": "json"},
                            {"lookup": {"key": "aud"}},
                        ],
                    },
                    {
                        "selector": "property",
                        "args": ["filter_metadata", "jwt_authn"],
                        "ops": [
                            {"lookup": {"position": 0}},
                            {"lookup": {"key": "aud"}},
                        ],
                    },
                ],
            },
        ]
    }
