"""Small HTTP-related constants shared across travis_v3.

This module is intentionally tiny to avoid circular imports and drift.
"""

from __future__ import annotations

from typing import Literal

HTTPMethod = Literal["GET", "POST", "PATCH", "DELETE"]

SCHEME = "https"
DEFAULT_HTTPS_PORT = 443
API_VERSION = "3"
DEFAULT_USER_AGENT = "travis-v3-python"

API_VERSION_HEADER = "Travis-API-Version"
AUTHORIZATION_HEADER = "Authorization"
# The v3 API expects "token <value>", not "Bearer <value>".
AUTHORIZATION_SCHEME = "token"

JSON_CONTENT_TYPE = "application/json"
