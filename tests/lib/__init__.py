"""Shared helpers for the test suites."""

from .api import ApiUser, DiarumApiClient, DiarumApiError, make_api_user
from .chevereto_stub import StubChevereto

__all__ = [
    "ApiUser",
    "DiarumApiClient",
    "DiarumApiError",
    "StubChevereto",
    "make_api_user",
]
