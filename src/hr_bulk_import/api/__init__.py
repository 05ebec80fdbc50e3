"""Backend access: session, httpx client and reference-data providers."""

from .client import ApiError, AuthenticationError, HRApiClient
from .reference import BulkSubmitter, ReferenceDataProvider, StaticReferenceData
from .session import ApiSession

__all__ = [
    "ApiError",
    "ApiSession",
    "AuthenticationError",
    "BulkSubmitter",
    "HRApiClient",
    "ReferenceDataProvider",
    "StaticReferenceData",
]
