"""Packaging API adapters.

- PackagingApi: Abstract base class defining the remote calls
- SalesforceRestApi: Salesforce REST / Tooling API adapter (httpx)
"""

from sf_package1.api.base import PackagingApi
from sf_package1.api.rest import SalesforceRestApi

__all__ = [
    "PackagingApi",
    "SalesforceRestApi",
]
