"""
Adapters layer - Marketplace data sources (JSON file store, REST backend).
"""

from .api_client import ServiceConnectClient
from .json_repository import JsonMarketplaceRepository

__all__ = ["ServiceConnectClient", "JsonMarketplaceRepository"]
