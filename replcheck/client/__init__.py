from .endpoint import (
    ADMIN_PRINCIPAL,
    StoreEndpoint,
    build_endpoint,
    parse_endpoint,
)
from .store_client import WebSocketStoreClient, connect

__all__ = [
    "ADMIN_PRINCIPAL",
    "StoreEndpoint",
    "WebSocketStoreClient",
    "build_endpoint",
    "connect",
    "parse_endpoint",
]
