"""Local cluster harness: in-process nodes serving the metadata scan API."""

from .local import DEFAULT_EVENT_BUFFER, LocalCluster
from .meta_store import MetaStore
from .node import StoreNode

__all__ = ["DEFAULT_EVENT_BUFFER", "LocalCluster", "MetaStore", "StoreNode"]
