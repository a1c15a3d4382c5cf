"""Locate the bootstrap range among scanned metadata rows."""

from collections.abc import Sequence

from ..datastructures.type_aliases import ReplicaCount
from .errors import BootstrapRangeNotFound
from .model import RangeDescriptor, ScanRow
from .serialization import DescriptorCodec

_default_codec = DescriptorCodec()


def find_bootstrap_descriptor(
    rows: Sequence[ScanRow], codec: DescriptorCodec = _default_codec
) -> RangeDescriptor:
    """Return the descriptor whose start key is empty.

    Rows are decoded in scan order; the first row that does not decode aborts
    with ``DecodeError`` even if the bootstrap range would have come later.
    """
    for row in rows:
        descriptor = codec.decode(row.key, row.value)
        if descriptor.is_bootstrap:
            return descriptor
    raise BootstrapRangeNotFound(len(rows))


def count_bootstrap_replicas(
    rows: Sequence[ScanRow], codec: DescriptorCodec = _default_codec
) -> ReplicaCount:
    """Replica count of the bootstrap range found in ``rows``."""
    return find_bootstrap_descriptor(rows, codec).replica_count


def decode_rows(
    rows: Sequence[ScanRow], codec: DescriptorCodec = _default_codec
) -> list[RangeDescriptor]:
    return [codec.decode(row.key, row.value) for row in rows]
