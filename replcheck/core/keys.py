"""Metadata keyspace layout.

Range addressing records live under ``META2_PREFIX`` keyed by the END key of
the range they describe, so an ordered scan of the prefix visits ranges in
keyspace order and the first range surfaces among the first rows.
"""

from ..datastructures.type_aliases import RawKey

KEY_MIN: RawKey = b""
KEY_MAX: RawKey = b"\xff\xff"

META_PREFIX: RawKey = b"\x00\x00meta"
META1_PREFIX: RawKey = META_PREFIX + b"1"
META2_PREFIX: RawKey = META_PREFIX + b"2"


def prefix_end(key: RawKey) -> RawKey:
    """Return the first key that sorts after every key prefixed by ``key``."""
    if not key:
        return KEY_MAX
    for i in range(len(key) - 1, -1, -1):
        if key[i] != 0xFF:
            return key[:i] + bytes([key[i] + 1])
    # Already maximal; nothing sorts after it while keeping the prefix.
    return key


def range_meta_key(end_key: RawKey) -> RawKey:
    """Addressing record key for the range ending at ``end_key``."""
    return META2_PREFIX + end_key


def meta_scan_span() -> tuple[RawKey, RawKey]:
    """Start/end keys covering every range addressing record."""
    return META2_PREFIX, prefix_end(META2_PREFIX)
