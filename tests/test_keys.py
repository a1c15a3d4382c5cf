from replcheck.core.keys import (
    KEY_MAX,
    META1_PREFIX,
    META2_PREFIX,
    META_PREFIX,
    meta_scan_span,
    prefix_end,
    range_meta_key,
)


def test_prefix_end_increments_last_byte():
    assert prefix_end(b"abc") == b"abd"
    assert prefix_end(META2_PREFIX) == META_PREFIX + b"3"


def test_prefix_end_carries_over_ff_bytes():
    assert prefix_end(b"a\xff") == b"b"
    assert prefix_end(b"a\xfe\xff\xff") == b"a\xff"


def test_prefix_end_of_empty_key_is_key_max():
    assert prefix_end(b"") == KEY_MAX


def test_prefix_end_of_maximal_key_is_unchanged():
    assert prefix_end(b"\xff\xff\xff") == b"\xff\xff\xff"


def test_meta_span_covers_range_records_only():
    start, end = meta_scan_span()
    bootstrap_key = range_meta_key(KEY_MAX)
    assert start <= bootstrap_key < end
    assert not start <= META1_PREFIX + b"x" < end
    assert not start <= b"user-key" < end
