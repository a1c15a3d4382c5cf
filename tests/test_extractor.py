import pytest

from replcheck.core.errors import BootstrapRangeNotFound, DecodeError
from replcheck.core.extractor import (
    count_bootstrap_replicas,
    decode_rows,
    find_bootstrap_descriptor,
)
from replcheck.core.keys import META2_PREFIX
from replcheck.core.model import ScanRow
from tests.conftest import descriptor_row


def split_rows() -> list[ScanRow]:
    return [
        descriptor_row(start_key=b"", end_key=b"c", replicas=2, range_id=1),
        descriptor_row(start_key=b"c", end_key=b"m", replicas=3, range_id=2),
        descriptor_row(start_key=b"m", end_key=b"\xff\xff", replicas=1, range_id=3),
    ]


def test_counts_replicas_of_bootstrap_range():
    assert count_bootstrap_replicas(split_rows()) == 2


def test_bootstrap_range_found_anywhere_in_rows():
    rows = list(reversed(split_rows()))
    descriptor = find_bootstrap_descriptor(rows)
    assert descriptor.range_id == 1
    assert descriptor.is_bootstrap


def test_repeated_extraction_is_stable():
    rows = split_rows()
    assert {count_bootstrap_replicas(rows) for _ in range(5)} == {2}


def test_empty_scan_has_no_bootstrap_range():
    with pytest.raises(BootstrapRangeNotFound) as exc_info:
        count_bootstrap_replicas([])
    assert exc_info.value.rows_scanned == 0
    assert "first range not found" in str(exc_info.value)


def test_rows_without_empty_start_key():
    rows = split_rows()[1:]
    with pytest.raises(BootstrapRangeNotFound) as exc_info:
        count_bootstrap_replicas(rows)
    assert exc_info.value.rows_scanned == 2


def test_undecodable_row_reports_its_key():
    bad = ScanRow(key=META2_PREFIX + b"c", value=b"not a descriptor")
    rows = [bad, *split_rows()]
    with pytest.raises(DecodeError) as exc_info:
        count_bootstrap_replicas(rows)
    assert exc_info.value.key == META2_PREFIX + b"c"


def test_bootstrap_row_before_bad_row_still_counts():
    bad = ScanRow(key=META2_PREFIX + b"zz", value=b"\x00\x01")
    assert count_bootstrap_replicas([split_rows()[0], bad]) == 2


def test_descriptor_missing_fields_is_a_decode_error():
    row = ScanRow(key=META2_PREFIX + b"a", value=b'{"range_id": 1}')
    with pytest.raises(DecodeError):
        decode_rows([row])


def test_decode_rows_preserves_order():
    descriptors = decode_rows(split_rows())
    assert [d.range_id for d in descriptors] == [1, 2, 3]
    assert [d.replica_count for d in descriptors] == [2, 3, 1]
