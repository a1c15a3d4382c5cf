import orjson
import pytest

from replcheck.core.errors import DecodeError
from replcheck.core.messages import (
    ErrorReply,
    ScanReply,
    ScanRequest,
    WireRow,
    parse_message,
)
from replcheck.core.model import RangeDescriptor, ReplicaDescriptor
from replcheck.core.serialization import DescriptorCodec, JsonSerializer


def test_descriptor_codec_keeps_binary_keys():
    codec = DescriptorCodec()
    descriptor = RangeDescriptor(
        range_id=4,
        start_key=b"\x00\x01meta",
        end_key=b"\xff\xff",
        replicas=(ReplicaDescriptor(node_id=1, store_id=1),),
    )

    decoded = codec.decode(b"key", codec.encode(descriptor))

    assert decoded == descriptor
    assert decoded.start_key == b"\x00\x01meta"
    assert not decoded.is_bootstrap


def test_descriptor_codec_rejects_wrong_types():
    payload = orjson.dumps({"range_id": "one", "start_key": "", "end_key": ""})
    with pytest.raises(DecodeError) as exc_info:
        DescriptorCodec().decode(b"\x00\x00meta2z", payload)
    assert exc_info.value.key == b"\x00\x00meta2z"
    assert "decode error" in str(exc_info.value)


def test_json_serializer_renders_bytes_readably():
    data = orjson.loads(
        JsonSerializer().serialize({"start_key": b"\x00\x00meta2", "count": 3})
    )
    assert data == {"start_key": "\\x00\\x00meta2", "count": 3}


def test_parse_message_dispatches_on_role():
    request = ScanRequest(start_key=b"\x00", end_key=b"\x01", limit=10, u="abc")
    parsed = parse_message(request.model_dump_json())
    assert isinstance(parsed, ScanRequest)
    assert parsed.start_key == b"\x00"

    reply = ScanReply(rows=(WireRow(key=b"k", value=b"\xff"),), u="abc")
    parsed_reply = parse_message(reply.model_dump_json())
    assert isinstance(parsed_reply, ScanReply)
    assert parsed_reply.rows[0].to_scan_row().value == b"\xff"

    error = parse_message(ErrorReply(code=403, message="no").model_dump_json())
    assert isinstance(error, ErrorReply)
    assert error.u is None


def test_parse_message_rejects_unknown_role():
    from pydantic import ValidationError

    with pytest.raises(ValidationError):
        parse_message(b'{"role": "delete", "u": "1"}')
