from typing import Any

import orjson
from pydantic import ValidationError

from ..datastructures.type_aliases import RawKey, RawValue
from .errors import DecodeError
from .model import RangeDescriptor


class JsonSerializer:
    """orjson rendering of CLI reports."""

    def serialize(self, data: Any) -> bytes:
        """Serializes data to JSON bytes using orjson."""

        # Raw keys are bytes; render them the way they would print in a log
        # line rather than failing the whole report.
        def default(obj: Any) -> Any:
            if isinstance(obj, bytes):
                return repr(obj)[2:-1]
            if isinstance(obj, frozenset | set):
                return sorted(obj)
            raise TypeError

        return orjson.dumps(data, default=default, option=orjson.OPT_INDENT_2)


class DescriptorCodec:
    """Encodes range descriptors into the opaque values stored in meta rows."""

    def encode(self, descriptor: RangeDescriptor) -> RawValue:
        return descriptor.model_dump_json().encode()

    def decode(self, key: RawKey, value: RawValue) -> RangeDescriptor:
        """Decode a stored value, raising ``DecodeError`` naming ``key``."""
        try:
            return RangeDescriptor.model_validate_json(value)
        except ValidationError as e:
            raise DecodeError(key, f"{e.error_count()} validation error(s)") from e
