"""
Wire messages exchanged between the store client and a node.

Every message is a JSON object discriminated by ``role``; replies echo the
request's ``u`` so the client can match them. Raw keys travel as base64.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, Field, TypeAdapter

from ..datastructures.type_aliases import NodeId, Principal, RequestId
from .model import BYTES_AS_BASE64, ScanRow


class HelloRequest(BaseModel):
    """Authenticates the connection as ``principal``."""

    model_config = BYTES_AS_BASE64

    role: Literal["hello"] = "hello"
    principal: Principal = Field(description="User the client acts as.")
    u: RequestId = Field(description="A unique identifier for this request.")


class HelloReply(BaseModel):
    model_config = BYTES_AS_BASE64

    role: Literal["hello-ack"] = "hello-ack"
    node_id: NodeId = Field(description="Identifier of the answering node.")
    u: RequestId


class ScanRequest(BaseModel):
    """Ordered scan of ``[start_key, end_key)`` returning at most ``limit`` rows."""

    model_config = BYTES_AS_BASE64

    role: Literal["scan"] = "scan"
    start_key: bytes
    end_key: bytes
    limit: int = Field(gt=0)
    u: RequestId


class WireRow(BaseModel):
    model_config = BYTES_AS_BASE64

    key: bytes
    value: bytes

    def to_scan_row(self) -> ScanRow:
        return ScanRow(key=self.key, value=self.value)


class ScanReply(BaseModel):
    model_config = BYTES_AS_BASE64

    role: Literal["scan-result"] = "scan-result"
    rows: tuple[WireRow, ...] = Field(default_factory=tuple)
    u: RequestId


class ErrorReply(BaseModel):
    model_config = BYTES_AS_BASE64

    role: Literal["error"] = "error"
    code: int = Field(description="Numeric error class.")
    message: str
    u: RequestId | None = None


# Error codes carried by ErrorReply.
ERROR_BAD_REQUEST = 400
ERROR_UNAUTHENTICATED = 401
ERROR_FORBIDDEN = 403

WireMessage = Annotated[
    HelloRequest | HelloReply | ScanRequest | ScanReply | ErrorReply,
    Field(discriminator="role"),
]

_wire_adapter = TypeAdapter(WireMessage)


def parse_message(
    raw: str | bytes,
) -> HelloRequest | HelloReply | ScanRequest | ScanReply | ErrorReply:
    """Validate one raw frame; raises ``pydantic.ValidationError`` if malformed."""
    return _wire_adapter.validate_json(raw)
