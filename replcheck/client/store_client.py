"""Websocket client for the store's metadata scan API.

One request is in flight at a time: the checker is a single logical worker,
so replies are read straight off the connection rather than dispatched by a
listener task.
"""

import asyncio
from dataclasses import dataclass, field

import ulid
from loguru import logger
from pydantic import ValidationError
from websockets.asyncio.client import ClientConnection
from websockets.asyncio.client import connect as ws_connect
from websockets.exceptions import ConnectionClosed, InvalidHandshake, InvalidURI

from ..core.errors import SetupError, TransportError
from ..core.messages import (
    ErrorReply,
    HelloReply,
    HelloRequest,
    ScanReply,
    ScanRequest,
    parse_message,
)
from ..core.model import ScanRow
from ..datastructures.type_aliases import (
    DurationSeconds,
    EndpointURL,
    NodeId,
    RawKey,
    RowLimit,
)
from .endpoint import StoreEndpoint, parse_endpoint

DEFAULT_REQUEST_TIMEOUT: DurationSeconds = 5.0


@dataclass(slots=True)
class WebSocketStoreClient:
    endpoint: StoreEndpoint
    request_timeout: DurationSeconds = DEFAULT_REQUEST_TIMEOUT

    node_id: NodeId | None = field(default=None, init=False)
    _connection: ClientConnection | None = field(default=None, init=False)

    async def open(self) -> None:
        """Connect and authenticate; any failure here is a ``SetupError``."""
        try:
            self._connection = await ws_connect(
                self.endpoint.websocket_url,
                ssl=self.endpoint.ssl_context(),
                open_timeout=self.request_timeout,
                user_agent_header=None,
            )
        except (OSError, TimeoutError, InvalidHandshake, InvalidURI) as e:
            raise SetupError(f"cannot connect to {self.endpoint}: {e}") from e

        hello = HelloRequest(principal=self.endpoint.principal, u=str(ulid.new()))
        try:
            reply = await self._exchange(hello.model_dump_json(), hello.u)
        except TransportError as e:
            await self.close()
            raise SetupError(f"handshake with {self.endpoint} failed: {e.message}") from e

        if isinstance(reply, ErrorReply):
            await self.close()
            raise SetupError(
                f"{self.endpoint} rejected principal "
                f"{self.endpoint.principal!r}: {reply.message}"
            )
        if not isinstance(reply, HelloReply):
            await self.close()
            raise SetupError(f"unexpected handshake reply {reply.role!r}")

        self.node_id = reply.node_id
        logger.debug(
            "Connected to node {} at {} as {}",
            reply.node_id,
            self.endpoint.address,
            self.endpoint.principal,
        )

    async def scan(
        self, start_key: RawKey, end_key: RawKey, limit: RowLimit
    ) -> list[ScanRow]:
        """Ordered scan of ``[start_key, end_key)``, at most ``limit`` rows."""
        request = ScanRequest(
            start_key=start_key, end_key=end_key, limit=limit, u=str(ulid.new())
        )
        reply = await self._exchange(request.model_dump_json(), request.u)
        if isinstance(reply, ErrorReply):
            raise TransportError(f"scan refused ({reply.code}): {reply.message}")
        if not isinstance(reply, ScanReply):
            raise TransportError(f"unexpected scan reply {reply.role!r}")
        return [row.to_scan_row() for row in reply.rows]

    async def close(self) -> None:
        if self._connection is None:
            return
        connection, self._connection = self._connection, None
        await connection.close()

    async def _exchange(self, payload: str, request_id: str):
        if self._connection is None:
            raise TransportError("connection is not established")

        try:
            await self._connection.send(payload)
            raw = await asyncio.wait_for(
                self._connection.recv(), timeout=self.request_timeout
            )
        except TimeoutError as e:
            raise TransportError(
                f"no reply from {self.endpoint.address} "
                f"after {self.request_timeout}s"
            ) from e
        except ConnectionClosed as e:
            raise TransportError(
                f"connection to {self.endpoint.address} closed: {e}"
            ) from e

        try:
            reply = parse_message(raw)
        except ValidationError as e:
            raise TransportError(f"malformed reply: {e.error_count()} error(s)") from e

        if reply.u is not None and reply.u != request_id:
            raise TransportError(
                f"reply {reply.u} does not match request {request_id}"
            )
        return reply


async def connect(
    endpoint: EndpointURL | StoreEndpoint,
    *,
    request_timeout: DurationSeconds = DEFAULT_REQUEST_TIMEOUT,
) -> WebSocketStoreClient:
    """Open an authenticated client for ``endpoint``."""
    if not isinstance(endpoint, StoreEndpoint):
        endpoint = parse_endpoint(endpoint)
    client = WebSocketStoreClient(endpoint=endpoint, request_timeout=request_timeout)
    await client.open()
    return client
