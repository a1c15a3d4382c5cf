"""A single storage node serving the scan API over a websocket."""

from dataclasses import dataclass, field

from loguru import logger
from pydantic import ValidationError
from websockets.asyncio.server import Server, ServerConnection, serve
from websockets.exceptions import ConnectionClosed

from ..client.endpoint import format_address
from ..core.messages import (
    ERROR_BAD_REQUEST,
    ERROR_FORBIDDEN,
    ERROR_UNAUTHENTICATED,
    ErrorReply,
    HelloReply,
    HelloRequest,
    ScanReply,
    ScanRequest,
    WireRow,
    parse_message,
)
from ..datastructures.type_aliases import (
    HostAddress,
    NodeAddress,
    NodeId,
    PortNumber,
    Principal,
)
from .meta_store import MetaStore


@dataclass(slots=True)
class StoreNode:
    node_id: NodeId
    store: MetaStore
    host: HostAddress = "127.0.0.1"
    admin_principal: Principal = "root"

    _server: Server | None = field(default=None, init=False)
    _port: PortNumber | None = field(default=None, init=False)

    @property
    def port(self) -> PortNumber:
        if self._port is None:
            raise RuntimeError(f"node {self.node_id} is not running")
        return self._port

    @property
    def address(self) -> NodeAddress:
        return format_address(self.host, self.port)

    async def start(self, port: PortNumber = 0) -> None:
        """Listen on ``port``; 0 picks an ephemeral port."""
        if self._server is not None:
            return
        self._server = await serve(self._serve_connection, self.host, port)
        self._port = self._server.sockets[0].getsockname()[1]
        logger.debug("Node {} listening on {}", self.node_id, self.address)

    async def stop(self) -> None:
        if self._server is None:
            return
        server, self._server = self._server, None
        server.close()
        await server.wait_closed()
        logger.debug("Node {} stopped", self.node_id)

    async def _serve_connection(self, connection: ServerConnection) -> None:
        principal: Principal | None = None
        try:
            async for raw in connection:
                try:
                    request = parse_message(raw)
                except ValidationError as e:
                    await connection.send(
                        ErrorReply(
                            code=ERROR_BAD_REQUEST,
                            message=f"malformed request: {e.error_count()} error(s)",
                        ).model_dump_json()
                    )
                    continue

                if isinstance(request, HelloRequest):
                    reply, principal = self._handle_hello(request)
                elif isinstance(request, ScanRequest):
                    reply = self._handle_scan(request, principal)
                else:
                    reply = ErrorReply(
                        code=ERROR_BAD_REQUEST,
                        message=f"nodes do not accept {request.role!r} messages",
                        u=request.u,
                    )
                await connection.send(reply.model_dump_json())
        except ConnectionClosed:
            logger.debug("Node {}: client went away", self.node_id)

    def _handle_hello(
        self, request: HelloRequest
    ) -> tuple[HelloReply | ErrorReply, Principal | None]:
        if request.principal != self.admin_principal:
            logger.warning(
                "Node {} refused principal {!r}", self.node_id, request.principal
            )
            return (
                ErrorReply(
                    code=ERROR_FORBIDDEN,
                    message=f"principal {request.principal!r} is not an administrator",
                    u=request.u,
                ),
                None,
            )
        return HelloReply(node_id=self.node_id, u=request.u), request.principal

    def _handle_scan(
        self, request: ScanRequest, principal: Principal | None
    ) -> ScanReply | ErrorReply:
        if principal is None:
            return ErrorReply(
                code=ERROR_UNAUTHENTICATED,
                message="scan before hello",
                u=request.u,
            )
        rows = self.store.scan(request.start_key, request.end_key, request.limit)
        return ScanReply(
            rows=tuple(WireRow(key=row.key, value=row.value) for row in rows),
            u=request.u,
        )
