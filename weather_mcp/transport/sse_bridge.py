"""
SSE transport bridge.

Serves the two MCP SSE endpoints:
- GET  /sse                         opens a stream, announces the message URL
- POST /messages?sessionId={id}     delivers a JSON-RPC message to that stream

Each stream gets a pair of in-memory channels wired to the MCP server; the
read side's writer is what the SessionRegistry stores. When the HTTP
connection goes away the session is closed in the registry and the channels
are shut so the server loop for that stream winds down.
"""

from typing import Any, Protocol

import anyio
from loguru import logger
from mcp import types
from mcp.shared.message import SessionMessage
from pydantic import ValidationError
from sse_starlette import EventSourceResponse
from starlette.requests import Request
from starlette.responses import PlainTextResponse
from starlette.types import Receive, Scope, Send

from weather_mcp.infrastructure.observability import get_observability_manager
from weather_mcp.transport.session_registry import ForwardOutcome, SessionRegistry


class StreamServer(Protocol):
    """The part of the MCP low-level server the bridge drives."""

    async def run(self, read_stream: Any, write_stream: Any, initialization_options: Any) -> None: ...

    def create_initialization_options(self) -> Any: ...


class SseTransportBridge:
    def __init__(
        self,
        server: StreamServer,
        message_path: str = "/messages",
        registry: SessionRegistry | None = None,
    ) -> None:
        self._server = server
        self._message_path = message_path
        self.registry = registry or SessionRegistry()

    # ------------------------------------------------------------------
    # GET /sse
    # ------------------------------------------------------------------

    async def handle_sse(self, scope: Scope, receive: Receive, send: Send) -> None:
        read_stream_writer, read_stream = anyio.create_memory_object_stream[SessionMessage | Exception](0)
        write_stream, write_stream_reader = anyio.create_memory_object_stream[SessionMessage](0)
        sse_stream_writer, sse_stream_reader = anyio.create_memory_object_stream[dict[str, Any]](0)

        session_id = self.registry.open(read_stream_writer)
        root_path = scope.get("root_path", "").rstrip("/")
        endpoint = f"{root_path}{self._message_path}?sessionId={session_id}"

        async def sse_writer() -> None:
            async with sse_stream_writer, write_stream_reader:
                await sse_stream_writer.send({"event": "endpoint", "data": endpoint})
                async for session_message in write_stream_reader:
                    await sse_stream_writer.send({
                        "event": "message",
                        "data": session_message.message.model_dump_json(by_alias=True, exclude_none=True),
                    })

        async def run_server() -> None:
            with get_observability_manager().session_context(session_id):
                try:
                    await self._server.run(
                        read_stream,
                        write_stream,
                        self._server.create_initialization_options(),
                    )
                except* (anyio.BrokenResourceError, anyio.ClosedResourceError):
                    # in-flight results for a client that has already left
                    logger.debug(f"Session {session_id}: discarded output after disconnect")
                finally:
                    await read_stream.aclose()
                    await write_stream.aclose()

        async with anyio.create_task_group() as tg:
            tg.start_soon(run_server)
            try:
                response = EventSourceResponse(content=sse_stream_reader, data_sender_callable=sse_writer)
                await response(scope, receive, send)
            finally:
                self.registry.close(session_id)
                await read_stream_writer.aclose()
                await write_stream_reader.aclose()

    # ------------------------------------------------------------------
    # POST /messages
    # ------------------------------------------------------------------

    async def handle_post_message(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope, receive)
        session_id = request.query_params.get("sessionId")

        if not session_id:
            response = PlainTextResponse("sessionId is required", status_code=400)
            await response(scope, receive, send)
            return

        if session_id not in self.registry:
            await self._session_not_found(session_id)(scope, receive, send)
            return

        body = await request.body()
        try:
            message = types.JSONRPCMessage.model_validate_json(body)
        except ValidationError as e:
            logger.error(f"Session {session_id}: could not parse message: {e}")
            response = PlainTextResponse("Could not parse message", status_code=400)
            await response(scope, receive, send)
            return

        # the stream may have closed while the body was being read
        if session_id not in self.registry:
            await self._session_not_found(session_id)(scope, receive, send)
            return

        response = PlainTextResponse("Accepted", status_code=202)
        await response(scope, receive, send)

        outcome = await self.registry.forward(session_id, SessionMessage(message))
        if outcome is ForwardOutcome.NOT_FOUND:
            logger.warning(f"Session {session_id} closed before message delivery")

    @staticmethod
    def _session_not_found(session_id: str) -> PlainTextResponse:
        logger.warning(f"No transport found for sessionId {session_id}")
        return PlainTextResponse(f"No transport found for sessionId {session_id}", status_code=400)
