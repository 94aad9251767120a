"""
Session registry for the SSE transport.

Maps each open SSE stream's session id to the write end of the memory stream
feeding the MCP server for that stream. A session moves absent -> open on
``open`` and open -> absent on ``close``; nothing else mutates the map.

All calls happen on the event loop, so plain dict operations are enough.
"""

import enum
import uuid

import anyio
from anyio.streams.memory import MemoryObjectSendStream
from loguru import logger
from mcp.shared.message import SessionMessage

Connection = MemoryObjectSendStream[SessionMessage | Exception]


class ForwardOutcome(enum.Enum):
    DELIVERED = "delivered"
    NOT_FOUND = "not_found"


class SessionRegistry:
    def __init__(self) -> None:
        self._connections: dict[str, Connection] = {}

    def open(self, connection: Connection) -> str:
        """Register ``connection`` under a fresh session id and return the id."""
        session_id = str(uuid.uuid4())
        while session_id in self._connections:
            session_id = str(uuid.uuid4())
        self._connections[session_id] = connection
        logger.info(f"Session {session_id} opened ({len(self._connections)} active)")
        return session_id

    async def forward(self, session_id: str, message: SessionMessage | Exception) -> ForwardOutcome:
        """Hand ``message`` to the connection registered under ``session_id``."""
        connection = self._connections.get(session_id)
        if connection is None:
            return ForwardOutcome.NOT_FOUND
        try:
            await connection.send(message)
        except (anyio.ClosedResourceError, anyio.BrokenResourceError):
            logger.warning(f"Session {session_id} closed before its message could be delivered")
            return ForwardOutcome.NOT_FOUND
        return ForwardOutcome.DELIVERED

    def close(self, session_id: str) -> None:
        """Drop the session; closing an unknown or already closed session is a no-op."""
        if self._connections.pop(session_id, None) is not None:
            logger.info(f"Session {session_id} closed ({len(self._connections)} active)")

    def get(self, session_id: str) -> Connection | None:
        return self._connections.get(session_id)

    def session_ids(self) -> list[str]:
        return list(self._connections)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._connections

    def __len__(self) -> int:
        return len(self._connections)
