"""Tests for the SSE session registry."""

import anyio
import pytest
from mcp import types
from mcp.shared.message import SessionMessage

from weather_mcp.transport.session_registry import ForwardOutcome, SessionRegistry


def ping(request_id: int = 1) -> SessionMessage:
    return SessionMessage(
        types.JSONRPCMessage.model_validate({"jsonrpc": "2.0", "id": request_id, "method": "ping"})
    )


def test_open_mints_unique_ids():
    registry = SessionRegistry()
    ids = {registry.open(anyio.create_memory_object_stream(1)[0]) for _ in range(50)}
    assert len(ids) == 50
    assert len(registry) == 50
    assert set(registry.session_ids()) == ids


@pytest.mark.asyncio
async def test_forward_delivers_to_matching_connection():
    registry = SessionRegistry()
    first_writer, first_reader = anyio.create_memory_object_stream(1)
    second_writer, second_reader = anyio.create_memory_object_stream(1)
    first = registry.open(first_writer)
    registry.open(second_writer)

    outcome = await registry.forward(first, ping(7))

    assert outcome is ForwardOutcome.DELIVERED
    assert first_reader.receive_nowait().message.root.id == 7
    with pytest.raises(anyio.WouldBlock):
        second_reader.receive_nowait()


@pytest.mark.asyncio
async def test_forward_to_unknown_session_is_not_found():
    registry = SessionRegistry()
    assert await registry.forward("never-opened", ping()) is ForwardOutcome.NOT_FOUND


@pytest.mark.asyncio
async def test_forward_after_close_is_not_found():
    registry = SessionRegistry()
    writer, _ = anyio.create_memory_object_stream(1)
    session_id = registry.open(writer)

    registry.close(session_id)

    assert session_id not in registry
    assert await registry.forward(session_id, ping()) is ForwardOutcome.NOT_FOUND


@pytest.mark.asyncio
async def test_forward_to_dead_connection_is_not_found():
    registry = SessionRegistry()
    writer, reader = anyio.create_memory_object_stream(1)
    session_id = registry.open(writer)
    reader.close()

    assert await registry.forward(session_id, ping()) is ForwardOutcome.NOT_FOUND


def test_close_is_idempotent():
    registry = SessionRegistry()
    session_id = registry.open(anyio.create_memory_object_stream(1)[0])

    registry.close(session_id)
    registry.close(session_id)
    registry.close("never-opened")

    assert len(registry) == 0
    assert registry.get(session_id) is None
