"""Unit tests for the stdio serving loop."""

import asyncio
import json

import pytest

from convolut_mcp.mcp_server.dispatch import Dispatcher
from convolut_mcp.mcp_server.main import LINE_LIMIT, StdioServer


def feed(*lines: str) -> asyncio.StreamReader:
    """A reader holding the given lines followed by EOF."""
    reader = asyncio.StreamReader()
    for line in lines:
        reader.feed_data((line + "\n").encode("utf-8"))
    reader.feed_eof()
    return reader


@pytest.fixture
def dispatcher(config, tools):
    return Dispatcher(config, tools)


class TestStdioServer:
    """Test reading, replying and shutdown."""

    @pytest.mark.asyncio
    async def test_one_reply_per_request(self, dispatcher):
        output = []
        reader = feed(
            json.dumps({"jsonrpc": "2.0", "id": 1, "method": "ping"}),
            "",
            json.dumps({"jsonrpc": "2.0", "method": "notifications/initialized"}),
            json.dumps({"jsonrpc": "2.0", "id": 2, "method": "tools/list"}),
        )

        await StdioServer(dispatcher, reader, write=output.append).serve()

        replies = [json.loads(line) for line in output]
        assert sorted(reply["id"] for reply in replies) == [1, 2]
        assert all("\n" not in line for line in output)

    @pytest.mark.asyncio
    async def test_parse_error_reply(self, dispatcher):
        output = []

        await StdioServer(dispatcher, feed("not json"), write=output.append).serve()

        assert len(output) == 1
        assert json.loads(output[0])["error"]["code"] == -32700

    @pytest.mark.asyncio
    async def test_empty_input(self, dispatcher):
        output = []

        await StdioServer(dispatcher, feed(), write=output.append).serve()

        assert output == []

    @pytest.mark.asyncio
    async def test_stop_ends_serving(self, dispatcher):
        reader = asyncio.StreamReader()
        server = StdioServer(dispatcher, reader, write=lambda line: None)

        serving = asyncio.create_task(server.serve())
        await asyncio.sleep(0)
        server.stop()

        await asyncio.wait_for(serving, timeout=1)

    @pytest.mark.asyncio
    async def test_slow_request_does_not_block_later_ones(self):
        release = asyncio.Event()
        output = []

        class SlowFirstDispatcher:
            async def handle_line(self, line):
                if line.strip() == "slow":
                    await release.wait()
                else:
                    release.set()
                return line.strip()

        reader = feed("slow", "fast")

        await StdioServer(SlowFirstDispatcher(), reader, write=output.append).serve()

        assert output == ["fast", "slow"]

    @pytest.mark.asyncio
    async def test_escaped_error_stops_server(self):
        class BrokenDispatcher:
            async def handle_line(self, line):
                raise RuntimeError("dispatch bug")

        reader = asyncio.StreamReader()
        reader.feed_data(b"anything\n")
        server = StdioServer(BrokenDispatcher(), reader, write=lambda line: None)

        with pytest.raises(RuntimeError, match="dispatch bug"):
            await asyncio.wait_for(server.serve(), timeout=1)


class TestOverlongLines:
    """Test lines longer than the reader's buffer limit."""

    @pytest.mark.asyncio
    async def test_overlong_line_gets_parse_error_and_serving_continues(
        self, dispatcher
    ):
        output = []
        huge = json.dumps(
            {
                "jsonrpc": "2.0",
                "id": 1,
                "method": "tools/call",
                "params": {
                    "name": "create_context",
                    "arguments": {"title": "Big", "content": "a" * 70000},
                },
            }
        )
        reader = asyncio.StreamReader()
        reader.feed_data((huge + "\n").encode("utf-8"))
        reader.feed_data(b'{"jsonrpc": "2.0", "id": 2, "method": "ping"}\n')
        reader.feed_eof()

        await StdioServer(dispatcher, reader, write=output.append).serve()

        replies = [json.loads(line) for line in output]
        assert len(replies) == 2
        assert replies[0]["id"] is None
        assert replies[0]["error"]["code"] == -32700
        assert replies[1] == {"jsonrpc": "2.0", "id": 2, "result": {"status": "ok"}}

    @pytest.mark.asyncio
    async def test_overlong_line_arriving_in_pieces(self, dispatcher):
        output = []
        reader = asyncio.StreamReader(limit=1024)
        server = StdioServer(dispatcher, reader, write=output.append)

        reader.feed_data(b'{"jsonrpc": "2.0", "id": 1, "method": "ping", "pad": "')
        reader.feed_data(b"x" * 4096)
        serving = asyncio.create_task(server.serve())
        for _ in range(5):
            await asyncio.sleep(0)
        reader.feed_data(b"x" * 4096 + b'"}\n')
        reader.feed_data(b'{"jsonrpc": "2.0", "id": 2, "method": "ping"}\n')
        reader.feed_eof()

        await asyncio.wait_for(serving, timeout=1)

        replies = [json.loads(line) for line in output]
        assert [reply["id"] for reply in replies] == [None, 2]
        assert replies[0]["error"]["code"] == -32700

    def test_stdin_reader_accepts_large_lines(self):
        assert LINE_LIMIT > 70000
