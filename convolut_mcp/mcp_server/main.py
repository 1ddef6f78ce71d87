"""Main MCP server for Convolut integration."""

import asyncio
import contextlib
import json
import logging
import signal
import sys
from typing import Callable

from convolut_mcp.models.rpc import error_response

from .client import ConvolutClient
from .config import Config
from .dispatch import Dispatcher
from .errors import ConvolutError, ProtocolError
from .tools import ConvolutTools

logger = logging.getLogger(__name__)

# Longest input line the stdin reader buffers.
LINE_LIMIT = 16 * 1024 * 1024


def write_stdout(line: str) -> None:
    """Emit one protocol frame; stdout carries nothing else."""
    sys.stdout.write(line + "\n")
    sys.stdout.flush()


class StdioServer:
    """Line-delimited JSON-RPC loop.

    Each input line is handled in its own task, so a slow API call does not
    hold up reading. Responses are written in completion order, one line each.
    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        reader: asyncio.StreamReader,
        write: Callable[[str], None] = write_stdout,
    ):
        self.dispatcher = dispatcher
        self.reader = reader
        self.write = write
        self._stopping = asyncio.Event()
        self._pending: set[asyncio.Task] = set()
        self._failure: BaseException | None = None

    def stop(self) -> None:
        """Stop reading input; in-flight messages still get their responses."""
        self._stopping.set()

    async def _handle(self, line: str) -> None:
        response = await self.dispatcher.handle_line(line)
        if response is not None:
            self.write(response)

    def _task_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None and self._failure is None:
            logger.critical(f"Unhandled error while serving: {error}", exc_info=error)
            self._failure = error
            self.stop()

    async def _skip_line(self) -> None:
        """Drop input up to and including the next newline (or EOF)."""
        while True:
            try:
                await self.reader.readuntil(b"\n")
                return
            except asyncio.LimitOverrunError as e:
                await self.reader.readexactly(e.consumed)
            except asyncio.IncompleteReadError:
                return

    def _reject_overlong_line(self) -> None:
        error = ProtocolError.parse_error("message exceeds the input line limit")
        logger.warning(error.message)
        self.write(json.dumps(error_response(None, error.code, error.message)))

    async def _read_line(self) -> bytes | None:
        """Next complete line; overlong lines are skipped and answered -32700."""
        while True:
            try:
                return await self.reader.readuntil(b"\n")
            except asyncio.IncompleteReadError as e:
                return e.partial or None
            except asyncio.LimitOverrunError:
                await self._skip_line()
                self._reject_overlong_line()

    async def _next_line(self) -> bytes | None:
        """Next raw line, or None once input ends or a stop is requested."""
        read = asyncio.ensure_future(self._read_line())
        stopping = asyncio.ensure_future(self._stopping.wait())
        done, _ = await asyncio.wait(
            {read, stopping}, return_when=asyncio.FIRST_COMPLETED
        )
        if read in done:
            stopping.cancel()
            line = read.result()
            return line or None
        read.cancel()
        return None

    async def serve(self) -> None:
        """Run until EOF or stop(); then wait for in-flight messages.

        Raises:
            The first exception that escaped a message task.
        """
        while not self._stopping.is_set():
            line = await self._next_line()
            if line is None:
                break
            task = asyncio.create_task(
                self._handle(line.decode("utf-8", errors="replace"))
            )
            self._pending.add(task)
            task.add_done_callback(self._task_done)

        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
        if self._failure is not None:
            raise self._failure


async def open_stdin_reader() -> asyncio.StreamReader:
    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader(limit=LINE_LIMIT)
    protocol = asyncio.StreamReaderProtocol(reader)
    await loop.connect_read_pipe(lambda: protocol, sys.stdin)
    return reader


async def _probe_health(client: ConvolutClient) -> None:
    try:
        await client.health_check()
        logger.info("Successfully connected to Convolut API")
    except ConvolutError as e:
        logger.warning(f"Convolut API health check failed: {e.message}")


async def main(config: Config) -> None:
    """Serve MCP over stdio until input closes or a termination signal arrives."""
    logger.info(f"Starting Convolut MCP server against {config.base_url}")

    client = ConvolutClient(config)
    tools = ConvolutTools(client)
    dispatcher = Dispatcher(config, tools)
    server = StdioServer(dispatcher, await open_stdin_reader())

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, server.stop)

    health = asyncio.create_task(_probe_health(client))
    try:
        await server.serve()
    finally:
        health.cancel()
        logger.info("Convolut MCP server shutting down")


__all__ = ["StdioServer", "main", "open_stdin_reader", "write_stdout"]
