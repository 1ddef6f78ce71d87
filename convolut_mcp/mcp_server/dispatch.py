"""JSON-RPC routing for the MCP stdio protocol."""

import json
import logging
from typing import Any

import mcp.types as types
from pydantic import ValidationError

from convolut_mcp.mcp_server.catalog import tool_definitions
from convolut_mcp.mcp_server.config import Config
from convolut_mcp.mcp_server.errors import ProtocolError
from convolut_mcp.mcp_server.tools import ConvolutTools
from convolut_mcp.models.rpc import JsonRpcRequest, error_response, success_response

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2024-11-05"

# Returned by a route when the method never gets a reply.
NO_REPLY = object()


class Dispatcher:
    """Routes one JSON-RPC message at a time to its handler.

    Holds no state between messages; every call carries its own request.
    """

    def __init__(self, config: Config, tools: ConvolutTools):
        self.config = config
        self.tools = tools
        self._routes = {
            "initialize": self._initialize,
            "ping": self._ping,
            "tools/list": self._list_tools,
            "tools/call": self._call_tool,
            "resources/list": self._list_resources,
        }

    async def handle_line(self, line: str) -> str | None:
        """Process one input line; returns the response line, or None for no reply."""
        if not line.strip():
            return None

        try:
            message = json.loads(line)
        except json.JSONDecodeError as e:
            logger.warning(f"Unparseable message: {e.msg}")
            error = ProtocolError.parse_error(e.msg)
            return json.dumps(error_response(None, error.code, error.message))

        response = await self.handle_message(message)
        if response is None:
            return None
        return json.dumps(response, ensure_ascii=False)

    async def handle_message(self, message: Any) -> dict[str, Any] | None:
        """Process one decoded message; returns the response envelope or None."""
        try:
            request = JsonRpcRequest.model_validate(message)
        except ValidationError as e:
            request_id = message.get("id") if isinstance(message, dict) else None
            if not isinstance(request_id, (int, str)):
                request_id = None
            error = ProtocolError.invalid_request(
                "; ".join(err["msg"] for err in e.errors())
            )
            logger.warning(error.message)
            return error_response(request_id, error.code, error.message)

        logger.debug(f"<- {request.method} (id={request.id})")
        try:
            result = await self._route(request)
        except ProtocolError as e:
            logger.warning(f"{request.method} failed: {e.message}")
            if request.is_notification:
                return None
            return error_response(request.id, e.code, e.message)
        except Exception as e:
            logger.error(f"{request.method} failed: {e}", exc_info=True)
            if request.is_notification:
                return None
            error = ProtocolError.internal_error(str(e))
            return error_response(request.id, error.code, error.message)

        if result is NO_REPLY or request.is_notification:
            return None
        return success_response(request.id, result)

    async def _route(self, request: JsonRpcRequest) -> Any:
        if request.method.startswith("notifications/"):
            return NO_REPLY
        route = self._routes.get(request.method)
        if route is None:
            raise ProtocolError.method_not_found(request.method)
        return await route(request.params)

    async def _initialize(self, params: dict[str, Any]) -> dict[str, Any]:
        client = params.get("clientInfo") or {}
        logger.info(
            f"Initializing for {client.get('name', 'unknown client')} "
            f"(requested protocol {params.get('protocolVersion', 'unspecified')})"
        )
        result = types.InitializeResult(
            protocolVersion=PROTOCOL_VERSION,
            capabilities=types.ServerCapabilities(
                tools=types.ToolsCapability(listChanged=False)
            ),
            serverInfo=types.Implementation(
                name=self.config.server_name, version=self.config.server_version
            ),
        )
        return result.model_dump(by_alias=True, exclude_none=True)

    async def _ping(self, params: dict[str, Any]) -> dict[str, Any]:
        return {"status": "ok"}

    async def _list_tools(self, params: dict[str, Any]) -> dict[str, Any]:
        return {"tools": tool_definitions()}

    async def _list_resources(self, params: dict[str, Any]) -> dict[str, Any]:
        return {"resources": []}

    async def _call_tool(self, params: dict[str, Any]) -> dict[str, Any]:
        name = params.get("name")
        if not name or not isinstance(name, str):
            raise ProtocolError.invalid_params("Missing tool name")

        handler = self.tools.handler(name)
        if handler is None:
            raise ProtocolError.tool_not_found(name)

        logger.info(f"Calling tool: {name}")
        try:
            result = await handler(params.get("arguments") or {})
        except Exception as e:
            logger.error(f"Tool {name} raised: {e}", exc_info=True)
            raise ProtocolError(types.INTERNAL_ERROR, str(e)) from e
        return result.model_dump(by_alias=True, exclude_none=True)


__all__ = ["Dispatcher", "PROTOCOL_VERSION"]
