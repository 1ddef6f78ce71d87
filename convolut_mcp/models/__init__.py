"""Pydantic models for the Convolut MCP server.

- contexts: shapes returned by the Convolut API
- requests: validated tool arguments
- rpc: JSON-RPC envelopes
"""

from convolut_mcp.models.contexts import *
from convolut_mcp.models.requests import *
from convolut_mcp.models.rpc import *

__all__ = [
    # API models
    "CATEGORIES",
    "Category",
    "Context",
    "ContextFile",
    "ContextListEnvelope",
    "ContextPage",
    # Tool requests
    "ConsolidateRequest",
    "ContextFileInput",
    "ContextIdRequest",
    "CreateContextRequest",
    "ExportRequest",
    "ListContextsRequest",
    "PlanRequest",
    "RawUrlRequest",
    "SearchContextsRequest",
    "StatsRequest",
    "ToolRequest",
    "UpdateContextRequest",
    # JSON-RPC
    "JSONRPC_VERSION",
    "JsonRpcRequest",
    "error_response",
    "success_response",
]
