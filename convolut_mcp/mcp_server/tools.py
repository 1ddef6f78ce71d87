"""MCP tools for Convolut integration."""

import json
import logging
import math
from collections import Counter
from datetime import datetime, timedelta, timezone
from functools import wraps
from typing import Any, Awaitable, Callable, TypeVar

import mcp.types as types
from pydantic import BaseModel, ValidationError

from convolut_mcp.mcp_server.client import LOOKUP_WINDOW, ConvolutClient
from convolut_mcp.mcp_server.errors import (
    ConvolutError,
    InvalidResponse,
    ToolValidationError,
)
from convolut_mcp.models.contexts import Context
from convolut_mcp.models.requests import (
    ConsolidateRequest,
    ContextIdRequest,
    CreateContextRequest,
    ExportRequest,
    ListContextsRequest,
    PlanRequest,
    RawUrlRequest,
    SearchContextsRequest,
    StatsRequest,
    UpdateContextRequest,
)

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=BaseModel)
Handler = Callable[[dict[str, Any]], Awaitable[types.CallToolResult]]

DATE_RANGES: dict[str, timedelta | None] = {
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
    "90d": timedelta(days=90),
    "1y": timedelta(days=365),
    "all": None,
}
UNKNOWN_DATE = "unknown"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_validation_error(error: ValidationError) -> str:
    """One readable sentence per violated constraint."""
    messages = []
    for err in error.errors():
        field = ".".join(str(part) for part in err["loc"]) or "arguments"
        if err["type"] == "value_error":
            messages.append(str(err["ctx"]["error"]))
        elif err["type"] == "missing":
            messages.append(f"{field} is required")
        else:
            messages.append(f"{field}: {err['msg']}")
    return "; ".join(messages)


def validate_arguments(model: type[R], arguments: Any) -> R:
    """Build a request model from raw tool arguments.

    Raises:
        ToolValidationError: If the arguments violate the model's constraints
    """
    try:
        return model.model_validate(arguments if arguments is not None else {})
    except ValidationError as e:
        raise ToolValidationError(format_validation_error(e)) from e


def text_result(payload: Any) -> types.CallToolResult:
    return types.CallToolResult(
        content=[
            types.TextContent(
                type="text", text=json.dumps(payload, indent=2, ensure_ascii=False)
            )
        ],
        isError=False,
    )


def error_result(message: str) -> types.CallToolResult:
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=message)],
        isError=True,
    )


def tool_handler(action: str) -> Callable:
    """Turn a handler returning a JSON payload into one returning a tool result.

    Failures never escape: they become an error result reading
    ``Error <action>: <message>``.

    Args:
        action: What the tool does, for messages (e.g. "listing contexts")
    """

    def decorator(func: Callable[..., Awaitable[Any]]) -> Callable:
        @wraps(func)
        async def wrapper(self, arguments: Any) -> types.CallToolResult:
            try:
                payload = await func(self, arguments)
            except ConvolutError as e:
                logger.warning(f"Error {action}: {e.message}")
                return error_result(f"Error {action}: {e.message}")
            except Exception as e:
                logger.error(f"Error {action}: {e}", exc_info=True)
                return error_result(f"Error {action}: {e}")
            return text_result(payload)

        return wrapper

    return decorator


def _parse_date(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def group_contexts(contexts: list[Context], group_by: str) -> dict[str, int]:
    """Count contexts per category, tag, creation day or favorite flag."""
    if group_by == "favorite":
        favorites = sum(1 for c in contexts if c.is_favorite)
        return {"favorites": favorites, "non_favorites": len(contexts) - favorites}

    if group_by == "tags":
        return dict(Counter(tag for c in contexts for tag in c.tags))

    if group_by == "date":
        days = Counter()
        for c in contexts:
            created = _parse_date(c.created_date)
            days[created.date().isoformat() if created else UNKNOWN_DATE] += 1
        return {
            day: days[day]
            for day in sorted(days, key=lambda d: (d == UNKNOWN_DATE, d))
        }

    return dict(Counter(c.category or "other" for c in contexts))


class ConvolutTools:
    """Collection of MCP tools for the Convolut API."""

    def __init__(
        self,
        client: ConvolutClient,
        clock: Callable[[], datetime] = _utcnow,
    ):
        """Initialize tools with a Convolut client.

        Args:
            client: Client for the Convolut API
            clock: Source of the current UTC time (stats windows, URL expiry)
        """
        self.client = client
        self.clock = clock
        self._handlers: dict[str, Handler] = {
            "list_contexts": self.list_contexts,
            "get_context": self.get_context,
            "create_context": self.create_context,
            "update_context": self.update_context,
            "delete_context": self.delete_context,
            "search_contexts": self.search_contexts,
            "consolidate_contexts": self.consolidate_contexts,
            "plan_from_contexts": self.plan_from_contexts,
            "export_contexts": self.export_contexts,
            "get_raw_url": self.get_raw_url,
            "get_context_stats": self.get_context_stats,
        }

    @property
    def names(self) -> list[str]:
        return list(self._handlers)

    def handler(self, name: str) -> Handler | None:
        """Handler registered for a tool name, or None."""
        return self._handlers.get(name)

    # Context Management Tools

    @tool_handler("listing contexts")
    async def list_contexts(self, arguments: dict[str, Any]) -> dict[str, Any]:
        """List contexts with pagination metadata.

        ``hasMore`` is true while ``offset + returned < total_count``.
        """
        request = validate_arguments(ListContextsRequest, arguments)
        page = await self.client.list_contexts(request)
        return {
            "contexts": page.items_json(),
            "pagination": {
                "total": page.total_count,
                "limit": request.limit,
                "offset": request.offset,
                "hasMore": request.offset + len(page.items) < page.total_count,
            },
        }

    @tool_handler("retrieving context")
    async def get_context(self, arguments: dict[str, Any]) -> dict[str, Any]:
        request = validate_arguments(ContextIdRequest, arguments)
        context = await self.client.get_context(request.context_id)
        return context.to_json()

    @tool_handler("creating context")
    async def create_context(self, arguments: dict[str, Any]) -> dict[str, Any]:
        request = validate_arguments(CreateContextRequest, arguments)
        context = await self.client.create_context(request)
        return {"message": "Context created successfully", "context": context}

    @tool_handler("updating context")
    async def update_context(self, arguments: dict[str, Any]) -> dict[str, Any]:
        request = validate_arguments(UpdateContextRequest, arguments)
        context = await self.client.update_context(request.context_id, request)
        return {"message": "Context updated successfully", "context": context}

    @tool_handler("deleting context")
    async def delete_context(self, arguments: dict[str, Any]) -> dict[str, Any]:
        request = validate_arguments(ContextIdRequest, arguments)
        await self.client.delete_context(request.context_id)
        return {
            "message": "Context deleted successfully",
            "context_id": request.context_id,
        }

    # Search and AI Tools

    @tool_handler("searching contexts")
    async def search_contexts(self, arguments: dict[str, Any]) -> dict[str, Any]:
        request = validate_arguments(SearchContextsRequest, arguments)
        page = await self.client.list_contexts(request.to_list_request())
        return {
            "message": "Context search completed",
            "query": request.query,
            "results": page.items_json(),
            "total_found": len(page.items),
            "total_count": page.total_count,
            "hasMore": len(page.items) < page.total_count,
        }

    @tool_handler("consolidating contexts")
    async def consolidate_contexts(self, arguments: dict[str, Any]) -> dict[str, Any]:
        request = validate_arguments(ConsolidateRequest, arguments)
        result = await self.client.consolidate_contexts(request)
        return {
            "message": "Contexts consolidated successfully",
            "consolidation_type": request.consolidation_type,
            "input_contexts": len(request.context_ids),
            "result": result,
        }

    @tool_handler("generating plan")
    async def plan_from_contexts(self, arguments: dict[str, Any]) -> dict[str, Any]:
        request = validate_arguments(PlanRequest, arguments)
        result = await self.client.plan_from_contexts(request)
        return {
            "message": "Plan generated successfully from contexts",
            "analyzed_contexts": len(request.context_ids),
            "result": result,
        }

    # Export and Statistics Tools

    @tool_handler("exporting contexts")
    async def export_contexts(self, arguments: dict[str, Any]) -> dict[str, Any]:
        request = validate_arguments(ExportRequest, arguments)
        result = await self.client.export_contexts(request)
        return {
            "message": "Contexts exported successfully",
            "format": request.format,
            "exported_contexts": len(request.context_ids),
            "include_metadata": request.include_metadata,
            "result": result,
        }

    @tool_handler("generating raw URL")
    async def get_raw_url(self, arguments: dict[str, Any]) -> dict[str, Any]:
        request = validate_arguments(RawUrlRequest, arguments)
        result = await self.client.generate_raw_url(request)
        if not isinstance(result, dict) or "raw_url" not in result:
            raise InvalidResponse(json.dumps(result), reason="No raw_url in response")

        expires_in = result.get("expires_in_seconds")
        expires_at = None
        if isinstance(expires_in, (int, float)) and not isinstance(expires_in, bool):
            expires_at = (
                (self.clock() + timedelta(seconds=expires_in))
                .isoformat(timespec="milliseconds")
                .replace("+00:00", "Z")
            )
        return {
            "message": "Raw URL generated successfully",
            "context_id": request.context_id,
            "raw_url": result["raw_url"],
            "expires_in_seconds": expires_in,
            "expires_at": expires_at,
        }

    @tool_handler("generating statistics")
    async def get_context_stats(self, arguments: dict[str, Any]) -> dict[str, Any]:
        """Aggregate statistics over the most recent contexts.

        ``date_range`` keeps contexts created within the window (contexts with
        no usable creation date only count under ``all``).
        """
        request = validate_arguments(StatsRequest, arguments)
        page = await self.client.list_contexts(
            ListContextsRequest(limit=LOOKUP_WINDOW)
        )

        window = DATE_RANGES[request.date_range]
        contexts = page.items
        if window is not None:
            cutoff = self.clock() - window
            contexts = [
                c
                for c in contexts
                if (created := _parse_date(c.created_date)) and created >= cutoff
            ]

        total_words = sum(c.word_count or 0 for c in contexts)
        return {
            "total_contexts": page.total_count,
            "contexts_analyzed": len(contexts),
            "date_range": request.date_range,
            "group_by": request.group_by,
            "statistics": group_contexts(contexts, request.group_by),
            "total_words": total_words,
            "avg_words_per_context": (
                math.floor(total_words / len(contexts) + 0.5) if contexts else 0
            ),
        }


__all__ = [
    "ConvolutTools",
    "error_result",
    "format_validation_error",
    "group_contexts",
    "text_result",
    "tool_handler",
    "validate_arguments",
]
