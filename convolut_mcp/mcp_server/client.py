"""HTTP client for Convolut API communication."""

import logging
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from convolut_mcp.mcp_server.config import Config
from convolut_mcp.mcp_server.errors import ContextNotFound, InvalidResponse
from convolut_mcp.mcp_server.transport import HttpTransport
from convolut_mcp.models.contexts import (
    Context,
    ContextListEnvelope,
    ContextPage,
)
from convolut_mcp.models.requests import (
    ConsolidateRequest,
    CreateContextRequest,
    ExportRequest,
    ListContextsRequest,
    PlanRequest,
    RawUrlRequest,
    UpdateContextRequest,
)

logger = logging.getLogger(__name__)

# The API has no GET /contexts/{id}; lookups scan this many recent contexts.
LOOKUP_WINDOW = 100

_context_list = TypeAdapter(list[Context])


def normalize_list_response(raw: Any) -> ContextPage:
    """Resolve a list response into a ContextPage.

    ``GET /contexts`` answers either with a bare array of contexts or with an
    envelope ``{items, total_count, limit, offset, ...}``. An envelope without
    ``items`` is an empty page.

    Raises:
        InvalidResponse: If the response is neither shape
    """
    try:
        if isinstance(raw, list):
            items = _context_list.validate_python(raw)
            return ContextPage(items=items, total_count=len(items))

        if isinstance(raw, dict):
            envelope = ContextListEnvelope.model_validate(raw)
            items = envelope.items or []
            total = envelope.total_count
            return ContextPage(
                items=items, total_count=total if total is not None else len(items)
            )
    except ValidationError as e:
        raise InvalidResponse(
            str(raw), reason=f"Malformed context list ({e.error_count()} errors)"
        )

    raise InvalidResponse(str(raw), reason="Unexpected context list")


class ConvolutClient:
    """Typed operations against the Convolut API."""

    def __init__(
        self,
        config: Config,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the client with configuration."""
        self.config = config
        self.http = HttpTransport(config, transport=transport)

    # Context operations

    async def list_contexts(
        self, params: ListContextsRequest | None = None
    ) -> ContextPage:
        """List contexts matching the given filters."""
        params = params or ListContextsRequest()
        endpoint = "/contexts"
        query = params.to_query()
        if query:
            endpoint = f"{endpoint}?{httpx.QueryParams(query)}"

        raw = await self.http.request("GET", endpoint)
        page = normalize_list_response(raw)
        logger.info(f"Listed {len(page.items)} of {page.total_count} contexts")
        return page

    async def get_context(self, context_id: str) -> Context:
        """Find a context by id among the most recent LOOKUP_WINDOW contexts.

        Raises:
            ContextNotFound: If no listed context has this id
        """
        page = await self.list_contexts(ListContextsRequest(limit=LOOKUP_WINDOW))
        for context in page.items:
            if context.id == context_id:
                return context
        raise ContextNotFound(context_id)

    async def create_context(self, request: CreateContextRequest) -> Any:
        result = await self.http.request("POST", "/contexts", body=request.to_payload())
        logger.info(f"Created context: {request.title}")
        return result

    async def update_context(
        self, context_id: str, request: UpdateContextRequest
    ) -> Any:
        result = await self.http.request(
            "PUT", f"/contexts/{context_id}", body=request.to_payload()
        )
        logger.info(f"Updated context: {context_id}")
        return result

    async def delete_context(self, context_id: str) -> Any:
        result = await self.http.request("DELETE", f"/contexts/{context_id}")
        logger.info(f"Deleted context: {context_id}")
        return result

    # AI-powered operations

    async def consolidate_contexts(self, request: ConsolidateRequest) -> Any:
        return await self.http.request(
            "POST", "/contexts/consolidate", body=request.to_payload()
        )

    async def plan_from_contexts(self, request: PlanRequest) -> Any:
        return await self.http.request(
            "POST", "/contexts/plan", body=request.to_payload()
        )

    # Export and sharing

    async def export_contexts(self, request: ExportRequest) -> Any:
        return await self.http.request(
            "POST", "/contexts/export", body=request.to_payload()
        )

    async def generate_raw_url(self, request: RawUrlRequest) -> Any:
        return await self.http.request(
            "POST", "/contexts/raw-url", body=request.to_payload()
        )

    async def health_check(self) -> Any:
        """Probe the unauthenticated health endpoint.

        Raises:
            TransportError: If the API is unreachable or unhealthy
        """
        return await self.http.request(
            "GET",
            self.config.health_url,
            timeout=self.config.health_timeout,
            authenticated=False,
        )


__all__ = ["ConvolutClient", "LOOKUP_WINDOW", "normalize_list_response"]
