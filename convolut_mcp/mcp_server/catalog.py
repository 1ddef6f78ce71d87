"""Static MCP tool catalog."""

import mcp.types as types

from convolut_mcp.models.contexts import CATEGORIES

_CATEGORY = {"type": "string", "enum": list(CATEGORIES)}
_TAGS = {"type": "array", "items": {"type": "string"}}
_CONTEXT_ID = {"type": "string", "format": "uuid"}


def _context_ids(minimum: int, maximum: int, what: str) -> dict:
    return {
        "type": "array",
        "items": _CONTEXT_ID,
        "description": f"Array of context IDs to {what} ({minimum}-{maximum} contexts)",
        "minItems": minimum,
        "maxItems": maximum,
    }


TOOLS: list[types.Tool] = [
    # Context Management Tools
    types.Tool(
        name="list_contexts",
        description="Search and filter contexts with advanced options including keywords, tags, categories, and date ranges",
        inputSchema={
            "type": "object",
            "properties": {
                "limit": {
                    "type": "integer",
                    "description": "Maximum number of contexts to return (1-100)",
                    "minimum": 1,
                    "maximum": 100,
                    "default": 20,
                },
                "offset": {
                    "type": "integer",
                    "description": "Number of contexts to skip for pagination",
                    "minimum": 0,
                    "default": 0,
                },
                "search": {
                    "type": "string",
                    "description": "Keyword to search for in context title and content",
                },
                "category": {**_CATEGORY, "description": "Filter by category"},
                "tags": {**_TAGS, "description": "Filter by tags"},
                "from": {
                    "type": "string",
                    "format": "date-time",
                    "description": "Start date for filtering (ISO datetime)",
                },
                "to": {
                    "type": "string",
                    "format": "date-time",
                    "description": "End date for filtering (ISO datetime)",
                },
                "is_favorite": {
                    "type": "boolean",
                    "description": "Filter by favorite status",
                },
            },
        },
    ),
    types.Tool(
        name="get_context",
        description="Retrieve a specific context by its ID, including full content and metadata",
        inputSchema={
            "type": "object",
            "properties": {
                "context_id": {
                    **_CONTEXT_ID,
                    "description": "The unique identifier of the context to retrieve",
                }
            },
            "required": ["context_id"],
        },
    ),
    types.Tool(
        name="create_context",
        description="Create a new context with title, content, tags, and metadata",
        inputSchema={
            "type": "object",
            "properties": {
                "title": {
                    "type": "string",
                    "description": "The title of the context",
                    "minLength": 1,
                    "maxLength": 200,
                },
                "content": {
                    "type": "string",
                    "description": "The main content of the context",
                    "minLength": 1,
                },
                "tags": {**_TAGS, "description": "Tags to categorize the context"},
                "category": {
                    **_CATEGORY,
                    "description": "Category for the context",
                    "default": "other",
                },
                "is_favorite": {
                    "type": "boolean",
                    "description": "Whether to mark the context as favorite",
                    "default": False,
                },
                "files": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "name": {"type": "string"},
                            "url": {"type": "string", "format": "uri"},
                            "type": {"type": "string"},
                        },
                        "required": ["name", "url", "type"],
                    },
                    "description": "File attachments for the context",
                },
            },
            "required": ["title", "content"],
        },
    ),
    types.Tool(
        name="update_context",
        description="Update an existing context with new title, content, tags, or metadata",
        inputSchema={
            "type": "object",
            "properties": {
                "context_id": {
                    **_CONTEXT_ID,
                    "description": "The unique identifier of the context to update",
                },
                "title": {
                    "type": "string",
                    "description": "New title for the context",
                    "minLength": 1,
                    "maxLength": 200,
                },
                "content": {
                    "type": "string",
                    "description": "New content for the context",
                    "minLength": 1,
                },
                "tags": {**_TAGS, "description": "New tags for the context"},
                "category": {**_CATEGORY, "description": "New category for the context"},
                "is_favorite": {
                    "type": "boolean",
                    "description": "Whether to mark the context as favorite",
                },
            },
            "required": ["context_id"],
        },
    ),
    types.Tool(
        name="delete_context",
        description="Delete a context permanently by its ID",
        inputSchema={
            "type": "object",
            "properties": {
                "context_id": {
                    **_CONTEXT_ID,
                    "description": "The unique identifier of the context to delete",
                }
            },
            "required": ["context_id"],
        },
    ),
    # Search and AI Tools
    types.Tool(
        name="search_contexts",
        description="Perform semantic search across contexts to find relevant information",
        inputSchema={
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "Search query to find semantically similar contexts",
                    "minLength": 1,
                },
                "limit": {
                    "type": "integer",
                    "description": "Maximum number of results to return",
                    "minimum": 1,
                    "maximum": 50,
                    "default": 10,
                },
                "category": {**_CATEGORY, "description": "Filter results by category"},
                "tags": {**_TAGS, "description": "Filter results by tags"},
            },
            "required": ["query"],
        },
    ),
    types.Tool(
        name="consolidate_contexts",
        description="Merge multiple contexts using AI to create a consolidated summary or composition",
        inputSchema={
            "type": "object",
            "properties": {
                "context_ids": _context_ids(2, 10, "consolidate"),
                "consolidation_type": {
                    "type": "string",
                    "enum": ["summarize", "compose"],
                    "description": "Type of consolidation",
                    "default": "summarize",
                },
                "custom_prompt": {
                    "type": "string",
                    "description": "Optional custom prompt to guide the consolidation process",
                },
            },
            "required": ["context_ids", "consolidation_type"],
        },
    ),
    types.Tool(
        name="plan_from_contexts",
        description="Analyze contexts and generate actionable plans using AI",
        inputSchema={
            "type": "object",
            "properties": {
                "context_ids": _context_ids(1, 20, "analyze for planning"),
                "planning_prompt": {
                    "type": "string",
                    "description": "Optional custom prompt to guide the planning process",
                },
            },
            "required": ["context_ids"],
        },
    ),
    # Export and Statistics Tools
    types.Tool(
        name="export_contexts",
        description="Export contexts in various formats (JSON, XML, TXT, Markdown) for integration with other systems",
        inputSchema={
            "type": "object",
            "properties": {
                "context_ids": _context_ids(1, 100, "export"),
                "format": {
                    "type": "string",
                    "enum": ["json", "xml", "txt", "markdown"],
                    "description": "Export format",
                    "default": "json",
                },
                "include_metadata": {
                    "type": "boolean",
                    "description": "Whether to include metadata",
                    "default": True,
                },
            },
            "required": ["context_ids", "format"],
        },
    ),
    types.Tool(
        name="get_raw_url",
        description="Generate a temporary raw URL for a context that can be accessed without authentication (expires in 10 minutes)",
        inputSchema={
            "type": "object",
            "properties": {
                "context_id": {
                    **_CONTEXT_ID,
                    "description": "The unique identifier of the context to generate raw URL for",
                }
            },
            "required": ["context_id"],
        },
    ),
    types.Tool(
        name="get_context_stats",
        description="Get statistical information about contexts including counts, categories, and usage metrics",
        inputSchema={
            "type": "object",
            "properties": {
                "date_range": {
                    "type": "string",
                    "enum": ["7d", "30d", "90d", "1y", "all"],
                    "description": "Time range for statistics, by creation date",
                    "default": "30d",
                },
                "group_by": {
                    "type": "string",
                    "enum": ["category", "tags", "date", "favorite"],
                    "description": "How to group the statistics (date groups by creation day)",
                    "default": "category",
                },
            },
        },
    ),
]

TOOL_NAMES: frozenset[str] = frozenset(tool.name for tool in TOOLS)


def tool_definitions() -> list[dict]:
    """Catalog in wire form for ``tools/list``."""
    return [tool.model_dump(by_alias=True, exclude_none=True) for tool in TOOLS]


__all__ = ["TOOLS", "TOOL_NAMES", "tool_definitions"]
