"""Validated request models, one per MCP tool.

Tool arguments arrive as untyped JSON. Each tool builds exactly one of these
models from its arguments; nothing downstream sees the raw dict.
"""

from typing import Annotated, Any, Literal

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    StringConstraints,
    ValidationInfo,
    field_validator,
    model_validator,
)

from convolut_mcp.models.contexts import Category

ContextId = Annotated[
    str, StringConstraints(strict=True, strip_whitespace=True, min_length=1)
]
ConsolidationType = Literal["summarize", "compose"]
ExportFormat = Literal["json", "xml", "txt", "markdown"]
DateRange = Literal["7d", "30d", "90d", "1y", "all"]
GroupBy = Literal["category", "tags", "date", "favorite"]

TITLE_MAX_LENGTH = 200


def _non_empty_text(field_name: str, value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError(f"{field_name} must be a non-empty string")
    return value


def _check_title(value: str) -> str:
    value = _non_empty_text("title", value)
    if len(value) > TITLE_MAX_LENGTH:
        raise ValueError(f"title must be at most {TITLE_MAX_LENGTH} characters")
    return value


class ToolRequest(BaseModel):
    """Base for tool requests."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    def to_payload(self) -> dict[str, Any]:
        """JSON body for the API, without fields that were not given."""
        return self.model_dump(mode="json", exclude_none=True, by_alias=True)


class ContextFileInput(BaseModel):
    """File attachment supplied by the caller."""

    name: StrictStr
    url: StrictStr
    type: StrictStr


class ListContextsRequest(ToolRequest):
    """Arguments for ``list_contexts`` (and the query behind search/get/stats)."""

    limit: StrictInt = Field(20, ge=1, le=100)
    offset: StrictInt = Field(0, ge=0)
    search: StrictStr | None = Field(
        None, validation_alias=AliasChoices("search", "contain")
    )
    category: Category | None = None
    tags: list[StrictStr] | None = None
    from_: StrictStr | None = Field(None, alias="from")
    to: StrictStr | None = None
    is_favorite: StrictBool | None = None

    def to_query(self) -> dict[str, str]:
        """Query-string parameters for ``GET /contexts``."""
        query: dict[str, str] = {}
        for key, value in self.model_dump(exclude_none=True, by_alias=True).items():
            if isinstance(value, bool):
                query[key] = "true" if value else "false"
            elif isinstance(value, list):
                if value:
                    query[key] = ",".join(value)
            else:
                query[key] = str(value)
        return query


class ContextIdRequest(ToolRequest):
    """Arguments for tools addressing a single context."""

    context_id: ContextId


class CreateContextRequest(ToolRequest):
    """Arguments for ``create_context``."""

    title: StrictStr
    content: StrictStr
    tags: list[StrictStr] | None = None
    category: Category = "other"
    is_favorite: StrictBool = False
    files: list[ContextFileInput] | None = None

    @field_validator("category", "is_favorite", mode="before")
    @classmethod
    def null_as_default(cls, v: Any, info: ValidationInfo) -> Any:
        if v is None:
            return cls.model_fields[info.field_name].default
        return v

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return _check_title(v)

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        return _non_empty_text("content", v)


class UpdateContextRequest(ToolRequest):
    """Arguments for ``update_context``; at least one field must change."""

    context_id: ContextId
    title: StrictStr | None = None
    content: StrictStr | None = None
    tags: list[StrictStr] | None = None
    category: Category | None = None
    is_favorite: StrictBool | None = None
    files: list[ContextFileInput] | None = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str | None) -> str | None:
        return None if v is None else _check_title(v)

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str | None) -> str | None:
        return None if v is None else _non_empty_text("content", v)

    @model_validator(mode="after")
    def require_change(self) -> "UpdateContextRequest":
        if not self.to_payload():
            raise ValueError(
                "at least one of title, content, tags, category, "
                "is_favorite or files must be provided"
            )
        return self

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(
            mode="json", exclude_none=True, by_alias=True, exclude={"context_id"}
        )


class SearchContextsRequest(ToolRequest):
    """Arguments for ``search_contexts``."""

    query: StrictStr
    limit: StrictInt = Field(10, ge=1, le=50)
    category: Category | None = None
    tags: list[StrictStr] | None = None

    @field_validator("query")
    @classmethod
    def validate_query(cls, v: str) -> str:
        return _non_empty_text("query", v)

    def to_list_request(self) -> ListContextsRequest:
        return ListContextsRequest(
            search=self.query, limit=self.limit, category=self.category, tags=self.tags
        )


class ConsolidateRequest(ToolRequest):
    """Arguments for ``consolidate_contexts``."""

    context_ids: list[ContextId] = Field(min_length=2, max_length=10)
    consolidation_type: ConsolidationType
    custom_prompt: StrictStr | None = None


class PlanRequest(ToolRequest):
    """Arguments for ``plan_from_contexts``."""

    context_ids: list[ContextId] = Field(min_length=1, max_length=20)
    planning_prompt: StrictStr | None = None


class ExportRequest(ToolRequest):
    """Arguments for ``export_contexts``."""

    context_ids: list[ContextId] = Field(min_length=1, max_length=100)
    format: ExportFormat
    include_metadata: StrictBool = True

    @field_validator("include_metadata", mode="before")
    @classmethod
    def null_as_true(cls, v: Any) -> Any:
        return True if v is None else v


class RawUrlRequest(ContextIdRequest):
    """Arguments for ``get_raw_url``."""


class StatsRequest(ToolRequest):
    """Arguments for ``get_context_stats``."""

    date_range: DateRange = "30d"
    group_by: GroupBy = "category"


__all__ = [
    "ConsolidateRequest",
    "ContextFileInput",
    "ContextIdRequest",
    "CreateContextRequest",
    "DateRange",
    "ExportRequest",
    "GroupBy",
    "ListContextsRequest",
    "PlanRequest",
    "RawUrlRequest",
    "SearchContextsRequest",
    "StatsRequest",
    "TITLE_MAX_LENGTH",
    "ToolRequest",
    "UpdateContextRequest",
]
