"""Context-related API models."""

from typing import Any, Literal, get_args

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

Category = Literal["personal", "work", "research", "templates", "prompts", "other"]
CATEGORIES: tuple[str, ...] = get_args(Category)


class ContextFile(BaseModel):
    """File attachment on a context."""

    model_config = ConfigDict(extra="allow")

    name: str | None = None
    url: str | None = None
    type: str | None = None


class Context(BaseModel):
    """A context as returned by the Convolut API.

    The API owns this data, so parsing is lenient: nulls fall back to the
    field default and fields the API adds beyond these are kept.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    title: str = ""
    content: str = ""
    tags: list[str] = Field(default_factory=list)
    category: str | None = None
    is_favorite: bool = False
    word_count: int | float | None = None
    created_date: str | None = None
    updated_date: str | None = None
    created_by: str | None = None
    files: list[ContextFile] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def numeric_id_as_str(cls, v: Any) -> Any:
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("title", "content", "is_favorite", mode="before")
    @classmethod
    def null_as_default(cls, v: Any, info: ValidationInfo) -> Any:
        if v is None:
            return cls.model_fields[info.field_name].default
        return v

    @field_validator("tags", mode="before")
    @classmethod
    def normalize_tags(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, list):
            return [str(tag) for tag in v if tag is not None]
        return v

    @field_validator("files", mode="before")
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    def to_json(self) -> dict[str, Any]:
        """Serialize back to the API's JSON shape."""
        return self.model_dump(mode="json", exclude_unset=True)


class ContextListEnvelope(BaseModel):
    """Paginated list response: ``{items, total_count, limit, offset, ...}``."""

    model_config = ConfigDict(extra="allow")

    items: list[Context] | None = None
    total_count: int | None = None
    limit: int | None = None
    offset: int | None = None


class ContextPage(BaseModel):
    """A list response normalized from either the bare-array or envelope shape."""

    items: list[Context] = Field(default_factory=list)
    total_count: int = 0

    def items_json(self) -> list[dict[str, Any]]:
        return [item.to_json() for item in self.items]


__all__ = [
    "CATEGORIES",
    "Category",
    "Context",
    "ContextFile",
    "ContextListEnvelope",
    "ContextPage",
]
