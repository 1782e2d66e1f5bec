"""Pydantic models for the Notes MCP server."""

from datetime import UTC, datetime
from typing import Annotated, Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    TypeAdapter,
    ValidationError,
)

from .errors import ErrorKind, InvalidArgumentsError, NotesError

NonEmptyStr = Annotated[str, StringConstraints(min_length=1)]


def utcnow() -> datetime:
    return datetime.now(UTC)


# ---------------------------------------------------------------------------
# Entity
# ---------------------------------------------------------------------------


class Note(BaseModel):
    """A single note with metadata."""

    id: str
    title: NonEmptyStr = Field(..., description="Note title")
    content: str = Field(..., description="Note content")
    tags: list[str] = Field(default_factory=list, description="List of tags")
    created_at: datetime = Field(
        default_factory=utcnow,
        serialization_alias="createdAt",
        description="Creation timestamp (UTC)",
    )
    updated_at: datetime = Field(
        default_factory=utcnow,
        serialization_alias="updatedAt",
        description="Last update timestamp (UTC)",
    )


_NOTES_ADAPTER = TypeAdapter(list[Note])


def dump_note(note: Note) -> str:
    """Pretty-print one note as JSON using its wire field names."""
    return note.model_dump_json(indent=2, by_alias=True)


def dump_notes(notes: list[Note]) -> str:
    """Pretty-print a list of notes as a JSON array."""
    return _NOTES_ADAPTER.dump_json(notes, indent=2, by_alias=True).decode("utf-8")


# ---------------------------------------------------------------------------
# Argument contracts
# ---------------------------------------------------------------------------


class Arguments(BaseModel):
    """Base for argument bags: strict types, unknown keys ignored."""

    model_config = ConfigDict(strict=True, extra="ignore", frozen=True)


class CreateNoteArgs(Arguments):
    title: NonEmptyStr
    content: str
    tags: list[str] | None = None


class ListNotesArgs(Arguments):
    tag: str | None = None


class GetNoteArgs(Arguments):
    id: str


class UpdateNoteArgs(Arguments):
    id: str
    title: NonEmptyStr | None = None
    content: str | None = None
    tags: list[str] | None = None


class DeleteNoteArgs(Arguments):
    id: str


class SearchNotesArgs(Arguments):
    query: str


class SummarizeNotesArgs(Arguments):
    tag: str | None = None


class OrganizeNotesArgs(Arguments):
    pass


def parse_arguments(model: type[Arguments], target: str, arguments: Any) -> Arguments:
    """Validate an argument bag against ``model``.

    Raises:
        InvalidArgumentsError: naming every offending field.
    """
    try:
        return model.model_validate({} if arguments is None else arguments)
    except ValidationError as exc:
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'arguments'}: {err['msg']}"
            for err in exc.errors()
        )
        raise InvalidArgumentsError(target, details) from None


# ---------------------------------------------------------------------------
# Response envelopes
# ---------------------------------------------------------------------------


class TextContent(BaseModel):
    type: Literal["text"] = "text"
    text: str


class OperationResult(BaseModel):
    """Uniform envelope for operation invocations, successful or not."""

    content: list[TextContent]
    is_error: bool = False
    error_kind: ErrorKind | None = None

    @classmethod
    def success(cls, text: str) -> "OperationResult":
        return cls(content=[TextContent(text=text)])

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "OperationResult":
        return cls(
            content=[TextContent(text=f"Error: {message}")],
            is_error=True,
            error_kind=kind,
        )

    @classmethod
    def from_error(cls, exc: NotesError) -> "OperationResult":
        return cls.failure(exc.kind, str(exc))

    @property
    def text(self) -> str:
        return "\n".join(c.text for c in self.content)

    def to_wire(self) -> dict[str, Any]:
        """Serialize the envelope; ``isError`` appears only when set."""
        payload: dict[str, Any] = {"content": [c.model_dump() for c in self.content]}
        if self.is_error:
            payload["isError"] = True
        return payload


class ViewContents(BaseModel):
    uri: str
    mime_type: str = Field(serialization_alias="mimeType")
    text: str


class TemplateMessage(BaseModel):
    role: Literal["user", "assistant"] = "user"
    content: TextContent


# ---------------------------------------------------------------------------
# Capability descriptors
# ---------------------------------------------------------------------------


class OperationDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    input_schema: dict[str, Any] = Field(serialization_alias="inputSchema")
    arguments_model: type[Arguments] = Field(exclude=True)


class ViewDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    uri: str
    mime_type: str = Field(serialization_alias="mimeType")
    name: str
    description: str


class TemplateArgument(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    required: bool = False


class TemplateDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    arguments: list[TemplateArgument] | None = None
    arguments_model: type[Arguments] = Field(exclude=True)
