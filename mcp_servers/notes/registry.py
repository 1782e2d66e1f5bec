"""Static catalog of the operations, views and templates the server offers.

The catalog is built once at import time and never changes. Discovery
requests are answered from here alone; the dispatcher, view reader and
template resolver check their handler tables against it on construction.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from .errors import UnknownOperationError, UnknownTemplateError, UnknownViewError
from .models import (
    CreateNoteArgs,
    DeleteNoteArgs,
    GetNoteArgs,
    ListNotesArgs,
    OperationDescriptor,
    OrganizeNotesArgs,
    SearchNotesArgs,
    SummarizeNotesArgs,
    TemplateArgument,
    TemplateDescriptor,
    UpdateNoteArgs,
    ViewDescriptor,
)

ALL_NOTES_URI = "notes://all"
SUMMARY_URI = "notes://summary"


def _object_schema(properties: dict[str, Any], required: list[str] | None = None) -> dict:
    schema: dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        schema["required"] = required
    return schema


def _string(description: str) -> dict:
    return {"type": "string", "description": description}


def _string_array(description: str) -> dict:
    return {"type": "array", "items": {"type": "string"}, "description": description}


OPERATIONS: tuple[OperationDescriptor, ...] = (
    OperationDescriptor(
        name="create_note",
        description="Create a new note with a title, content, and optional tags",
        input_schema=_object_schema(
            {
                "title": _string("The title of the note"),
                "content": _string("The content/body of the note"),
                "tags": _string_array("Optional tags to categorize the note"),
            },
            required=["title", "content"],
        ),
        arguments_model=CreateNoteArgs,
    ),
    OperationDescriptor(
        name="list_notes",
        description="List all notes, optionally filtered by tag",
        input_schema=_object_schema({"tag": _string("Optional tag to filter notes by")}),
        arguments_model=ListNotesArgs,
    ),
    OperationDescriptor(
        name="get_note",
        description="Get a specific note by its ID",
        input_schema=_object_schema(
            {"id": _string("The ID of the note to retrieve")}, required=["id"]
        ),
        arguments_model=GetNoteArgs,
    ),
    OperationDescriptor(
        name="update_note",
        description="Update an existing note",
        input_schema=_object_schema(
            {
                "id": _string("The ID of the note to update"),
                "title": _string("New title (optional)"),
                "content": _string("New content (optional)"),
                "tags": _string_array("New tags (optional)"),
            },
            required=["id"],
        ),
        arguments_model=UpdateNoteArgs,
    ),
    OperationDescriptor(
        name="delete_note",
        description="Delete a note by its ID",
        input_schema=_object_schema(
            {"id": _string("The ID of the note to delete")}, required=["id"]
        ),
        arguments_model=DeleteNoteArgs,
    ),
    OperationDescriptor(
        name="search_notes",
        description="Search notes by keyword in title or content",
        input_schema=_object_schema(
            {
                "query": _string(
                    "Search query to match against note titles and content"
                )
            },
            required=["query"],
        ),
        arguments_model=SearchNotesArgs,
    ),
)

VIEWS: tuple[ViewDescriptor, ...] = (
    ViewDescriptor(
        uri=ALL_NOTES_URI,
        mime_type="application/json",
        name="All Notes",
        description="Complete list of all notes in the system",
    ),
    ViewDescriptor(
        uri=SUMMARY_URI,
        mime_type="text/plain",
        name="Notes Summary",
        description="A summary of notes with statistics",
    ),
)

TEMPLATES: tuple[TemplateDescriptor, ...] = (
    TemplateDescriptor(
        name="summarize_notes",
        description="Create a summary of notes, optionally filtered by tag",
        arguments=[
            TemplateArgument(
                name="tag", description="Optional tag to filter notes", required=False
            )
        ],
        arguments_model=SummarizeNotesArgs,
    ),
    TemplateDescriptor(
        name="organize_notes",
        description="Get suggestions for organizing and categorizing notes",
        arguments_model=OrganizeNotesArgs,
    ),
)


def _index(items: Iterable, key: str) -> dict:
    table: dict = {}
    for item in items:
        name = getattr(item, key)
        if name in table:
            raise ValueError(f"Duplicate capability name: {name}")
        table[name] = item
    return table


class CapabilityRegistry:
    """Read-only lookup over the operation, view and template catalogs."""

    def __init__(
        self,
        operations: Iterable[OperationDescriptor] = OPERATIONS,
        views: Iterable[ViewDescriptor] = VIEWS,
        templates: Iterable[TemplateDescriptor] = TEMPLATES,
    ) -> None:
        self._operations = _index(operations, "name")
        self._views = _index(views, "uri")
        self._templates = _index(templates, "name")

    @property
    def operations(self) -> list[OperationDescriptor]:
        return list(self._operations.values())

    @property
    def views(self) -> list[ViewDescriptor]:
        return list(self._views.values())

    @property
    def templates(self) -> list[TemplateDescriptor]:
        return list(self._templates.values())

    def operation(self, name: str) -> OperationDescriptor:
        try:
            return self._operations[name]
        except KeyError:
            raise UnknownOperationError(name) from None

    def view(self, uri: str) -> ViewDescriptor:
        try:
            return self._views[uri]
        except KeyError:
            raise UnknownViewError(uri) from None

    def template(self, name: str) -> TemplateDescriptor:
        try:
            return self._templates[name]
        except KeyError:
            raise UnknownTemplateError(name) from None


def ensure_covers(category: str, handlers: Iterable[str], declared: Iterable[str]) -> None:
    """Fail fast when a handler table and the catalog disagree on names."""
    handled, expected = set(handlers), set(declared)
    if handled != expected:
        missing = sorted(expected - handled)
        extra = sorted(handled - expected)
        raise RuntimeError(
            f"{category} handlers out of sync with registry: "
            f"missing={missing} unregistered={extra}"
        )
