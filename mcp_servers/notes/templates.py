"""Templates that turn the current notes into prompt messages."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from .errors import ErrorKind, NotesError
from .metrics import TEMPLATE_RENDERS
from .models import (
    OrganizeNotesArgs,
    SummarizeNotesArgs,
    TemplateMessage,
    TextContent,
    parse_arguments,
)
from .registry import CapabilityRegistry, ensure_covers
from .storage import NoteStorage

logger = logging.getLogger("notes.templates")

ORGANIZE_INSTRUCTIONS = (
    "Please suggest:\n"
    "1. Better tags for organization\n"
    "2. Notes that could be merged\n"
    "3. Missing categories or topics"
)


class TemplateResolver:
    """Renders named templates against the store's current contents."""

    def __init__(self, storage: NoteStorage, registry: CapabilityRegistry) -> None:
        self._storage = storage
        self._registry = registry
        self._renderers: dict[str, Callable[[Any], str]] = {
            "summarize_notes": self._summarize_notes,
            "organize_notes": self._organize_notes,
        }
        ensure_covers("Template", self._renderers, (t.name for t in registry.templates))

    def get(self, name: str, arguments: Any = None) -> list[TemplateMessage]:
        """Render template ``name`` into user messages.

        Raises:
            UnknownTemplateError: if ``name`` is not registered.
            InvalidArgumentsError: if ``arguments`` break the template's contract.
        """
        try:
            descriptor = self._registry.template(name)
            args = parse_arguments(descriptor.arguments_model, name, arguments)
        except NotesError as exc:
            label = "unknown" if exc.kind is ErrorKind.UNKNOWN_TEMPLATE else name
            TEMPLATE_RENDERS.labels(name=label, status="error").inc()
            raise
        text = self._renderers[name](args)
        TEMPLATE_RENDERS.labels(name=name, status="success").inc()
        logger.info("Template %s rendered", name)
        return [TemplateMessage(role="user", content=TextContent(text=text))]

    def _summarize_notes(self, args: SummarizeNotesArgs) -> str:
        notes = self._storage.list(args.tag)
        notes_text = "\n".join(f"- {n.title}: {n.content}" for n in notes)
        scope = f' tagged with "{args.tag}"' if args.tag else ""
        return f"Please summarize the following notes{scope}:\n\n{notes_text}"

    def _organize_notes(self, args: OrganizeNotesArgs) -> str:
        blocks = "\n---\n".join(
            f"ID: {n.id}\nTitle: {n.title}\nContent: {n.content}\n"
            f"Tags: {', '.join(n.tags)}\n"
            for n in self._storage.list()
        )
        return f"Here are all my notes:\n\n{blocks}\n\n{ORGANIZE_INSTRUCTIONS}"
