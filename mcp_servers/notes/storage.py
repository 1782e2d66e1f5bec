"""In-memory storage layer for the Notes MCP server."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any
from uuid import uuid4

from .errors import NoteNotFoundError
from .metrics import NOTES_STORED
from .models import Note, utcnow

logger = logging.getLogger("notes.storage")

_TICK = timedelta(microseconds=1)


def _distinct(tags: list[str]) -> list[str]:
    # Tags behave as a set; first occurrence keeps its position.
    return list(dict.fromkeys(tags))


def _new_id() -> str:
    return str(uuid4())


class NoteStorage:
    """Owns the process-lifetime collection of notes.

    Notes are kept in insertion order. Every note handed out is a copy, so
    callers cannot change stored state except through the methods below.
    """

    def __init__(
        self,
        clock: Callable[[], datetime] = utcnow,
        id_factory: Callable[[], str] = _new_id,
    ) -> None:
        self._clock = clock
        self._id_factory = id_factory
        self._notes: dict[str, Note] = {}
        self._issued: set[str] = set()

    def _next_id(self) -> str:
        # Ids are never reused, including ids of deleted notes.
        note_id = self._id_factory()
        while note_id in self._issued:
            note_id = self._id_factory()
        self._issued.add(note_id)
        return note_id

    def _require(self, note_id: str) -> Note:
        try:
            return self._notes[note_id]
        except KeyError:
            raise NoteNotFoundError(note_id) from None

    def insert(self, title: str, content: str, tags: list[str] | None = None) -> Note:
        """Create and store a new note."""
        now = self._clock()
        note = Note(
            id=self._next_id(),
            title=title,
            content=content,
            tags=_distinct(tags or []),
            created_at=now,
            updated_at=now,
        )
        self._notes[note.id] = note
        NOTES_STORED.set(len(self._notes))
        logger.info("Stored note %s - '%s'", note.id, note.title)
        return note.model_copy(deep=True)

    def get(self, note_id: str) -> Note:
        """Return the note with exactly this id.

        Raises:
            NoteNotFoundError: if no such note is stored.
        """
        return self._require(note_id).model_copy(deep=True)

    def list(self, tag: str | None = None) -> list[Note]:
        """Return every note, or only those whose tags contain ``tag`` exactly.

        An empty or missing tag means no filter.
        """
        notes = self._notes.values()
        if tag:
            notes = [n for n in notes if tag in n.tags]
        return [n.model_copy(deep=True) for n in notes]

    def update(
        self,
        note_id: str,
        *,
        title: str | None = None,
        content: str | None = None,
        tags: list[str] | None = None,
    ) -> Note:
        """Overwrite the supplied fields and refresh ``updated_at``.

        Fields left as ``None`` keep their current value. Nothing changes if
        the id is unknown.
        """
        current = self._require(note_id)
        changes: dict[str, Any] = {}
        if title is not None:
            changes["title"] = title
        if content is not None:
            changes["content"] = content
        if tags is not None:
            changes["tags"] = _distinct(tags)

        # updated_at must move forward even when the clock has not ticked.
        now = self._clock()
        if now <= current.updated_at:
            now = current.updated_at + _TICK
        changes["updated_at"] = now

        updated = current.model_copy(update=changes, deep=True)
        self._notes[note_id] = updated
        logger.info("Updated note %s - fields=%s", note_id, sorted(changes))
        return updated.model_copy(deep=True)

    def delete(self, note_id: str) -> None:
        """Remove a note permanently."""
        self._require(note_id)
        del self._notes[note_id]
        NOTES_STORED.set(len(self._notes))
        logger.info("Deleted note %s", note_id)

    def search(self, query: str) -> list[Note]:
        """Return notes whose title or content contains the query (case-insensitive).

        An empty query is a substring of everything and matches every note.
        """
        q = query.lower()
        return [
            n.model_copy(deep=True)
            for n in self._notes.values()
            if q in n.title.lower() or q in n.content.lower()
        ]

    def tags(self) -> list[str]:
        """Distinct tags across all notes, in first-seen order."""
        return list(dict.fromkeys(t for n in self._notes.values() for t in n.tags))

    @property
    def count(self) -> int:
        """Number of stored notes."""
        return len(self._notes)
