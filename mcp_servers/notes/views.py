"""Read-only views over the note collection."""

from __future__ import annotations

import logging
from collections.abc import Callable

from .errors import NotesError
from .metrics import VIEW_READS
from .models import ViewContents, dump_notes
from .registry import ALL_NOTES_URI, SUMMARY_URI, CapabilityRegistry, ensure_covers
from .storage import NoteStorage

logger = logging.getLogger("notes.views")


class ViewReader:
    """Materializes a view address into a fresh snapshot of the store."""

    def __init__(self, storage: NoteStorage, registry: CapabilityRegistry) -> None:
        self._storage = storage
        self._registry = registry
        self._renderers: dict[str, Callable[[], str]] = {
            ALL_NOTES_URI: self._render_all,
            SUMMARY_URI: self._render_summary,
        }
        ensure_covers("View", self._renderers, (v.uri for v in registry.views))

    def read(self, uri: str) -> ViewContents:
        """Render the view at ``uri``.

        Raises:
            UnknownViewError: if ``uri`` is not a registered view.
        """
        try:
            descriptor = self._registry.view(uri)
        except NotesError:
            VIEW_READS.labels(uri="unknown", status="error").inc()
            raise
        text = self._renderers[uri]()
        VIEW_READS.labels(uri=uri, status="success").inc()
        logger.info("View %s read", uri)
        return ViewContents(uri=uri, mime_type=descriptor.mime_type, text=text)

    def _render_all(self) -> str:
        return dump_notes(self._storage.list())

    def _render_summary(self) -> str:
        tags = self._storage.tags()
        return "\n".join(
            [
                "Notes Summary",
                "=============",
                f"Total notes: {self._storage.count}",
                f"Unique tags: {len(tags)}",
                f"Tags: {', '.join(tags) or 'none'}",
            ]
        )
