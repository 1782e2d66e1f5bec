"""Operation dispatch: validate, execute against the store, wrap the result."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

from .errors import ErrorKind, NotesError
from .metrics import OPERATION_DURATION, OPERATION_INVOCATIONS
from .models import (
    CreateNoteArgs,
    DeleteNoteArgs,
    GetNoteArgs,
    ListNotesArgs,
    OperationResult,
    SearchNotesArgs,
    UpdateNoteArgs,
    dump_note,
    dump_notes,
    parse_arguments,
)
from .registry import CapabilityRegistry, ensure_covers
from .storage import NoteStorage

logger = logging.getLogger("notes.dispatcher")

Handler = Callable[[Any], str]


class OperationDispatcher:
    """Routes named operations to their implementations.

    ``invoke`` never raises: every outcome, including unknown names, bad
    arguments and unexpected bugs, comes back as an ``OperationResult``.
    """

    def __init__(self, storage: NoteStorage, registry: CapabilityRegistry) -> None:
        self._storage = storage
        self._registry = registry
        self._handlers: dict[str, Handler] = {
            "create_note": self._create_note,
            "list_notes": self._list_notes,
            "get_note": self._get_note,
            "update_note": self._update_note,
            "delete_note": self._delete_note,
            "search_notes": self._search_notes,
        }
        ensure_covers(
            "Operation", self._handlers, (op.name for op in registry.operations)
        )

    def invoke(self, name: str, arguments: Any = None) -> OperationResult:
        start = time.perf_counter()
        try:
            descriptor = self._registry.operation(name)
            args = parse_arguments(descriptor.arguments_model, name, arguments)
            result = OperationResult.success(self._handlers[name](args))
        except NotesError as exc:
            logger.info("Operation %s failed - %s: %s", name, exc.kind.value, exc)
            result = OperationResult.from_error(exc)
        except Exception as exc:
            logger.exception("Unexpected error in operation %s", name)
            result = OperationResult.failure(ErrorKind.INTERNAL, str(exc))
        else:
            logger.info("Operation %s invoked", name)

        self._record(name, result, time.perf_counter() - start)
        return result

    def _record(self, name: str, result: OperationResult, elapsed: float) -> None:
        if result.error_kind is ErrorKind.UNKNOWN_OPERATION:
            # Keep label cardinality bounded to registered names.
            name = "unknown"
        status = "error" if result.is_error else "success"
        OPERATION_INVOCATIONS.labels(operation=name, status=status).inc()
        OPERATION_DURATION.labels(operation=name).observe(elapsed)

    # ------------------------------------------------------------------
    # Operation implementations
    # ------------------------------------------------------------------

    def _create_note(self, args: CreateNoteArgs) -> str:
        note = self._storage.insert(args.title, args.content, args.tags)
        return f"Note created successfully with ID: {note.id}"

    def _list_notes(self, args: ListNotesArgs) -> str:
        return dump_notes(self._storage.list(args.tag))

    def _get_note(self, args: GetNoteArgs) -> str:
        return dump_note(self._storage.get(args.id))

    def _update_note(self, args: UpdateNoteArgs) -> str:
        self._storage.update(
            args.id, title=args.title, content=args.content, tags=args.tags
        )
        return f"Note {args.id} updated successfully"

    def _delete_note(self, args: DeleteNoteArgs) -> str:
        self._storage.delete(args.id)
        return f"Note {args.id} deleted successfully"

    def _search_notes(self, args: SearchNotesArgs) -> str:
        return dump_notes(self._storage.search(args.query))
