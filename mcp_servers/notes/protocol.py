"""Request routing for the notes protocol.

``NotesProtocol`` owns the store and the three invocation components and
answers the six protocol methods. Operation failures travel in-band inside
the result envelope; unknown views and templates, bad envelopes and unknown
methods become JSON-RPC error objects.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import IO, Any

from mcp.types import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
)

from .dispatcher import OperationDispatcher
from .errors import (
    InvalidArgumentsError,
    NotesError,
    UnknownTemplateError,
    UnknownViewError,
)
from .models import OperationResult, TemplateMessage, ViewContents
from .registry import CapabilityRegistry
from .storage import NoteStorage
from .templates import TemplateResolver
from .views import ViewReader

logger = logging.getLogger("notes.protocol")

JSONRPC_VERSION = "2.0"
RESOURCE_NOT_FOUND = -32002


class ProtocolError(Exception):
    """An envelope-level failure carrying a JSON-RPC error code."""

    def __init__(self, code: int, message: str, data: Any = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data

    def to_error(self) -> dict[str, Any]:
        error: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            error["data"] = self.data
        return error


def _require_str(params: dict, key: str) -> str:
    value = params.get(key)
    if not isinstance(value, str):
        raise ProtocolError(INVALID_PARAMS, f"Missing or invalid '{key}' parameter")
    return value


class NotesProtocol:
    """The capability-dispatch engine behind every transport."""

    def __init__(
        self,
        storage: NoteStorage | None = None,
        registry: CapabilityRegistry | None = None,
    ) -> None:
        self.storage = storage if storage is not None else NoteStorage()
        self.registry = registry if registry is not None else CapabilityRegistry()
        self.dispatcher = OperationDispatcher(self.storage, self.registry)
        self.views = ViewReader(self.storage, self.registry)
        self.templates = TemplateResolver(self.storage, self.registry)
        self._methods: dict[str, Callable[[dict], dict]] = {
            "list-operations": self._list_operations,
            "invoke-operation": self._invoke_operation,
            "list-views": self._list_views,
            "read-view": self._read_view,
            "list-templates": self._list_templates,
            "get-template": self._get_template,
        }

    # ------------------------------------------------------------------
    # Typed entry points, shared with the MCP binding
    # ------------------------------------------------------------------

    def invoke_operation(self, name: str, arguments: Any = None) -> OperationResult:
        return self.dispatcher.invoke(name, arguments)

    def read_view(self, uri: str) -> ViewContents:
        """Raises ``ProtocolError`` (-32002) for unknown views."""
        try:
            return self.views.read(uri)
        except UnknownViewError as exc:
            raise ProtocolError(RESOURCE_NOT_FOUND, str(exc), {"uri": uri}) from exc

    def get_template(self, name: str, arguments: Any = None) -> list[TemplateMessage]:
        """Raises ``ProtocolError`` (-32602) for unknown templates or bad arguments."""
        try:
            return self.templates.get(name, arguments)
        except UnknownTemplateError as exc:
            raise ProtocolError(INVALID_PARAMS, str(exc), {"name": name}) from exc
        except InvalidArgumentsError as exc:
            raise ProtocolError(INVALID_PARAMS, str(exc), {"name": name}) from exc

    # ------------------------------------------------------------------
    # Method handlers
    # ------------------------------------------------------------------

    def _list_operations(self, params: dict) -> dict:
        return {
            "operations": [
                op.model_dump(by_alias=True) for op in self.registry.operations
            ]
        }

    def _invoke_operation(self, params: dict) -> dict:
        name = _require_str(params, "name")
        return self.invoke_operation(name, params.get("arguments")).to_wire()

    def _list_views(self, params: dict) -> dict:
        return {"views": [v.model_dump(by_alias=True) for v in self.registry.views]}

    def _read_view(self, params: dict) -> dict:
        contents = self.read_view(_require_str(params, "uri"))
        return {"contents": [contents.model_dump(by_alias=True)]}

    def _list_templates(self, params: dict) -> dict:
        return {
            "templates": [
                t.model_dump(by_alias=True, exclude_none=True)
                for t in self.registry.templates
            ]
        }

    def _get_template(self, params: dict) -> dict:
        name = _require_str(params, "name")
        messages = self.get_template(name, params.get("arguments"))
        return {"messages": [m.model_dump() for m in messages]}

    # ------------------------------------------------------------------
    # Envelope handling
    # ------------------------------------------------------------------

    def handle(self, message: Any) -> dict | None:
        """Answer one decoded request; notifications (no ``id``) get ``None``."""
        if not isinstance(message, dict):
            return _error_response(None, ProtocolError(INVALID_REQUEST, "Invalid request"))

        request_id = message.get("id")
        is_notification = "id" not in message
        try:
            result = self._dispatch(message)
        except ProtocolError as exc:
            logger.info("Request %r failed - %s", message.get("method"), exc.message)
            response = _error_response(request_id, exc)
        except NotesError as exc:
            response = _error_response(request_id, ProtocolError(INVALID_PARAMS, str(exc)))
        except Exception as exc:
            logger.exception("Unexpected error handling %r", message.get("method"))
            response = _error_response(request_id, ProtocolError(INTERNAL_ERROR, str(exc)))
        else:
            response = {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}
        return None if is_notification else response

    def _dispatch(self, message: dict) -> dict:
        method = message.get("method")
        if not isinstance(method, str):
            raise ProtocolError(INVALID_REQUEST, "Invalid request: 'method' must be a string")
        handler = self._methods.get(method)
        if handler is None:
            raise ProtocolError(METHOD_NOT_FOUND, f"Method not found: {method}", {"method": method})
        params = message.get("params")
        if params is None:
            params = {}
        if not isinstance(params, dict):
            raise ProtocolError(INVALID_PARAMS, "'params' must be an object")
        return handler(params)

    def handle_line(self, line: str) -> str | None:
        """Decode one framed line, answer it, and encode the response."""
        try:
            message = json.loads(line)
        except json.JSONDecodeError as exc:
            response = _error_response(None, ProtocolError(PARSE_ERROR, f"Parse error: {exc}"))
        else:
            response = self.handle(message)
        if response is None:
            return None
        return json.dumps(response, ensure_ascii=False)


def _error_response(request_id: Any, exc: ProtocolError) -> dict:
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "error": exc.to_error()}


def serve_lines(protocol: NotesProtocol, instream: IO[str], outstream: IO[str]) -> None:
    """Run the newline-framed transport until ``instream`` is exhausted."""
    for line in instream:
        if not line.strip():
            continue
        response = protocol.handle_line(line)
        if response is not None:
            outstream.write(response + "\n")
            outstream.flush()
