"""Error taxonomy for the Notes MCP server."""

from enum import Enum


class ErrorKind(str, Enum):
    """Category of a failed request, independent of its message text."""

    UNKNOWN_OPERATION = "UnknownOperation"
    UNKNOWN_VIEW = "UnknownView"
    UNKNOWN_TEMPLATE = "UnknownTemplate"
    INVALID_ARGUMENTS = "InvalidArguments"
    NOT_FOUND = "NotFound"
    INTERNAL = "Internal"


class NotesError(Exception):
    """Base class for every domain failure raised by the notes core."""

    kind: ErrorKind = ErrorKind.INTERNAL


class UnknownOperationError(NotesError):
    kind = ErrorKind.UNKNOWN_OPERATION

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown operation: {name}")
        self.name = name


class UnknownViewError(NotesError):
    kind = ErrorKind.UNKNOWN_VIEW

    def __init__(self, uri: str) -> None:
        super().__init__(f"Unknown view: {uri}")
        self.uri = uri


class UnknownTemplateError(NotesError):
    kind = ErrorKind.UNKNOWN_TEMPLATE

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown template: {name}")
        self.name = name


class InvalidArgumentsError(NotesError):
    """Raised when an argument bag does not satisfy a declared input contract."""

    kind = ErrorKind.INVALID_ARGUMENTS

    def __init__(self, target: str, details: str) -> None:
        super().__init__(f"Invalid arguments for {target}: {details}")
        self.target = target
        self.details = details


class NoteNotFoundError(NotesError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, note_id: str) -> None:
        super().__init__(f"Note with ID {note_id} not found")
        self.note_id = note_id
