from __future__ import annotations


class FlowsceneError(Exception):
    """Base class for failures that abort a conversion or lint run."""


class InputEmptyError(FlowsceneError):
    def __init__(self, message: str = "Flowchart input is empty.") -> None:
        super().__init__(message)


class NoNodesFoundError(FlowsceneError):
    def __init__(self, message: str = "Could not identify any flowchart nodes.") -> None:
        super().__init__(message)


class MalformedDocumentError(FlowsceneError):
    pass


class MalformedLibraryError(FlowsceneError):
    pass


class ExternalRoutineFailure(FlowsceneError):
    """Raised by external backends; always caught and turned into a fallback."""
