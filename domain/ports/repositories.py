from __future__ import annotations

from pathlib import Path
from typing import Any, Protocol

from domain.models import ExcalidrawDocument, ExcalidrawLibrary


class NotationRepository(Protocol):
    def load(self, source: str) -> str: ...


class ExcalidrawRepository(Protocol):
    def load_raw(self, path: Path) -> Any: ...

    def save(self, document: ExcalidrawDocument, path: Path, pretty: bool = True) -> None: ...


class LibraryRepository(Protocol):
    def load_raw(self, path: Path) -> Any: ...

    def save(self, library: ExcalidrawLibrary, path: Path) -> None: ...
