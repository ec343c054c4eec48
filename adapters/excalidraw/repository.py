from __future__ import annotations

from pathlib import Path
from typing import Any

from filelock import FileLock

from adapters.filesystem.json_utils import load_json, write_json_atomic
from domain.models import ExcalidrawDocument, ExcalidrawLibrary
from domain.ports.repositories import ExcalidrawRepository, LibraryRepository


class FileSystemExcalidrawRepository(ExcalidrawRepository):
    def load_raw(self, path: Path) -> Any:
        return load_json(path)

    def save(self, document: ExcalidrawDocument, path: Path, pretty: bool = True) -> None:
        _locked_write(path, document.to_dict(), pretty)


class FileSystemLibraryRepository(LibraryRepository):
    def load_raw(self, path: Path) -> Any:
        return load_json(path)

    def save(self, library: ExcalidrawLibrary, path: Path) -> None:
        _locked_write(path, library.to_dict(), pretty=True)


def _locked_write(path: Path, payload: dict, pretty: bool) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    lock_path = path.with_suffix(f"{path.suffix}.lock")
    with FileLock(str(lock_path)):
        write_json_atomic(path, payload, pretty=pretty)
