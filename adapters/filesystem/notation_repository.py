from __future__ import annotations

import sys
from pathlib import Path
from typing import TextIO

from domain.ports.repositories import NotationRepository

STDIN_MARKER = "-"


class FileSystemNotationRepository(NotationRepository):
    def __init__(self, stdin: TextIO | None = None) -> None:
        self._stdin = stdin

    def load(self, source: str) -> str:
        if source == STDIN_MARKER:
            return (self._stdin or sys.stdin).read()
        return Path(source).read_text(encoding="utf-8")
