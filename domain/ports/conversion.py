from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol

from domain.models import ConversionOptions, ConversionResult


class SceneConversionBackend(Protocol):
    """External notation converter returning a scene mapping with ``elements`` and ``files``."""

    def convert(self, notation: str, options: ConversionOptions) -> Mapping[str, Any]: ...


class SceneRestorer(Protocol):
    def restore(self, scene: Mapping[str, Any]) -> Mapping[str, Any]: ...


class ConversionProvider(Protocol):
    name: str

    def convert(self, notation: str, options: ConversionOptions) -> ConversionResult: ...
