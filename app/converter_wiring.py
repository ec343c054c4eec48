from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from adapters.external.loader import load_external_object
from adapters.layout.layered import LayeredLayoutEngine, LayoutConfig
from app.config import ConverterSettings
from domain.errors import ExternalRoutineFailure
from domain.models import ConversionOptions
from domain.ports.conversion import ConversionProvider
from domain.services.conversion_provider import (
    ConvertFlowchartToScene,
    ExternalConversionProvider,
    LocalConversionProvider,
)
from domain.services.normalize_scene import SceneNormalizer

logger = logging.getLogger(__name__)


class FunctionSceneBackend:
    """Exposes a plain ``convert(notation, options)`` function as a backend."""

    def __init__(self, func: Callable[[str, ConversionOptions], Mapping[str, Any]]) -> None:
        self.func = func

    def convert(self, notation: str, options: ConversionOptions) -> Mapping[str, Any]:
        return self.func(notation, options)


class FunctionSceneRestorer:
    def __init__(self, func: Callable[[Mapping[str, Any]], Mapping[str, Any]]) -> None:
        self.func = func

    def restore(self, scene: Mapping[str, Any]) -> Mapping[str, Any]:
        return self.func(scene)


def _load_optional(
    spec: str | None, role: str, method: str, adapter: Callable[[Any], Any]
) -> Any | None:
    if not spec:
        return None
    try:
        target = load_external_object(spec)
    except ExternalRoutineFailure as exc:
        logger.warning("External %s unavailable, using local implementation: %s", role, exc)
        return None
    if callable(getattr(target, method, None)):
        return target
    if callable(target):
        return adapter(target)
    logger.warning(
        "External %s %s has no %s() and is not callable, using local implementation",
        role,
        spec,
        method,
    )
    return None


def build_external_provider(settings: ConverterSettings) -> ConversionProvider | None:
    backend = _load_optional(
        settings.external_backend, "conversion backend", "convert", FunctionSceneBackend
    )
    if backend is None:
        return None
    return ExternalConversionProvider(backend, source=settings.source)


def build_normalizer(settings: ConverterSettings) -> SceneNormalizer:
    restorer = _load_optional(
        settings.external_restore, "restore routine", "restore", FunctionSceneRestorer
    )
    return SceneNormalizer(restorer=restorer)


def build_converter(settings: ConverterSettings) -> ConvertFlowchartToScene:
    layout = LayeredLayoutEngine(LayoutConfig(font_size=settings.font_size))
    return ConvertFlowchartToScene(
        local=LocalConversionProvider(layout, source=settings.source),
        external=build_external_provider(settings),
        normalizer=build_normalizer(settings),
    )
