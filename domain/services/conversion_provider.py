from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from domain.errors import InputEmptyError
from domain.models import (
    DEFAULT_SOURCE,
    ConversionFallback,
    ConversionOptions,
    ConversionResult,
    ConversionSucceeded,
    ExcalidrawDocument,
)
from domain.ports.conversion import ConversionProvider, SceneConversionBackend
from domain.ports.layout import LayoutEngine
from domain.services.build_flow_graph import build_flow_graph
from domain.services.convert_flowchart_to_excalidraw import FlowchartToExcalidrawConverter
from domain.services.normalize_scene import (
    DEFAULT_APP_STATE,
    MODE_EXTERNAL,
    MODE_LOCAL,
    SceneNormalizer,
)
from domain.services.parse_flowchart import parse_flowchart

logger = logging.getLogger(__name__)


class LocalConversionProvider:
    name = MODE_LOCAL

    def __init__(self, layout_engine: LayoutEngine, source: str = DEFAULT_SOURCE) -> None:
        self.converter = FlowchartToExcalidrawConverter(layout_engine, source=source)

    def convert(self, notation: str, options: ConversionOptions) -> ConversionSucceeded:
        graph = build_flow_graph(parse_flowchart(notation))
        return ConversionSucceeded(document=self.converter.convert(graph, options), mode=self.name)


class ExternalConversionProvider:
    name = MODE_EXTERNAL

    def __init__(self, backend: SceneConversionBackend, source: str = DEFAULT_SOURCE) -> None:
        self.backend = backend
        self.source = source

    def convert(self, notation: str, options: ConversionOptions) -> ConversionResult:
        try:
            scene = self.backend.convert(notation, options)
        except Exception as exc:  # noqa: BLE001
            logger.warning("External conversion failed: %s", exc)
            return ConversionFallback(reason=str(exc) or type(exc).__name__)

        elements = scene.get("elements") if isinstance(scene, Mapping) else None
        if not isinstance(elements, list):
            logger.warning("External conversion returned no elements list")
            return ConversionFallback(reason="external conversion returned no elements list")
        files = scene.get("files")
        return ConversionSucceeded(
            document=ExcalidrawDocument(
                elements=list(elements),
                app_state=dict(DEFAULT_APP_STATE),
                files=dict(files) if isinstance(files, Mapping) else {},
                source=self.source,
            ),
            mode=self.name,
        )


@dataclass(frozen=True)
class ConversionReport:
    document: ExcalidrawDocument
    conversion_mode: str
    normalization_mode: str
    fallback_reason: str | None = None


class ConvertFlowchartToScene:
    """Runs one external attempt per stage and falls back to the local engine."""

    def __init__(
        self,
        local: LocalConversionProvider,
        external: ConversionProvider | None = None,
        normalizer: SceneNormalizer | None = None,
    ) -> None:
        self.local = local
        self.external = external
        self.normalizer = normalizer or SceneNormalizer()

    def run(self, notation: str, options: ConversionOptions | None = None) -> ConversionReport:
        options = options or ConversionOptions()
        if not notation.strip():
            raise InputEmptyError()

        fallback_reason: str | None = None
        result: ConversionResult | None = None
        if self.external is not None:
            result = self.external.convert(notation, options)
            if isinstance(result, ConversionFallback):
                fallback_reason = result.reason
                logger.info("Using local conversion: %s", fallback_reason)
        if not isinstance(result, ConversionSucceeded):
            result = self.local.convert(notation, options)

        normalized = self.normalizer.finalize(result.document)
        return ConversionReport(
            document=normalized.document,
            conversion_mode=result.mode,
            normalization_mode=normalized.mode,
            fallback_reason=fallback_reason,
        )
