from __future__ import annotations

import os
from collections.abc import Callable, Generator

import pytest

from adapters.layout.layered import LayeredLayoutEngine, LayoutConfig
from domain.models import ConversionOptions
from domain.services.conversion_provider import ConvertFlowchartToScene, LocalConversionProvider


def _clear_flowscene_env() -> None:
    for key in list(os.environ):
        if key.startswith("FLOWSCENE_"):
            os.environ.pop(key, None)


_clear_flowscene_env()


@pytest.fixture(autouse=True)
def clear_flowscene_env() -> Generator[None, None, None]:
    _clear_flowscene_env()
    yield
    _clear_flowscene_env()


@pytest.fixture
def layout_engine() -> LayeredLayoutEngine:
    return LayeredLayoutEngine(LayoutConfig())


@pytest.fixture
def local_pipeline(layout_engine: LayeredLayoutEngine) -> ConvertFlowchartToScene:
    return ConvertFlowchartToScene(local=LocalConversionProvider(layout_engine))


@pytest.fixture
def convert_text(local_pipeline: ConvertFlowchartToScene) -> Callable[..., dict]:
    def _convert(text: str, **options: object) -> dict:
        report = local_pipeline.run(text, ConversionOptions(**options))
        return report.document.to_dict()

    return _convert
