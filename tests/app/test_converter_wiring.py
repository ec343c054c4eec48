from __future__ import annotations

import logging

import pytest

from app.config import ConverterSettings
from app.converter_wiring import (
    FunctionSceneBackend,
    FunctionSceneRestorer,
    build_converter,
    build_external_provider,
    build_normalizer,
)
from domain.services.conversion_provider import ExternalConversionProvider
from tests.helpers.fake_backends import StaticSceneBackend, TaggingRestorer

BACKEND = "tests.helpers.fake_backends:StaticSceneBackend"


def test_no_external_backend_by_default() -> None:
    assert build_external_provider(ConverterSettings()) is None
    assert build_normalizer(ConverterSettings()).restorer is None


def test_configured_backend_is_wired() -> None:
    provider = build_external_provider(ConverterSettings(external_backend=BACKEND))

    assert isinstance(provider, ExternalConversionProvider)
    assert isinstance(provider.backend, StaticSceneBackend)


def test_configured_restorer_is_wired() -> None:
    settings = ConverterSettings(external_restore="tests.helpers.fake_backends:TaggingRestorer")

    assert isinstance(build_normalizer(settings).restorer, TaggingRestorer)


def test_unloadable_backend_falls_back_to_local(caplog: pytest.LogCaptureFixture) -> None:
    settings = ConverterSettings(external_backend="module_that_does_not_exist_xyz:Backend")

    with caplog.at_level(logging.WARNING):
        converter = build_converter(settings)

    assert converter.external is None
    assert "module_that_does_not_exist_xyz" in caplog.text
    assert converter.run("A --> B").conversion_mode == "local"


def test_font_size_reaches_layout() -> None:
    settings = ConverterSettings(font_size=30, regenerate_ids=False)

    report = build_converter(settings).run("A --> B", settings.to_options())
    texts = [element for element in report.document.elements if element["type"] == "text"]

    assert {text["fontSize"] for text in texts} == {30}


def test_function_backend_is_adapted() -> None:
    settings = ConverterSettings(
        external_backend="tests.helpers.fake_backends:convert_notation", regenerate_ids=False
    )

    provider = build_external_provider(settings)
    report = build_converter(settings).run("A --> B", settings.to_options())

    assert isinstance(provider, ExternalConversionProvider)
    assert isinstance(provider.backend, FunctionSceneBackend)
    assert report.conversion_mode == "external"
    assert [element["id"] for element in report.document.elements] == ["fn-1"]


def test_function_restorer_is_adapted() -> None:
    settings = ConverterSettings(
        external_restore="tests.helpers.fake_backends:restore_scene", regenerate_ids=False
    )

    normalizer = build_normalizer(settings)
    report = build_converter(settings).run("A --> B", settings.to_options())

    assert isinstance(normalizer.restorer, FunctionSceneRestorer)
    assert report.normalization_mode == "external"
    assert all(element["restored"] for element in report.document.elements)


def test_non_callable_target_is_skipped(caplog: pytest.LogCaptureFixture) -> None:
    settings = ConverterSettings(external_backend="tests.helpers.fake_backends:not_callable_backend")

    with caplog.at_level(logging.WARNING):
        provider = build_external_provider(settings)

    assert provider is None
    assert "not_callable_backend" in caplog.text
