from __future__ import annotations

import pytest

from domain.errors import MalformedDocumentError
from domain.services.lint_scene import (
    ISSUE_DANGLING_BINDING,
    ISSUE_DANGLING_CONTAINER,
    ISSUE_DANGLING_FILE,
    ISSUE_DUPLICATE_IDS,
    ISSUE_INVALID_CONTAINER,
    ISSUE_INVALID_ELEMENT,
    ISSUE_INVALID_ID,
    ISSUE_INVISIBLE_ELEMENT,
    ISSUE_TEXT_OVERFLOW,
    ISSUE_UNBOUND_CONNECTOR,
    ISSUE_UNCONTAINED_TEXT,
    ISSUE_UNMIRRORED_BINDING,
    ISSUE_UNMIRRORED_CONTAINER,
    SceneLinter,
)
from tests.helpers.scene_fixtures import load_flowchart_fixture, minimal_scene


def _box(element_id: str, *bound: str, width: float = 100, height: float = 60) -> dict:
    return {
        "id": element_id,
        "type": "rectangle",
        "width": width,
        "height": height,
        "boundElements": [{"id": item, "type": "arrow"} for item in bound],
    }


def _arrow(element_id: str, start: str | None, end: str | None) -> dict:
    return {
        "id": element_id,
        "type": "arrow",
        "width": 50,
        "height": 0,
        "startBinding": {"elementId": start} if start else None,
        "endBinding": {"elementId": end} if end else None,
    }


def _codes(findings) -> list[str]:
    return [finding.code for finding in findings]


def test_duplicate_ids_fail() -> None:
    scene = minimal_scene(_box("a"), _box("a"), _box("b"), _box("b"))

    report = SceneLinter().lint(scene)

    assert not report.ok
    assert _codes(report.errors) == [ISSUE_DUPLICATE_IDS]
    assert "a, b" in report.errors[0].message


@pytest.mark.parametrize("strict", [False, True])
def test_dangling_binding_fails_in_any_mode(strict: bool) -> None:
    scene = minimal_scene(_box("b", "arrow-1"), _arrow("arrow-1", "missing", "b"))

    report = SceneLinter(strict=strict).lint(scene)

    assert _codes(report.errors) == [ISSUE_DANGLING_BINDING]
    assert report.errors[0].element_id == "arrow-1"


def test_uncontained_text_is_warning_by_default() -> None:
    scene = minimal_scene({"id": "t", "type": "text", "width": 20, "height": 10})

    report = SceneLinter().lint(scene)

    assert report.ok
    assert _codes(report.warnings) == [ISSUE_UNCONTAINED_TEXT]


def test_uncontained_text_is_error_when_strict() -> None:
    scene = minimal_scene({"id": "t", "type": "text", "width": 20, "height": 10})

    report = SceneLinter(strict=True).lint(scene)

    assert not report.ok
    assert report.strict
    assert _codes(report.errors) == [ISSUE_UNCONTAINED_TEXT]


def test_unbound_and_unmirrored_connectors() -> None:
    scene = minimal_scene(_box("a"), _box("b", "arrow-1"), _arrow("arrow-1", "a", None))

    lenient = SceneLinter().lint(scene)
    strict = SceneLinter(strict=True).lint(scene)

    assert lenient.ok
    assert sorted(_codes(lenient.warnings)) == [ISSUE_UNBOUND_CONNECTOR, ISSUE_UNMIRRORED_BINDING]
    assert sorted(_codes(strict.errors)) == [ISSUE_UNBOUND_CONNECTOR, ISSUE_UNMIRRORED_BINDING]


def test_dangling_container_is_error() -> None:
    scene = minimal_scene({"id": "t", "type": "text", "width": 5, "height": 5, "containerId": "gone"})

    report = SceneLinter().lint(scene)

    assert _codes(report.errors) == [ISSUE_DANGLING_CONTAINER]


@pytest.mark.parametrize("strict", [False, True])
def test_text_overflow_is_promoted_when_strict(strict: bool) -> None:
    container = _box("box", width=100, height=50)
    container["boundElements"] = [{"id": "t", "type": "text"}]
    text = {"id": "t", "type": "text", "width": 95, "height": 20, "containerId": "box"}

    report = SceneLinter(strict=strict).lint(minimal_scene(container, text))

    if strict:
        assert _codes(report.errors) == [ISSUE_TEXT_OVERFLOW]
        assert report.warnings == ()
    else:
        assert report.ok
        assert _codes(report.warnings) == [ISSUE_TEXT_OVERFLOW]


@pytest.mark.parametrize("strict", [False, True])
def test_unmirrored_container(strict: bool) -> None:
    container = _box("box", width=100, height=50)
    text = {"id": "t", "type": "text", "width": 20, "height": 10, "containerId": "box"}

    report = SceneLinter(strict=strict).lint(minimal_scene(container, text))

    findings = report.errors if strict else report.warnings
    assert _codes(findings) == [ISSUE_UNMIRRORED_CONTAINER]
    assert findings[0].element_id == "t"
    assert report.ok is not strict


def test_text_inside_text_is_rejected() -> None:
    outer = {"id": "outer", "type": "text", "width": 40, "height": 20, "containerId": "box"}
    inner = {"id": "inner", "type": "text", "width": 10, "height": 10, "containerId": "outer"}
    box = _box("box", width=100, height=50)
    box["boundElements"] = [{"id": "outer", "type": "text"}]

    report = SceneLinter().lint(minimal_scene(box, outer, inner))

    assert _codes(report.errors) == [ISSUE_INVALID_CONTAINER]
    assert report.errors[0].element_id == "inner"


def test_dangling_file_reference() -> None:
    image = {"id": "img", "type": "image", "width": 10, "height": 10, "fileId": "f1"}

    missing = SceneLinter().lint(minimal_scene(image))
    present = SceneLinter().lint(minimal_scene(image, files={"f1": {"mimeType": "image/png"}}))

    assert _codes(missing.errors) == [ISSUE_DANGLING_FILE]
    assert present.ok
    assert present.file_count == 1


def test_invisible_element_is_always_a_warning() -> None:
    report = SceneLinter(strict=True).lint(minimal_scene({"id": "dot", "type": "ellipse"}))

    assert report.ok
    assert _codes(report.warnings) == [ISSUE_INVISIBLE_ELEMENT]


def test_invalid_entries_are_reported() -> None:
    scene = minimal_scene("oops", {"type": "rectangle", "width": 1, "height": 1})

    report = SceneLinter().lint(scene)

    assert _codes(report.errors) == [ISSUE_INVALID_ELEMENT, ISSUE_INVALID_ID]
    assert report.element_count == 2


@pytest.mark.parametrize(
    "payload",
    [
        [],
        {"elements": "nope"},
        {"files": {}},
        {"elements": [], "files": []},
    ],
)
def test_malformed_documents_raise(payload: object) -> None:
    with pytest.raises(MalformedDocumentError):
        SceneLinter().lint(payload)


def test_null_files_count_as_empty() -> None:
    report = SceneLinter().lint({"elements": [], "files": None})

    assert report.ok
    assert report.file_count == 0


def test_converted_scene_is_clean_even_when_strict(convert_text) -> None:
    scene = convert_text(load_flowchart_fixture("checkout.mmd"))

    report = SceneLinter(strict=True).lint(scene)

    assert report.errors == ()
    assert report.warnings == ()
    assert report.element_count == 15


def test_large_font_scene_is_clean(convert_text) -> None:
    scene = convert_text("A[A label long enough to wrap several times] --> B{Decision}", font_size=48)

    report = SceneLinter(strict=True).lint(scene)

    assert report.ok
    assert _codes(report.warnings) == []
