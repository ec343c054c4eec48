from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from domain.errors import MalformedDocumentError

SEVERITY_ERROR = "error"
SEVERITY_WARNING = "warning"

ISSUE_INVALID_ELEMENT = "invalid_element"
ISSUE_INVALID_ID = "invalid_id"
ISSUE_INVALID_TYPE = "invalid_type"
ISSUE_DUPLICATE_IDS = "duplicate_ids"
ISSUE_DANGLING_FILE = "dangling_file"
ISSUE_UNBOUND_CONNECTOR = "unbound_connector"
ISSUE_DANGLING_BINDING = "dangling_binding"
ISSUE_UNMIRRORED_BINDING = "unmirrored_binding"
ISSUE_UNCONTAINED_TEXT = "uncontained_text"
ISSUE_DANGLING_CONTAINER = "dangling_container"
ISSUE_INVALID_CONTAINER = "invalid_container"
ISSUE_UNMIRRORED_CONTAINER = "unmirrored_container"
ISSUE_INVISIBLE_ELEMENT = "invisible_element"
ISSUE_TEXT_OVERFLOW = "text_overflow"

# Promoted to errors in strict mode.
STRICT_ISSUES = frozenset(
    {
        ISSUE_UNBOUND_CONNECTOR,
        ISSUE_UNMIRRORED_BINDING,
        ISSUE_UNCONTAINED_TEXT,
        ISSUE_UNMIRRORED_CONTAINER,
        ISSUE_TEXT_OVERFLOW,
    }
)
CONNECTOR_TYPES = frozenset({"arrow"})
CONTAINER_TYPES = frozenset({"rectangle", "diamond", "ellipse"})
TEXT_CONTAINER_PADDING = 10.0


@dataclass(frozen=True)
class LintFinding:
    code: str
    severity: str
    message: str
    element_id: str | None = None


@dataclass(frozen=True)
class SceneLintReport:
    element_count: int
    file_count: int
    errors: Tuple[LintFinding, ...]
    warnings: Tuple[LintFinding, ...]
    strict: bool = False

    @property
    def ok(self) -> bool:
        return not self.errors


class SceneLinter:
    def __init__(self, *, strict: bool = False) -> None:
        self._strict = strict

    def lint(self, payload: Any) -> SceneLintReport:
        if not isinstance(payload, Mapping):
            raise MalformedDocumentError("Scene payload must be a JSON object.")
        elements = payload.get("elements")
        if not isinstance(elements, list):
            raise MalformedDocumentError("Missing or invalid 'elements' array.")
        files = payload.get("files", {})
        if files is None:
            files = {}
        if not isinstance(files, Mapping):
            raise MalformedDocumentError("'files' must be an object when present.")

        findings: List[LintFinding] = []
        index = self._index_elements(elements, findings)
        for position, element in enumerate(elements):
            if not isinstance(element, Mapping):
                continue
            label = _element_label(element, position)
            self._check_file(element, label, files, findings)
            if element.get("type") in CONNECTOR_TYPES:
                self._check_connector(element, label, index, findings)
            if element.get("type") == "text":
                self._check_text(element, label, index, findings)
            if _number(element.get("width")) == 0 and _number(element.get("height")) == 0:
                findings.append(
                    self._finding(
                        ISSUE_INVISIBLE_ELEMENT,
                        f"Invisibly small element: {label}",
                        label,
                        always=SEVERITY_WARNING,
                    )
                )

        return SceneLintReport(
            element_count=len(elements),
            file_count=len(files),
            errors=tuple(item for item in findings if item.severity == SEVERITY_ERROR),
            warnings=tuple(item for item in findings if item.severity == SEVERITY_WARNING),
            strict=self._strict,
        )

    def _index_elements(
        self, elements: List[Any], findings: List[LintFinding]
    ) -> Dict[str, Mapping[str, Any]]:
        index: Dict[str, Mapping[str, Any]] = {}
        duplicates: List[str] = []
        for position, element in enumerate(elements):
            if not isinstance(element, Mapping):
                findings.append(
                    self._error(ISSUE_INVALID_ELEMENT, f"elements[{position}] is not a valid object.")
                )
                continue
            element_id = element.get("id")
            if not isinstance(element_id, str) or not element_id.strip():
                findings.append(
                    self._error(ISSUE_INVALID_ID, f"elements[{position}] has invalid or missing id.")
                )
            elif element_id in index:
                if element_id not in duplicates:
                    duplicates.append(element_id)
            else:
                index[element_id] = element
            element_type = element.get("type")
            if not isinstance(element_type, str) or not element_type.strip():
                findings.append(
                    self._error(
                        ISSUE_INVALID_TYPE, f"elements[{position}] has invalid or missing type."
                    )
                )
        if duplicates:
            findings.append(
                self._error(ISSUE_DUPLICATE_IDS, f"Duplicate element IDs: {', '.join(duplicates)}")
            )
        return index

    def _check_file(
        self,
        element: Mapping[str, Any],
        label: str,
        files: Mapping[str, Any],
        findings: List[LintFinding],
    ) -> None:
        file_id = element.get("fileId")
        if isinstance(file_id, str) and file_id and not files.get(file_id):
            findings.append(
                self._error(ISSUE_DANGLING_FILE, f"Dangling file reference: {label} -> {file_id}", label)
            )

    def _check_connector(
        self,
        element: Mapping[str, Any],
        label: str,
        index: Mapping[str, Mapping[str, Any]],
        findings: List[LintFinding],
    ) -> None:
        for key in ("startBinding", "endBinding"):
            binding = element.get(key)
            if not binding:
                findings.append(
                    self._finding(ISSUE_UNBOUND_CONNECTOR, f"Connector {label} has no {key}.", label)
                )
                continue
            target_id = binding.get("elementId") if isinstance(binding, Mapping) else None
            target = index.get(target_id) if isinstance(target_id, str) else None
            if target is None:
                findings.append(
                    self._error(
                        ISSUE_DANGLING_BINDING,
                        f"Connector {label} {key} points to missing element {target_id!r}.",
                        label,
                    )
                )
                continue
            if not _lists_bound(target, element.get("id")):
                findings.append(
                    self._finding(
                        ISSUE_UNMIRRORED_BINDING,
                        f"Element {target_id} does not list connector {label} in boundElements.",
                        label,
                    )
                )

    def _check_text(
        self,
        element: Mapping[str, Any],
        label: str,
        index: Mapping[str, Mapping[str, Any]],
        findings: List[LintFinding],
    ) -> None:
        container_id = element.get("containerId")
        if not container_id:
            findings.append(
                self._finding(ISSUE_UNCONTAINED_TEXT, f"Text {label} has no containerId.", label)
            )
            return
        container = index.get(container_id) if isinstance(container_id, str) else None
        if container is None:
            findings.append(
                self._error(
                    ISSUE_DANGLING_CONTAINER,
                    f"Text {label} references missing container {container_id!r}.",
                    label,
                )
            )
            return
        if container.get("type") not in CONTAINER_TYPES:
            findings.append(
                self._error(
                    ISSUE_INVALID_CONTAINER,
                    f"Text {label} is contained by {container.get('type')!r} element "
                    f"{container_id}, not a shape.",
                    label,
                )
            )
            return
        if not _lists_bound(container, element.get("id")):
            findings.append(
                self._finding(
                    ISSUE_UNMIRRORED_CONTAINER,
                    f"Container {container_id} does not list text {label} in boundElements.",
                    label,
                )
            )
        max_width = _number(container.get("width")) - TEXT_CONTAINER_PADDING
        max_height = _number(container.get("height")) - TEXT_CONTAINER_PADDING
        if _number(element.get("width")) > max_width or _number(element.get("height")) > max_height:
            findings.append(
                self._finding(
                    ISSUE_TEXT_OVERFLOW,
                    f"Text {label} overflows container {container_id}.",
                    label,
                )
            )

    def _finding(
        self,
        code: str,
        message: str,
        element_id: str | None = None,
        always: str | None = None,
    ) -> LintFinding:
        if always is not None:
            severity = always
        elif self._strict and code in STRICT_ISSUES:
            severity = SEVERITY_ERROR
        else:
            severity = SEVERITY_WARNING
        return LintFinding(code=code, severity=severity, message=message, element_id=element_id)

    def _error(self, code: str, message: str, element_id: str | None = None) -> LintFinding:
        return self._finding(code, message, element_id, always=SEVERITY_ERROR)


def _element_label(element: Mapping[str, Any], position: int) -> str:
    element_id = element.get("id")
    if isinstance(element_id, str) and element_id:
        return element_id
    return f"index-{position}"


def _number(value: Any) -> float:
    if value is None:
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return float("nan")


def _lists_bound(target: Mapping[str, Any], element_id: Any) -> bool:
    bound = target.get("boundElements")
    if not isinstance(bound, list):
        return False
    return any(isinstance(item, Mapping) and item.get("id") == element_id for item in bound)
