from __future__ import annotations

import copy
import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Dict, List, Set

from domain.models import ExcalidrawDocument
from domain.ports.conversion import SceneRestorer

logger = logging.getLogger(__name__)

Element = Dict[str, Any]

DEFAULT_APP_STATE = {"viewBackgroundColor": "#ffffff"}
NUMERIC_DEFAULTS = {
    "x": 0,
    "y": 0,
    "width": 0,
    "height": 0,
    "angle": 0,
    "strokeWidth": 1,
    "roughness": 1,
    "opacity": 100,
    "version": 1,
    "updated": 1,
}
STRING_DEFAULTS = {
    "type": "rectangle",
    "strokeColor": "#1e1e1e",
    "backgroundColor": "transparent",
    "fillStyle": "hachure",
    "strokeStyle": "solid",
}
NULLABLE_DEFAULTS = ("frameId", "roundness", "boundElements", "link")
MODE_LOCAL = "local"
MODE_EXTERNAL = "external"


def hash_number(text: str) -> int:
    """DJB2-xor over the string, kept in signed 32-bit range, always positive."""
    value = 5381
    for char in text:
        value = _to_int32(value * 33) ^ ord(char)
    return abs(value) + 1


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value >= 0x80000000 else value


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _pick(restored: Mapping[str, Any], key: str, fallback: Any) -> Any:
    value = restored.get(key)
    return fallback if value is None else value


def _format_number(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


@dataclass(frozen=True)
class NormalizedScene:
    document: ExcalidrawDocument
    mode: str


class SceneNormalizer:
    def __init__(self, restorer: SceneRestorer | None = None) -> None:
        self.restorer = restorer

    def finalize(self, document: ExcalidrawDocument) -> NormalizedScene:
        """Prefer the external restore routine, fall back to local normalization."""
        if self.restorer is not None:
            try:
                restored = self.restorer.restore(document.to_dict())
            except Exception as exc:  # noqa: BLE001
                logger.warning(
                    "External restore failed, using local normalization: %s", exc
                )
            else:
                if isinstance(restored, Mapping) and isinstance(restored.get("elements"), list):
                    return NormalizedScene(
                        document=ExcalidrawDocument(
                            elements=restored["elements"],
                            app_state=_pick(restored, "appState", document.app_state),
                            files=_pick(restored, "files", document.files),
                            source=document.source,
                        ),
                        mode=MODE_EXTERNAL,
                    )
                logger.warning("External restore returned no elements list, using local normalization")
        return NormalizedScene(document=self.normalize(document), mode=MODE_LOCAL)

    def normalize(self, document: ExcalidrawDocument) -> ExcalidrawDocument:
        elements = document.elements if isinstance(document.elements, list) else []
        used_ids: Set[str] = set()
        normalized: List[Element] = []
        for position, element in enumerate(elements, start=1):
            if not isinstance(element, dict):
                continue
            normalized.append(self.normalize_element(element, position, used_ids))
        app_state = document.app_state if isinstance(document.app_state, dict) else None
        files = document.files if isinstance(document.files, dict) else {}
        return ExcalidrawDocument(
            elements=normalized,
            app_state=copy.deepcopy(app_state) if app_state else dict(DEFAULT_APP_STATE),
            files=copy.deepcopy(files),
            source=document.source,
        )

    def normalize_element(self, element: Element, position: int, used_ids: Set[str]) -> Element:
        result = copy.deepcopy(element)

        raw_id = element.get("id")
        element_id = raw_id if isinstance(raw_id, str) and raw_id.strip() else f"el-{position}"
        while element_id in used_ids:
            element_id = f"{element_id}-dup"
        used_ids.add(element_id)
        result["id"] = element_id

        for key, default in STRING_DEFAULTS.items():
            if not isinstance(result.get(key), str) or not result.get(key):
                result[key] = default
        for key, default in NUMERIC_DEFAULTS.items():
            if not _is_number(result.get(key)):
                result[key] = default
        for key in NULLABLE_DEFAULTS:
            result.setdefault(key, None)
        if not isinstance(result.get("groupIds"), list):
            result["groupIds"] = []
        result["isDeleted"] = bool(result.get("isDeleted"))
        result["locked"] = bool(result.get("locked"))

        if not _is_number(result.get("seed")):
            result["seed"] = hash_number(
                ":".join(
                    (
                        result["type"],
                        element_id,
                        _format_number(result["x"]),
                        _format_number(result["y"]),
                    )
                )
            )
        if not _is_number(result.get("versionNonce")):
            result["versionNonce"] = hash_number(f"nonce:{element_id}")
        return result
