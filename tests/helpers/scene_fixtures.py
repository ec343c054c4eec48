from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any


@lru_cache(maxsize=1)
def repo_root() -> Path:
    for parent in Path(__file__).resolve().parents:
        if (parent / "pyproject.toml").exists():
            return parent
    raise RuntimeError("Repository root not found")


def load_flowchart_fixture(name: str) -> str:
    return (repo_root() / "examples" / "flowcharts" / name).read_text(encoding="utf-8")


def elements_of_type(scene: dict[str, Any], element_type: str) -> list[dict[str, Any]]:
    return [element for element in scene["elements"] if element.get("type") == element_type]


def element_by_id(scene: dict[str, Any], element_id: str) -> dict[str, Any]:
    return next(element for element in scene["elements"] if element.get("id") == element_id)


def shape_for_node(scene: dict[str, Any], node_id: str) -> dict[str, Any]:
    return element_by_id(scene, f"node-{node_id}")


def bound_ids(element: dict[str, Any]) -> list[str]:
    return [entry["id"] for entry in element.get("boundElements") or []]


def minimal_scene(*elements: dict[str, Any], files: dict[str, Any] | None = None) -> dict[str, Any]:
    return {
        "type": "excalidraw",
        "version": 2,
        "source": "tests",
        "elements": list(elements),
        "appState": {},
        "files": files or {},
    }
