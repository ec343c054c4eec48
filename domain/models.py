from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Set, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

SCENE_TYPE = "excalidraw"
SCENE_VERSION = 2
LIBRARY_TYPE = "excalidrawlib"
LIBRARY_VERSION = 2
DEFAULT_SOURCE = "flowchart-scene-convertor"
DEFAULT_FONT_SIZE = 16.0


class NodeShape(str, Enum):
    RECTANGLE = "rectangle"
    DIAMOND = "diamond"
    ELLIPSE = "ellipse"


class FlowNode(BaseModel):
    model_config = ConfigDict(frozen=True)

    node_id: str = Field(..., min_length=1)
    label: str = ""
    shape: NodeShape = NodeShape.RECTANGLE

    @model_validator(mode="before")
    @classmethod
    def default_label(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("label"):
            return {**data, "label": data.get("node_id", "")}
        return data


class FlowEdge(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: str = Field(..., min_length=1)
    target: str = Field(..., min_length=1)


class Flowchart(BaseModel):
    nodes: List[FlowNode] = Field(default_factory=list)
    edges: List[FlowEdge] = Field(default_factory=list)

    @field_validator("nodes", mode="after")
    @classmethod
    def ensure_unique_node_ids(cls, nodes: List[FlowNode]) -> List[FlowNode]:
        seen: Set[str] = set()
        for node in nodes:
            if node.node_id in seen:
                msg = f"Duplicate node id found: {node.node_id}"
                raise ValueError(msg)
            seen.add(node.node_id)
        return nodes

    @model_validator(mode="after")
    def ensure_edges_reference_nodes(self) -> "Flowchart":
        known = {node.node_id for node in self.nodes}
        for edge in self.edges:
            missing = [end for end in (edge.source, edge.target) if end not in known]
            if missing:
                msg = f"Edge {edge.source} --> {edge.target} references unknown node(s): {missing}"
                raise ValueError(msg)
        return self


class ConversionOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    font_size: float = Field(DEFAULT_FONT_SIZE, gt=0)
    regenerate_ids: bool = True


class LibraryItem(BaseModel):
    id: str = Field(..., min_length=1)
    status: str
    created: Union[int, float]
    elements: List[Dict[str, Any]] = Field(default_factory=list)


@dataclass(frozen=True)
class FlowGraph:
    """Arena graph: nodes are addressed by their declaration index."""

    nodes: Tuple[FlowNode, ...]
    index: Dict[str, int]
    edges: Tuple[Tuple[int, int], ...]
    adjacency: Tuple[Tuple[int, ...], ...]
    in_degree: Tuple[int, ...]
    layers: Tuple[int, ...]
    buckets: Tuple[Tuple[int, ...], ...]

    def node(self, node_id: str) -> FlowNode:
        return self.nodes[self.index[node_id]]

    def layer_of(self, node_id: str) -> int:
        return self.layers[self.index[node_id]]


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Size:
    width: float
    height: float


@dataclass(frozen=True)
class NodePlacement:
    node_id: str
    shape: NodeShape
    label_lines: Tuple[str, ...]
    label_size: Size
    font_size: float
    position: Point
    size: Size
    layer: int
    row: int

    @property
    def center(self) -> Point:
        return Point(
            x=self.position.x + self.size.width / 2,
            y=self.position.y + self.size.height / 2,
        )

    @property
    def label(self) -> str:
        return "\n".join(self.label_lines)


@dataclass(frozen=True)
class LayoutPlan:
    nodes: List[NodePlacement]
    edges: List[Tuple[str, str]] = field(default_factory=list)


@dataclass(frozen=True)
class ExcalidrawDocument:
    elements: List[dict]
    app_state: dict
    files: dict
    source: str = DEFAULT_SOURCE

    def to_dict(self) -> dict:
        return {
            "type": SCENE_TYPE,
            "version": SCENE_VERSION,
            "source": self.source,
            "elements": self.elements,
            "appState": self.app_state,
            "files": self.files,
        }


@dataclass(frozen=True)
class ExcalidrawLibrary:
    items: List[dict]
    source: str = DEFAULT_SOURCE

    def to_dict(self) -> dict:
        return {
            "type": LIBRARY_TYPE,
            "version": LIBRARY_VERSION,
            "source": self.source,
            "libraryItems": self.items,
        }


@dataclass(frozen=True)
class ConversionSucceeded:
    document: ExcalidrawDocument
    mode: str


@dataclass(frozen=True)
class ConversionFallback:
    reason: str


ConversionResult = Union[ConversionSucceeded, ConversionFallback]
