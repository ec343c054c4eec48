from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from domain.models import (
    DEFAULT_FONT_SIZE,
    FlowGraph,
    FlowNode,
    LayoutPlan,
    NodePlacement,
    NodeShape,
    Point,
    Size,
)
from domain.ports.layout import LayoutEngine
from domain.services.label_wrap import wrap_label


def _default_wrap_chars() -> Dict[NodeShape, int]:
    # Diamonds wrap narrower so the label stays inside the rhombus.
    return {
        NodeShape.RECTANGLE: 24,
        NodeShape.ELLIPSE: 24,
        NodeShape.DIAMOND: 14,
    }


def _default_min_sizes() -> Dict[NodeShape, Size]:
    return {
        NodeShape.RECTANGLE: Size(180, 80),
        NodeShape.ELLIPSE: Size(180, 90),
        NodeShape.DIAMOND: Size(200, 120),
    }


@dataclass(frozen=True)
class LayoutConfig:
    """Geometry constants of the layered layout.

    ``font_size`` is the base label size; a character is ``font_size *
    char_width_factor`` wide and a line ``font_size * line_height`` tall.
    Shapes are at least ``min_sizes[shape]`` and at most ``max_width`` wide,
    with ``padding_x``/``padding_y`` around the label on each side. Layer
    ``n`` occupies the column starting at ``origin.x + n * column_pitch``;
    the ``k``-th node of a layer is centered on row ``k`` of height
    ``row_pitch``.
    """

    font_size: float = DEFAULT_FONT_SIZE
    char_width_factor: float = 0.6
    line_height: float = 1.25
    wrap_chars: Dict[NodeShape, int] = field(default_factory=_default_wrap_chars)
    min_sizes: Dict[NodeShape, Size] = field(default_factory=_default_min_sizes)
    max_width: float = 320.0
    padding_x: float = 20.0
    padding_y: float = 16.0
    column_pitch: float = 440.0
    row_pitch: float = 200.0
    origin: Point = Point(120.0, 80.0)

    def char_width(self, font_size: float) -> float:
        return font_size * self.char_width_factor

    def effective_wrap_chars(self, shape: NodeShape, font_size: float) -> int:
        available = self.max_width - 2 * self.padding_x
        fitting = int(available // self.char_width(font_size))
        return max(1, min(self.wrap_chars.get(shape, 24), fitting))


class LayeredLayoutEngine(LayoutEngine):
    def __init__(self, config: LayoutConfig | None = None) -> None:
        self.config = config or LayoutConfig()

    def build_plan(self, graph: FlowGraph, font_size: float | None = None) -> LayoutPlan:
        size = font_size or self.config.font_size
        placements: List[NodePlacement] = []
        for layer, bucket in enumerate(graph.buckets):
            for row, node_idx in enumerate(bucket):
                placements.append(self._place(graph.nodes[node_idx], layer, row, size))
        edges = [
            (graph.nodes[src].node_id, graph.nodes[tgt].node_id) for src, tgt in graph.edges
        ]
        return LayoutPlan(nodes=placements, edges=edges)

    def measure_label(
        self, node: FlowNode, font_size: float
    ) -> Tuple[Tuple[str, ...], Size]:
        max_chars = self.config.effective_wrap_chars(node.shape, font_size)
        lines = tuple(wrap_label(node.label, max_chars))
        longest = max((len(line) for line in lines), default=0)
        width = longest * self.config.char_width(font_size)
        height = len(lines) * font_size * self.config.line_height
        return lines, Size(_round(width), _round(height))

    def measure_shape(self, shape: NodeShape, label_size: Size) -> Size:
        minimum = self.config.min_sizes.get(shape, Size(0, 0))
        width = max(minimum.width, label_size.width + 2 * self.config.padding_x)
        height = max(minimum.height, label_size.height + 2 * self.config.padding_y)
        return Size(_round(min(width, self.config.max_width)), _round(height))

    def _place(self, node: FlowNode, layer: int, row: int, font_size: float) -> NodePlacement:
        lines, label_size = self.measure_label(node, font_size)
        size = self.measure_shape(node.shape, label_size)
        center_x = self.config.origin.x + layer * self.config.column_pitch + self.config.max_width / 2
        center_y = self.config.origin.y + row * self.config.row_pitch + self.config.row_pitch / 2
        return NodePlacement(
            node_id=node.node_id,
            shape=node.shape,
            label_lines=lines,
            label_size=label_size,
            font_size=font_size,
            position=Point(_round(center_x - size.width / 2), _round(center_y - size.height / 2)),
            size=size,
            layer=layer,
            row=row,
        )


def _round(value: float) -> float:
    return round(value, 2)
