from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List

from domain.models import (
    DEFAULT_SOURCE,
    ConversionOptions,
    ExcalidrawDocument,
    FlowGraph,
    NodePlacement,
    NodeShape,
)
from domain.ports.layout import LayoutEngine
from domain.services.route_connectors import SIDE_RATIOS, ConnectorRoute, route_connector

Element = Dict[str, Any]

BINDING_GAP = 4
FONT_FAMILY = 1
LINE_HEIGHT = 1.25
SHAPE_ROUNDNESS: Dict[NodeShape, dict | None] = {
    NodeShape.RECTANGLE: {"type": 3},
    NodeShape.DIAMOND: {"type": 2},
    NodeShape.ELLIPSE: None,
}


@dataclass
class ElementRegistry:
    elements: List[Element] = field(default_factory=list)
    index: Dict[str, Element] = field(default_factory=dict)

    def add(self, element: Element) -> None:
        self.elements.append(element)
        element_id = element.get("id")
        if isinstance(element_id, str):
            self.index[element_id] = element


class FlowchartToExcalidrawConverter:
    """Turns a layered flow graph into shapes, bound labels and bound arrows.

    Only identity, geometry and binding fields are set here; visual defaults,
    seeds and nonces are left to the scene normalizer.
    """

    def __init__(self, layout_engine: LayoutEngine, source: str = DEFAULT_SOURCE) -> None:
        self.layout_engine = layout_engine
        self.source = source
        self.namespace = uuid.uuid5(uuid.NAMESPACE_DNS, DEFAULT_SOURCE)

    def convert(
        self, graph: FlowGraph, options: ConversionOptions | None = None
    ) -> ExcalidrawDocument:
        options = options or ConversionOptions()
        plan = self.layout_engine.build_plan(graph, font_size=options.font_size)
        registry = ElementRegistry()

        placements: Dict[str, NodePlacement] = {}
        shape_ids: Dict[str, str] = {}
        for placement in plan.nodes:
            placements[placement.node_id] = placement
            shape_ids[placement.node_id] = self._build_node(placement, registry, options)

        for number, (source_id, target_id) in enumerate(plan.edges, start=1):
            route = route_connector(placements[source_id], placements[target_id])
            arrow_id = self._element_id(options, "edge", str(number), source_id, target_id)
            arrow = self._arrow_element(
                element_id=arrow_id,
                route=route,
                start_binding=shape_ids[source_id],
                end_binding=shape_ids[target_id],
            )
            registry.add(arrow)
            self._bind_arrow(registry.index, arrow)

        app_state = {
            "viewBackgroundColor": "#ffffff",
            "gridSize": None,
            "currentItemFontFamily": FONT_FAMILY,
            "currentItemFontSize": options.font_size,
            "currentItemStrokeColor": "#1e1e1e",
        }
        return ExcalidrawDocument(
            elements=registry.elements, app_state=app_state, files={}, source=self.source
        )

    def _build_node(
        self, placement: NodePlacement, registry: ElementRegistry, options: ConversionOptions
    ) -> str:
        shape_id = self._element_id(options, "node", placement.node_id)
        text_id = self._element_id(options, "label", placement.node_id)
        registry.add(
            self._shape_element(
                element_id=shape_id,
                placement=placement,
                bound_elements=[{"id": text_id, "type": "text"}],
            )
        )
        registry.add(
            self._text_element(
                element_id=text_id,
                placement=placement,
                container_id=shape_id,
            )
        )
        return shape_id

    def _shape_element(
        self, element_id: str, placement: NodePlacement, bound_elements: List[dict]
    ) -> Element:
        return {
            "id": element_id,
            "type": placement.shape.value,
            "x": placement.position.x,
            "y": placement.position.y,
            "width": placement.size.width,
            "height": placement.size.height,
            "roundness": SHAPE_ROUNDNESS.get(placement.shape),
            "boundElements": bound_elements,
        }

    def _text_element(
        self, element_id: str, placement: NodePlacement, container_id: str
    ) -> Element:
        center = placement.center
        width = placement.label_size.width
        height = placement.label_size.height
        return {
            "id": element_id,
            "type": "text",
            "x": round(center.x - width / 2, 2),
            "y": round(center.y - height / 2, 2),
            "width": width,
            "height": height,
            "text": placement.label,
            "originalText": placement.label,
            "fontSize": placement.font_size,
            "fontFamily": FONT_FAMILY,
            "textAlign": "center",
            "verticalAlign": "middle",
            "baseline": round(height - placement.font_size * (LINE_HEIGHT - 1), 2),
            "lineHeight": LINE_HEIGHT,
            "containerId": container_id,
            "autoResize": True,
        }

    def _arrow_element(
        self,
        element_id: str,
        route: ConnectorRoute,
        start_binding: str,
        end_binding: str,
    ) -> Element:
        dx = round(route.dx, 2)
        dy = round(route.dy, 2)
        return {
            "id": element_id,
            "type": "arrow",
            "x": route.start.x,
            "y": route.start.y,
            "width": abs(dx),
            "height": abs(dy),
            "roundness": {"type": 2},
            "points": [[0, 0], [dx, dy]],
            "startBinding": self._binding(start_binding, route.source_side),
            "endBinding": self._binding(end_binding, route.target_side),
            "startArrowhead": None,
            "endArrowhead": "arrow",
            "elbowed": False,
            "lastCommittedPoint": None,
        }

    def _binding(self, element_id: str, side: str) -> dict:
        return {
            "elementId": element_id,
            "focus": 0.0,
            "gap": BINDING_GAP,
            "fixedPoint": list(SIDE_RATIOS[side]),
        }

    def _bind_arrow(self, element_index: Dict[str, Element], arrow: Element) -> None:
        arrow_id = arrow["id"]
        for key in ("startBinding", "endBinding"):
            binding = arrow.get(key)
            if not binding:
                continue
            target = element_index.get(binding.get("elementId"))
            if target is None:
                continue
            bound = target.setdefault("boundElements", [])
            entry = {"id": arrow_id, "type": "arrow"}
            # Self-loops bind both ends to the same shape.
            if entry not in bound:
                bound.append(entry)

    def _element_id(self, options: ConversionOptions, *parts: str) -> str:
        readable = "-".join(parts)
        if options.regenerate_ids:
            return self._stable_id(readable)
        return readable

    def _stable_id(self, *parts: str) -> str:
        return str(uuid.uuid5(self.namespace, "|".join(parts)))
