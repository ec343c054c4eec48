from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from domain.models import NodePlacement, Point

SIDE_RATIOS = {
    "left": (0.0, 0.5),
    "right": (1.0, 0.5),
    "top": (0.5, 0.0),
    "bottom": (0.5, 1.0),
}


@dataclass(frozen=True)
class ConnectorRoute:
    source_id: str
    target_id: str
    source_side: str
    target_side: str
    start: Point
    end: Point

    @property
    def dx(self) -> float:
        return self.end.x - self.start.x

    @property
    def dy(self) -> float:
        return self.end.y - self.start.y


def facing_sides(source: NodePlacement, target: NodePlacement) -> Tuple[str, str]:
    """Sides facing each other along the axis of the larger center displacement."""
    dx = target.center.x - source.center.x
    dy = target.center.y - source.center.y
    if abs(dx) >= abs(dy):
        return ("right", "left") if dx >= 0 else ("left", "right")
    return ("bottom", "top") if dy > 0 else ("top", "bottom")


def side_anchor(placement: NodePlacement, side: str) -> Point:
    ratio_x, ratio_y = SIDE_RATIOS[side]
    return Point(
        x=placement.position.x + placement.size.width * ratio_x,
        y=placement.position.y + placement.size.height * ratio_y,
    )


def route_connector(source: NodePlacement, target: NodePlacement) -> ConnectorRoute:
    source_side, target_side = facing_sides(source, target)
    return ConnectorRoute(
        source_id=source.node_id,
        target_id=target.node_id,
        source_side=source_side,
        target_side=target_side,
        start=side_anchor(source, source_side),
        end=side_anchor(target, target_side),
    )
