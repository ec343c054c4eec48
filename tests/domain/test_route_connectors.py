from __future__ import annotations

from domain.models import NodePlacement, NodeShape, Point, Size
from domain.services.route_connectors import facing_sides, route_connector, side_anchor


def _placement(node_id: str, x: float, y: float, width: float = 100, height: float = 50) -> NodePlacement:
    return NodePlacement(
        node_id=node_id,
        shape=NodeShape.RECTANGLE,
        label_lines=(node_id,),
        label_size=Size(10, 20),
        font_size=16,
        position=Point(x, y),
        size=Size(width, height),
        layer=0,
        row=0,
    )


def test_horizontal_neighbors_use_right_and_left() -> None:
    route = route_connector(_placement("A", 0, 0), _placement("B", 300, 0))

    assert (route.source_side, route.target_side) == ("right", "left")
    assert route.start == Point(100, 25)
    assert route.end == Point(300, 25)
    assert (route.dx, route.dy) == (200, 0)


def test_backward_edge_leaves_from_the_left() -> None:
    assert facing_sides(_placement("A", 300, 0), _placement("B", 0, 0)) == ("left", "right")


def test_vertical_neighbors_use_bottom_and_top() -> None:
    route = route_connector(_placement("A", 0, 0), _placement("B", 0, 200))

    assert (route.source_side, route.target_side) == ("bottom", "top")
    assert route.start == Point(50, 50)
    assert route.end == Point(50, 200)


def test_upward_edge_leaves_from_the_top() -> None:
    assert facing_sides(_placement("A", 0, 200), _placement("B", 0, 0)) == ("top", "bottom")


def test_diagonal_tie_prefers_horizontal() -> None:
    assert facing_sides(_placement("A", 0, 0), _placement("B", 200, 200)) == ("right", "left")


def test_self_loop_is_routed_across_the_box() -> None:
    node = _placement("A", 10, 10)

    route = route_connector(node, node)

    assert (route.source_side, route.target_side) == ("right", "left")
    assert route.dx == -100


def test_side_anchor_is_edge_midpoint() -> None:
    node = _placement("A", 10, 20, width=40, height=60)

    assert side_anchor(node, "left") == Point(10, 50)
    assert side_anchor(node, "top") == Point(30, 20)
    assert side_anchor(node, "bottom") == Point(30, 80)
