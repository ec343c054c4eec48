from __future__ import annotations

import re
from typing import Dict, List

from domain.errors import InputEmptyError, NoNodesFoundError
from domain.models import FlowEdge, FlowNode, Flowchart, NodeShape

COMMENT_PREFIX = "%%"
EDGE_MARKER = "-->"

_HEADER_PATTERN = re.compile(r"^(flowchart|graph)(\s|$)", re.IGNORECASE)
_EDGE_LABEL_PATTERN = re.compile(r"\|[^|]+\|")
_NODE_PATTERN = re.compile(
    r"^(?P<id>[A-Za-z0-9_:-]+)\s*"
    r"(?:\[(?P<square>.*)\]|\{(?P<curly>.*)\}|\((?P<round>.*)\))?$"
)
_BRACKET_SHAPES = (
    ("square", NodeShape.RECTANGLE),
    ("curly", NodeShape.DIAMOND),
    ("round", NodeShape.ELLIPSE),
)


def parse_node_token(raw: str) -> FlowNode:
    text = raw.strip()
    match = _NODE_PATTERN.match(text)
    if not match:
        return FlowNode(node_id=text, label=text, shape=NodeShape.RECTANGLE)
    node_id = match.group("id")
    for group, shape in _BRACKET_SHAPES:
        label = match.group(group)
        if label is not None:
            return FlowNode(node_id=node_id, label=label.strip() or node_id, shape=shape)
    return FlowNode(node_id=node_id, label=node_id, shape=NodeShape.RECTANGLE)


def directive_lines(text: str) -> List[str]:
    """Trimmed lines without blanks, comments and the leading diagram header."""
    lines = [line.strip() for line in text.splitlines()]
    lines = [line for line in lines if line and not line.startswith(COMMENT_PREFIX)]
    if not lines:
        raise InputEmptyError()
    if _HEADER_PATTERN.match(lines[0]):
        lines = lines[1:]
    return lines


def parse_flowchart(text: str) -> Flowchart:
    nodes: Dict[str, FlowNode] = {}
    edges: List[FlowEdge] = []

    def declare(token: str) -> FlowNode:
        node = parse_node_token(token)
        # First declaration wins; later ones only reference the id.
        return nodes.setdefault(node.node_id, node)

    for line in directive_lines(text):
        stripped = _EDGE_LABEL_PATTERN.sub("", line)
        tokens = [part.strip() for part in stripped.split(EDGE_MARKER)]
        tokens = [token for token in tokens if token]
        if not tokens:
            continue
        if len(tokens) == 1:
            declare(tokens[0])
            continue
        chain = [declare(token) for token in tokens]
        for source, target in zip(chain, chain[1:]):
            edges.append(FlowEdge(source=source.node_id, target=target.node_id))

    if not nodes:
        raise NoNodesFoundError()
    return Flowchart(nodes=list(nodes.values()), edges=edges)
