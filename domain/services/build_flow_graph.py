from __future__ import annotations

from collections import deque
from typing import Dict, List, Optional, Sequence, Tuple

from domain.models import FlowGraph, Flowchart


def build_flow_graph(flowchart: Flowchart) -> FlowGraph:
    nodes = tuple(flowchart.nodes)
    index: Dict[str, int] = {node.node_id: idx for idx, node in enumerate(nodes)}

    adjacency: List[List[int]] = [[] for _ in nodes]
    in_degree: List[int] = [0 for _ in nodes]
    edges: List[Tuple[int, int]] = []
    for edge in flowchart.edges:
        if edge.source not in index or edge.target not in index:
            msg = f"Edge {edge.source} --> {edge.target} references an undeclared node"
            raise ValueError(msg)
        src, tgt = index[edge.source], index[edge.target]
        edges.append((src, tgt))
        adjacency[src].append(tgt)
        in_degree[tgt] += 1

    layers = assign_layers(adjacency, in_degree)
    return FlowGraph(
        nodes=nodes,
        index=index,
        edges=tuple(edges),
        adjacency=tuple(tuple(targets) for targets in adjacency),
        in_degree=tuple(in_degree),
        layers=tuple(layers),
        buckets=bucket_by_layer(layers),
    )


def assign_layers(adjacency: Sequence[Sequence[int]], in_degree: Sequence[int]) -> List[int]:
    """Longest-path layering by forward relaxation in Kahn order.

    Nodes are visited at most once, so edges closing a cycle are ignored.
    Nodes the relaxation never reaches get fresh layers past the maximum, in
    declaration order.
    """
    count = len(adjacency)
    if count == 0:
        return []
    remaining = list(in_degree)
    layers: List[Optional[int]] = [None] * count
    visited = [False] * count

    queue = deque(idx for idx in range(count) if remaining[idx] == 0)
    if not queue:
        queue.append(0)
    for idx in queue:
        layers[idx] = 0

    while queue:
        node = queue.popleft()
        if visited[node]:
            continue
        visited[node] = True
        level = layers[node] or 0
        for neighbor in adjacency[node]:
            if visited[neighbor]:
                continue
            layers[neighbor] = max(layers[neighbor] or 0, level + 1)
            remaining[neighbor] -= 1
            if remaining[neighbor] == 0:
                queue.append(neighbor)

    next_layer = max((layer for layer in layers if layer is not None), default=-1) + 1
    resolved: List[int] = []
    for layer in layers:
        if layer is None:
            layer = next_layer
            next_layer += 1
        resolved.append(layer)
    return resolved


def bucket_by_layer(layers: Sequence[int]) -> Tuple[Tuple[int, ...], ...]:
    if not layers:
        return ()
    buckets: List[List[int]] = [[] for _ in range(max(layers) + 1)]
    for idx, layer in enumerate(layers):
        buckets[layer].append(idx)
    return tuple(tuple(bucket) for bucket in buckets)
