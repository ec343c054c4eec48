from __future__ import annotations

from typing import Protocol

from domain.models import FlowGraph, LayoutPlan


class LayoutEngine(Protocol):
    def build_plan(self, graph: FlowGraph, font_size: float | None = None) -> LayoutPlan:
        ...
