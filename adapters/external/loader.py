from __future__ import annotations

import importlib
from typing import Any

from domain.errors import ExternalRoutineFailure


def load_external_object(spec: str) -> Any:
    """Resolve ``package.module:attribute`` and instantiate it when it is a class."""
    module_name, _, attribute = spec.partition(":")
    if not module_name or not attribute:
        msg = f"External backend must look like 'module:attribute', got {spec!r}"
        raise ExternalRoutineFailure(msg)
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        msg = f"Cannot import external backend module {module_name!r}: {exc}"
        raise ExternalRoutineFailure(msg) from exc
    target = getattr(module, attribute, None)
    if target is None:
        msg = f"Module {module_name!r} has no attribute {attribute!r}"
        raise ExternalRoutineFailure(msg)
    return target() if isinstance(target, type) else target
