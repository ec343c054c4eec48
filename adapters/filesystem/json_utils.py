from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import orjson


def load_json(path: Path) -> Any:
    return parse_json(path.read_bytes())


def parse_json(raw: bytes | str) -> Any:
    return orjson.loads(raw)


def dump_json_bytes(payload: Any, pretty: bool = True) -> bytes:
    option = orjson.OPT_INDENT_2 if pretty else 0
    try:
        return orjson.dumps(payload, option=option)
    except TypeError:
        indent = 2 if pretty else None
        return json.dumps(payload, ensure_ascii=True, indent=indent).encode("utf-8")


def write_json_atomic(path: Path, payload: Any, pretty: bool = True) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(f"{path.suffix}.tmp")
    tmp_path.write_bytes(dump_json_bytes(payload, pretty=pretty))
    tmp_path.replace(path)
