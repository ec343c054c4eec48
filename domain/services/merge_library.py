from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Dict, List

from domain.errors import MalformedLibraryError
from domain.models import DEFAULT_SOURCE, ExcalidrawLibrary, LibraryItem

STATUS_PUBLISHED = "published"
STATUS_UNPUBLISHED = "unpublished"
LIBRARY_STATUSES = (STATUS_PUBLISHED, STATUS_UNPUBLISHED)


def extract_library_items(payload: Any, label: str) -> List[Any]:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, Mapping) and isinstance(payload.get("libraryItems"), list):
        return payload["libraryItems"]
    msg = f"{label} must contain a libraryItems array or be an array itself."
    raise MalformedLibraryError(msg)


def normalize_library_items(items: List[Any], default_status: str) -> List[LibraryItem]:
    normalized: List[LibraryItem] = []
    for position, item in enumerate(items, start=1):
        raw = item if isinstance(item, Mapping) else {}
        item_id = raw.get("id")
        created = raw.get("created")
        elements = raw.get("elements")
        normalized.append(
            LibraryItem(
                id=item_id if isinstance(item_id, str) and item_id else f"item-{position}",
                status=STATUS_PUBLISHED if raw.get("status") == STATUS_PUBLISHED else default_status,
                created=created
                if isinstance(created, (int, float)) and not isinstance(created, bool)
                else position,
                elements=[element for element in elements if isinstance(element, dict)]
                if isinstance(elements, list)
                else [],
            )
        )
    return normalized


@dataclass(frozen=True)
class LibraryMergeResult:
    library: ExcalidrawLibrary
    base_count: int
    other_count: int

    @property
    def merged_count(self) -> int:
        return len(self.library.items)


class LibraryMerger:
    """Set-union of library items keyed by id; later items replace earlier ones in place."""

    def __init__(
        self, default_status: str = STATUS_UNPUBLISHED, source: str = DEFAULT_SOURCE
    ) -> None:
        if default_status not in LIBRARY_STATUSES:
            msg = f"default status must be one of {', '.join(LIBRARY_STATUSES)}"
            raise ValueError(msg)
        self.default_status = default_status
        self.source = source

    def merge(self, base: Any, other: Any) -> LibraryMergeResult:
        base_items = normalize_library_items(
            extract_library_items(base, "base library"), self.default_status
        )
        other_items = normalize_library_items(
            extract_library_items(other, "other library"), self.default_status
        )
        keyed: Dict[str, LibraryItem] = {}
        for item in [*base_items, *other_items]:
            keyed[item.id] = item
        return LibraryMergeResult(
            library=ExcalidrawLibrary(
                items=[item.model_dump(mode="json") for item in keyed.values()],
                source=self.source,
            ),
            base_count=len(base_items),
            other_count=len(other_items),
        )
