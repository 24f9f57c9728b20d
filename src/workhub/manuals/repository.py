from __future__ import annotations

from typing import Any, Dict, Optional, Protocol, Sequence, Tuple

from .model import Manual, ManualQuery, Viewer


class ManualRepository(Protocol):
    def create(self, *, fields: Dict[str, Any]) -> int:
        raise NotImplementedError

    def get_by_id(self, manual_id: int) -> Optional[Manual]:
        raise NotImplementedError

    def update_fields(self, *, manual_id: int, fields: Dict[str, Any]) -> bool:
        raise NotImplementedError

    def delete_by_id(self, manual_id: int) -> bool:
        raise NotImplementedError

    def search(
        self,
        query: ManualQuery,
        *,
        viewer: Viewer,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> Tuple[Sequence[Manual], int]:
        """Manuals accessible to viewer (or authored by viewer when query.only_author)."""
        raise NotImplementedError
