"""QueryService — read-only views of a map file."""

from __future__ import annotations

from pathlib import Path

from dungeonmap.services._helpers import MapFileError, describe_map, load_map
from dungeonmap.services.base import BaseService
from dungeonmap.services.result import ServiceResult
from dungeonmap.services.telemetry import trace_span, traced


class QueryService(BaseService):
    """Loads a map and reports its layout and statistics."""

    @traced
    def show(self, path: Path, *, offline: bool = False) -> ServiceResult:
        """Lay out the map at *path* and list its rooms."""
        warnings: list[str] = []
        try:
            with trace_span("load"):
                root = load_map(path, self._validator())
        except MapFileError as exc:
            return exc.to_result("show")

        with trace_span("catalog"):
            names = {m.index: m.name for m in self._monsters(warnings, offline=offline)}
        with trace_span("layout"):
            summary = describe_map(root, self._settings.layout.metrics(), names)

        return ServiceResult(
            ok=True,
            op="show",
            data={"path": str(path), **summary},
            warnings=warnings,
        )
