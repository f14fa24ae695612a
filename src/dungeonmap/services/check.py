"""CheckService — validate a map file without changing it.

Follows the linter pattern: a schema failure reports every violation the
validator found, not just the first.
"""

from __future__ import annotations

from pathlib import Path

import structlog

from dungeonmap.domain.nodes import reachable_from
from dungeonmap.services._helpers import MapFileError, load_map
from dungeonmap.services.base import BaseService
from dungeonmap.services.result import ServiceResult
from dungeonmap.services.telemetry import trace_span, traced

log = structlog.get_logger(__name__)


class CheckService(BaseService):
    """Reports whether a map file loads cleanly."""

    @traced
    def validate(self, path: Path) -> ServiceResult:
        """Parse, validate and reconstruct *path*."""
        try:
            with trace_span("load"):
                root = load_map(path, self._validator())
        except MapFileError as exc:
            log.info("map.invalid", path=str(path), code=exc.code)
            return exc.to_result("validate")

        return ServiceResult(
            ok=True,
            op="validate",
            data={"path": str(path), "valid": True, "rooms": len(reachable_from(root))},
        )
