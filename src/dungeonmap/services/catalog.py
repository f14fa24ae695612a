"""CatalogService — list the monsters available to BATTLE rooms."""

from __future__ import annotations

from dungeonmap.services.base import BaseService
from dungeonmap.services.result import ServiceResult
from dungeonmap.services.telemetry import traced


class CatalogService(BaseService):
    """Exposes the monster catalog."""

    @traced
    def monsters(self, *, offline: bool = False) -> ServiceResult:
        """Return the current catalog and where it came from."""
        warnings: list[str] = []
        monsters = self._monsters(warnings, offline=offline)

        if offline or not self._settings.catalog.enabled:
            source = "builtin"
        else:
            source = "builtin" if self.catalog.used_fallback else "remote"

        return ServiceResult(
            ok=True,
            op="monsters",
            data={
                "source": source,
                "url": self._settings.catalog.url,
                "count": len(monsters),
                "monsters": [monster.model_dump() for monster in monsters],
            },
            warnings=warnings,
        )
