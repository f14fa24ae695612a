"""BaseService — shared foundation for dungeonmap services.

Every service receives the frozen :class:`DungeonMapSettings` at
construction time. The monster catalog is created lazily, so services that
never place monsters never touch the network.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import anyio
import structlog

from dungeonmap.domain.validation import MapValidator
from dungeonmap.infrastructure.catalog import DEFAULT_CATALOG, Monster, MonsterCatalog

if TYPE_CHECKING:
    from dungeonmap.config.settings import DungeonMapSettings

log = structlog.get_logger(__name__)


class BaseService:
    """Base for all service-layer classes.

    Usage::

        class CheckService(BaseService):
            def validate(self, path: Path) -> ServiceResult:
                validator = self._validator()
                ...
    """

    def __init__(
        self,
        settings: DungeonMapSettings,
        *,
        catalog: MonsterCatalog | None = None,
    ) -> None:
        self._settings = settings
        self._catalog = catalog

    @property
    def catalog(self) -> MonsterCatalog:
        """The monster catalog (created on first access)."""
        if self._catalog is None:
            cfg = self._settings.catalog
            self._catalog = MonsterCatalog(
                cfg.url,
                ttl_seconds=cfg.ttl_seconds,
                timeout_seconds=cfg.timeout_seconds,
            )
        return self._catalog

    def _validator(self) -> MapValidator:
        graph = self._settings.graph
        return MapValidator(capacity=graph.capacity, monster_index_max=graph.monster_index_max)

    def _monsters(self, warnings: list[str], *, offline: bool = False) -> list[Monster]:
        """Current monster list; the built-in catalog when offline or unreachable."""
        if offline or not self._settings.catalog.enabled:
            return list(DEFAULT_CATALOG)

        monsters = anyio.run(self.catalog.get_catalog)
        if self.catalog.used_fallback:
            warnings.append(
                f"Monster catalog unavailable at {self.catalog.url}; using the built-in catalog"
            )
        return monsters
