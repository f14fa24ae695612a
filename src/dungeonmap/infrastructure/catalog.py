"""Monster catalog adapter: GraphQL fetch behind a TTL cache, with a built-in fallback.

The catalog lists the monster kinds a map may place in BATTLE rooms. It is
fetched once and served from memory until the TTL lapses. Any failure
(transport error, non-2xx status, unexpected payload, empty list) yields the
built-in four-monster catalog instead; fallbacks are never cached, so the
next call retries the remote service.

INVARIANT: ``get_catalog()`` never returns an empty list.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any

import httpx
import structlog
from pydantic import BaseModel, ValidationError

log = structlog.get_logger(__name__)

MONSTERS_QUERY = """\
query GetMonsters {
  monsters {
    items {
      id
      characterAddress
      index
      health
      character {
        name
      }
    }
  }
}"""


class Monster(BaseModel):
    """One catalog entry."""

    model_config = {"frozen": True}

    index: int
    name: str
    health: int


DEFAULT_CATALOG: tuple[Monster, ...] = (
    Monster(index=0, name="Goblin", health=40),
    Monster(index=1, name="ThiccGoblin", health=50),
    Monster(index=2, name="Troll", health=80),
    Monster(index=3, name="Orc", health=100),
)


def default_indices() -> list[int]:
    """Monster indices of the built-in catalog."""
    return [monster.index for monster in DEFAULT_CATALOG]


def parse_monsters(payload: Any) -> list[Monster]:
    """Extract monsters from a GraphQL ``GetMonsters`` response body.

    Numeric fields arrive as strings and are coerced. Raises ``ValueError``
    when the payload does not have the expected shape.
    """
    try:
        items = payload["data"]["monsters"]["items"]
    except (KeyError, TypeError) as exc:
        msg = "GraphQL response has no data.monsters.items"
        raise ValueError(msg) from exc
    if not isinstance(items, list):
        raise ValueError("data.monsters.items is not a list")

    try:
        monsters = [
            Monster(
                index=item["index"],
                name=item["character"]["name"],
                health=item["health"],
            )
            for item in items
        ]
    except (KeyError, TypeError, ValidationError) as exc:
        msg = f"Malformed monster entry: {exc}"
        raise ValueError(msg) from exc
    return sorted(monsters, key=lambda m: m.index)


class MonsterCatalog:
    """Cached async access to the remote monster catalog.

    Args:
        url: GraphQL endpoint.
        ttl_seconds: How long a successful fetch stays fresh.
        timeout_seconds: Per-request timeout handed to httpx.
        transport: Optional httpx transport (tests pass a ``MockTransport``).
        clock: Monotonic time source.

    Attributes:
        used_fallback: Whether the last lookup served the built-in catalog.
    """

    def __init__(
        self,
        url: str,
        *,
        ttl_seconds: float = 300.0,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.url = url
        self.ttl_seconds = ttl_seconds
        self.timeout_seconds = timeout_seconds
        self._transport = transport
        self._clock = clock
        self._cache: list[Monster] | None = None
        self._fetched_at = 0.0
        self.used_fallback = False

    @property
    def is_fresh(self) -> bool:
        return self._cache is not None and self._clock() - self._fetched_at < self.ttl_seconds

    def invalidate(self) -> None:
        """Drop the cached catalog so the next call refetches."""
        self._cache = None

    async def get_catalog(self) -> list[Monster]:
        """Return the catalog, fetching when the cache is cold or stale."""
        cached = self._cache
        if cached is not None and self._clock() - self._fetched_at < self.ttl_seconds:
            self.used_fallback = False
            return list(cached)

        try:
            monsters = await self._fetch()
        except (httpx.HTTPError, ValueError) as exc:
            log.warning("catalog.fallback", url=self.url, reason=str(exc))
            self.used_fallback = True
            return list(DEFAULT_CATALOG)

        if not monsters:
            log.warning("catalog.fallback", url=self.url, reason="empty catalog")
            self.used_fallback = True
            return list(DEFAULT_CATALOG)

        self._cache = monsters
        self._fetched_at = self._clock()
        self.used_fallback = False
        log.debug("catalog.fetched", url=self.url, count=len(monsters))
        return list(monsters)

    async def _fetch(self) -> list[Monster]:
        async with httpx.AsyncClient(
            timeout=self.timeout_seconds,
            transport=self._transport,
        ) as client:
            response = await client.post(self.url, json={"query": MONSTERS_QUERY})
            response.raise_for_status()
            return parse_monsters(response.json())

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def get_monster(self, index: int) -> Monster | None:
        """Return the monster with *index*, or None."""
        for monster in await self.get_catalog():
            if monster.index == index:
                return monster
        return None

    async def monster_names(self) -> dict[int, str]:
        """Map each catalog index to its monster name."""
        return {monster.index: monster.name for monster in await self.get_catalog()}

    async def is_valid_index(self, index: int) -> bool:
        return await self.get_monster(index) is not None

    async def monster_count(self) -> int:
        return len(await self.get_catalog())
