"""Config file discovery.

The finder walks up from the working directory looking for
``dungeonmap.toml`` (or its hidden twin ``.dungeonmap.toml``), the way git
finds ``.git/``. ``DUNGEONMAP_CONFIG`` pins an explicit file instead.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

CONFIG_FILENAME = "dungeonmap.toml"
CONFIG_FILENAMES = (CONFIG_FILENAME, f".{CONFIG_FILENAME}")
CONFIG_ENV_VAR = "DUNGEONMAP_CONFIG"


def _search_dirs(start: Path) -> Iterator[Path]:
    current = start.resolve()
    yield current
    yield from current.parents


def find_config(start: Path | None = None) -> Path | None:
    """Return the config file governing *start* (default: cwd), if any.

    An env override that points at a missing file yields None rather than
    falling back to discovery.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        pinned = Path(env_path)
        return pinned if pinned.is_file() else None

    for directory in _search_dirs(start or Path.cwd()):
        for name in CONFIG_FILENAMES:
            candidate = directory / name
            if candidate.is_file():
                return candidate
    return None

