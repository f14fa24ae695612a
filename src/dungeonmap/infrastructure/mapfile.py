"""Map file I/O.

Map documents are UTF-8 JSON files. Parsing and validation live in
:mod:`dungeonmap.domain.serialization`; this module only moves text
between disk and memory.
"""

from __future__ import annotations

from pathlib import Path


def read_map_text(path: Path) -> str:
    """Read a map document.

    Raises:
        FileNotFoundError: *path* does not exist.
        OSError: Any other read failure.
    """
    return path.read_text(encoding="utf-8")


def write_map_text(path: Path, text: str) -> None:
    """Write a map document with a trailing newline.

    Creates parent directories if they don't exist.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text if text.endswith("\n") else f"{text}\n", encoding="utf-8")
