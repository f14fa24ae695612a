"""dungeonmap — procedural dungeon map generator, editor and validator."""

__version__ = "0.1.0"
