"""Exception hierarchy for conditions that cannot be returned as values.

Validation problems are reported as error lists, and mutations report
failure with booleans. These exceptions cover the remaining cases and are
converted to a ``ServiceResult`` error at the service boundary.
"""

from __future__ import annotations


class DungeonMapError(Exception):
    """Base class for dungeonmap failures."""


class EmptyCatalogError(DungeonMapError):
    """Raised when generation is asked to run without any monster index."""


class MalformedInputError(DungeonMapError):
    """Raised when a map document is not JSON or not a JSON array."""


class ReconstructionError(DungeonMapError):
    """Raised when records cannot be rebuilt into a graph.

    Records that passed validation never trigger this.
    """
