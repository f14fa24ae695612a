"""GenerateService — build a new dungeon map from the monster catalog."""

from __future__ import annotations

import random
from pathlib import Path

import structlog

from dungeonmap.domain.errors import EmptyCatalogError
from dungeonmap.domain.generation import GeneratedMap, MapGenerator
from dungeonmap.infrastructure.catalog import default_indices
from dungeonmap.services._helpers import MapFileError, check_records, describe_map, save_records
from dungeonmap.services.base import BaseService
from dungeonmap.services.result import ErrorCode, ServiceResult, failure
from dungeonmap.services.telemetry import trace_span, traced

log = structlog.get_logger(__name__)


class GenerateService(BaseService):
    """Generates maps and optionally writes them to disk."""

    @traced
    def generate(
        self,
        max_depth: int | None = None,
        *,
        seed: int | None = None,
        output: Path | None = None,
        offline: bool = False,
    ) -> ServiceResult:
        """Generate a map of *max_depth* levels (default from ``[generator]``).

        Without *output* the document is returned in ``data["document"]``
        and nothing is written.
        """
        op = "generate"
        warnings: list[str] = []
        depth = self._settings.generator.max_depth if max_depth is None else max_depth
        if depth < 1:
            return failure(op, ErrorCode.INVALID_ARGUMENT, f"Depth must be at least 1, got {depth}")

        with trace_span("catalog"):
            monsters = self._monsters(warnings, offline=offline)
        names = {monster.index: monster.name for monster in monsters}

        with trace_span("generate"):
            try:
                generated = self._build(depth, [m.index for m in monsters], seed)
            except EmptyCatalogError:
                warnings.append("Monster catalog is empty; using the built-in catalog")
                generated = self._build(depth, default_indices(), seed)
            except ValueError as exc:
                return failure(op, ErrorCode.INVALID_ARGUMENT, str(exc))

        try:
            with trace_span("validate"):
                records = check_records(generated.root, self._validator())
            if output is not None:
                with trace_span("write"):
                    save_records(output, records)
        except MapFileError as exc:
            return exc.to_result(op, warnings)

        summary = describe_map(generated.root, self._settings.layout.metrics(), names)
        log.info(
            "map.generated",
            rooms=len(records),
            max_depth=depth,
            seed=seed,
            path=str(output) if output else None,
        )
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "path": str(output) if output else None,
                "seed": seed,
                "max_depth": depth,
                "document": records,
                **summary,
            },
            warnings=warnings,
        )

    def _build(self, max_depth: int, indices: list[int], seed: int | None) -> GeneratedMap:
        generator = MapGenerator(
            max_depth,
            indices,
            rng=random.Random(seed),
            capacity=self._settings.graph.capacity,
            max_branching=self._settings.generator.max_branching,
        )
        return generator.generate()
