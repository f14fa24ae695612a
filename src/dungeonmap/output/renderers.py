"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a StringIO-backed Console; the caller extracts the
text with ``get_output(console)``. Renderers are dispatched by ``result.op``
in :func:`render_result`, and unknown ops fall through to a generic
key-value renderer.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from dungeonmap.output.console import create_console, get_output, style_for_room

if TYPE_CHECKING:
    from rich.console import Console

    from dungeonmap.services.result import ServiceResult

# Validation errors shown before the list is cut short.
MAX_LISTED_ERRORS = 5


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult as styled text.

    Plain text comes back when Rich finds no terminal, which covers
    CliRunner and piped output.
    """
    console = create_console()
    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)
    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Minimal output for ``--quiet``: a path, a document, or one id per line."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    data = result.data
    if result.op == "generate":
        if data.get("path"):
            return str(data["path"])
        return json.dumps(data.get("document", []), indent=2)
    if result.op == "monsters":
        return "\n".join(str(m["index"]) for m in data.get("monsters", []))
    rooms = data.get("rooms")
    if isinstance(rooms, list):
        return "\n".join(str(room["id"]) for room in rooms)
    return f"OK: {result.op}"


def format_errors(errors: list[str], *, limit: int | None = MAX_LISTED_ERRORS) -> list[str]:
    """Cut an error list down to *limit* entries plus a count of the rest."""
    if limit is None or len(errors) <= limit:
        return list(errors)
    return [*errors[:limit], f"... and {len(errors) - limit} more errors"]


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    line = Text("OK", style="dm.ok")
    line.append(f"  {result.op}", style="dm.op")
    console.print(line)


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    style: str | None = None
    if key == "id" or key.endswith("_id"):
        style = "dm.id"
    elif key == "path":
        style = "dm.path"
    elif key == "monster":
        style = "dm.monster"
    line = Text(f"  {key}: ", style="dm.key")
    line.append(str(value), style=style)
    console.print(line)


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print the meta block, including the telemetry span tree."""
    if not result.meta:
        return
    console.print()
    console.print(Text("  meta:", style="dim"))
    for key, value in result.meta.items():
        if key == "telemetry":
            _render_telemetry_tree(console, value, indent=4)
        else:
            console.print(f"    {key}: {value}")


def _render_telemetry_tree(console: Console, span: dict[str, Any], indent: int = 4) -> None:
    """Render a span tree, coloring slow spans."""
    prefix = " " * indent
    duration = span.get("duration_ms", 0.0)
    if duration > 1000:
        style = "bold red"
    elif duration > 100:
        style = "yellow"
    else:
        style = "dim"

    line = Text(prefix)
    line.append(f"{duration:>8.2f}ms", style=style)
    line.append(f"  {span.get('name', '?')}")
    annotations = span.get("annotations") or {}
    if annotations:
        line.append(f"  ({', '.join(f'{k}={v}' for k, v in annotations.items())})")
    console.print(line)

    for child in span.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 4)


def _room_table(rooms: list[dict[str, Any]], *, verbose: bool = False) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="dm.id", no_wrap=True, justify="right")
    table.add_column("Type")
    table.add_column("Depth", justify="right")
    table.add_column("Monster", style="dm.monster")
    table.add_column("Doors")
    if verbose:
        table.add_column("X", style="dim", justify="right")
        table.add_column("Y", style="dim", justify="right")

    for room in rooms:
        room_type = str(room.get("room_type", ""))
        monster = room.get("monster") or room.get("monster_index")
        row: list[Any] = [
            str(room.get("id", "")),
            Text(room_type, style=style_for_room(room_type)),
            str(room.get("depth", "")),
            "" if monster is None else str(monster),
            ", ".join(str(door) for door in room.get("doors", [])) or "-",
        ]
        if verbose:
            row.extend([f"{room.get('x', 0):.0f}", f"{room.get('y', 0):.0f}"])
        table.add_row(*row)
    return table


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    line = Text("ERROR", style="dm.error")
    line.append(f"  {result.op}", style="dm.op")
    line.append(f" — {msg}")
    console.print(line)

    if err is None:
        return
    errors = err.detail.get("errors")
    if isinstance(errors, list):
        for line in format_errors(errors, limit=None if verbose else MAX_LISTED_ERRORS):
            console.print(Text(f"  - {line}"))
    if verbose:
        extra = {k: v for k, v in err.detail.items() if k != "errors"}
        if extra:
            console.print(Text("  detail:", style="dim"))
            for key, value in extra.items():
                console.print(f"    {key}: {value}")


# ── Map renderers ─────────────────────────────────────────────────────


def _render_map(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render generate/show results: summary fields then the room table."""
    d = result.data
    stats = d.get("stats", {})
    _status_line(console, result)
    if d.get("path"):
        _field(console, "path", d["path"])
    if d.get("seed") is not None:
        _field(console, "seed", d["seed"])
    _field(console, "rooms", stats.get("rooms", len(d.get("rooms", []))))
    _field(console, "passages", stats.get("passages", 0))
    _field(console, "battle_rooms", stats.get("battle_rooms", 0))
    _field(console, "goal_rooms", stats.get("goal_rooms", 0))
    if stats.get("longest_path") is not None:
        _field(console, "longest_path", stats["longest_path"])
    if stats.get("convergent_rooms"):
        _field(console, "convergent_rooms", ", ".join(map(str, stats["convergent_rooms"])))

    rooms = d.get("rooms", [])
    if rooms:
        console.print()
        console.print(_room_table(rooms, verbose=verbose))
    if verbose:
        _render_meta(console, result)


def _render_validate(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    _field(console, "path", result.data.get("path", ""))
    _field(console, "rooms", result.data.get("rooms", 0))
    console.print(Text("  map is valid", style="dm.ok"))
    if verbose:
        _render_meta(console, result)


def _render_monsters(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    monsters = result.data.get("monsters", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Index", style="dm.id", justify="right")
    table.add_column("Name", style="dm.monster")
    table.add_column("Health", justify="right")
    for monster in monsters:
        table.add_row(str(monster["index"]), str(monster["name"]), str(monster["health"]))
    console.print(table)

    source = result.data.get("source", "")
    line = f"\n{result.data.get('count', len(monsters))} monsters ({source})"
    if verbose and source == "remote":
        line += f" from {result.data.get('url', '')}"
    console.print(line)
    if verbose:
        _render_meta(console, result)


# ── Mutation renderer ─────────────────────────────────────────────────


def _render_mutation(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render edit results."""
    _status_line(console, result)
    mutation_keys = (
        "path",
        "parent_id",
        "child_id",
        "goal_id",
        "room_id",
        "doors_before",
        "doors_after",
        "monster_index",
        "monster",
        "dropped_rooms",
        "rooms",
    )
    for key in mutation_keys:
        if result.data.get(key) is not None:
            _field(console, key, result.data[key])
    if verbose:
        _render_meta(console, result)


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)
    if verbose:
        _render_meta(console, result)


_OP_RENDERERS: dict[str, Any] = {
    "generate": _render_map,
    "show": _render_map,
    "validate": _render_validate,
    "monsters": _render_monsters,
    "add_edge": _render_mutation,
    "remove_edge": _render_mutation,
    "add_goal": _render_mutation,
    "set_doors": _render_mutation,
    "set_monster": _render_mutation,
}
