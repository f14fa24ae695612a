"""Tests for --examples flag on CLI commands.

Parametrized to cover all commands that define examples text.
"""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from dungeonmap.cli import cli

# (CLI args, expected keywords in output)
EXAMPLES_COMMANDS: list[tuple[list[str], list[str]]] = [
    (["generate", "--examples"], ["--depth 5 --seed 42", "--offline"]),
    (["validate", "--examples"], ["dungeonmap validate dungeon.json"]),
    (["show", "--examples"], ["dungeonmap show dungeon.json"]),
    # -- catalog --
    (["catalog", "--examples"], ["dungeonmap catalog list"]),
    (["catalog", "list", "--examples"], ["--json catalog list"]),
    # -- edit --
    (["edit", "--examples"], ["edit add-edge", "edit set-monster"]),
    (["edit", "add-edge", "--examples"], ["edit add-edge dungeon.json 3 7"]),
    (["edit", "remove-edge", "--examples"], ["edit remove-edge"]),
    (["edit", "add-goal", "--examples"], ["edit add-goal"]),
    (["edit", "set-doors", "--examples"], ["--seed 11"]),
    (["edit", "set-monster", "--examples"], ["edit set-monster"]),
]


def _examples_id(item: tuple[list[str], list[str]]) -> str:
    """Generate a readable test ID from args."""
    args, _ = item
    return "_".join(a for a in args if a != "--examples")


@pytest.mark.parametrize(
    "args,expected_keywords",
    EXAMPLES_COMMANDS,
    ids=[_examples_id(item) for item in EXAMPLES_COMMANDS],
)
def test_examples_flag(
    cli_runner: CliRunner, args: list[str], expected_keywords: list[str]
) -> None:
    result = cli_runner.invoke(cli, args)
    assert result.exit_code == 0
    for kw in expected_keywords:
        assert kw in result.output, f"Expected '{kw}' in examples output for {args}"


class TestExamplesInHelp:
    @pytest.mark.parametrize(
        "args",
        [
            ["generate", "--help"],
            ["validate", "--help"],
            ["show", "--help"],
            ["catalog", "list", "--help"],
            ["edit", "--help"],
            ["edit", "set-doors", "--help"],
        ],
    )
    def test_examples_in_help(self, cli_runner: CliRunner, args: list[str]) -> None:
        result = cli_runner.invoke(cli, args)
        assert result.exit_code == 0
        assert "--examples" in result.output


class TestExamplesEagerExit:
    """--examples exits before argument validation."""

    def test_examples_skips_required_args(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["validate", "--examples"])
        assert result.exit_code == 0
        assert "Examples for" in result.output

    def test_examples_skips_required_edit_args(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["edit", "set-monster", "--examples"])
        assert result.exit_code == 0
