"""Unit tests for the command line entry point."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from mini_telnet.cli.args import parse_args
from mini_telnet.cli.main import build_targets, main
from mini_telnet.runner import CommandResult, HostResult, HostTarget

if TYPE_CHECKING:
    from collections.abc import Generator
    from pathlib import Path


@pytest.fixture(autouse=True)
def mock_logging() -> Generator[MagicMock]:
    """Keep the tests from reconfiguring the root logger."""
    with patch("mini_telnet.cli.args.configure_logging") as mock:
        yield mock


def successful_results(targets: list[HostTarget], *_: object, **__: object) -> list[HostResult]:
    """Build a successful result for each target."""
    return [
        HostResult(
            host=target.address,
            success=True,
            time_ms=1.0,
            commands=[CommandResult(command="whoami", output="ubuntu\n")],
        )
        for target in targets
    ]


def test_no_arguments_shows_help(capsys: pytest.CaptureFixture[str]) -> None:
    """Test that running without arguments prints help and exits cleanly."""
    with pytest.raises(SystemExit) as exc_info:
        parse_args([])
    if exc_info.value.code != 0:
        pytest.fail(f"Expected exit code 0, got {exc_info.value.code}")
    if "usage: mini-telnet" not in capsys.readouterr().out:
        pytest.fail("Help text was not printed")


@pytest.mark.parametrize(
    "argv",
    [
        ["-P", "$ "],
        ["-H", "10.0.0.1"],
        ["-H", "10.0.0.1", "-P", "$ ", "-n", "0"],
    ],
)
def test_invalid_arguments(argv: list[str]) -> None:
    """Test that missing hosts, prompts or bad concurrency are usage errors."""
    with pytest.raises(SystemExit) as exc_info:
        parse_args(argv)
    if exc_info.value.code != 2:
        pytest.fail(f"Expected exit code 2, got {exc_info.value.code}")


def test_parse_args(mock_logging: MagicMock) -> None:
    """Test parsing of a typical invocation."""
    args = parse_args(["-H", "10.0.0.1", "-H", "10.0.0.2:2323", "-P", "$ ", "-c", "whoami", "-vv"])

    if args.host != ["10.0.0.1", "10.0.0.2:2323"] or args.command != ["whoami"]:
        pytest.fail(f"Unexpected arguments: {args!r}")
    mock_logging.assert_called_once_with(2)


def test_build_targets(tmp_path: Path) -> None:
    """Test that inventory rows override command line credentials."""
    inventory = tmp_path / "hosts.csv"
    inventory.write_text("host,username,prompt\n10.0.0.2,admin,router# \n")
    args = parse_args(["-H", "10.0.0.1", "-i", str(inventory), "-u", "ubuntu", "-p", "secret", "-P", "$ "])

    targets = build_targets(args)

    expected = [
        HostTarget(address="10.0.0.1", username="ubuntu", password="secret", prompt=None),
        HostTarget(address="10.0.0.2", username="admin", password="secret", prompt="router# "),
    ]
    if targets != expected:
        pytest.fail(f"Targets mismatch.\nExpected: {expected!r}\nGot: {targets!r}")


def test_build_targets_no_login() -> None:
    """Test that --no-login drops the username."""
    args = parse_args(["-H", "10.0.0.1", "-u", "ubuntu", "-P", "$ ", "--no-login"])
    if build_targets(args)[0].username is not None:
        pytest.fail("Username should be dropped with --no-login")


@pytest.mark.asyncio
async def test_main_stdout(capsys: pytest.CaptureFixture[str]) -> None:
    """Test that results are printed as plain text."""
    with patch("mini_telnet.cli.main.run_hosts", AsyncMock(side_effect=successful_results)):
        status = await main(["-H", "10.0.0.1", "-P", "$ ", "-c", "whoami"])

    if status != 0:
        pytest.fail(f"Expected exit status 0, got {status}")
    output = capsys.readouterr().out
    if "host: 10.0.0.1\ncommand: whoami\noutput: ubuntu\n" not in output:
        pytest.fail(f"Unexpected output: {output!r}")


@pytest.mark.asyncio
async def test_main_output_file(tmp_path: Path) -> None:
    """Test that results can be written to a JSON file."""
    path = tmp_path / "results.json"
    with patch("mini_telnet.cli.main.run_hosts", AsyncMock(side_effect=successful_results)):
        status = await main(["-H", "10.0.0.1", "-P", "$ ", "-c", "whoami", "-o", str(path), "-of", "json"])

    if status != 0:
        pytest.fail(f"Expected exit status 0, got {status}")
    written = json.loads(path.read_text())
    if written != [{"host": "10.0.0.1", "command": "whoami", "output": "ubuntu\n", "error": None}]:
        pytest.fail(f"Unexpected file content: {written!r}")


@pytest.mark.asyncio
async def test_main_failed_host() -> None:
    """Test that a failed host gives a non-zero exit status."""
    failed = [HostResult(host="10.0.0.1", success=False, time_ms=1.0, error="ConnectFailedError: refused")]
    with patch("mini_telnet.cli.main.run_hosts", AsyncMock(return_value=failed)):
        status = await main(["-H", "10.0.0.1", "-P", "$ "])

    if status != 1:
        pytest.fail(f"Expected exit status 1, got {status}")


@pytest.mark.asyncio
async def test_main_invalid_config() -> None:
    """Test that an empty prompt is reported before connecting."""
    with (
        patch("mini_telnet.cli.main.log") as mock_log,
        patch("mini_telnet.cli.main.run_hosts", AsyncMock()) as mock_run_hosts,
    ):
        status = await main(["-H", "10.0.0.1", "-P", ""])

    if status != 2:
        pytest.fail(f"Expected exit status 2, got {status}")
    mock_log.error.assert_called_once()
    mock_run_hosts.assert_not_called()
