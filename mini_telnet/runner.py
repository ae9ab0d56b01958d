"""Batch command execution module.

This module logs in to one or more telnet hosts concurrently and runs the same
list of commands on each, with a configurable concurrency limit. Failures are
captured per host so that one unreachable device does not abort the batch.
"""

from __future__ import annotations

from asyncio import Semaphore, gather as asyncio_gather, get_running_loop
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from mini_telnet.cli.console import complete_progress, create_progress, log, update_progress
from mini_telnet.telnet import TelnetError, TelnetSession

if TYPE_CHECKING:
    from collections.abc import Sequence

    from mini_telnet.telnet import TelnetConfig
    from mini_telnet.types import JSON_TYPE


@dataclass(slots=True, frozen=True)
class HostTarget:
    """A host to run commands on, with optional per-host login details."""

    address: str
    username: str | None = None
    password: str | None = None
    prompt: str | None = None


@dataclass
class CommandResult:
    """Output of a single command, or the error that interrupted it."""

    command: str
    output: str | None = None
    error: str | None = None


@dataclass
class HostResult:
    """Result of running a batch of commands on one host."""

    host: str
    success: bool
    time_ms: float
    commands: list[CommandResult] = field(default_factory=list)
    error: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Convert the result to a dictionary.

        Returns:
            Dictionary representation of the result
        """
        return {
            "host": self.host,
            "success": self.success,
            "time_ms": self.time_ms,
            "commands": [
                {"command": item.command, "output": item.output, "error": item.error} for item in self.commands
            ],
            "error": self.error,
        }

    def records(self) -> list[dict[str, JSON_TYPE]]:
        """Flatten the result into one row per command for tabular output.

        Returns:
            Rows with host, command, output and error columns
        """
        if not self.commands:
            return [{"host": self.host, "command": None, "output": None, "error": self.error}]
        return [
            {"host": self.host, "command": item.command, "output": item.output, "error": item.error}
            for item in self.commands
        ]


async def run_host(
    target: HostTarget, config: TelnetConfig, commands: Sequence[str], raw: bool = False
) -> HostResult:
    """Connect to a host, log in if a username is given, and run the commands.

    Args:
        target: Host address and optional credentials and prompt override
        config: Session configuration shared by all hosts
        commands: Commands to run, in order
        raw: Return output with echo and prompt, as normal_execute does

    Returns:
        HostResult with the output of each command that completed
    """
    start_time = get_running_loop().time()
    results: list[CommandResult] = []

    def elapsed_ms() -> float:
        return round((get_running_loop().time() - start_time) * 1000, 2)

    try:
        if target.prompt:
            config = config.with_options(command_prompt=target.prompt)
        async with await TelnetSession.connect_to(target.address, config) as session:
            if target.username is not None:
                await session.login(target.username, target.password or "")
            for command in commands:
                results.append(CommandResult(command=command))
                if raw:
                    results[-1].output = await session.normal_execute(command)
                else:
                    results[-1].output = await session.execute(command)

    except (TelnetError, ValueError) as e:
        log.error("Telnet error on %s: %s", target.address, e)
        if results and results[-1].output is None:
            results[-1].error = str(e)
        return HostResult(
            host=target.address,
            success=False,
            time_ms=elapsed_ms(),
            commands=results,
            error=f"{type(e).__name__}: {e!s}",
        )

    except Exception as e:
        log.exception("Unexpected error on %s", target.address)
        return HostResult(
            host=target.address,
            success=False,
            time_ms=elapsed_ms(),
            commands=results,
            error=f"Unexpected error: {e!s}",
        )

    return HostResult(host=target.address, success=True, time_ms=elapsed_ms(), commands=results)


async def run_hosts(
    targets: Sequence[HostTarget],
    config: TelnetConfig,
    commands: Sequence[str],
    max_concurrency: int,
    raw: bool = False,
) -> list[HostResult]:
    """Run commands on multiple hosts concurrently.

    Args:
        targets: Hosts to run the commands on
        config: Session configuration shared by all hosts
        commands: Commands to run on every host, in order
        max_concurrency: Maximum number of simultaneous sessions
        raw: Return output with echo and prompt

    Returns:
        List of HostResult objects, in the order of the targets
    """
    # Create a semaphore to limit concurrency
    semaphore = Semaphore(max_concurrency)
    task_id = create_progress(f"Running {len(commands)} command(s) on {len(targets)} host(s)", total=len(targets))

    async def host_task(target: HostTarget) -> HostResult:
        async with semaphore:
            log.debug("Starting session with %s", target.address)
            result = await run_host(target, config, commands, raw=raw)
            status = "✓" if result.success else "✗"
            update_progress(task_id, advance=1, description=f"Running commands: {target.address} {status}")
            return result

    try:
        results = await asyncio_gather(*(host_task(target) for target in targets))
        complete_progress(task_id, f"Completed {len(targets)} host(s)")
    except Exception as e:
        log.error("Error running commands: %s", e)
        complete_progress(task_id, "Batch failed")
        raise
    else:
        return list(results)
