"""Main entry point for the mini telnet CLI."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.markup import escape

from mini_telnet.runner import HostTarget, run_hosts
from mini_telnet.telnet import TelnetConfig, TelnetError

from .args import parse_args
from .console import console, log
from .files import InventoryReader, ResultWriter, format_plain

if TYPE_CHECKING:
    from argparse import Namespace as Arguments


def build_targets(args: Arguments) -> list[HostTarget]:
    """Combine --host options and inventory rows into session targets.

    Inventory values override the command line defaults for their host.

    Returns:
        The hosts to run commands on
    """
    rows: list[dict[str, str]] = [{"host": host} for host in args.host]
    if args.input is not None:
        rows.extend(InventoryReader(path=args.input, type=args.input_format).rows)

    targets = []
    for row in rows:
        username = None if args.no_login else row.get("username", args.username)
        targets.append(
            HostTarget(
                address=row["host"],
                username=username,
                password=row.get("password", args.password),
                prompt=row.get("prompt"),
            )
        )
    return targets


async def main(argv: list[str] | None = None) -> int:
    """Main entry point for the mini telnet CLI.

    Returns:
        Process exit status: 0 if every host succeeded, 1 otherwise
    """
    args = parse_args(argv)
    try:
        config = TelnetConfig(
            command_prompt=args.prompt,
            username_prompt=args.username_prompt,
            password_prompt=args.password_prompt,
            connect_timeout=args.connect_timeout,
            read_timeout=args.timeout,
        )
        targets = build_targets(args)
    except (TelnetError, ValueError, OSError) as e:
        log.error("Invalid configuration: %s", e)
        return 2

    results = await run_hosts(targets, config, args.command, args.concurrency, raw=args.raw)
    records = [record for result in results for record in result.records()]

    if args.output is None:
        # Results go to stdout, diagnostics stay on the stderr console
        print(format_plain(records))  # noqa: T201
    else:
        ResultWriter(path=args.output, type=args.output_format, data=records)
        console.print(f"Wrote {len(records)} result(s) to {escape(str(args.output))}")

    return 0 if all(result.success for result in results) else 1
