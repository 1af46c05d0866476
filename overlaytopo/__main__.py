"""Orchestrator CLI — dispatches to sub-CLIs.

Sub-commands:
  dump        Refresh the overlay topology once and print it

Examples:
  overlaytopo dump --metadata-address 169.254.169.250

  overlaytopo dump --client-ip 10.42.0.5 --format json -o topology.json
"""

from __future__ import annotations

import os
import sys

from tabulate import tabulate

from overlaytopo import __version__, configure_logging
from overlaytopo import glogger

COMMANDS = {
    "dump": ("overlaytopo.store.cli", "Dump the overlay topology"),
}


def _print_usage() -> None:
    print("usage: overlaytopo <command> [options]\n")
    print("Available commands:")
    for cmd, (_, desc) in COMMANDS.items():
        print(f"  {cmd:14s}  {desc}")
    print("\nRun 'overlaytopo <command> --help' for command-specific options.")


def _print_startup_banner() -> None:
    startup_rows = [
        ["version", __version__],
    ]

    for var in ("OVERLAYTOPO_METADATA_ADDRESS", "LOGURU_LEVEL", "BUILDTIME"):
        val = os.environ.get(var)
        if val:
            startup_rows.append([var, val])

    table_str = tabulate(startup_rows, tablefmt="mixed_grid")
    lines = table_str.split("\n")
    table_width = len(lines[0])
    title = "overlaytopo starting up"
    title_border = "┍" + "━" * (table_width - 2) + "┑"
    title_row = "│ " + title.center(table_width - 4) + " │"
    separator = lines[0].replace("┍", "┝").replace("┑", "┥").replace("┯", "┿")

    glogger.opt(raw=True).info(
        "\n{}\n", title_border + "\n" + title_row + "\n" + separator + "\n" + "\n".join(lines[1:])
    )


def main() -> None:
    """Main entry point — dispatch to sub-CLI."""
    configure_logging()
    _print_startup_banner()

    if len(sys.argv) < 2 or sys.argv[1] in ("-h", "--help"):
        _print_usage()
        sys.exit(0 if len(sys.argv) >= 2 else 1)

    command = sys.argv[1]
    if command not in COMMANDS:
        print(f"overlaytopo: unknown command '{command}'\n", file=sys.stderr)
        _print_usage()
        sys.exit(1)

    module_path, _ = COMMANDS[command]

    # Import and call the sub-CLI's main(), passing remaining args
    from importlib import import_module

    module = import_module(module_path)
    module.main(sys.argv[2:])


if __name__ == "__main__":
    main()
