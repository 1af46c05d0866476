"""CLI entry point for dumping the overlay topology — standalone-capable."""

from __future__ import annotations

import argparse
import json
import os
import sys
from collections.abc import Mapping
from dataclasses import asdict
from pathlib import Path
from typing import Any

from loguru import logger
from tabulate import tabulate

from overlaytopo.metadata.client import DEFAULT_METADATA_ADDRESS
from overlaytopo.metadata.exceptions import MetadataError
from overlaytopo.store.models import Entry, Topology
from overlaytopo.store.store import TopologyStore

METADATA_ADDRESS_ENV = "OVERLAYTOPO_METADATA_ADDRESS"


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Build argparse parser for the topology dump."""
    parser = argparse.ArgumentParser(
        description="Refresh the overlay topology from the metadata service once and print it.",
    )
    parser.add_argument(
        "--metadata-address",
        default=os.getenv(METADATA_ADDRESS_ENV, DEFAULT_METADATA_ADDRESS),
        help=f"Metadata service address (default: ${METADATA_ADDRESS_ENV} or {DEFAULT_METADATA_ADDRESS})",
    )
    parser.add_argument(
        "--client-ip",
        help="Query metadata as seen from this container IP",
    )
    parser.add_argument(
        "--format",
        choices=["table", "json"],
        default="table",
        help="Output format (default: table)",
    )
    parser.add_argument(
        "--no-wait",
        action="store_true",
        help="Don't wait for the metadata service to become ready",
    )
    parser.add_argument(
        "-o",
        "--output",
        help="Output file (default: stdout)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose logging",
    )
    return parser.parse_args(args)


def _entry_rows(entries: Mapping[str, Entry]) -> list[list[Any]]:
    return [[ip, e.ip_address, e.host_ip_address, e.is_self, e.is_peer] for ip, e in sorted(entries.items())]


def format_table(topology: Topology) -> str:
    """Render a topology as terminal tables."""
    headers = ["IP", "Address", "Host IP", "Self", "Peer"]
    sections = [
        ("Self", _entry_rows({topology.self_entry.bare_ip: topology.self_entry})),
        ("Peers", _entry_rows(topology.peers)),
        ("Local", _entry_rows(topology.local)),
        ("Remote", _entry_rows(topology.remote)),
        ("Remote non-peers", _entry_rows(topology.remote_non_peers)),
    ]
    lines = [f"Subnet prefix: {topology.subnet_prefix}"]
    for title, rows in sections:
        lines.append(f"\n{title} ({len(rows)})")
        lines.append(tabulate(rows, headers=headers, tablefmt="simple") if rows else "  -")

    linked = topology.linked_peers
    lines.append(f"\nLinked peer networks: {', '.join(sorted(linked.networks)) or '-'}")
    lines.append(f"Linked peer containers: {len(linked.containers)}")
    return "\n".join(lines)


def format_json(topology: Topology) -> str:
    """Render a topology as JSON."""

    def _entries(entries: Mapping[str, Entry]) -> dict[str, dict[str, Any]]:
        return {ip: asdict(e) for ip, e in sorted(entries.items())}

    data = {
        "self": asdict(topology.self_entry),
        "subnet_prefix": topology.subnet_prefix,
        "entries": [asdict(e) for e in topology.entries],
        "peers": _entries(topology.peers),
        "local": _entries(topology.local),
        "remote": _entries(topology.remote),
        "remote_non_peers": _entries(topology.remote_non_peers),
        "linked_peers": {
            "networks": sorted(topology.linked_peers.networks),
            "containers": [c.model_dump() for c in topology.linked_peers.containers],
        },
    }
    return json.dumps(data, indent=2)


def main(args: list[str] | None = None) -> None:
    """Main entry point for the topology dump CLI."""
    parsed = parse_args(args)

    if not parsed.verbose:
        logger.remove()
        logger.add(sys.stderr, level="INFO")

    try:
        store = TopologyStore.from_metadata_address(
            parsed.metadata_address, client_ip=parsed.client_ip, wait=not parsed.no_wait
        )
        store.reload()
    except MetadataError as e:
        logger.error(f"topology refresh failed: {e}")
        sys.exit(1)

    topology = store.topology
    assert topology is not None
    output = format_json(topology) if parsed.format == "json" else format_table(topology)

    if parsed.output:
        Path(parsed.output).write_text(output + "\n")
        logger.info(f"Output written to {parsed.output}")
    else:
        print(output)
