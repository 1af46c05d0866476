"""Topology data models."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from overlaytopo.metadata.models import Container


def _empty_map() -> Mapping[str, Entry]:
    return MappingProxyType({})


@dataclass(frozen=True)
class Entry:
    """One routable address known to the overlay.

    ``ip_address`` is in CIDR notation: ``/32`` for host (peer) entries,
    the overlay subnet prefix for container entries.
    """

    ip_address: str
    host_ip_address: str
    is_self: bool = False
    is_peer: bool = False

    @property
    def bare_ip(self) -> str:
        """The address with its mask stripped."""
        return self.ip_address.split("/", 1)[0]


@dataclass(frozen=True)
class LinkedPeers:
    """Containers of linked cross-environment services sitting on the overlay network."""

    networks: frozenset[str] = frozenset()
    containers: tuple[Container, ...] = ()


@dataclass(frozen=True)
class Topology:
    """Result of one successful refresh. Replaced as a whole, never mutated."""

    self_entry: Entry
    subnet_prefix: str
    entries: tuple[Entry, ...] = ()
    local: Mapping[str, Entry] = field(default_factory=_empty_map)
    remote: Mapping[str, Entry] = field(default_factory=_empty_map)
    peers: Mapping[str, Entry] = field(default_factory=_empty_map)
    remote_non_peers: Mapping[str, Entry] = field(default_factory=_empty_map)
    linked_peers: LinkedPeers = field(default_factory=LinkedPeers)
