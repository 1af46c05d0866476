"""Topology store — refreshes from metadata and answers topology queries."""

from __future__ import annotations

import threading
from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import TypeVar

from loguru import logger

from overlaytopo.metadata.client import BaseMetadataClient, RancherMetadataClient
from overlaytopo.store.classify import build_peers_map, classify_containers, entry_from_host
from overlaytopo.store.links import ServiceLinkIndex, resolve_linked_peers
from overlaytopo.store.models import Entry, LinkedPeers, Topology
from overlaytopo.store.snapshot import build_snapshot, find_self_network
from overlaytopo.store.subnet import resolve_subnet_prefix

_T = TypeVar("_T")

_NO_ENTRIES: Mapping[str, Entry] = MappingProxyType({})


class TopologyStore:
    """Holds the topology derived from the most recent successful refresh.

    ``reload()`` calls are serialized. The published :class:`Topology` is
    swapped in one assignment, so readers see either the old or the new
    result, never a mix. Before the first successful reload every accessor
    returns an empty value.
    """

    def __init__(self, client: BaseMetadataClient) -> None:
        self.client = client
        self._topology: Topology | None = None
        self._reload_lock = threading.Lock()
        self._log = logger.bind(classname=self.__class__.__name__)

    @classmethod
    def from_metadata_address(
        cls,
        metadata_address: str = "",
        client_ip: str | None = None,
        wait: bool = True,
    ) -> TopologyStore:
        """Create a store backed by the Rancher metadata service at ``metadata_address``."""
        client = RancherMetadataClient(metadata_address, client_ip=client_ip)
        logger.debug(f"creating TopologyStore, metadata URL: {client.base_url}, client IP: {client_ip}")
        if wait:
            client.wait_until_ready()
        return cls(client)

    @property
    def topology(self) -> Topology | None:
        return self._topology

    def reload(self) -> None:
        """Fetch a fresh snapshot and publish the topology derived from it.

        Any error raised by the metadata client propagates unchanged and the
        previously published topology stays in place.
        """
        with self._reload_lock:
            self._log.debug("Reloading ...")
            topology = self._build()
            self._topology = topology
            self._log.debug(
                f"published topology: {len(topology.entries)} entries, {len(topology.peers)} peers, "
                f"{len(topology.local)} local, {len(topology.remote)} remote"
            )

    def _fetch(self, what: str, fetch: Callable[[], _T]) -> _T:
        try:
            return fetch()
        except Exception as e:
            self._log.error(f"couldn't get {what} from metadata: {e}")
            raise

    def _build(self) -> Topology:
        self_host = self._fetch("self host", self.client.get_self_host)
        hosts = self._fetch("hosts", self.client.get_hosts)
        containers = self._fetch("containers", self.client.get_containers)
        services = self._fetch("services", self.client.get_services)
        networks = self._fetch("networks", self.client.get_networks)

        snapshot = build_snapshot(self_host, hosts, containers, services, networks)
        self_network = find_self_network(snapshot.networks)
        subnet_prefix = resolve_subnet_prefix(self_network).prefix

        self_entry = entry_from_host(snapshot.self_host, snapshot.self_host)
        peers = build_peers_map(snapshot)
        classified = classify_containers(snapshot, self_network, subnet_prefix, self_entry)
        # Computed for callers; it does not feed into the maps below.
        linked_peers = resolve_linked_peers(snapshot, self_network, ServiceLinkIndex.build(snapshot))

        return Topology(
            self_entry=self_entry,
            subnet_prefix=subnet_prefix,
            entries=tuple(classified.entries),
            local=MappingProxyType(classified.local),
            remote=MappingProxyType(classified.remote),
            peers=MappingProxyType(peers),
            remote_non_peers=MappingProxyType(classified.remote_non_peers),
            linked_peers=linked_peers,
        )

    def local_host_ip_address(self) -> str:
        """Agent IP of the host this agent runs on."""
        topology = self._topology
        return topology.self_entry.host_ip_address if topology else ""

    def local_ip_address(self) -> str:
        """This agent's own address without mask."""
        topology = self._topology
        return topology.self_entry.bare_ip if topology else ""

    def is_remote(self, ip_address: str) -> bool:
        """True only for addresses known to live on another host."""
        topology = self._topology
        if topology is None:
            return False
        if ip_address in topology.local:
            self._log.debug(f"Local: {ip_address}")
            return False
        if ip_address in topology.remote:
            self._log.debug(f"Remote: {ip_address}")
            return True
        return False

    def entries(self) -> tuple[Entry, ...]:
        topology = self._topology
        return topology.entries if topology else ()

    def local_entries_map(self) -> Mapping[str, Entry]:
        topology = self._topology
        return topology.local if topology else _NO_ENTRIES

    def remote_entries_map(self) -> Mapping[str, Entry]:
        topology = self._topology
        return topology.remote if topology else _NO_ENTRIES

    def peer_entries_map(self) -> Mapping[str, Entry]:
        topology = self._topology
        return topology.peers if topology else _NO_ENTRIES

    def remote_non_peer_entries_map(self) -> Mapping[str, Entry]:
        topology = self._topology
        return topology.remote_non_peers if topology else _NO_ENTRIES

    def linked_peers(self) -> LinkedPeers:
        topology = self._topology
        return topology.linked_peers if topology else LinkedPeers()
