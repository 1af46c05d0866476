"""Cross-environment peers discovered through service links.

When environments are linked, their overlay network services link to each
other. Either this environment's overlay service links out to the others,
or the others link in to it. Both directions are answered from one edge
index built per snapshot, and resolution stops after one link hop.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from loguru import logger

from overlaytopo.metadata.models import Container, Network, Service
from overlaytopo.store.classify import is_running
from overlaytopo.store.models import LinkedPeers
from overlaytopo.store.snapshot import Snapshot

SELF_SERVICE_NAME = "ipsec/ipsec"


@dataclass(frozen=True)
class ServiceLinkIndex:
    """Directed link edges between system services, keyed by service uuid."""

    services_by_id: Mapping[str, Service]
    outgoing: Mapping[str, tuple[str, ...]]
    incoming: Mapping[str, tuple[str, ...]]
    unresolved: Mapping[str, tuple[str, ...]]

    @classmethod
    def build(cls, snapshot: Snapshot) -> ServiceLinkIndex:
        services_by_id: dict[str, Service] = {}
        outgoing: dict[str, list[str]] = {}
        incoming: dict[str, list[str]] = {}
        unresolved: dict[str, list[str]] = {}

        for services in snapshot.services_by_name.values():
            for service in services:
                services_by_id.setdefault(service.uuid, service)

        for source in services_by_id.values():
            for link_name in source.links:
                targets = snapshot.services_by_name.get(link_name)
                if not targets:
                    unresolved.setdefault(source.uuid, []).append(link_name)
                    continue
                for target in targets:
                    _append_once(outgoing.setdefault(source.uuid, []), target.uuid)
                    _append_once(incoming.setdefault(target.uuid, []), source.uuid)

        logger.debug(f"service link edges: {sum(len(v) for v in outgoing.values())}, unresolved: {unresolved}")
        return cls(
            services_by_id=MappingProxyType(services_by_id),
            outgoing=_freeze(outgoing),
            incoming=_freeze(incoming),
            unresolved=_freeze(unresolved),
        )

    def linked_to(self, service_uuid: str) -> tuple[Service, ...]:
        """Services that ``service_uuid`` links to."""
        return tuple(self.services_by_id[u] for u in self.outgoing.get(service_uuid, ()))

    def linked_from(self, service_uuid: str) -> tuple[Service, ...]:
        """Services that link to ``service_uuid``."""
        return tuple(self.services_by_id[u] for u in self.incoming.get(service_uuid, ()))


def _append_once(values: list[str], value: str) -> None:
    if value not in values:
        values.append(value)


def _freeze(edges: dict[str, list[str]]) -> Mapping[str, tuple[str, ...]]:
    return MappingProxyType({k: tuple(v) for k, v in edges.items()})


def _collect(services: Iterable[Service], snapshot: Snapshot, self_network: Network) -> LinkedPeers:
    networks: set[str] = set()
    containers: list[Container] = []
    for service in services:
        for container in service.containers:
            if not is_running(container):
                continue
            # Linked environments have their own overlay network with the same name.
            if snapshot.network_name(container.network_uuid) != self_network.name:
                continue
            containers.append(container)
            networks.add(container.network_uuid)
    return LinkedPeers(networks=frozenset(networks), containers=tuple(containers))


def resolve_linked_peers(
    snapshot: Snapshot,
    self_network: Network,
    index: ServiceLinkIndex | None = None,
    service_name: str = SELF_SERVICE_NAME,
) -> LinkedPeers:
    """Find running overlay containers of services linked to or from ``service_name``.

    If the service declares links, the linked services are used; otherwise
    every system service linking to it is. Link names without a matching
    service are logged and skipped.
    """
    if index is None:
        index = ServiceLinkIndex.build(snapshot)

    candidates = snapshot.services_by_name.get(service_name)
    if not candidates:
        logger.warning(f"service {service_name!r} not found in metadata, no linked peers")
        return LinkedPeers()
    current = candidates[0]

    if current.links:
        for link_name in index.unresolved.get(current.uuid, ()):
            logger.error(f"{service_name} is linked to service {link_name}, but it cannot be found in metadata")
        linked = index.linked_to(current.uuid)
    else:
        linked = index.linked_from(current.uuid)

    peers = _collect(linked, snapshot, self_network)
    logger.debug(f"linked peer networks: {sorted(peers.networks)}, containers: {[c.uuid for c in peers.containers]}")
    return peers
