"""Point-in-time bundle of metadata records and the lookup indexes derived from it."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType

from loguru import logger

from overlaytopo.metadata.models import Container, Host, Network, Service

SELF_NETWORK_NAME = "ipsec"


@dataclass(frozen=True)
class Snapshot:
    self_host: Host
    hosts: tuple[Host, ...]
    containers: tuple[Container, ...]
    services: tuple[Service, ...]
    networks: tuple[Network, ...]
    hosts_by_id: Mapping[str, Host]
    networks_by_id: Mapping[str, Network]
    services_by_name: Mapping[str, tuple[Service, ...]]

    def host_agent_ip(self, host_uuid: str) -> str:
        """Agent IP of the host with ``host_uuid``, empty when the host is unknown."""
        host = self.hosts_by_id.get(host_uuid)
        return host.agent_ip if host is not None else ""

    def network_name(self, network_uuid: str) -> str | None:
        network = self.networks_by_id.get(network_uuid)
        return network.name if network is not None else None


def index_hosts(hosts: Iterable[Host]) -> dict[str, Host]:
    """Map hosts by uuid."""
    hosts_by_id = {h.uuid: h for h in hosts}
    logger.debug(f"hosts_by_id: {sorted(hosts_by_id)}")
    return hosts_by_id


def index_networks(networks: Iterable[Network]) -> dict[str, Network]:
    """Map networks by uuid."""
    networks_by_id = {n.uuid: n for n in networks}
    logger.debug(f"networks_by_id: {sorted(networks_by_id)}")
    return networks_by_id


def index_services_by_name(services: Iterable[Service]) -> dict[str, tuple[Service, ...]]:
    """Map system services by ``stack_name/name``.

    Links refer to services by name, and names are not guaranteed unique,
    so each key holds every matching service in snapshot order.
    """
    grouped: dict[str, list[Service]] = {}
    for service in services:
        if not service.system:
            continue
        grouped.setdefault(service.qualified_name, []).append(service)
    logger.debug(f"services_by_name: { {k: len(v) for k, v in grouped.items()} }")
    return {k: tuple(v) for k, v in grouped.items()}


def find_self_network(networks: Sequence[Network], name: str = SELF_NETWORK_NAME) -> Network:
    """First network called ``name``; an empty ``Network`` when there is none."""
    for network in networks:
        if network.name == name:
            return network
    logger.warning(f"no network named {name!r} in metadata")
    return Network()


def build_snapshot(
    self_host: Host,
    hosts: Iterable[Host],
    containers: Iterable[Container],
    services: Iterable[Service],
    networks: Iterable[Network],
) -> Snapshot:
    hosts = tuple(hosts)
    services = tuple(services)
    networks = tuple(networks)
    return Snapshot(
        self_host=self_host,
        hosts=hosts,
        containers=tuple(containers),
        services=services,
        networks=networks,
        hosts_by_id=MappingProxyType(index_hosts(hosts)),
        networks_by_id=MappingProxyType(index_networks(networks)),
        services_by_name=MappingProxyType(index_services_by_name(services)),
    )
