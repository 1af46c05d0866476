"""Turn hosts and containers into topology entries and sort them into maps."""

from __future__ import annotations

from dataclasses import dataclass, field

from loguru import logger

from overlaytopo.metadata.models import Container, Host, Network
from overlaytopo.store.models import Entry
from overlaytopo.store.snapshot import Snapshot

RUNNING_STATES = frozenset({"running", "starting"})


def is_running(container: Container) -> bool:
    return container.state in RUNNING_STATES


def entry_from_host(host: Host, self_host: Host) -> Entry:
    """Peer entry for a host: its agent IP as a single address."""
    return Entry(
        ip_address=f"{host.agent_ip}/32",
        host_ip_address=host.agent_ip,
        is_self=host.uuid == self_host.uuid,
        is_peer=True,
    )


def entry_from_container(container: Container, snapshot: Snapshot, subnet_prefix: str) -> Entry:
    return Entry(
        ip_address=f"{container.primary_ip}{subnet_prefix}",
        host_ip_address=snapshot.host_agent_ip(container.host_uuid),
        is_self=False,
        is_peer=False,
    )


def container_skip_reason(container: Container, snapshot: Snapshot, self_network: Network) -> str | None:
    """Why ``container`` gets no entry, or ``None`` if it is visible."""
    if not is_running(container):
        return f"state {container.state!r}"
    if not container.primary_ip:
        return "no primary IP"
    if container.network_from_container_uuid:
        return f"network from container {container.network_from_container_uuid}"
    if container.network_uuid != self_network.uuid:
        return f"network {container.network_uuid!r} is not the overlay network"
    if container.primary_ip == snapshot.self_host.agent_ip:
        return "primary IP is the agent IP of this host"
    if container.primary_ip == snapshot.host_agent_ip(container.host_uuid):
        return "host networking"
    return None


def build_peers_map(snapshot: Snapshot) -> dict[str, Entry]:
    """One peer entry per host, keyed by agent IP."""
    return {h.agent_ip: entry_from_host(h, snapshot.self_host) for h in snapshot.hosts}


@dataclass
class Classification:
    entries: list[Entry] = field(default_factory=list)
    local: dict[str, Entry] = field(default_factory=dict)
    remote: dict[str, Entry] = field(default_factory=dict)
    remote_non_peers: dict[str, Entry] = field(default_factory=dict)


def classify_containers(
    snapshot: Snapshot,
    self_network: Network,
    subnet_prefix: str,
    self_entry: Entry,
) -> Classification:
    """Build entries for all visible containers and file them as local or remote.

    Containers are visited in snapshot order; when two share a bare IP the
    first one wins.
    """
    result = Classification()
    seen: set[str] = set()

    for container in snapshot.containers:
        reason = container_skip_reason(container, snapshot, self_network)
        if reason is not None:
            logger.debug(f"skipping container {container.uuid}: {reason}")
            continue

        entry = entry_from_container(container, snapshot, subnet_prefix)
        ip = entry.bare_ip
        if ip in seen:
            logger.debug(f"skipping container {container.uuid}: {ip} already seen")
            continue
        seen.add(ip)

        if entry.host_ip_address == self_entry.host_ip_address:
            result.local[ip] = entry
        else:
            result.remote[ip] = entry
            # container entries are never peers, so this mirrors remote
            if not entry.is_peer:
                result.remote_non_peers[ip] = entry

        logger.debug(f"entry: {entry}")
        result.entries.append(entry)

    return result
