"""Topology resolution — snapshot indexing, classification and the refreshable store."""

from overlaytopo.store.classify import RUNNING_STATES
from overlaytopo.store.links import SELF_SERVICE_NAME, ServiceLinkIndex, resolve_linked_peers
from overlaytopo.store.models import Entry, LinkedPeers, Topology
from overlaytopo.store.snapshot import SELF_NETWORK_NAME, Snapshot, build_snapshot
from overlaytopo.store.store import TopologyStore
from overlaytopo.store.subnet import DEFAULT_SUBNET_PREFIX, SubnetPrefix, resolve_subnet_prefix

__all__ = [
    "DEFAULT_SUBNET_PREFIX",
    "RUNNING_STATES",
    "SELF_NETWORK_NAME",
    "SELF_SERVICE_NAME",
    "Entry",
    "LinkedPeers",
    "Topology",
    "Snapshot",
    "build_snapshot",
    "SubnetPrefix",
    "resolve_subnet_prefix",
    "ServiceLinkIndex",
    "resolve_linked_peers",
    "TopologyStore",
]
