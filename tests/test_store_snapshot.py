"""Tests for overlaytopo/store/snapshot.py"""

import pytest

from overlaytopo.metadata.models import Network
from overlaytopo.store.snapshot import (
    build_snapshot,
    find_self_network,
    index_hosts,
    index_networks,
    index_services_by_name,
)


class TestIndexes:
    """Tests for the index helpers."""

    def test_index_hosts_by_uuid(self, make_host):
        """Hosts are keyed by uuid."""
        h1, h2 = make_host("h1", "10.0.0.1"), make_host("h2", "10.0.0.2")

        assert index_hosts([h1, h2]) == {"h1": h1, "h2": h2}

    def test_index_networks_by_uuid(self, make_network):
        """Networks are keyed by uuid."""
        ipsec, bridge = make_network(), make_network("net-bridge", "bridge", {})

        assert index_networks([ipsec, bridge]) == {"net-ipsec": ipsec, "net-bridge": bridge}

    def test_services_grouped_by_qualified_name(self, make_service):
        """Services sharing stack/name are kept together, in order."""
        a = make_service("s1", "ipsec", "ipsec")
        b = make_service("s2", "ipsec", "ipsec")
        c = make_service("s3", "healthcheck", "healthcheck")

        index = index_services_by_name([a, b, c])

        assert index == {"ipsec/ipsec": (a, b), "healthcheck/healthcheck": (c,)}

    def test_services_index_skips_non_system(self, make_service):
        """Only system services are indexed."""
        user = make_service("s1", "web", "app", system=False)

        assert index_services_by_name([user]) == {}


class TestFindSelfNetwork:
    """Tests for find_self_network."""

    def test_finds_ipsec_network(self, make_network):
        """The network named ipsec is the overlay network."""
        ipsec = make_network()

        assert find_self_network([make_network("n0", "bridge", {}), ipsec]) is ipsec

    def test_first_match_wins(self, make_network):
        """With duplicate names the first one wins."""
        first, second = make_network("n1"), make_network("n2")

        assert find_self_network([first, second]) is first

    def test_missing_returns_empty_network(self, make_network):
        """Without an overlay network an empty Network is returned."""
        assert find_self_network([make_network("n0", "bridge", {})]) == Network()


class TestBuildSnapshot:
    """Tests for build_snapshot."""

    def test_collections_and_indexes(self, two_hosts, make_container, make_service, make_network):
        """build_snapshot freezes the collections and builds all three indexes."""
        h1, h2 = two_hosts
        container = make_container()
        service = make_service()
        network = make_network()

        snapshot = build_snapshot(h1, [h1, h2], [container], [service], [network])

        assert snapshot.self_host is h1
        assert snapshot.hosts == (h1, h2)
        assert snapshot.containers == (container,)
        assert snapshot.hosts_by_id["h2"] is h2
        assert snapshot.networks_by_id["net-ipsec"] is network
        assert snapshot.services_by_name["ipsec/ipsec"] == (service,)

    def test_indexes_read_only(self, two_hosts):
        """Snapshot indexes cannot be modified."""
        h1, h2 = two_hosts
        snapshot = build_snapshot(h1, [h1, h2], [], [], [])

        with pytest.raises(TypeError):
            snapshot.hosts_by_id["h3"] = h1  # type: ignore[index]

    def test_host_agent_ip(self, two_hosts):
        """host_agent_ip looks up by uuid and is empty for unknown hosts."""
        h1, h2 = two_hosts
        snapshot = build_snapshot(h1, [h1, h2], [], [], [])

        assert snapshot.host_agent_ip("h2") == "10.0.0.2"
        assert snapshot.host_agent_ip("nope") == ""

    def test_network_name(self, two_hosts, make_network):
        """network_name is None for unknown networks."""
        h1, _ = two_hosts
        snapshot = build_snapshot(h1, [h1], [], [], [make_network()])

        assert snapshot.network_name("net-ipsec") == "ipsec"
        assert snapshot.network_name("missing") is None
