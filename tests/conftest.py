"""Shared fixtures for the overlaytopo test suite."""

from __future__ import annotations

import pytest

from overlaytopo.metadata.client import BaseMetadataClient
from overlaytopo.metadata.models import Container, Host, Network, Service

SUBNET_16_CONFIG = {"cniConfig": {"10-rancher.conf": {"ipam": {"subnetPrefixSize": "/16"}}}}


class FakeMetadataClient(BaseMetadataClient):
    """In-memory metadata source; set ``fail_on`` to make one fetch raise."""

    def __init__(self, self_host, hosts=(), containers=(), services=(), networks=()):
        self.self_host = self_host
        self.hosts = list(hosts)
        self.containers = list(containers)
        self.services = list(services)
        self.networks = list(networks)
        self.fail_on: str | None = None
        self.error: Exception = RuntimeError("metadata unavailable")
        self.calls: list[str] = []

    def _answer(self, name, value):
        self.calls.append(name)
        if self.fail_on == name:
            raise self.error
        return value

    def get_self_host(self):
        return self._answer("self_host", self.self_host)

    def get_hosts(self):
        return self._answer("hosts", list(self.hosts))

    def get_containers(self):
        return self._answer("containers", list(self.containers))

    def get_services(self):
        return self._answer("services", list(self.services))

    def get_networks(self):
        return self._answer("networks", list(self.networks))


# ── record factories ──────────────────────────────────────────────────


@pytest.fixture()
def make_host():
    """Factory fixture returning a Host with customizable fields."""

    def _make(uuid="h1", agent_ip="10.0.0.1", **kwargs):
        kwargs.setdefault("name", uuid)
        return Host(uuid=uuid, agent_ip=agent_ip, **kwargs)

    return _make


@pytest.fixture()
def make_container():
    """Factory fixture returning a running overlay Container."""

    def _make(uuid="c1", primary_ip="10.42.0.5", host_uuid="h1", **kwargs):
        defaults = {
            "network_uuid": "net-ipsec",
            "state": "running",
        }
        defaults.update(kwargs)
        return Container(uuid=uuid, primary_ip=primary_ip, host_uuid=host_uuid, **defaults)

    return _make


@pytest.fixture()
def make_service():
    """Factory fixture returning a system Service."""

    def _make(uuid="s1", name="ipsec", stack_name="ipsec", **kwargs):
        defaults = {"system": True}
        defaults.update(kwargs)
        return Service(uuid=uuid, name=name, stack_name=stack_name, **defaults)

    return _make


@pytest.fixture()
def make_network():
    """Factory fixture returning a Network (the overlay network by default)."""

    def _make(uuid="net-ipsec", name="ipsec", metadata=None):
        return Network(uuid=uuid, name=name, metadata=SUBNET_16_CONFIG if metadata is None else metadata)

    return _make


# ── two-host environment ──────────────────────────────────────────────


@pytest.fixture()
def two_hosts(make_host):
    """Self host H1 (10.0.0.1) and a second host H2 (10.0.0.2)."""
    return make_host("h1", "10.0.0.1"), make_host("h2", "10.0.0.2")


@pytest.fixture()
def fake_client(two_hosts, make_container, make_network):
    """FakeMetadataClient with one running overlay container on each of two hosts."""
    h1, h2 = two_hosts
    return FakeMetadataClient(
        self_host=h1,
        hosts=[h1, h2],
        containers=[
            make_container("w1", "10.42.0.5", "h1"),
            make_container("w2", "10.42.0.6", "h2"),
        ],
        networks=[make_network()],
    )


@pytest.fixture()
def fake_client_factory():
    """The FakeMetadataClient class, for tests that assemble their own environment."""
    return FakeMetadataClient
