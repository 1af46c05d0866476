"""Metadata service clients.

``BaseMetadataClient`` is the interface the topology store consumes;
``RancherMetadataClient`` talks to the Rancher metadata HTTP API.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from types import TracebackType
from typing import Any, Self, TypeVar

import requests
from loguru import logger
from pydantic import BaseModel, ValidationError

from overlaytopo.metadata.exceptions import (
    MetadataAPIError,
    MetadataConnectionError,
    MetadataTimeoutError,
)
from overlaytopo.metadata.models import Container, Host, Network, Service

METADATA_URL_TEMPLATE = "http://{address}/2015-12-19"
DEFAULT_METADATA_ADDRESS = "169.254.169.250"

_ModelT = TypeVar("_ModelT", bound=BaseModel)


class BaseMetadataClient(ABC):
    """Abstract source of inventory records for one refresh cycle."""

    @abstractmethod
    def get_self_host(self) -> Host:
        """Return the host the agent is running on."""

    @abstractmethod
    def get_hosts(self) -> list[Host]:
        """Return all hosts of the environment."""

    @abstractmethod
    def get_containers(self) -> list[Container]:
        """Return all containers of the environment."""

    @abstractmethod
    def get_services(self) -> list[Service]:
        """Return all services, including linked services of other environments."""

    @abstractmethod
    def get_networks(self) -> list[Network]:
        """Return all networks of the environment."""


class RancherMetadataClient(BaseMetadataClient):
    """HTTP client for the Rancher metadata service.

    When ``client_ip`` is set, requests carry it as ``X-Forwarded-For`` so the
    metadata service answers as it would for a container with that address.
    """

    def __init__(
        self,
        address: str = DEFAULT_METADATA_ADDRESS,
        client_ip: str | None = None,
        timeout: float = 10.0,
    ):
        self.address = address or DEFAULT_METADATA_ADDRESS
        self.client_ip = client_ip
        self.timeout = timeout
        self.base_url = METADATA_URL_TEMPLATE.format(address=self.address)
        self._session = requests.Session()
        self._session.headers["Accept"] = "application/json"
        if client_ip:
            self._session.headers["X-Forwarded-For"] = client_ip
        self._log = logger.bind(classname=self.__class__.__name__)

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self, exc_type: type[BaseException] | None, exc_val: BaseException | None, exc_tb: TracebackType | None
    ) -> None:
        self.close()

    def get(self, endpoint: str) -> Any:
        """GET ``endpoint`` relative to the versioned base URL and return decoded JSON."""
        url = f"{self.base_url}/{endpoint}"
        try:
            resp = self._session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise MetadataConnectionError(f"GET {endpoint} failed: {e}") from e

        if not resp.ok:
            raise MetadataAPIError(f"GET {endpoint} returned HTTP {resp.status_code}", status_code=resp.status_code)

        try:
            return resp.json()
        except ValueError as e:
            raise MetadataAPIError(f"GET {endpoint} returned invalid JSON: {e}", status_code=resp.status_code) from e

    def wait_until_ready(self, retries: int = 30, interval: float = 1.0) -> None:
        """Poll the ``version`` endpoint until the metadata service answers.

        Raises:
            MetadataTimeoutError: If the service did not answer after ``retries`` attempts.
        """
        for attempt in range(1, retries + 1):
            try:
                version = self.get("version")
            except (MetadataConnectionError, MetadataAPIError) as e:
                self._log.debug(f"metadata not ready (attempt {attempt}/{retries}): {e}")
                if attempt < retries:
                    time.sleep(interval)
                continue
            self._log.info(f"metadata service at {self.base_url} ready, version: {version}")
            return
        raise MetadataTimeoutError(f"metadata service at {self.base_url} not ready after {retries} attempts")

    def get_self_host(self) -> Host:
        return self._parse(Host, self.get("self/host"), "self/host")

    def get_hosts(self) -> list[Host]:
        return self._parse_list(Host, self.get("hosts"), "hosts")

    def get_containers(self) -> list[Container]:
        return self._parse_list(Container, self.get("containers"), "containers")

    def get_services(self) -> list[Service]:
        return self._parse_list(Service, self.get("services"), "services")

    def get_networks(self) -> list[Network]:
        return self._parse_list(Network, self.get("networks"), "networks")

    @staticmethod
    def _parse(model: type[_ModelT], data: Any, endpoint: str) -> _ModelT:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise MetadataAPIError(f"GET {endpoint} returned an unexpected payload: {e}") from e

    @classmethod
    def _parse_list(cls, model: type[_ModelT], data: Any, endpoint: str) -> list[_ModelT]:
        if data is None:
            return []
        if not isinstance(data, list):
            raise MetadataAPIError(f"GET {endpoint} returned {type(data).__name__}, expected a list")
        return [cls._parse(model, item, endpoint) for item in data]
