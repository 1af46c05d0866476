"""Metadata service access — record models, client interface and HTTP client."""

from overlaytopo.metadata.client import DEFAULT_METADATA_ADDRESS, BaseMetadataClient, RancherMetadataClient
from overlaytopo.metadata.exceptions import (
    MetadataAPIError,
    MetadataConnectionError,
    MetadataError,
    MetadataTimeoutError,
)
from overlaytopo.metadata.models import Container, Host, Network, Service

__all__ = [
    "DEFAULT_METADATA_ADDRESS",
    "BaseMetadataClient",
    "RancherMetadataClient",
    "Host",
    "Container",
    "Service",
    "Network",
    "MetadataError",
    "MetadataConnectionError",
    "MetadataAPIError",
    "MetadataTimeoutError",
]
