"""Overlay subnet prefix lookup in a network's CNI configuration.

The prefix lives at ``metadata.cniConfig.<file>.ipam.subnetPrefixSize``.
Anything missing or of the wrong type along that path yields
``DEFAULT_SUBNET_PREFIX``; lookup never fails a refresh.
"""

from __future__ import annotations

from typing import Any, NamedTuple

from loguru import logger

from overlaytopo.metadata.models import Network

DEFAULT_SUBNET_PREFIX = "/16"
CNI_CONFIG_KEY = "cniConfig"


class SubnetPrefix(NamedTuple):
    prefix: str
    found: bool


_DEFAULT = SubnetPrefix(DEFAULT_SUBNET_PREFIX, found=False)


def _as_dict(value: Any) -> dict[str, Any] | None:
    return value if isinstance(value, dict) else None


def resolve_subnet_prefix(network: Network) -> SubnetPrefix:
    """Return the subnet prefix (e.g. ``"/16"``) configured for ``network``.

    Only the first CNI config file examined decides the result; dict order
    of the files is whatever the metadata service sent.
    """
    conf = _as_dict(network.metadata.get(CNI_CONFIG_KEY))
    if not conf:
        logger.warning(f"no {CNI_CONFIG_KEY} in network {network.name!r}, using default {DEFAULT_SUBNET_PREFIX}")
        return _DEFAULT

    for file_name, file_conf in conf.items():
        props = _as_dict(file_conf) or {}
        ipam = _as_dict(props.get("ipam"))
        if ipam is None:
            logger.error(f"couldn't find ipam key in network config {file_name!r}")
            return _DEFAULT

        prefix = ipam.get("subnetPrefixSize")
        if not isinstance(prefix, str):
            logger.error(f"couldn't find subnetPrefixSize in ipam config of {file_name!r}")
            return _DEFAULT

        return SubnetPrefix(prefix, found=True)

    return _DEFAULT
