"""Pydantic models for records served by the Rancher metadata service."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


class _MetadataRecord(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class Host(_MetadataRecord):
    uuid: str = ""
    name: str = ""
    hostname: str = ""
    agent_ip: str = ""
    labels: dict[str, str] = Field(default_factory=dict)

    @field_validator("labels", mode="before")
    @classmethod
    def _null_labels(cls, value: Any) -> Any:
        return value or {}


class Container(_MetadataRecord):
    uuid: str = ""
    name: str = ""
    host_uuid: str = ""
    network_uuid: str = ""
    network_from_container_uuid: str = ""
    primary_ip: str = ""
    state: str = ""
    system: bool = False
    service_name: str = ""
    stack_name: str = ""

    @field_validator("primary_ip", "network_from_container_uuid", "network_uuid", "host_uuid", mode="before")
    @classmethod
    def _null_str(cls, value: Any) -> Any:
        return value or ""


class Service(_MetadataRecord):
    uuid: str = ""
    name: str = ""
    stack_name: str = ""
    kind: str = ""
    system: bool = False
    links: dict[str, str] = Field(default_factory=dict)  # "stack/service" -> alias
    containers: list[Container] = Field(default_factory=list)

    @field_validator("links", "containers", mode="before")
    @classmethod
    def _null_collection(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return {} if info.field_name == "links" else []
        return value

    @property
    def qualified_name(self) -> str:
        """``stack_name/name`` — the key links refer to services by."""
        return f"{self.stack_name}/{self.name}"


class Network(_MetadataRecord):
    uuid: str = ""
    name: str = ""
    default: bool = False
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("metadata", mode="before")
    @classmethod
    def _null_metadata(cls, value: Any) -> Any:
        return value or {}
