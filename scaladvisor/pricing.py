"""Instance pricing data: loading price lists and looking up hourly prices."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Union


class PricingError(Exception):
    """Raised when pricing data cannot be loaded or an entry cannot be found."""


class CloudProvider(str, Enum):
    """Cloud providers for which pricing data can be held."""

    AWS = "aws"
    GCP = "gcp"
    AZURE = "azure"
    ALI = "ali"
    OPENSTACK = "openstack"


def as_cloud_provider(value: str) -> CloudProvider:
    """Return the cloud provider named by ``value``, raising ValueError if unknown."""
    try:
        return CloudProvider(value)
    except ValueError:
        supported = ", ".join(p.value for p in CloudProvider)
        raise ValueError(
            f"unsupported cloud provider {value!r}: must be one of {supported}"
        ) from None


@dataclass(frozen=True)
class PriceKey:
    """Lookup key of a price entry."""

    name: str
    region: str


@dataclass(frozen=True)
class InstancePriceInfo:
    """Price and shape of one instance type in one region."""

    instance_type: str
    region: str
    vcpu: int = 0
    memory: float = 0.0
    hourly_price: float = 0.0
    os: str = ""

    @classmethod
    def from_dict(cls, entry: dict[str, Any]) -> "InstancePriceInfo":
        """Build an entry from its JSON object form."""
        if not isinstance(entry, dict):
            raise PricingError(f"price entry must be an object, got {entry!r}")
        try:
            return cls(
                instance_type=str(entry.get("instanceType", "")),
                region=str(entry.get("region", "")),
                vcpu=int(entry.get("vcpu", 0)),
                memory=float(entry.get("memory", 0.0)),
                hourly_price=float(entry.get("hourlyPrice", 0.0)),
                os=str(entry.get("os", "")),
            )
        except (TypeError, ValueError) as exc:
            raise PricingError(f"invalid price entry {entry!r}: {exc}") from exc

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON object form of this entry."""
        return {
            "instanceType": self.instance_type,
            "region": self.region,
            "vcpu": self.vcpu,
            "memory": self.memory,
            "hourlyPrice": self.hourly_price,
            "os": self.os,
        }

    @property
    def key(self) -> PriceKey:
        return PriceKey(name=self.instance_type, region=self.region)


class InstancePricing:
    """Price entries of one cloud provider, indexed by instance type and region."""

    def __init__(self, provider: CloudProvider, infos: list[InstancePriceInfo]):
        self.cloud_provider = provider
        self._infos_by_key = {info.key: info for info in infos}

    def __len__(self) -> int:
        return len(self._infos_by_key)

    def get_info(self, region: str, instance_type: str) -> InstancePriceInfo:
        """Return the price entry for ``instance_type`` in ``region``."""
        try:
            return self._infos_by_key[PriceKey(name=instance_type, region=region)]
        except KeyError:
            raise PricingError(
                f"no instance type info found for instanceType {instance_type!r} "
                f"in region {region!r}"
            ) from None


def _parse_instance_type_infos(data: Union[bytes, str]) -> list[InstancePriceInfo]:
    try:
        entries = json.loads(data)
    except (ValueError, UnicodeDecodeError) as exc:
        raise PricingError(f"cannot parse instance pricing data: {exc}") from exc
    if entries is None:
        return []
    if not isinstance(entries, list):
        raise PricingError("instance pricing data must be a JSON array")
    return [InstancePriceInfo.from_dict(entry) for entry in entries]


def get_instance_pricing_from_data(
    provider: CloudProvider, data: Union[bytes, str]
) -> InstancePricing:
    """Build pricing access from JSON pricing data."""
    return InstancePricing(provider, _parse_instance_type_infos(data))


def get_instance_pricing_access(
    provider: CloudProvider, pricing_data_path: Union[str, Path]
) -> InstancePricing:
    """Build pricing access from the JSON pricing file at ``pricing_data_path``."""
    data = Path(pricing_data_path).read_bytes()
    return get_instance_pricing_from_data(provider, data)