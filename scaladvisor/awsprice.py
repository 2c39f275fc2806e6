"""Fetching and parsing EC2 on-demand prices from the public price list."""

from __future__ import annotations

import json
import re
import urllib.error
import urllib.request
from typing import Any, Optional, Union

from scaladvisor.pricing import InstancePriceInfo

PRICE_LIST_URL = (
    "https://pricing.us-east-1.amazonaws.com/offers/v1.0/aws/AmazonEC2/current/"
    "{region}/index.json"
)

_MAX_INT32 = 2**31 - 1
_INT_PATTERN = re.compile(r"[+-]?[0-9]+")


class FetchError(Exception):
    """Raised when price list data cannot be downloaded."""


def fetch_region_json(region: str) -> bytes:
    """Download the raw JSON price list of ``region``."""
    url = PRICE_LIST_URL.format(region=region)
    try:
        with urllib.request.urlopen(url) as response:
            status = response.status
            if status != 200:
                raise FetchError(f"http status {status} from {url}")
            return response.read()
    except urllib.error.HTTPError as exc:
        raise FetchError(f"http status {exc.code} from {url}") from exc
    except urllib.error.URLError as exc:
        raise FetchError(f"http get failed: {exc.reason}") from exc


def _as_object(value: Any, what: str) -> dict:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{what} must be a JSON object, got {value!r}")
    return value


def _as_string(value: Any, what: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{what} must be a JSON string, got {value!r}")
    return value


def _parse_float(text: str) -> Optional[float]:
    if "_" in text or text != text.strip():
        return None
    try:
        return float(text)
    except ValueError:
        return None


def _parse_vcpu(text: str) -> int:
    """Convert a vCPU attribute such as ``"4"`` to an integer count."""
    stripped = text.strip()
    if not _INT_PATTERN.fullmatch(stripped):
        raise ValueError(f"invalid vCPU value: {text!r}")
    value = int(stripped)
    if value < 0 or value > _MAX_INT32:
        raise ValueError(f"vCPU value {value} out of int32 range")
    return value


def _parse_memory(text: str) -> float:
    """Convert a memory attribute such as ``"16 GiB"`` to GiB."""
    parts = text.split()
    if not parts:
        raise ValueError(f"invalid memory string: {text!r}")
    value = _parse_float(parts[0])
    if value is None:
        raise ValueError(f"invalid memory string: {text!r}")
    return value


def _on_demand_hourly_price(on_demand: dict, sku: str) -> float:
    """Return the lowest per-hour USD on-demand price of ``sku``, or 0.0."""
    offers = _as_object(on_demand.get(sku), f"offers of {sku}")
    best = 0.0
    for offer in offers.values():
        dimensions = _as_object(
            _as_object(offer, "offer term").get("priceDimensions"), "priceDimensions"
        )
        for dimension in dimensions.values():
            dimension = _as_object(dimension, "price dimension")
            if _as_string(dimension.get("unit"), "unit") != "Hrs":
                continue
            per_unit = _as_object(dimension.get("pricePerUnit"), "pricePerUnit")
            if "USD" not in per_unit:
                continue
            value = _parse_float(_as_string(per_unit["USD"], "USD price"))
            if value is None:
                continue
            if best == 0.0 or value < best:
                best = value
    return best


def parse_region_prices(
    region: str, os_name: str, data: Union[bytes, str]
) -> list[InstancePriceInfo]:
    """Parse a region's price list into per-instance-type hourly prices.

    Only shared-tenancy products of ``os_name`` with a positive per-hour
    on-demand price are kept; of several such products for one instance type
    the cheapest wins. Raises ValueError if the data is not a valid price list.
    """
    price_list = _as_object(json.loads(data), "price list")
    products = _as_object(price_list.get("products"), "products")
    terms = _as_object(price_list.get("terms"), "terms")
    on_demand = _as_object(terms.get("OnDemand"), "OnDemand terms")

    best: dict[tuple[str, str], InstancePriceInfo] = {}
    for sku, product in products.items():
        attrs = _as_object(
            _as_object(product, f"product {sku}").get("attributes"), "attributes"
        )
        instance_type = _as_string(attrs.get("instanceType"), "instanceType")
        vcpu_text = _as_string(attrs.get("vcpu"), "vcpu")
        memory_text = _as_string(attrs.get("memory"), "memory")
        operating_system = _as_string(attrs.get("operatingSystem"), "operatingSystem")
        tenancy = _as_string(attrs.get("tenancy"), "tenancy")
        if not instance_type or not vcpu_text or not memory_text:
            continue
        if operating_system != os_name:
            continue
        if tenancy and tenancy != "Shared":
            continue
        try:
            vcpu = _parse_vcpu(vcpu_text)
            memory = _parse_memory(memory_text)
        except ValueError:
            continue
        price = _on_demand_hourly_price(on_demand, sku)
        if price <= 0:
            continue
        key = (instance_type, operating_system)
        existing = best.get(key)
        if existing is None or price < existing.hourly_price:
            best[key] = InstancePriceInfo(
                instance_type=instance_type,
                region=region,
                vcpu=vcpu,
                memory=memory,
                hourly_price=price,
                os=operating_system,
            )
    return list(best.values())