import json
import urllib.error
from unittest.mock import patch

import pytest

from scaladvisor.awsprice import FetchError, fetch_region_json, parse_region_prices


def _product(instance_type, vcpu="2", memory="8 GiB", os_name="Linux", tenancy="Shared"):
    return {
        "attributes": {
            "instanceType": instance_type,
            "vcpu": vcpu,
            "memory": memory,
            "operatingSystem": os_name,
            "tenancy": tenancy,
        }
    }


def _offer(sku, *dimensions):
    dims = {
        f"{sku}.OFFER.DIM{i}": {"unit": unit, "pricePerUnit": {"USD": usd}}
        for i, (unit, usd) in enumerate(dimensions)
    }
    return {f"{sku}.OFFER": {"priceDimensions": dims}}


def _price_list(products, on_demand):
    return json.dumps({"products": products, "terms": {"OnDemand": on_demand}}).encode()


class _FakeResponse:
    def __init__(self, body, status=200):
        self._body = body
        self.status = status

    def read(self):
        return self._body

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


def test_keeps_lowest_price_per_instance_type():
    data = _price_list(
        {"A": _product("m5.large"), "B": _product("m5.large")},
        {"A": _offer("A", ("Hrs", "0.1200")), "B": _offer("B", ("Hrs", "0.0928"))},
    )
    infos = parse_region_prices("us-east-1", "Linux", data)
    assert len(infos) == 1
    info = infos[0]
    assert info.instance_type == "m5.large"
    assert info.hourly_price == 0.0928
    assert info.region == "us-east-1"
    assert info.vcpu == 2
    assert info.memory == 8.0
    assert info.os == "Linux"


def test_filters_operating_system_and_tenancy():
    data = _price_list(
        {
            "A": _product("a.large", os_name="Windows"),
            "B": _product("b.large", tenancy="Dedicated"),
            "C": _product("c.large", tenancy=""),
            "D": _product("d.large"),
        },
        {sku: _offer(sku, ("Hrs", "0.5")) for sku in "ABCD"},
    )
    infos = parse_region_prices("eu-west-1", "Linux", data)
    assert sorted(i.instance_type for i in infos) == ["c.large", "d.large"]


def test_only_per_hour_dimensions_count():
    data = _price_list(
        {"A": _product("a.large"), "B": _product("b.large")},
        {
            "A": _offer("A", ("Second", "0.0001")),
            "B": _offer("B", ("Second", "0.0001"), ("Hrs", "0.3"), ("Hrs", "0.2")),
        },
    )
    infos = parse_region_prices("r", "Linux", data)
    assert [(i.instance_type, i.hourly_price) for i in infos] == [("b.large", 0.2)]


def test_skips_products_without_terms_or_bad_prices():
    data = _price_list(
        {
            "A": _product("a.large"),
            "B": _product("b.large"),
            "C": _product("c.large"),
        },
        {"B": _offer("B", ("Hrs", "free")), "C": _offer("C", ("Hrs", "0"))},
    )
    assert parse_region_prices("r", "Linux", data) == []


def test_skips_invalid_attributes():
    data = _price_list(
        {
            "A": _product("a.large", vcpu="two"),
            "B": _product("b.large", vcpu="-1"),
            "C": _product("c.large", memory="lots GiB"),
            "D": _product("d.large", memory=""),
            "E": _product("", vcpu="2"),
        },
        {sku: _offer(sku, ("Hrs", "0.5")) for sku in "ABCDE"},
    )
    assert parse_region_prices("r", "Linux", data) == []


def test_parses_padded_vcpu_and_fractional_memory():
    data = _price_list(
        {"A": _product("t3.nano", vcpu=" 4 ", memory="0.5 GiB")},
        {"A": _offer("A", ("Hrs", "0.0052"))},
    )
    (info,) = parse_region_prices("r", "Linux", data)
    assert info.vcpu == 4
    assert info.memory == 0.5
    assert info.hourly_price == 0.0052


def test_vcpu_out_of_int32_range_is_skipped():
    data = _price_list(
        {"A": _product("huge", vcpu=str(2**31))},
        {"A": _offer("A", ("Hrs", "1"))},
    )
    assert parse_region_prices("r", "Linux", data) == []


def test_empty_document_yields_nothing():
    assert parse_region_prices("r", "Linux", b"{}") == []


def test_invalid_json_raises():
    with pytest.raises(ValueError):
        parse_region_prices("r", "Linux", b"not json")


def test_wrong_structure_raises():
    with pytest.raises(ValueError):
        parse_region_prices("r", "Linux", b'{"products": []}')


def test_fetch_returns_body_and_uses_region_url():
    seen = []

    def fake_urlopen(url):
        seen.append(url)
        return _FakeResponse(b'{"products": {}}')

    with patch("urllib.request.urlopen", fake_urlopen):
        body = fetch_region_json("eu-central-1")
    assert body == b'{"products": {}}'
    assert len(seen) == 1
    assert "/eu-central-1/index.json" in seen[0]


def test_fetch_non_ok_status_raises():
    with patch("urllib.request.urlopen", lambda url: _FakeResponse(b"", status=203)):
        with pytest.raises(FetchError, match="http status 203"):
            fetch_region_json("us-east-1")


def test_fetch_http_error_raises():
    def fake_urlopen(url):
        raise urllib.error.HTTPError(url, 404, "Not Found", hdrs=None, fp=None)

    with patch("urllib.request.urlopen", fake_urlopen):
        with pytest.raises(FetchError, match="http status 404"):
            fetch_region_json("nowhere-1")


def test_fetch_connection_error_raises():
    def fake_urlopen(url):
        raise urllib.error.URLError("connection refused")

    with patch("urllib.request.urlopen", fake_urlopen):
        with pytest.raises(FetchError, match="http get failed"):
            fetch_region_json("us-east-1")