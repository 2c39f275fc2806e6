import json

import pytest

from scaladvisor.pricing import (
    CloudProvider,
    InstancePriceInfo,
    InstancePricing,
    PriceKey,
    PricingError,
    as_cloud_provider,
    get_instance_pricing_access,
    get_instance_pricing_from_data,
)

TEST_ENTRIES = [
    {
        "instanceType": "instance_type_1",
        "region": "region_a",
        "vcpu": 2,
        "memory": 4,
        "hourlyPrice": 0.5,
        "os": "Linux",
    },
    {
        "instanceType": "instance_type_2",
        "region": "region_b",
        "vcpu": 4,
        "memory": 8,
        "hourlyPrice": 1.25,
        "os": "Linux",
    },
]


@pytest.fixture
def access():
    return get_instance_pricing_from_data(
        CloudProvider.AWS, json.dumps(TEST_ENTRIES).encode()
    )


def test_get_instance_pricing(access):
    info1 = access.get_info("region_a", "instance_type_1")
    info2 = access.get_info("region_b", "instance_type_2")
    assert info1.hourly_price == 0.5
    assert info2.hourly_price == 1.25
    assert info2.vcpu == 4
    assert info2.memory == 8.0


@pytest.mark.parametrize(
    "region, instance_type, error",
    [
        ("region_a", "instance_type_1", False),
        ("region_b", "instance_type_2", False),
        ("region_a", "invalid_instance", True),
        ("invalid_region", "instance_type_2", True),
    ],
)
def test_get_price(access, region, instance_type, error):
    if error:
        with pytest.raises(PricingError):
            access.get_info(region, instance_type)
    else:
        info = access.get_info(region, instance_type)
        assert (info.region, info.instance_type) == (region, instance_type)


def test_load_from_file(tmp_path):
    path = tmp_path / "prices.json"
    path.write_text(json.dumps(TEST_ENTRIES))
    access = get_instance_pricing_access(CloudProvider.AWS, path)
    assert access.cloud_provider is CloudProvider.AWS
    assert len(access) == 2


def test_missing_file_raises(tmp_path):
    with pytest.raises(OSError):
        get_instance_pricing_access(CloudProvider.AWS, tmp_path / "nope.json")


def test_invalid_json_raises():
    with pytest.raises(PricingError):
        get_instance_pricing_from_data(CloudProvider.AWS, b"{not json")


def test_non_array_raises():
    with pytest.raises(PricingError):
        get_instance_pricing_from_data(CloudProvider.AWS, b'{"a": 1}')


def test_duplicate_key_last_wins():
    entries = [
        {"instanceType": "t", "region": "r", "hourlyPrice": 1.0},
        {"instanceType": "t", "region": "r", "hourlyPrice": 2.0},
    ]
    access = get_instance_pricing_from_data(CloudProvider.AWS, json.dumps(entries))
    assert access.get_info("r", "t").hourly_price == 2.0
    assert len(access) == 1


def test_dict_round_trip():
    info = InstancePriceInfo("m5.large", "eu-west-1", 2, 8.0, 0.107, "Linux")
    assert InstancePriceInfo.from_dict(info.to_dict()) == info
    assert info.key == PriceKey(name="m5.large", region="eu-west-1")


def test_instance_pricing_direct():
    pricing = InstancePricing(CloudProvider.GCP, [InstancePriceInfo("x", "y")])
    assert pricing.get_info("y", "x").instance_type == "x"


def test_as_cloud_provider():
    assert as_cloud_provider("aws") is CloudProvider.AWS
    assert as_cloud_provider("openstack") is CloudProvider.OPENSTACK
    with pytest.raises(ValueError):
        as_cloud_provider("unknown")