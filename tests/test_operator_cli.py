import pytest

from scaladvisor.operator_cli import LaunchOptions, OptionError, parse_launch_options


@pytest.mark.parametrize(
    "args, expected",
    [
        (["--version"], LaunchOptions(version=True)),
        (["--config=/tmp/scaling-advisor.yaml"], LaunchOptions(config_file="/tmp/scaling-advisor.yaml")),
        (["-V"], LaunchOptions(version=True)),
        ([], LaunchOptions()),
    ],
)
def test_parse_launch_options(args, expected):
    assert parse_launch_options(args) == expected


def test_parse_unknown_flag():
    with pytest.raises(OptionError, match="cannot parse"):
        parse_launch_options(["--bogus"])


def test_validate_missing():
    with pytest.raises(OptionError, match="one of version or config"):
        LaunchOptions().validate()


def test_validate_both():
    with pytest.raises(OptionError, match="both config and version"):
        LaunchOptions(config_file="/tmp/scaling-advisor.yaml", version=True).validate()


@pytest.mark.parametrize(
    "options",
    [LaunchOptions(version=True), LaunchOptions(config_file="/tmp/scaling-advisor.yaml")],
)
def test_validate_ok(options):
    options.validate()
    assert options.version != bool(options.config_file)