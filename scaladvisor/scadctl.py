"""Command-line tool for the scaling advisor: pricing data and scenarios."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Iterable, Optional, Sequence, Union

from scaladvisor.awsprice import FetchError, fetch_region_json, parse_region_prices
from scaladvisor.pricing import CloudProvider, InstancePriceInfo, as_cloud_provider

DEFAULT_AWS_REGIONS = (
    "us-east-1", "us-east-2", "us-west-1", "us-west-2",
    "eu-north-1", "eu-west-1", "eu-west-2", "eu-west-3",
    "eu-central-1", "eu-south-1",
    "ap-northeast-1", "ap-northeast-2", "ap-northeast-3",
    "ap-south-1", "ap-southeast-1", "ap-southeast-2",
    "ca-central-1", "me-central-1", "sa-east-1",
)

AWS_OUTPUT_FILE_NAME = "aws_instance-type-infos.json"


def write_instance_type_infos(
    path: Union[str, Path], infos: Iterable[InstancePriceInfo]
) -> None:
    """Write price entries to ``path`` as an indented JSON array."""
    path = Path(path)
    with path.open("w", encoding="utf-8") as out:
        json.dump([info.to_dict() for info in infos], out, indent=2)
        out.write("\n")
    print(f"AWS pricing data written to {path}")


def generate_aws_prices(pricing_dir: Union[str, Path], regions: Sequence[str]) -> Path:
    """Fetch EC2 Linux prices for ``regions`` and write them into ``pricing_dir``.

    Returns the path of the written file.
    """
    pricing_dir = Path(pricing_dir)
    pricing_dir.mkdir(parents=True, exist_ok=True)

    all_infos: list[InstancePriceInfo] = []
    for region in regions:
        print(f"Fetching AWS pricing for region: {region}")
        try:
            data = fetch_region_json(region)
        except FetchError as exc:
            raise FetchError(f"failed to fetch region {region}: {exc}") from exc
        try:
            infos = parse_region_prices(region, "Linux", data)
        except ValueError as exc:
            raise ValueError(f"failed to parse region {region}: {exc}") from exc
        print(f"Fetched {len(infos)} instance type prices for region {region}")
        all_infos.extend(infos)
    all_infos.sort(key=lambda info: info.instance_type)
    print(
        f"Fetched {len(all_infos)} instance type prices across {len(regions)} region(s)"
    )
    output_file = pricing_dir / AWS_OUTPUT_FILE_NAME
    write_instance_type_infos(output_file, all_infos)
    return output_file


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scadctl",
        description=(
            "scadctl - Scaling Advisor CLI Tool. Supports generating pricing "
            "information files for various cloud providers."
        ),
    )
    commands = parser.add_subparsers(dest="command")

    genprice = commands.add_parser(
        "genprice",
        help="obtain pricing data and write to <pricing-dir> for the given cloud provider",
    )
    genprice.add_argument("pricing_dir", metavar="pricing-dir")
    genprice.add_argument(
        "-p",
        "--provider",
        default=CloudProvider.AWS.value,
        help="cloud provider (aws|gcp|azure|ali|openstack)",
    )
    genprice.add_argument(
        "-r",
        "--regions",
        action="append",
        default=None,
        help="Comma-separated list of regions; may be repeated",
    )

    genscenario = commands.add_parser(
        "genscenario",
        help="Generate scaling scenarios for the given cluster-manager",
    )
    genscenario.add_argument("-l", "--landscape", default="", help="gardener landscape name")
    managers = genscenario.add_subparsers(dest="cluster_manager")
    gardener = managers.add_parser(
        "gardener",
        help="generate scaling scenarios into <scenario-dir> for the gardener cluster manager",
    )
    gardener.add_argument("scenario_dir", metavar="scenario-dir")
    return parser


def _split_regions(values: Optional[list[str]]) -> list[str]:
    return [
        region
        for value in values or []
        if value
        for region in value.split(",")
    ]


def _run_genprice(args: argparse.Namespace) -> None:
    provider = as_cloud_provider(args.provider)
    if provider is not CloudProvider.AWS:
        raise ValueError(f"pricing not yet implemented for provider: {provider.value!r}")
    regions = _split_regions(args.regions) or list(DEFAULT_AWS_REGIONS)
    generate_aws_prices(args.pricing_dir, regions)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the command line tool and return its exit code."""
    parser = _build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        return 0 if exc.code in (0, None) else 1

    if args.command is None:
        parser.print_help()
        return 0
    try:
        if args.command == "genprice":
            _run_genprice(args)
        elif args.cluster_manager == "gardener":
            print("gardener called")
        else:
            print("genscenario called")
    except (FetchError, OSError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())