"""Launch options of the scaling advisor operator."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from typing import NoReturn, Optional, Sequence

OPERATOR_NAME = "scaling-advisor-operator"


class OptionError(ValueError):
    """Raised when launch options cannot be parsed or are invalid."""


class _Parser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        raise OptionError(f"cannot parse arguments: {message}")


@dataclass
class LaunchOptions:
    """Options the operator is launched with."""

    config_file: str = ""
    version: bool = False

    def validate(self) -> None:
        """Check that exactly one of version and config is given."""
        if not self.config_file and not self.version:
            raise OptionError(
                "missing option: one of version or config should be specified"
            )
        if self.config_file and self.version:
            raise OptionError(
                "invalid option: both config and version cannot be specified"
            )


def parse_launch_options(cli_args: Optional[Sequence[str]] = None) -> LaunchOptions:
    """Parse the operator's command line arguments."""
    parser = _Parser(prog=OPERATOR_NAME, add_help=False)
    parser.add_argument("--config", dest="config_file", default="",
                        help="path to the config file")
    parser.add_argument("-V", "--version", action="store_true",
                        help="print version and exit")
    args = parser.parse_args(list(cli_args or []))
    return LaunchOptions(config_file=args.config_file, version=args.version)