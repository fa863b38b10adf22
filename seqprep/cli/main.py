# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
CLI entrypoint for seqprep.

Every operation is a subcommand of `seqprep`. The global options
(--config, --log-level) are shared by all subcommands through a parent
parser.

Usage:
    seqprep info --config configs/bert.yaml
    seqprep preprocess --config configs/bert.yaml --text "Hello world"
"""

import argparse
import sys

from seqprep.cli.commands import handle_info, handle_preprocess
from seqprep.cli.exit_codes import USER_ERROR


def _build_global_parser() -> argparse.ArgumentParser:
    """Options every subcommand inherits. add_help=False avoids clashing -h flags."""
    parent = argparse.ArgumentParser(add_help=False)
    parent.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to YAML configuration file with a model section.",
    )
    parent.add_argument(
        "--log-level",
        type=str,
        default=None,
        dest="log_level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging verbosity; overrides global.log_level from the config.",
    )
    return parent


def _register_subcommands(
    subparsers: argparse._SubParsersAction,  # type: ignore[type-arg]
    parent: argparse.ArgumentParser,
) -> None:
    info_parser = subparsers.add_parser(
        "info",
        parents=[parent],
        help="Show which tokenizer the preprocessor selects and the input layout.",
    )
    info_parser.set_defaults(func=handle_info)

    preprocess_parser = subparsers.add_parser(
        "preprocess",
        parents=[parent],
        help="Encode text into the model's input buffers.",
    )
    preprocess_parser.add_argument(
        "--text",
        type=str,
        required=True,
        help="The text to encode.",
    )
    preprocess_parser.set_defaults(func=handle_preprocess)


def main() -> None:
    """
    Parse the command line, run the chosen subcommand and exit with its code.

    With no subcommand, show help and exit with USER_ERROR.
    """
    parent = _build_global_parser()

    root_parser = argparse.ArgumentParser(
        prog="seqprep",
        description="seqprep: fill sequence model input buffers from raw text.",
        parents=[parent],
    )
    subparsers = root_parser.add_subparsers(dest="command")
    _register_subcommands(subparsers, parent)

    args = root_parser.parse_args()

    if not hasattr(args, "func") or args.func is None:
        root_parser.print_help()
        sys.exit(USER_ERROR)

    exit_code = args.func(args)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
