#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
===============================================================================
 File:        args.py
 Created:     2026-02-06
 Description: Command-line argument parsing for the MetaStock reader.

              Provides:
              - CustomArgumentParser: argparse wrapper that prints help on error.
              - parse_args: Parse and validate CLI options.

              Features:
              - List the securities of an index file
              - Dump the first/last bars of every series
              - Export every series to CSV
              - Restrict to selected symbols

 Requirements:
     - Python 3.8+

 License:
     MIT License
===============================================================================
"""
import argparse
import sys
from typing import Any, Dict, List, Optional

DEFAULT_DUMP_ROWS = 5


class CustomArgumentParser(argparse.ArgumentParser):
    """
    Custom ArgumentParser that prints the help message on error.
    """
    def error(self, message: str):
        sys.stderr.write(f"{message}\n\n")
        self.print_help(sys.stderr)
        sys.exit(2)


def parse_args(argv: Optional[List[str]] = None) -> Dict[str, Any]:
    """
    Parse and validate command-line arguments.

    Parameters:
    -----------
    argv : Optional[List[str]]
        Arguments to parse. Defaults to sys.argv[1:].

    Returns:
    --------
    dict
        Dictionary of validated options.
    """
    parser = CustomArgumentParser(
        description="Reader for MetaStock index (MASTER/EMASTER/XMASTER) and data files.",
        formatter_class=argparse.RawTextHelpFormatter,
    )

    parser.add_argument(
        "index",
        nargs="?",
        metavar="INDEX_FILE",
        help="Path to a MASTER, EMASTER or XMASTER file.\n"
             "Defaults to reader.index from the configuration.",
    )

    # Mutually exclusive group: what to do with the decoded data
    command_group = parser.add_mutually_exclusive_group()
    command_group.add_argument(
        "--list",
        action="store_true",
        help="List the securities in the index file and exit (default).",
    )
    command_group.add_argument(
        "--dump",
        type=int,
        nargs="?",
        const=DEFAULT_DUMP_ROWS,
        metavar="N",
        help=f"Print the first and last N bars of every series (default N: {DEFAULT_DUMP_ROWS}).",
    )
    command_group.add_argument(
        "--export",
        type=str,
        nargs="?",
        const="",
        metavar="DIR_PATH",
        help="Write every series to CSV.\n"
             "Defaults to export.output_dir from the configuration.",
    )

    parser.add_argument(
        "--symbol",
        action="append",
        metavar="SYMBOL",
        help="Only read this symbol (repeatable).",
    )
    parser.add_argument(
        "--workers",
        type=int,
        metavar="N",
        help="Number of worker threads used to decode data files.",
    )
    parser.add_argument(
        "--config",
        type=str,
        metavar="FILE_PATH",
        help="Configuration file (default: config.user.yaml, then config.yaml).",
    )

    args = parser.parse_args(argv)

    if args.dump is not None and args.dump <= 0:
        parser.error("--dump requires a positive number of rows")

    if args.workers is not None and args.workers <= 0:
        parser.error("--workers must be a positive number")

    if args.dump is not None:
        command = "dump"
    elif args.export is not None:
        command = "export"
    else:
        command = "list"

    return {
        "index": args.index,
        "command": command,
        "rows": args.dump,
        "output_dir": args.export or None,
        "symbols": args.symbol or [],
        "workers": args.workers,
        "config": args.config,
    }
