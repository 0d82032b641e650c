#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
===============================================================================
 File:        run.py
 Created:     2026-02-06
 Description: Main entry point for the MetaStock reader.

              Workflow:
              1. Load configuration
              2. Parse command-line arguments
              3. Decode the index file
              4. List entries, or decode every data file in a thread pool
              5. Dump or export the decoded series
              6. Report missing/broken data files and runtime

 Usage:
    python -m metastock.run path/to/EMASTER --dump 3

 Requirements:
     - Python 3.8+
     - pandas
     - tqdm

 License:
     MIT License
===============================================================================
"""
import re
import sys
import time
from pathlib import Path
from typing import List, Optional
from tqdm import tqdm

from metastock.args import parse_args
from metastock.codec.dates import format_date
from metastock.codec.exceptions import MetastockError
from metastock.codec.index import IndexEntry
from metastock.config.app_config import ExportConfig, load_app_config, resolve_config_path
from metastock.io.directory import MetastockReader, Security, data_file_name


def list_entries(entries: List[IndexEntry], reader: MetastockReader) -> None:
    """Print one line per index entry."""
    print(f"\n--- {len(entries)} securities " + "-" * 62)
    for e in entries:
        file_name = data_file_name(e.data_file_number, reader.config.extensions)
        freq = f"{e.frequency}{e.intraday_minutes}" if e.is_intraday else e.frequency
        label = e.full_name or e.name or ""
        print(
            f"{file_name:<10} {e.symbol:<14} {freq:<4} "
            f"{format_date(e.start_date):>10} .. {format_date(e.end_date):<10} {label}"
        )
    print("-" * 80)


def dump_securities(securities: List[Security], num_rows: int) -> None:
    """Print the first and last `num_rows` bars of every series."""
    for s in securities:
        if s.missing or s.failed or not len(s.series):
            continue
        df = s.series.to_dataframe()
        print(f"\n--- {s.entry.symbol} ({Path(s.path).name}, {s.series.field_count} fields) ---")
        print(df.head(num_rows))
        if len(df) > num_rows:
            print("...")
            print(df.tail(num_rows))
        print(f"Total Records: {len(df)}")


def export_filename(security: Security) -> str:
    symbol = re.sub(r"[^A-Za-z0-9._-]+", "_", security.entry.symbol) or "UNNAMED"
    return f"F{security.entry.data_file_number}_{symbol}.csv"


def export_securities(securities: List[Security], output_dir: Path, config: ExportConfig) -> int:
    """
    Write every non-empty series to `output_dir` as CSV.

    Returns:
        int: Number of files written.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    count = 0
    for s in securities:
        if not len(s.series):
            continue
        output_path = output_dir / export_filename(s)
        s.series.to_dataframe().to_csv(
            output_path,
            date_format=config.date_format,
            float_format=config.float_format,
        )
        print(f"  ✓ Exported: {output_path}")
        count += 1
    return count


def report_problems(securities: List[Security], reader: MetastockReader) -> None:
    for s in securities:
        if s.failed:
            print(f"  ✗ {s.entry.symbol}: {s.error}")
        elif s.missing:
            name = data_file_name(s.entry.data_file_number, reader.config.extensions)
            print(f"  - {s.entry.symbol}: {name} not found, left empty")


def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the reader workflow. Returns a process exit code.
    """
    try:
        start_time = time.time()

        options = parse_args(argv)
        config = load_app_config(resolve_config_path(options["config"]))
        if options["workers"]:
            config.reader.max_workers = options["workers"]

        index_path = options["index"] or config.reader.index
        if not index_path:
            print("Error: no index file given and reader.index is not configured.")
            return 2

        reader = MetastockReader(config.reader)

        if options["command"] == "list":
            entries = reader.read_index(index_path)
            if options["symbols"]:
                wanted = set(options["symbols"])
                entries = [e for e in entries if e.symbol in wanted]
            list_entries(entries, reader)
            return 0

        print(f"Reading {index_path} ({reader.max_workers} workers)")
        with tqdm(unit="files", colour="white") as progress:
            securities = reader.read(
                index_path,
                symbols=options["symbols"],
                on_done=lambda _: progress.update(1),
                skip_errors=True,
            )

        if options["command"] == "dump":
            dump_securities(securities, options["rows"])
        else:
            output_dir = Path(options["output_dir"] or config.export.output_dir)
            count = export_securities(securities, output_dir, config.export)
            print(f"Exported {count} of {len(securities)} series to {output_dir}")

        report_problems(securities, reader)

        elapsed = time.time() - start_time
        print(f"\nTotal runtime: {elapsed:.2f} seconds")
        return 0

    except KeyboardInterrupt:
        print("")
        return 130
    except SystemExit as e:
        # argparse exit codes
        if e.code == 2:
            print("\nExiting due to command-line syntax error.")
        return e.code if isinstance(e.code, int) else 1
    except (MetastockError, OSError) as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
