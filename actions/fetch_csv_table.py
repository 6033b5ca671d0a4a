#!/usr/bin/env python3
"""
Read a CSV table from a file or URL, inspect it, and optionally save it.

**Usage**:
    python actions/fetch_csv_table.py data/prices.csv --titled
    python actions/fetch_csv_table.py https://example.com/table.csv --titled \\
        --proxy http://10.3.135.203:808 --timeout 10
    python actions/fetch_csv_table.py data/prices.csv --titled \\
        --lookup Date=2013-04-15 --target Close
    python actions/fetch_csv_table.py data/prices.csv --output out/prices_lf.csv \\
        --output-delimiter LF

**What this script does**:
  1. Load reader/writer defaults from environment (.env file)
  2. Read the table from a local path or an http(s) URL
  3. Print its shape and titles
  4. Optionally print the --target column for rows where KEY == VALUE
  5. Optionally write the table to --output

**Example output**:
    $ python actions/fetch_csv_table.py data/prices.csv --titled --lookup Date=2013-04-15 --target Close
    Reading data/prices.csv...
    ✓ 2 rows x 2 columns
    ✓ Titles: ['Date', 'Close']
    Close in 2013-04-15 : 10.5
    Done!
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Add project root to Python path so we can import csvtable
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from csvtable.config.settings import DELIMITER_ALIASES, get_settings, parse_delimiter
from csvtable.data.errors import CsvError
from csvtable.data.reader import CsvReader
from csvtable.data.table import Table
from csvtable.data.writer import CsvWriter


def parse_args(argv: Optional[List[str]] = None):
    """
    Parse command line arguments.

    Returns:
        Namespace with attributes: source, titled, encoding, proxy, timeout,
        lookup, target, output, output_delimiter, verbose.
    """
    parser = argparse.ArgumentParser(
        description="Read a CSV table from a file or URL",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "source",
        help="Path to a CSV file, or an http(s) URL",
    )
    parser.add_argument(
        "--titled",
        action="store_true",
        default=None,
        help="Treat the first line as column titles (default: CSVTABLE_TITLED)",
    )
    parser.add_argument(
        "--encoding",
        help="Text encoding of the source (default: CSVTABLE_ENCODING or utf-8)",
    )
    parser.add_argument(
        "--proxy",
        help="HTTP proxy URL, e.g. http://host:port (URL sources only)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        help="HTTP timeout in seconds (URL sources only)",
    )
    parser.add_argument(
        "--lookup",
        metavar="KEY=VALUE",
        help="Select rows whose KEY column equals VALUE (requires --titled and --target)",
    )
    parser.add_argument(
        "--target",
        help="Column to print for rows selected by --lookup",
    )
    parser.add_argument(
        "--output",
        help="Write the table to this path",
    )
    parser.add_argument(
        "--output-delimiter",
        choices=sorted(DELIMITER_ALIASES),
        help="Row delimiter for --output (default: CSVTABLE_DELIMITER or CRLF)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def is_url(source: str) -> bool:
    return source.lower().startswith(("http://", "https://"))


def lookup(table: Table, key: str, value: str, target: str) -> List[str]:
    """
    Return the target field of every row whose key column equals value.

    Raises:
        UntitledTableError: If the table has no titles.
        TitleNotFoundError: If key or target is not a title.
    """
    return [
        table.get_field(row, target)
        for row in range(table.row_count)
        if table.get_field(row, key) == value
    ]


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the script.

    **Exit codes**:
      - 0: Success
      - 1: Bad arguments, configuration error, or read/write failure
    """
    args = parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

    if args.lookup and not args.target:
        print("Error: --lookup requires --target", file=sys.stderr)
        return 1

    try:
        settings = get_settings()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    reader = CsvReader.from_settings(settings)
    if args.encoding:
        reader.encoding = args.encoding
    if args.titled is not None:
        reader.titled = args.titled

    print(f"Reading {args.source}...")
    try:
        if is_url(args.source):
            table = reader.read_url(args.source, proxy=args.proxy, timeout=args.timeout)
        else:
            table = reader.read_path(args.source)
    except (CsvError, LookupError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if table is None:
        print("  ✗ No data found")
        return 0

    print(f"  ✓ {table.row_count} rows x {table.column_count} columns")
    if table.titled:
        print(f"  ✓ Titles: {table.get_titles()}")

    try:
        if args.lookup:
            key, sep, value = args.lookup.partition("=")
            if not sep:
                print("Error: --lookup must look like KEY=VALUE", file=sys.stderr)
                return 1
            for found in lookup(table, key, value, args.target):
                print(f"{args.target} in {value} : {found}")

        if args.output:
            writer = CsvWriter.from_settings(settings)
            if args.output_delimiter:
                writer.delimiter = parse_delimiter(args.output_delimiter)
            writer.write_path(table, args.output)
            print(f"  ✓ Saved to {args.output}")
    except CsvError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print("Done!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
