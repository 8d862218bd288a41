#!/usr/bin/env python3
#
# Copyright 2018 Brian T. Park
#
# MIT License.

"""
Read the raw TZ Database files given on the command line, and generate a
zonedb Python package at `base_path`, in which every zone and link is a
module holding its transition history.

Positional arguments:

* `base_path`
    * Location of the generated zonedb package. The directory is replaced
      as a whole when the compiler succeeds.
* `input_files`
    * One or more TZ files (e.g. africa, europe, backward), read in order.

Workflow Flags:

* `--actions` flags is a comma-separated list of output format
    * zonedb: Generate the zonedb package (default)
    * json: Generate `zonedb.json` file with all transition histories
    * zonelist: Generate a raw list of zone names in 'zones.txt' file.
* `--until_year {until}`
    * Do not generate rule transitions on or after this year (default: 2100)
* `--json_file {file}`
    * Name of the JSON file (default: zonedb.json)

If any line of the input files cannot be parsed, every failing line is
printed as `file:line: message`, nothing is written, and the exit status is 1.

Examples:

    $ tzcompiler zonedb tz/africa tz/europe tz/backward
"""

import argparse
import logging
import sys
from typing import List
from typing import Optional

from tzpackager.compiler import ALLOWED_ACTIONS
from tzpackager.compiler import DataCrate
from tzpackager.data_types.tz_types import CompileError
from tzpackager.data_types.tz_types import DEFAULT_UNTIL_YEAR
from tzpackager.data_types.tz_types import NameCollisionError


def main(argv: Optional[List[str]] = None) -> None:
    """
    Main driver for the TZ compiler.

    Usage:
        tzcompiler.py [flags...] base_path input_file [input_file...]
    """
    # Configure command line flags.
    parser = argparse.ArgumentParser(
        description='Generate a zonedb package from TZ Database files.')

    parser.add_argument(
        'base_path', help='Location of the generated zonedb package')
    parser.add_argument(
        'input_files', nargs='+', help='TZ Database files, read in order')

    # Target action (i.e. output) selector.
    parser.add_argument(
        '--actions',
        help='Comma-separated list of actions or targets '
             '(zonedb|json|zonelist)',
        default='zonedb',
    )
    parser.add_argument(
        '--until_year',
        help='Until year of rule transitions (default: 2100)',
        type=int,
        default=DEFAULT_UNTIL_YEAR,
    )

    # For action=json, specify the output file.
    parser.add_argument(
        '--json_file',
        help='The JSON output file (default: zonedb.json)',
        default='zonedb.json',
    )

    # Parse the command line arguments
    args = parser.parse_args(argv)

    # Validate the comma-separated --actions flag.
    actions = set(args.actions.split(','))
    if not actions.issubset(ALLOWED_ACTIONS):
        print(f'Invalid --actions: {actions - ALLOWED_ACTIONS}')
        sys.exit(1)

    # Configure logging. This should normally be executed after the
    # parser.parse_args() because it allows us set the logging.level using a
    # flag.
    logging.basicConfig(level=logging.INFO)

    try:
        data_crate = DataCrate.from_files(
            args.base_path, args.input_files, until_year=args.until_year)
    except CompileError as e:
        for failure in e.failures:
            print(failure)
        print('Errors occurred - not going any further.')
        sys.exit(1)
    except OSError as e:
        print(f'IO error: {e}')
        sys.exit(1)

    try:
        data_crate.run(actions=actions, json_file=args.json_file)
    except NameCollisionError as e:
        print(f'Name error: {e}')
        sys.exit(1)
    except OSError as e:
        print(f'IO error: {e}')
        sys.exit(1)

    print('All done.')


if __name__ == '__main__':
    main()
