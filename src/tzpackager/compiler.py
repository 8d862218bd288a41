# Copyright 2018 Brian T. Park
#
# MIT License

"""
Library interface of the TZ compiler. The compiler has 3 stages implemented
by various helper classes:

* Extractor
    * Parse the raw TZ files and collect every failing line into a
      CompileError, or produce a Table.
* Table
    * Expose the namespace structure and the transition history of every zone
      and link.
* Generator
    * Generate the output files selected by the 'actions'.

Usage:

    data_crate = DataCrate.from_files('zonedb', ['africa', 'europe'])
    data_crate.run(actions={'zonedb'})

All output is first written into a staging directory next to 'base_path'.
The staging directory replaces 'base_path' only when every generator has
succeeded, so a failed run leaves the previous output untouched. The
'base_path' directory is owned by the compiler: any other files in it are
removed.
"""

import logging
import os
import shutil
import tempfile
from typing import Iterable
from typing import List
from typing_extensions import Protocol

from tzpackager.data_types.tz_types import DEFAULT_UNTIL_YEAR
from tzpackager.extractor.extractor import Extractor
from tzpackager.generator.jsongenerator import JsonGenerator
from tzpackager.generator.pyformat import GeneratorConfig
from tzpackager.generator.pygenerator import PythonGenerator
from tzpackager.generator.zonelistgenerator import ZoneListGenerator
from tzpackager.table.table import Table

ALLOWED_ACTIONS = {'zonedb', 'json', 'zonelist'}


class Generator(Protocol):
    """Define an interface for Generator subclasses for mypy type checking."""
    def generate_files(self, output_dir: str) -> None:
        ...


class DataCrate:
    """A finalized Table, and the location where its zonedb package is
    generated.
    """

    def __init__(
        self,
        base_path: str,
        table: Table,
        config: GeneratorConfig = GeneratorConfig(),
    ):
        self.base_path = base_path
        self.table = table
        self.config = config

    @classmethod
    def from_files(
        cls,
        base_path: str,
        input_files: List[str],
        until_year: int = DEFAULT_UNTIL_YEAR,
        config: GeneratorConfig = GeneratorConfig(),
    ) -> 'DataCrate':
        """Parse the 'input_files' in order. Raises CompileError listing every
        failing line, or OSError if an input file cannot be read.
        """
        if not input_files:
            raise ValueError('At least one input file is required')

        logging.info('======== Extracting TZ Data files')
        extractor = Extractor(input_files)
        extractor.parse()
        extractor.print_summary()
        table = extractor.get_table(until_year=until_year)
        table.print_summary()
        return cls(base_path, table, config)

    def run(
        self,
        actions: Iterable[str] = ('zonedb',),
        json_file: str = 'zonedb.json',
    ) -> None:
        """Generate the output of each action into 'base_path'. Raises
        OSError on an I/O failure, after removing the partial output.
        """
        generators = self._create_generators(set(actions), json_file)

        logging.info('======== Performing actions, generating files')
        staging_dir = _create_staging_dir(self.base_path)
        try:
            for generator in generators:
                generator.generate_files(staging_dir)
        except Exception:
            shutil.rmtree(staging_dir, ignore_errors=True)
            raise
        _swap_into_place(staging_dir, self.base_path)
        logging.info('======== Finished writing %s', self.base_path)

    def _create_generators(
        self, actions: Iterable[str], json_file: str,
    ) -> List[Generator]:
        invalid_actions = set(actions) - ALLOWED_ACTIONS
        if invalid_actions:
            raise ValueError(f'Invalid actions: {sorted(invalid_actions)}')

        generators: List[Generator] = []
        if 'zonedb' in actions:
            logging.info('==== Creating zonedb package')
            generators.append(PythonGenerator(self.table, self.config))
        if 'json' in actions:
            logging.info('==== Creating %s file', json_file)
            generators.append(JsonGenerator(self.table, json_file))
        if 'zonelist' in actions:
            logging.info('==== Creating zones.txt file')
            generators.append(ZoneListGenerator(self.table, self.config))
        return generators


def compile_zonedb(
    base_path: str,
    input_files: List[str],
    actions: Iterable[str] = ('zonedb',),
    until_year: int = DEFAULT_UNTIL_YEAR,
    json_file: str = 'zonedb.json',
) -> Table:
    """Parse the 'input_files' and generate the output of the 'actions' into
    'base_path'. Returns the Table that was used.
    """
    data_crate = DataCrate.from_files(
        base_path, input_files, until_year=until_year)
    data_crate.run(actions=actions, json_file=json_file)
    return data_crate.table


def _create_staging_dir(base_path: str) -> str:
    parent, basename = os.path.split(os.path.abspath(base_path))
    os.makedirs(parent, exist_ok=True)
    staging_dir = tempfile.mkdtemp(prefix=f'.{basename}-staging-', dir=parent)
    os.chmod(staging_dir, 0o755)
    return staging_dir


def _swap_into_place(staging_dir: str, base_path: str) -> None:
    """Replace 'base_path' with 'staging_dir'. The previous tree is moved
    aside first, then deleted.
    """
    base_path = os.path.abspath(base_path)
    if not os.path.exists(base_path):
        os.rename(staging_dir, base_path)
        return

    parent, basename = os.path.split(base_path)
    old_dir = tempfile.mkdtemp(prefix=f'.{basename}-old-', dir=parent)
    os.rename(base_path, os.path.join(old_dir, basename))
    os.rename(staging_dir, base_path)
    shutil.rmtree(old_dir)
