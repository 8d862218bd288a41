# Copyright 2021 Brian T. Park
#
# MIT License

import logging
import os

from tzpackager.generator.pyformat import GeneratorConfig
from tzpackager.table.table import Table


class ZoneListGenerator:
    """Create a file containing the sorted list of zone and link names, one
    per line.
    """

    ZONE_LIST_FILE_NAME = 'zones.txt'

    def __init__(
        self,
        table: Table,
        config: GeneratorConfig = GeneratorConfig(),
    ):
        self.table = table
        self.config = config

    def generate_files(self, output_dir: str) -> None:
        full_filename = os.path.join(output_dir, self.ZONE_LIST_FILE_NAME)
        with open(full_filename, 'w', encoding='utf-8') as output_file:
            print(self._generate_zone_list(), end='', file=output_file)
        logging.info("Created %s", full_filename)

    def _generate_zone_list(self) -> str:
        names = sorted(self.table.zone_names() + self.table.alias_names())
        name_lines = ''.join(f'{name}\n' for name in names)
        return f"""\
{self.config.warning_header}\
{name_lines}"""
