# Copyright 2018 Brian T. Park
#
# MIT License
"""
Generate the zonedb Python package from a Table. The package mirrors the
namespace of the zone names:

    {output_dir}/__init__.py                -- root index, ZONES and lookup()
    {output_dir}/America/__init__.py        -- re-exports its children
    {output_dir}/America/New_York.py        -- ZONE of America/New_York
    {output_dir}/America/Argentina/...

Each zone or link is accessible as an attribute of its namespace (e.g.
'zonedb.America.New_York'), or through 'zonedb.lookup("America/New_York")'.
"""

import logging
import os
from typing import Dict
from typing import List
from typing import Set

from tzpackager.data_types.tz_types import Entry
from tzpackager.data_types.tz_types import NAME_SEPARATOR
from tzpackager.data_types.tz_types import NameCollisionError
from tzpackager.data_types.tz_types import Submodule
from tzpackager.data_types.tz_types import TimeZone
from tzpackager.data_types.tz_types import Zoneset
from tzpackager.generator.pyformat import GeneratorConfig
from tzpackager.generator.pyformat import is_valid_identifier
from tzpackager.generator.pyformat import iso_utc
from tzpackager.generator.pyformat import render_timespan
from tzpackager.generator.pyformat import sanitize_components
from tzpackager.generator.pyformat import sanitize_name
from tzpackager.generator.pyformat import to_dotted_reference
from tzpackager.table.table import Table

# Names defined by the root index itself, which a top-level zone or namespace
# must not shadow.
ROOT_RESERVED_NAMES = {
    'MappingProxyType', 'Mapping', 'Optional', 'StaticTimeZone', 'ZONES',
    'lookup',
}


class PythonGenerator:
    """Generate the namespace index files, one zoneset file per zone or
    link, and the root lookup index.
    """

    INDEX_FILE_NAME = '__init__.py'
    ZONESET_FILE_EXTENSION = '.py'

    def __init__(
        self,
        table: Table,
        config: GeneratorConfig = GeneratorConfig(),
    ):
        self.table = table
        self.config = config
        self.zone_names = table.zone_names()
        self.alias_names = table.alias_names()
        self.names = sorted(self.zone_names + self.alias_names)

    def generate_files(self, output_dir: str) -> None:
        entries = list(self.table.structure())
        _detect_invalid_names(self.names, entries)

        top_level_entries = self._write_namespaces(output_dir, entries)
        self._write_zonesets(output_dir)
        self._write_root_index(output_dir, top_level_entries)
        logging.info(
            'Generated %d namespaces, %d zonesets (%d zones, %d links)',
            len(entries),
            len(self.names),
            len(self.zone_names),
            len(self.alias_names),
        )

    def _write_file(self, full_filename: str, content: str) -> None:
        with open(full_filename, 'w', encoding='utf-8') as output_file:
            print(content, end='', file=output_file)
        logging.debug("Created %s", full_filename)

    # ------------------------------------------------------------------------
    # Namespace indexes
    # ------------------------------------------------------------------------

    def _write_namespaces(
        self, output_dir: str, entries: List[Entry],
    ) -> List[str]:
        """Create a directory and an index file for each namespace Entry.
        Returns the names of the top-level namespaces.
        """
        top_level_entries: List[str] = []
        for entry in entries:
            if NAME_SEPARATOR not in entry.name:
                top_level_entries.append(entry.name)

            dir_path = os.path.join(output_dir, *sanitize_components(entry.name))
            if not os.path.isdir(dir_path):
                logging.info('Creating directory %s', dir_path)
                os.makedirs(dir_path, exist_ok=True)

            self._write_file(
                os.path.join(dir_path, self.INDEX_FILE_NAME),
                self._generate_namespace_index(entry),
            )
        return top_level_entries

    def _generate_namespace_index(self, entry: Entry) -> str:
        imports = ''
        for child in entry.children:
            sanichild = sanitize_name(child.name)
            if isinstance(child, TimeZone):
                imports += f'from .{sanichild} import ZONE as {sanichild}\n'
            elif isinstance(child, Submodule):
                imports += f'from . import {sanichild}\n'
        return f"""\
{self.config.warning_header}
{imports}"""

    # ------------------------------------------------------------------------
    # Zonesets
    # ------------------------------------------------------------------------

    def _write_zonesets(self, output_dir: str) -> None:
        for name in self.names:
            zoneset = self.table.transition_history(name)
            if zoneset is None:
                raise Exception(f'No transition history for "{name}"')

            components = sanitize_components(name)
            dir_path = os.path.join(output_dir, *components[:-1])
            os.makedirs(dir_path, exist_ok=True)
            self._write_file(
                os.path.join(
                    dir_path, components[-1] + self.ZONESET_FILE_EXTENSION),
                self._generate_zoneset(name, zoneset),
            )

    def _generate_zoneset(self, name: str, zoneset: Zoneset) -> str:
        first_fields = render_timespan(zoneset.first, ' ' * 12)

        rest_items = ''
        for instant, timespan in zoneset.rest:
            # Write the total offset (the only value that gets used)
            # and both the offsets that get added together, as a
            # comment in the zoneset file.
            rest_items += f"""\
            ({instant!r}, FixedTimespan(  # {iso_utc(instant)} UTC
{render_timespan(timespan, ' ' * 16)}\
            )),
"""

        return f"""\
{self.config.warning_header}
{self.config.zoneinfo_header}

ZONE = StaticTimeZone(
    name={name!r},
    fixed_timespans=FixedTimespanSet(
        first=FixedTimespan(
{first_fields}\
        ),
        rest=(
{rest_items}\
        ),
    ),
)
"""

    # ------------------------------------------------------------------------
    # Root index and lookup
    # ------------------------------------------------------------------------

    def _write_root_index(
        self, output_dir: str, top_level_entries: List[str],
    ) -> None:
        os.makedirs(output_dir, exist_ok=True)
        full_filename = os.path.join(output_dir, self.INDEX_FILE_NAME)
        self._write_file(
            full_filename, self._generate_root_index(top_level_entries))
        logging.info("Created %s", full_filename)

    def _generate_root_index(self, top_level_entries: List[str]) -> str:
        imports = ''
        for entry_name in top_level_entries:
            imports += f'from . import {sanitize_name(entry_name)}\n'
        for name in self.names:
            if NAME_SEPARATOR in name:
                continue
            sanichild = sanitize_name(name)
            imports += f'from .{sanichild} import ZONE as {sanichild}\n'

        lookup_items = ''
        for name in self.names:
            lookup_items += f'    {name!r}: {to_dotted_reference(name)},\n'

        return f"""\
{self.config.warning_header}
{self.config.mod_header}
{imports}

# Every zone and link name, mapped to its ZONE object.
ZONES: Mapping[str, StaticTimeZone] = MappingProxyType({{
{lookup_items}\
}})


def lookup(name: str) -> Optional[StaticTimeZone]:
    \"\"\"Return the StaticTimeZone of the zone or link 'name', or None if
    the name is unknown.
    \"\"\"
    return ZONES.get(name)
"""


def _detect_invalid_names(names: List[str], entries: List[Entry]) -> None:
    """If there were 2 zones names like "Etc/GMT-0" and "Etc/GMT_0", both
    would sanitize to "Etc/GMT_0", and one zoneset file would clobber the
    other. Make this a fatal error, along with names that cannot become Python
    identifiers, and zone names which are also namespaces.
    """
    namespaces: Set[str] = {
        '/'.join(sanitize_components(entry.name)) for entry in entries
    }
    sanitized_names: Dict[str, str] = {}  # sanitized_name -> name
    for name in names:
        components = sanitize_components(name)
        for component in components:
            if not is_valid_identifier(component):
                raise NameCollisionError(
                    f'Name "{name}" has invalid identifier "{component}"')
        if len(components) == 1 and components[0] in ROOT_RESERVED_NAMES:
            raise NameCollisionError(
                f'Name "{name}" is reserved by the root index')

        sanitized_name = '/'.join(components)
        colliding_name = sanitized_names.get(sanitized_name)
        if colliding_name is not None:
            raise NameCollisionError(
                f'Duplicate sanitized name: {name} with existing '
                f'{colliding_name} -> {sanitized_name}'
            )
        sanitized_names[sanitized_name] = name

        if sanitized_name in namespaces:
            raise NameCollisionError(
                f'Name "{name}" is both a zone and a namespace')

    for entry in entries:
        component = sanitize_components(entry.name)[-1]
        if not is_valid_identifier(component):
            raise NameCollisionError(
                f'Namespace "{entry.name}" has invalid identifier '
                f'"{component}"'
            )
        if NAME_SEPARATOR not in entry.name \
                and component in ROOT_RESERVED_NAMES:
            raise NameCollisionError(
                f'Namespace "{entry.name}" is reserved by the root index')
