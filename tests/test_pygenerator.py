# Copyright 2018 Brian T. Park
#
# MIT License

import os
import tempfile
import unittest
from typing import List
from typing import Sequence

from tzpackager.data_types.tz_types import ContinuationLine
from tzpackager.data_types.tz_types import LinkLine
from tzpackager.data_types.tz_types import NameCollisionError
from tzpackager.data_types.tz_types import UntilSpec
from tzpackager.data_types.tz_types import ZoneInfo
from tzpackager.data_types.tz_types import ZoneLine
from tzpackager.generator.pyformat import GeneratorConfig
from tzpackager.generator.pygenerator import PythonGenerator
from tzpackager.table.table import Table
from tzpackager.table.table import TableBuilder

CONFIG = GeneratorConfig(
    warning_header='# HEADER\n',
    zoneinfo_header='# ZONEINFO\n',
    mod_header='# MOD\n',
)

EXPECTED_ZONE_B = """\
# HEADER

# ZONEINFO


ZONE = StaticTimeZone(
    name='Test/Zone-B',
    fixed_timespans=FixedTimespanSet(
        first=FixedTimespan(
            offset=-3600,  # UTC offset -3600, DST offset 0
            is_dst=False,
            name='LMT',
        ),
        rest=(
            (3600, FixedTimespan(  # 1970-01-01T01:00:00 UTC
                offset=0,  # UTC offset 0, DST offset 0
                is_dst=False,
                name='UTC',
            )),
        ),
    ),
)
"""

EXPECTED_ALIAS = """\
# HEADER

# ZONEINFO


ZONE = StaticTimeZone(
    name='Test/Alias',
    fixed_timespans=FixedTimespanSet(
        first=FixedTimespan(
            offset=3600,  # UTC offset 3600, DST offset 0
            is_dst=False,
            name='FOO',
        ),
        rest=(
        ),
    ),
)
"""

EXPECTED_TEST_INDEX = """\
# HEADER

from .Alias import ZONE as Alias
from .Zone_A import ZONE as Zone_A
from .Zone_B import ZONE as Zone_B
"""

EXPECTED_ROOT_INDEX = """\
# HEADER

# MOD

from . import Test
from .UTC import ZONE as UTC


# Every zone and link name, mapped to its ZONE object.
ZONES: Mapping[str, StaticTimeZone] = MappingProxyType({
    'Test/Alias': Test.Alias,
    'Test/Zone-A': Test.Zone_A,
    'Test/Zone-B': Test.Zone_B,
    'UTC': UTC,
})
"""


def fixed_zone(name: str, offset: int = 0, format: str = 'STD') -> ZoneLine:
    return ZoneLine(name, ZoneInfo(offset, '', 0, format, None))


def build_table(
    zones: List[ZoneLine], links: Sequence[LinkLine] = (),
) -> Table:
    builder = TableBuilder()
    for zone in zones:
        builder.add_zone_line(zone)
    for link in links:
        builder.add_link_line(link)
    return builder.build()


class TestPythonGenerator(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.output_dir = self.temp_dir.name

    def tearDown(self) -> None:
        self.temp_dir.cleanup()

    def read(self, *path: str) -> str:
        with open(os.path.join(self.output_dir, *path), encoding='utf-8') as f:
            return f.read()

    def test_generate_files(self) -> None:
        builder = TableBuilder()
        builder.add_zone_line(fixed_zone('Test/Zone-A', 3600, 'FOO'))
        builder.add_zone_line(ZoneLine(
            'Test/Zone-B', ZoneInfo(-3600, '', 0, 'LMT', UntilSpec(1970))))
        builder.add_continuation_line(
            ContinuationLine(ZoneInfo(0, '', 0, 'UTC', None)))
        builder.add_zone_line(fixed_zone('UTC', 0, 'UTC'))
        builder.add_link_line(LinkLine('Test/Zone-A', 'Test/Alias'))

        PythonGenerator(builder.build(), CONFIG).generate_files(
            self.output_dir)

        self.assertEqual(
            ['Test', 'UTC.py', '__init__.py'],
            sorted(os.listdir(self.output_dir)),
        )
        self.assertEqual(
            ['Alias.py', 'Zone_A.py', 'Zone_B.py', '__init__.py'],
            sorted(os.listdir(os.path.join(self.output_dir, 'Test'))),
        )
        self.assertEqual(EXPECTED_ZONE_B, self.read('Test', 'Zone_B.py'))
        self.assertEqual(EXPECTED_ALIAS, self.read('Test', 'Alias.py'))
        self.assertEqual(EXPECTED_TEST_INDEX, self.read('Test', '__init__.py'))

        root_index = self.read('__init__.py')
        self.assertTrue(root_index.startswith(EXPECTED_ROOT_INDEX))
        self.assertIn('def lookup(name: str) -> Optional[StaticTimeZone]:',
                      root_index)

    def test_nested_namespaces(self) -> None:
        table = build_table([
            fixed_zone('America/Argentina/Buenos_Aires', -10800),
            fixed_zone('America/Port-au-Prince', -18000),
        ])
        PythonGenerator(table, CONFIG).generate_files(self.output_dir)

        self.assertEqual(
            '# HEADER\n\n'
            'from . import Argentina\n'
            'from .Port_au_Prince import ZONE as Port_au_Prince\n',
            self.read('America', '__init__.py'),
        )
        self.assertEqual(
            '# HEADER\n\nfrom .Buenos_Aires import ZONE as Buenos_Aires\n',
            self.read('America', 'Argentina', '__init__.py'),
        )
        root_index = self.read('__init__.py')
        self.assertIn(
            "    'America/Argentina/Buenos_Aires': "
            "America.Argentina.Buenos_Aires,\n",
            root_index,
        )
        self.assertIn(
            "    'America/Port-au-Prince': America.Port_au_Prince,\n",
            root_index,
        )

    def test_plus_and_minus_stay_distinct(self) -> None:
        table = build_table([
            fixed_zone('Etc/GMT+5', -18000),
            fixed_zone('Etc/GMT-5', 18000),
        ])
        PythonGenerator(table, CONFIG).generate_files(self.output_dir)
        self.assertEqual(
            ['GMT_5.py', 'GMT_PLUS_5.py', '__init__.py'],
            sorted(os.listdir(os.path.join(self.output_dir, 'Etc'))),
        )

    def test_sanitized_name_collision(self) -> None:
        table = build_table([
            fixed_zone('Etc/GMT-0'),
            fixed_zone('Etc/GMT_0'),
        ])
        generator = PythonGenerator(table, CONFIG)
        self.assertRaises(
            NameCollisionError, generator.generate_files, self.output_dir)
        self.assertEqual([], os.listdir(self.output_dir))

    def test_invalid_identifier(self) -> None:
        table = build_table([fixed_zone('Test/3rd'), fixed_zone('class/X')])
        generator = PythonGenerator(table, CONFIG)
        self.assertRaises(
            NameCollisionError, generator.generate_files, self.output_dir)

    def test_invalid_namespace_identifier(self) -> None:
        table = build_table([fixed_zone('class/X')])
        generator = PythonGenerator(table, CONFIG)
        self.assertRaises(
            NameCollisionError, generator.generate_files, self.output_dir)

    def test_reserved_root_name(self) -> None:
        table = build_table([fixed_zone('lookup')])
        generator = PythonGenerator(table, CONFIG)
        self.assertRaises(
            NameCollisionError, generator.generate_files, self.output_dir)

    def test_zone_which_is_also_a_namespace(self) -> None:
        table = build_table(
            [fixed_zone('America/Indiana/Indianapolis')],
            [LinkLine('America/Indiana/Indianapolis', 'America/Indiana')],
        )
        generator = PythonGenerator(table, CONFIG)
        self.assertRaises(
            NameCollisionError, generator.generate_files, self.output_dir)


if __name__ == '__main__':
    unittest.main()
