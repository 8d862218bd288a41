# Copyright 2018 Brian T. Park
#
# MIT License

import unittest

from tzpackager.data_types.tz_types import ContinuationLine
from tzpackager.data_types.tz_types import LineParseError
from tzpackager.data_types.tz_types import LinkLine
from tzpackager.data_types.tz_types import MAX_YEAR
from tzpackager.data_types.tz_types import MIN_YEAR
from tzpackager.data_types.tz_types import RuleLine
from tzpackager.data_types.tz_types import Space
from tzpackager.data_types.tz_types import TimeSpec
from tzpackager.data_types.tz_types import UntilSpec
from tzpackager.data_types.tz_types import ZoneInfo
from tzpackager.data_types.tz_types import ZoneLine
from tzpackager.extractor.line import INVALID_SECONDS
from tzpackager.extractor.line import month_to_index
from tzpackager.extractor.line import parse_at_time_string
from tzpackager.extractor.line import parse_line
from tzpackager.extractor.line import parse_on_day_string
from tzpackager.extractor.line import split_fields
from tzpackager.extractor.line import time_string_to_seconds
from tzpackager.extractor.line import weekday_to_index


class TestParseAtHourString(unittest.TestCase):
    def test_parse_at_time_string(self) -> None:
        self.assertEqual(('2:00', ''), parse_at_time_string('2:00'))
        self.assertEqual(('2:00', 'w'), parse_at_time_string('2:00w'))
        self.assertEqual(('12:00', 's'), parse_at_time_string('12:00s'))
        self.assertEqual(('12:00', 'g'), parse_at_time_string('12:00g'))
        self.assertEqual(('12:00', 'u'), parse_at_time_string('12:00u'))
        self.assertEqual(('0', 'z'), parse_at_time_string('0z'))

    def test_pase_at_time_string_fails(self) -> None:
        self.assertRaises(Exception, parse_at_time_string, '2:00p')
        self.assertRaises(Exception, parse_at_time_string, '')


class TestTimeStringToSeconds(unittest.TestCase):
    def test_time_string_to_seconds(self) -> None:
        self.assertEqual(0, time_string_to_seconds('0'))
        self.assertEqual(7200, time_string_to_seconds('2:00'))
        self.assertEqual(-21036, time_string_to_seconds('-5:50:36'))
        self.assertEqual(90000, time_string_to_seconds('25:00'))

    def test_time_string_to_seconds_invalid(self) -> None:
        self.assertEqual(INVALID_SECONDS, time_string_to_seconds(''))
        self.assertEqual(INVALID_SECONDS, time_string_to_seconds('26:00'))
        self.assertEqual(INVALID_SECONDS, time_string_to_seconds('1:60'))
        self.assertEqual(INVALID_SECONDS, time_string_to_seconds('1:00:60'))
        self.assertEqual(INVALID_SECONDS, time_string_to_seconds('1:2:3:4'))
        self.assertEqual(INVALID_SECONDS, time_string_to_seconds('abc'))


class TestMonthToIndex(unittest.TestCase):
    def test_month_to_index_success(self) -> None:
        self.assertEqual(1, month_to_index('Jan'))
        self.assertEqual(1, month_to_index('jan'))
        self.assertEqual(1, month_to_index('January'))

        self.assertEqual(2, month_to_index('Feb'))
        self.assertEqual(2, month_to_index('February'))

        self.assertEqual(5, month_to_index('May'))
        self.assertEqual(6, month_to_index('Jun'))
        self.assertEqual(7, month_to_index('jul'))
        self.assertEqual(9, month_to_index('Sept'))
        self.assertEqual(12, month_to_index('December'))

    def test_month_to_index_failure(self) -> None:
        self.assertRaises(Exception, month_to_index, '')
        self.assertRaises(Exception, month_to_index, 'none')
        # Ambiguous prefixes.
        self.assertRaises(LineParseError, month_to_index, 'Ma')
        self.assertRaises(LineParseError, month_to_index, 'Ju')
        self.assertRaises(LineParseError, month_to_index, 'a')

    def test_month_to_index_short_prefix(self) -> None:
        self.assertEqual(10, month_to_index('O'))
        self.assertEqual(8, month_to_index('Au'))
        self.assertEqual(2, month_to_index('fe'))
        self.assertEqual(1, month_to_index('ja'))


class TestParseOnDayString(unittest.TestCase):
    def test_weekday_to_index(self) -> None:
        self.assertEqual(1, weekday_to_index('Mon'))
        self.assertEqual(7, weekday_to_index('Sun'))
        self.assertEqual(7, weekday_to_index('sunday'))
        self.assertEqual(7, weekday_to_index('Su'))
        self.assertEqual(1, weekday_to_index('M'))
        self.assertRaises(LineParseError, weekday_to_index, 'S')
        self.assertRaises(LineParseError, weekday_to_index, 'T')
        self.assertRaises(LineParseError, weekday_to_index, '')

    def test_parse_on_day_string(self) -> None:
        self.assertEqual((0, 15), parse_on_day_string('15'))
        self.assertEqual((7, 0), parse_on_day_string('lastSun'))
        self.assertEqual((7, 8), parse_on_day_string('Sun>=8'))
        self.assertEqual((5, -1), parse_on_day_string('Fri<=1'))

    def test_parse_on_day_string_fails(self) -> None:
        self.assertRaises(LineParseError, parse_on_day_string, 'lastFoo')
        self.assertRaises(LineParseError, parse_on_day_string, 'Foo>=1')
        self.assertRaises(LineParseError, parse_on_day_string, 'Sun>=')
        self.assertRaises(LineParseError, parse_on_day_string, '32')
        self.assertRaises(LineParseError, parse_on_day_string, 'Sun=8')


class TestSplitFields(unittest.TestCase):
    def test_split_fields(self) -> None:
        self.assertEqual(['a', 'b'], split_fields('  a\t\tb  '))
        self.assertEqual(['a', 'b c', 'd'], split_fields('a "b c" d'))
        self.assertEqual(['a', ''], split_fields('a ""'))
        self.assertEqual([], split_fields(' \t '))

    def test_split_fields_unterminated_quote(self) -> None:
        self.assertRaises(LineParseError, split_fields, 'a "b c')


class TestParseLine(unittest.TestCase):
    def test_space(self) -> None:
        self.assertEqual(Space(), parse_line('  \t '))

    def test_rule(self) -> None:
        self.assertEqual(
            RuleLine(
                name='US',
                from_year=2007,
                to_year=MAX_YEAR,
                month=3,
                on_day_of_week=7,
                on_day_of_month=8,
                at_time=TimeSpec(7200, 'w'),
                save=3600,
                letters='D',
            ),
            parse_line('Rule\tUS\t2007\tmax\t-\tMar\tSun>=8\t2:00\t1:00\tD'),
        )

    def test_rule_only_min_and_empty_letter(self) -> None:
        rule = parse_line('Rule Foo min only - Oct lastSun 1:00u 0 -')
        assert isinstance(rule, RuleLine)
        self.assertEqual(MIN_YEAR, rule.from_year)
        self.assertEqual(MIN_YEAR, rule.to_year)
        self.assertEqual(TimeSpec(3600, 'u'), rule.at_time)
        self.assertEqual('', rule.letters)

    def test_rule_save_suffix(self) -> None:
        rule = parse_line('Rule Eire 1971 only - Oct 31 2:00u -1:00d GMT')
        assert isinstance(rule, RuleLine)
        self.assertEqual(-3600, rule.save)
        self.assertEqual((0, 31), (rule.on_day_of_week, rule.on_day_of_month))

    def test_rule_errors(self) -> None:
        self.assertRaises(LineParseError, parse_line, 'Rule US 2007')
        self.assertRaises(
            LineParseError, parse_line,
            'Rule US 2007 max - Foo Sun>=8 2:00 1:00 D')
        self.assertRaises(
            LineParseError, parse_line,
            'Rule US 20x7 max - Mar Sun>=8 2:00 1:00 D')
        self.assertRaises(
            LineParseError, parse_line,
            'Rule US 2007 2006 - Mar Sun>=8 2:00 1:00 D')
        self.assertRaises(
            LineParseError, parse_line,
            'Rule US 2007 max x Mar Sun>=8 2:00 1:00 D')
        self.assertRaises(
            LineParseError, parse_line,
            'Rule US 2007 max - Mar Sun>=8 2:00x 1:00 D')
        self.assertRaises(
            LineParseError, parse_line,
            'Rule US 2007 max - Mar Sun>=8 2:00 x D')
        self.assertRaises(
            LineParseError, parse_line,
            'Rule US 2007 m - Mar Sun>=8 2:00 1:00 D')
        self.assertRaises(
            LineParseError, parse_line,
            'Rule US m only - Mar Sun>=8 2:00 1:00 D')

    def test_rule_abbreviations(self) -> None:
        self.assertEqual(
            RuleLine(
                'd', 1916, 1919, 10, 7, 1, TimeSpec(82800, 's'), 0, ''),
            parse_line('R d 1916 1919 - O Su>=1 23s 0 -'),
        )
        self.assertEqual(
            RuleLine(
                'd', 1916, 1916, 6, 0, 14, TimeSpec(82800, 's'), 3600, 'S'),
            parse_line('R d 1916 o - Jun 14 23s 1 S'),
        )
        rule = parse_line('R x mi ma - Ja lastSu 0 0 -')
        assert isinstance(rule, RuleLine)
        self.assertEqual(MIN_YEAR, rule.from_year)
        self.assertEqual(MAX_YEAR, rule.to_year)
        self.assertEqual((7, 0), (rule.on_day_of_week, rule.on_day_of_month))

    def test_zone(self) -> None:
        self.assertEqual(
            ZoneLine(
                name='Test/Zone-A',
                info=ZoneInfo(
                    utc_offset=3600, rules='', save=0, format='FOO',
                    until=None),
            ),
            parse_line('Zone Test/Zone-A 1:00 - FOO'),
        )

    def test_zone_with_until(self) -> None:
        self.assertEqual(
            ZoneLine(
                name='America/New_York',
                info=ZoneInfo(
                    utc_offset=-17762,
                    rules='',
                    save=0,
                    format='LMT',
                    until=UntilSpec(
                        year=1883,
                        month=11,
                        on_day_of_week=0,
                        on_day_of_month=18,
                        time=TimeSpec(43438, 'w'),
                    ),
                ),
            ),
            parse_line(
                'Zone America/New_York -4:56:02 - LMT 1883 Nov 18 12:03:58'),
        )

    def test_zone_with_partial_until(self) -> None:
        zone = parse_line('Zone Foo/Bar 0 - LMT 1900 Oct')
        assert isinstance(zone, ZoneLine)
        self.assertEqual(UntilSpec(1900, 10), zone.info.until)

    def test_zone_with_fixed_save(self) -> None:
        zone = parse_line('Zone Foo/Bar 1:00 1:00 FOOST')
        assert isinstance(zone, ZoneLine)
        self.assertEqual('', zone.info.rules)
        self.assertEqual(3600, zone.info.save)

    def test_zone_errors(self) -> None:
        self.assertRaises(LineParseError, parse_line, 'Zone Foo 1:00 -')
        self.assertRaises(LineParseError, parse_line, 'Zone Foo x:00 - FOO')
        self.assertRaises(
            LineParseError, parse_line, 'Zone Foo 0 - FOO 19x0')
        self.assertRaises(
            LineParseError, parse_line,
            'Zone Foo 0 - FOO 1900 Jan 1 0:00 extra')

    def test_continuation(self) -> None:
        self.assertEqual(
            ContinuationLine(ZoneInfo(
                utc_offset=-18000, rules='US', save=0, format='E%sT',
                until=None,
            )),
            parse_line('\t\t\t-5:00\tUS\tE%sT'),
        )

    def test_compact_form(self) -> None:
        zone = parse_line('Z Africa/Abidjan -0:16:8 - LMT 1912')
        assert isinstance(zone, ZoneLine)
        self.assertEqual(-968, zone.info.utc_offset)
        zone = parse_line('Z Europe/Dublin -0:25:21 - LMT 1880 Au 2')
        assert isinstance(zone, ZoneLine)
        self.assertEqual(UntilSpec(1880, 8, 0, 2), zone.info.until)
        self.assertEqual(
            ContinuationLine(ZoneInfo(0, '', 0, 'GMT', None)),
            parse_line('0 - GMT'),
        )
        self.assertEqual(
            LinkLine(target='Africa/Abidjan', name='Africa/Accra'),
            parse_line('L Africa/Abidjan Africa/Accra'),
        )

    def test_link(self) -> None:
        self.assertEqual(
            LinkLine(target='America/New_York', name='US/Eastern'),
            parse_line('Link America/New_York US/Eastern'),
        )
        self.assertRaises(LineParseError, parse_line, 'Link A')

    def test_unknown_line_type(self) -> None:
        self.assertRaises(LineParseError, parse_line, 'Blah x y')


if __name__ == '__main__':
    unittest.main()
