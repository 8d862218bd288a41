# Copyright 2018 Brian T. Park
#
# MIT License

"""
Parse a single line of a TZ Database file into one of the Line records defined
in tz_types.py. The comment portion must already have been removed by the
caller. Every syntax error is reported as a LineParseError whose message
describes the offending field.
"""

import re
from typing import List
from typing import Tuple

from tzpackager.data_types.tz_types import ContinuationLine
from tzpackager.data_types.tz_types import Line
from tzpackager.data_types.tz_types import LineParseError
from tzpackager.data_types.tz_types import LinkLine
from tzpackager.data_types.tz_types import MAX_YEAR
from tzpackager.data_types.tz_types import MIN_YEAR
from tzpackager.data_types.tz_types import RuleLine
from tzpackager.data_types.tz_types import Space
from tzpackager.data_types.tz_types import TimeSpec
from tzpackager.data_types.tz_types import UntilSpec
from tzpackager.data_types.tz_types import WALL_SUFFIX
from tzpackager.data_types.tz_types import ZoneInfo
from tzpackager.data_types.tz_types import ZoneLine

INVALID_SECONDS = 999999  # 277h46m69s

MONTH_NAMES = [
    'january', 'february', 'march', 'april', 'may', 'june',
    'july', 'august', 'september', 'october', 'november', 'december',
]

# ISO-8601 specifies Monday=1, Sunday=7
WEEKDAY_NAMES = [
    'monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday',
    'sunday',
]

KEYWORDS = ['rule', 'zone', 'link']

# Number of fields of each kind of line, including the keyword.
RULE_FIELD_COUNT = 10
MIN_ZONE_FIELD_COUNT = 5
LINK_FIELD_COUNT = 3

# Matches the beginning of a STDOFF, SAVE or RULES amount.
AMOUNT_PATTERN = re.compile(r'^-?[0-9]')


def parse_line(text: str) -> Line:
    """Parse the comment-free 'text' of a line. A line starting with
    whitespace, or with a time amount (as in the compact 'tzdata.zi' format),
    is a continuation of the preceding Zone line.
    """
    fields = split_fields(text)
    if not fields:
        return Space()

    if text[0].isspace() or AMOUNT_PATTERN.match(fields[0]):
        return ContinuationLine(_parse_zone_info(fields, 'Continuation'))

    keyword = _match_keyword(fields[0])
    if keyword == 'rule':
        return _parse_rule_line(fields)
    elif keyword == 'zone':
        return _parse_zone_line(fields)
    else:
        return _parse_link_line(fields)


def split_fields(text: str) -> List[str]:
    """Split the line on whitespace. A double-quoted field may contain
    whitespace; the quotes are removed.
    """
    fields: List[str] = []
    current = ''
    in_field = False
    in_quote = False
    for c in text:
        if c == '"':
            in_quote = not in_quote
            in_field = True
        elif c.isspace() and not in_quote:
            if in_field:
                fields.append(current)
                current = ''
                in_field = False
        else:
            current += c
            in_field = True
    if in_quote:
        raise LineParseError('Unterminated quoted field')
    if in_field:
        fields.append(current)
    return fields


def _match_keyword(field: str) -> str:
    """Match the line type by a case-insensitive, unambiguous prefix of 'Rule',
    'Zone' or 'Link', so that 'R', 'Z' and 'L' are accepted too.
    """
    lowered = field.lower()
    matches = [k for k in KEYWORDS if k.startswith(lowered)]
    if len(matches) != 1:
        raise LineParseError(f'Unrecognized line type "{field}"')
    return matches[0]


def _parse_rule_line(fields: List[str]) -> RuleLine:
    if len(fields) != RULE_FIELD_COUNT:
        raise LineParseError(
            f'Rule line requires {RULE_FIELD_COUNT} fields, '
            f'found {len(fields)}'
        )
    (_, name, from_string, to_string, type_string, in_string, on_string,
        at_string, save_string, letter) = fields

    from_year = _parse_from_year(from_string)
    to_year = _parse_to_year(to_string, from_year)
    if to_year < from_year:
        raise LineParseError(
            f'Rule TO year {to_string} is before FROM year {from_string}')
    if type_string != '-':
        raise LineParseError(f'Unsupported Rule TYPE "{type_string}"')

    month = month_to_index(in_string)
    on_day_of_week, on_day_of_month = parse_on_day_string(on_string)
    at_time = _parse_time_spec(at_string)
    save = _parse_save(save_string)

    return RuleLine(
        name=name,
        from_year=from_year,
        to_year=to_year,
        month=month,
        on_day_of_week=on_day_of_week,
        on_day_of_month=on_day_of_month,
        at_time=at_time,
        save=save,
        letters='' if letter == '-' else letter,
    )


def _parse_zone_line(fields: List[str]) -> ZoneLine:
    if len(fields) < MIN_ZONE_FIELD_COUNT:
        raise LineParseError(
            f'Zone line requires at least {MIN_ZONE_FIELD_COUNT} fields, '
            f'found {len(fields)}'
        )
    return ZoneLine(name=fields[1], info=_parse_zone_info(fields[2:], 'Zone'))


def _parse_link_line(fields: List[str]) -> LinkLine:
    if len(fields) != LINK_FIELD_COUNT:
        raise LineParseError(
            f'Link line requires {LINK_FIELD_COUNT} fields, '
            f'found {len(fields)}'
        )
    return LinkLine(target=fields[1], name=fields[2])


def _parse_zone_info(fields: List[str], label: str) -> ZoneInfo:
    """Parse 'STDOFF RULES FORMAT [UNTIL]' of a Zone or Continuation line."""
    # STDOFF, RULES and FORMAT, plus up to 4 UNTIL fields.
    if len(fields) < 3 or len(fields) > 7:
        raise LineParseError(
            f'{label} line has {len(fields)} STDOFF/RULES/FORMAT/UNTIL '
            'fields, expected 3 to 7'
        )

    utc_offset = time_string_to_seconds(fields[0])
    if utc_offset == INVALID_SECONDS:
        raise LineParseError(f'Invalid STDOFF "{fields[0]}"')

    rules_string = fields[1]
    if rules_string == '-':
        rules = ''
        save = 0
    elif AMOUNT_PATTERN.match(rules_string):
        rules = ''
        save = _parse_save(rules_string)
    else:
        rules = rules_string
        save = 0

    until_fields = fields[3:]
    until = _parse_until(until_fields) if until_fields else None

    return ZoneInfo(
        utc_offset=utc_offset,
        rules=rules,
        save=save,
        format=fields[2],
        until=until,
    )


def _parse_until(fields: List[str]) -> UntilSpec:
    year = _parse_year(fields[0], 'UNTIL')
    month = month_to_index(fields[1]) if len(fields) > 1 else 1
    if len(fields) > 2:
        on_day_of_week, on_day_of_month = parse_on_day_string(fields[2])
    else:
        on_day_of_week, on_day_of_month = 0, 1
    time = _parse_time_spec(fields[3]) if len(fields) > 3 \
        else TimeSpec(0, WALL_SUFFIX)
    return UntilSpec(
        year=year,
        month=month,
        on_day_of_week=on_day_of_week,
        on_day_of_month=on_day_of_month,
        time=time,
    )


def _parse_year(year_string: str, label: str) -> int:
    try:
        return int(year_string)
    except ValueError:
        raise LineParseError(f'Invalid {label} year "{year_string}"')


def _parse_from_year(from_string: str) -> int:
    if _is_abbreviation(from_string, 'minimum', 2):
        return MIN_YEAR
    return _parse_year(from_string, 'FROM')


def _parse_to_year(to_string: str, from_year: int) -> int:
    if _is_abbreviation(to_string, 'only', 1):
        return from_year
    if _is_abbreviation(to_string, 'maximum', 2):
        return MAX_YEAR
    return _parse_year(to_string, 'TO')


def _is_abbreviation(word: str, full_name: str, min_length: int) -> bool:
    """Return True if 'word' is a case-insensitive prefix of 'full_name'
    with at least 'min_length' letters, e.g. 'o' for 'only', 'ma' or 'max'
    for 'maximum'.
    """
    return len(word) >= min_length and full_name.startswith(word.lower())


def _parse_save(save_string: str) -> int:
    """Parse the SAVE field of a Rule, or an amount in the RULES field of a
    Zone. A trailing 's' or 'd' (standard or daylight indicator) is ignored.
    """
    amount = save_string
    if amount and amount[-1] in 'sd':
        amount = amount[:-1]
    seconds = time_string_to_seconds(amount) if amount else INVALID_SECONDS
    if seconds == INVALID_SECONDS:
        raise LineParseError(f'Invalid SAVE amount "{save_string}"')
    return seconds


def _parse_time_spec(time_string: str) -> TimeSpec:
    time, suffix = parse_at_time_string(time_string)
    seconds = time_string_to_seconds(time)
    if seconds == INVALID_SECONDS:
        raise LineParseError(f'Invalid time "{time_string}"')
    return TimeSpec(seconds, suffix or WALL_SUFFIX)


def parse_at_time_string(at_string: str) -> Tuple[str, str]:
    """Parses the '2:00s' string into '2:00' and 's'. If there is no suffix,
    returns a '' as the suffix. A suffix that is not one of 'w', 's', 'u', 'g'
    or 'z' is an error.
    """
    if not at_string:
        raise LineParseError('Empty time field')
    suffix_index = len(at_string) - 1
    suffix = at_string[suffix_index]
    if suffix in 'wsugz':
        at_time = at_string[:suffix_index]
    elif suffix.isdigit():
        suffix = ''
        at_time = at_string
    else:
        raise LineParseError(
            f'Invalid suffix "{suffix}" in time "{at_string}"')
    return (at_time, suffix)


def time_string_to_seconds(time_string: str) -> int:
    """Converts the '[-]hh:mm:ss' string into +/- total seconds from 00:00.
    Returns INVALID_SECONDS if there is a parsing error.
    """
    if not time_string:
        return INVALID_SECONDS

    sign = 1
    if time_string[0] == '-':
        sign = -1
        time_string = time_string[1:]

    elems = time_string.split(':')
    if len(elems) > 3:
        return INVALID_SECONDS
    if not all(e.isdigit() for e in elems):
        return INVALID_SECONDS
    hour = int(elems[0])
    minute = int(elems[1]) if len(elems) > 1 else 0
    second = int(elems[2]) if len(elems) > 2 else 0

    # A number of countries use 24:00, and Japan uses 25:00(!).
    # Rule  Japan   1948    1951  -     Sep Sat>=8  25:00   0   	S
    if hour > 25:
        return INVALID_SECONDS
    if minute > 59:
        return INVALID_SECONDS
    if second > 59:
        return INVALID_SECONDS
    return sign * ((hour * 60 + minute) * 60 + second)


def month_to_index(month: str) -> int:
    """Convert 'Jan', 'jan', 'January' or any other unambiguous prefix
    ('O', 'Au') of the month name to the month index 1-12.
    """
    return _match_name(month, MONTH_NAMES, 'month') + 1


def weekday_to_index(weekday: str) -> int:
    """Convert 'Sun', 'Su' or 'Sunday' to the ISO weekday index (Mon=1,
    Sun=7).
    """
    return _match_name(weekday, WEEKDAY_NAMES, 'weekday') + 1


def _match_name(name: str, names: List[str], label: str) -> int:
    lowered = name.lower()
    matches = [
        index for index, full_name in enumerate(names)
        if lowered and full_name.startswith(lowered)
    ]
    if len(matches) != 1:
        raise LineParseError(f'Invalid {label} "{name}"')
    return matches[0]


def parse_on_day_string(on_string: str) -> Tuple[int, int]:
    """Parse things like "Sun>=1", "lastSun", "20", "Fri<=2".
    Returns (on_day_of_week, on_day_of_month) where
        (0, dayOfMonth) = exact match on dayOfMonth
        (dayOfWeek, dayOfMonth) = matches dayOfWeek>=dayOfMonth
        (dayOfWeek, -dayOfMonth) = matches dayOfWeek<=dayOfMonth
        (dayOfWeek, 0) = matches lastDayOfWeek

    where
        dayOfWeek is represented by a number (Mon=1, ..., Sun=7),
        dayOfMonth is 1-31 (if >=), or (-1)-(-31) (if <=).
    """
    if on_string.isdigit():
        return (0, _parse_day_of_month(on_string, on_string))

    if on_string[:4] == 'last':
        return (weekday_to_index(on_string[4:]), 0)

    greater_than_equal_index = on_string.find('>=')
    if greater_than_equal_index >= 0:
        day_of_week = weekday_to_index(on_string[:greater_than_equal_index])
        day_of_month = _parse_day_of_month(
            on_string[greater_than_equal_index + 2:], on_string)
        return (day_of_week, day_of_month)

    less_than_equal_index = on_string.find('<=')
    if less_than_equal_index >= 0:
        day_of_week = weekday_to_index(on_string[:less_than_equal_index])
        day_of_month = _parse_day_of_month(
            on_string[less_than_equal_index + 2:], on_string)
        return (day_of_week, -day_of_month)

    raise LineParseError(f'Invalid day "{on_string}"')


def _parse_day_of_month(day_string: str, on_string: str) -> int:
    if not day_string.isdigit():
        raise LineParseError(f'Invalid day "{on_string}"')
    day = int(day_string)
    if day < 1 or day > 31:
        raise LineParseError(f'Invalid day "{on_string}"')
    return day
