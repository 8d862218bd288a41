# Copyright 2019 Brian T. Park
#
# MIT License

"""
Convert the eras of a Zone (the Zone line and its continuation lines), along
with the Rules that they reference, into a Zoneset: the Timespan in effect
before the first transition, followed by the sorted list of (transition,
Timespan) pairs.

Each era starts at the UNTIL instant of the previous era. Rule occurrences
are expanded year by year, sorted in local time, then converted into UTC
instants one at a time, because a 'w' (wall) AT time depends on the DST
offset which was in effect just before the transition.
"""

import datetime
from typing import Dict
from typing import List
from typing import NamedTuple
from typing import Optional
from typing import Tuple

from tzpackager.data_types.tz_types import FIRST_RULE_YEAR
from tzpackager.data_types.tz_types import RuleLine
from tzpackager.data_types.tz_types import STANDARD_SUFFIX
from tzpackager.data_types.tz_types import TimeSpec
from tzpackager.data_types.tz_types import Timespan
from tzpackager.data_types.tz_types import UTC_SUFFIXES
from tzpackager.data_types.tz_types import UntilSpec
from tzpackager.data_types.tz_types import ZoneInfo
from tzpackager.data_types.tz_types import Zoneset

SECONDS_PER_DAY = 86400

# Proleptic Gregorian ordinal of the Unix epoch 1970-01-01.
UNIX_EPOCH_ORDINAL = datetime.date(1970, 1, 1).toordinal()

# Map of rulesetName -> RuleLine[].
RulesetsMap = Dict[str, List[RuleLine]]


class RuleOccurrence(NamedTuple):
    """A single firing of a Rule in a given year, in local time."""
    local_seconds: int  # seconds since epoch of the local date and AT time
    suffix: str
    save: int
    letters: str


def calc_zoneset(
    eras: List[ZoneInfo],
    rulesets: RulesetsMap,
    until_year: int,
) -> Zoneset:
    """Build the Zoneset of a zone from its eras. Rule occurrences in years
    on or after 'until_year' are not generated. Raises KeyError if an era
    references a ruleset missing from 'rulesets', or ValueError if there
    are no eras.
    """
    collector = _TransitionCollector()
    start: Optional[int] = None
    for era in eras:
        if era.rules:
            start = _add_ruleset_era(
                collector, era, start, rulesets[era.rules], until_year)
        else:
            start = _add_fixed_era(collector, era, start)
        if start is None:
            break
    return collector.zoneset()


class _TransitionCollector:
    """Accumulate transitions, keeping them strictly increasing and dropping
    those which do not change the Timespan.
    """

    def __init__(self) -> None:
        self.first: Optional[Timespan] = None
        self.rest: List[Tuple[int, Timespan]] = []

    def add(self, instant: Optional[int], timespan: Timespan) -> None:
        if instant is None:
            self.first = timespan
            return

        # A transition at (or before) the previous one supersedes it.
        while self.rest and instant <= self.rest[-1][0]:
            self.rest.pop()
        if timespan == self._current():
            return
        self.rest.append((instant, timespan))

    def _current(self) -> Optional[Timespan]:
        if self.rest:
            return self.rest[-1][1]
        return self.first

    def zoneset(self) -> Zoneset:
        if self.first is None:
            raise ValueError('Zone has no eras')
        return Zoneset(first=self.first, rest=self.rest)


def _add_fixed_era(
    collector: _TransitionCollector,
    era: ZoneInfo,
    start: Optional[int],
) -> Optional[int]:
    """Add an era with no rules ('-') or a fixed DST offset. Returns the UNTIL
    instant of the era, or None if this is the last era.
    """
    timespan = Timespan(
        utc_offset=era.utc_offset,
        dst_offset=era.save,
        abbreviation=format_abbreviation(
            era.format, '', era.utc_offset, era.save),
    )
    collector.add(start, timespan)
    if era.until is None:
        return None
    return until_to_instant(era.until, era.utc_offset, era.save)


def _add_ruleset_era(
    collector: _TransitionCollector,
    era: ZoneInfo,
    start: Optional[int],
    rules: List[RuleLine],
    until_year: int,
) -> Optional[int]:
    """Add an era which references a named ruleset. Occurrences at or before
    the start of the era only determine its initial DST offset and letters.
    Returns the UNTIL instant of the era, or None if this is the last era.
    """
    start_year = _instant_to_year(start) - 1 if start is not None \
        else FIRST_RULE_YEAR
    end_year = until_year - 1
    if era.until is not None:
        end_year = min(end_year, era.until.year + 1)
    occurrences = expand_rules(rules, start_year, end_year)

    save = 0
    letters = _initial_letters(occurrences)
    started = False
    for occurrence in occurrences:
        instant = _occurrence_to_instant(occurrence, era.utc_offset, save)
        if era.until is not None:
            until = until_to_instant(era.until, era.utc_offset, save)
            if instant >= until:
                break
        if start is not None and instant <= start:
            save, letters = occurrence.save, occurrence.letters
            continue

        if not started:
            collector.add(start, _ruleset_timespan(era, save, letters))
            started = True
        save, letters = occurrence.save, occurrence.letters
        collector.add(instant, _ruleset_timespan(era, save, letters))

    if not started:
        collector.add(start, _ruleset_timespan(era, save, letters))
    if era.until is None:
        return None
    return until_to_instant(era.until, era.utc_offset, save)


def _ruleset_timespan(era: ZoneInfo, save: int, letters: str) -> Timespan:
    return Timespan(
        utc_offset=era.utc_offset,
        dst_offset=save,
        abbreviation=format_abbreviation(
            era.format, letters, era.utc_offset, save),
    )


def _initial_letters(occurrences: List[RuleOccurrence]) -> str:
    """Return the letters of the earliest occurrence in standard time, which
    apply to an era before any of its rules have fired.
    """
    for occurrence in occurrences:
        if occurrence.save == 0:
            return occurrence.letters
    return ''


def expand_rules(
    rules: List[RuleLine],
    start_year: int,
    end_year: int,
) -> List[RuleOccurrence]:
    """Expand the rules into occurrences in the years [start_year, end_year],
    sorted by local time. A rule which stopped before 'start_year' contributes
    its final occurrence, since it may still define the state in effect at
    the start of the era.
    """
    occurrences: List[RuleOccurrence] = []
    for rule in rules:
        from_year = max(rule.from_year, FIRST_RULE_YEAR)
        if rule.to_year < from_year:
            continue
        if rule.to_year < start_year:
            years = range(rule.to_year, rule.to_year + 1)
        else:
            years = range(
                max(from_year, start_year), min(rule.to_year, end_year) + 1)
        for year in years:
            date = calc_date(
                year, rule.month, rule.on_day_of_week, rule.on_day_of_month)
            occurrences.append(RuleOccurrence(
                local_seconds=_to_local_seconds(date, rule.at_time.seconds),
                suffix=rule.at_time.suffix,
                save=rule.save,
                letters=rule.letters,
            ))
    occurrences.sort(key=lambda o: o.local_seconds)
    return occurrences


def until_to_instant(until: UntilSpec, utc_offset: int, save: int) -> int:
    """Convert the UNTIL field into seconds since the Unix epoch, using the
    offsets in effect at the end of the era.
    """
    date = calc_date(
        until.year, until.month, until.on_day_of_week, until.on_day_of_month)
    local_seconds = _to_local_seconds(date, until.time.seconds)
    return _local_to_instant(local_seconds, until.time, utc_offset, save)


def _occurrence_to_instant(
    occurrence: RuleOccurrence,
    utc_offset: int,
    save: int,
) -> int:
    return _local_to_instant(
        occurrence.local_seconds,
        TimeSpec(0, occurrence.suffix),
        utc_offset,
        save,
    )


def _local_to_instant(
    local_seconds: int,
    time: TimeSpec,
    utc_offset: int,
    save: int,
) -> int:
    if time.suffix in UTC_SUFFIXES:
        return local_seconds
    if time.suffix == STANDARD_SUFFIX:
        return local_seconds - utc_offset
    return local_seconds - utc_offset - save


def _to_local_seconds(date: datetime.date, seconds: int) -> int:
    return (date.toordinal() - UNIX_EPOCH_ORDINAL) * SECONDS_PER_DAY + seconds


def _instant_to_year(instant: int) -> int:
    days = instant // SECONDS_PER_DAY
    return datetime.date.fromordinal(UNIX_EPOCH_ORDINAL + days).year


def calc_date(
    year: int,
    month: int,
    on_day_of_week: int,
    on_day_of_month: int,
) -> datetime.date:
    """Return the actual date of expressions such as (on_day_of_week >=
    on_day_of_month), (on_day_of_week <= on_day_of_month), or (lastMon). Shifts
    into the previous or next month (or year) can occur.
    """
    if on_day_of_week == 0:
        first = datetime.date(year, month, 1)
        return first + datetime.timedelta(days=on_day_of_month - 1)

    if on_day_of_month >= 0:
        # Handle lastXxx by transforming it into (Xxx >= (daysInMonth - 6))
        if on_day_of_month == 0:
            on_day_of_month = days_in_month(year, month) - 6
        limit_date = datetime.date(year, month, 1) \
            + datetime.timedelta(days=on_day_of_month - 1)
        day_of_week_shift = (on_day_of_week - limit_date.isoweekday() + 7) % 7
        return limit_date + datetime.timedelta(days=day_of_week_shift)
    else:
        limit_date = datetime.date(year, month, 1) \
            + datetime.timedelta(days=-on_day_of_month - 1)
        day_of_week_shift = (limit_date.isoweekday() - on_day_of_week + 7) % 7
        return limit_date - datetime.timedelta(days=day_of_week_shift)


def days_in_month(year: int, month: int) -> int:
    """Return the number of days in the given (year, month)."""
    DAYS_IN_MONTH = [31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31]
    is_leap = (year % 4 == 0) and ((year % 100 != 0) or (year % 400) == 0)
    days = DAYS_IN_MONTH[month - 1]
    if month == 2:
        days += is_leap
    return days


def format_abbreviation(
    format: str,
    letters: str,
    utc_offset: int,
    dst_offset: int,
) -> str:
    """Expand the FORMAT field of a Zone line. 'GMT/BST' selects by DST,
    '%s' substitutes the LETTER of the Rule, and '%z' substitutes the total
    UTC offset in the form '+hh[mm[ss]]'.
    """
    slash_index = format.find('/')
    if slash_index >= 0:
        return format[slash_index + 1:] if dst_offset != 0 \
            else format[:slash_index]
    if '%s' in format:
        return format.replace('%s', letters)
    if '%z' in format:
        return format.replace(
            '%z', format_numeric_offset(utc_offset + dst_offset))
    return format


def format_numeric_offset(offset: int) -> str:
    """Convert the offset seconds into '+hh', '+hhmm' or '+hhmmss', whichever
    is the shortest exact representation.
    """
    sign = '-' if offset < 0 else '+'
    offset = abs(offset)
    h = offset // 3600
    m = (offset // 60) % 60
    s = offset % 60
    if s != 0:
        return f'{sign}{h:02}{m:02}{s:02}'
    if m != 0:
        return f'{sign}{h:02}{m:02}'
    return f'{sign}{h:02}'
