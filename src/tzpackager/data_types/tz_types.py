# Copyright 2018 Brian T. Park
#
# MIT License

from typing import Dict
from typing import List
from typing import NamedTuple
from typing import Optional
from typing import Tuple
from typing import Union
from typing_extensions import TypedDict

"""
Data types created or consumed by the extractor, table and generator packages.
These allow typing checking to be performed using mypy. Also contains global
constants used by multiple packages.
"""

# -----------------------------------------------------------------------------
# Constants used by various modules.
# -----------------------------------------------------------------------------

# Marker year to indicate the 'min' (or 'minimum') FROM year of a Rule.
MIN_YEAR: int = 0

# Indicate the 'max' (or 'maximum') TO year of a Rule.
MAX_YEAR: int = 9999

# Earliest year for which rule occurrences are generated. Rules with a 'min'
# FROM year are clamped to this year.
FIRST_RULE_YEAR: int = 1800

# Default year (exclusive) at which rule occurrences stop being generated.
DEFAULT_UNTIL_YEAR: int = 2100

# Separator of the components of a zone name.
NAME_SEPARATOR = '/'

# Time suffixes of the AT and UNTIL fields. 'w' = wall, 's' = local standard,
# 'u' (and its aliases 'g', 'z') = UTC.
WALL_SUFFIX = 'w'
STANDARD_SUFFIX = 's'
UTC_SUFFIXES = ('u', 'g', 'z')


# -----------------------------------------------------------------------------
# Exceptions.
# -----------------------------------------------------------------------------

class LineParseError(ValueError):
    """A single line of a TZ file could not be parsed."""


class TableError(ValueError):
    """A syntactically valid line was rejected by the TableBuilder."""


class ParseFailure(NamedTuple):
    """A failed line, identified by its file and its 1-based line number."""
    source_file: str
    line_number: int
    message: str

    def __str__(self) -> str:
        return f'{self.source_file}:{self.line_number}: {self.message}'


class CompileError(Exception):
    """Raised instead of returning a Table when one or more lines failed. The
    failures are in file order, then line order.
    """
    def __init__(self, failures: List[ParseFailure]):
        if not failures:
            raise ValueError('CompileError requires at least one failure')
        super().__init__(f'{len(failures)} error(s) in TZ files')
        self.failures = failures


class NameCollisionError(Exception):
    """Two zone names map to the same output identifier, or a name cannot be
    turned into an identifier at all.
    """


# -----------------------------------------------------------------------------
# Line records produced by extractor/line.py.
# -----------------------------------------------------------------------------

class TimeSpec(NamedTuple):
    """A time of day (AT or UNTIL field) in seconds, with its suffix."""
    seconds: int
    suffix: str  # 'w', 's', 'u', 'g', 'z'


class UntilSpec(NamedTuple):
    """The UNTIL field of a Zone line. The optional parts default to Jan 1,
    00:00 wall time.
    """
    year: int
    month: int = 1
    on_day_of_week: int = 0
    on_day_of_month: int = 1
    time: TimeSpec = TimeSpec(0, WALL_SUFFIX)


class ZoneInfo(NamedTuple):
    """The STDOFF, RULES, FORMAT and UNTIL fields shared by a Zone line and its
    continuation lines.

    # Zone  NAME                STDOFF      RULES   FORMAT  [UNTIL]
    Zone    America/Chicago     -5:50:36    -       LMT     1883 Nov 18 12:09:24
                                -6:00       US      C%sT    1920
    """
    utc_offset: int  # STDOFF in seconds
    rules: str  # name of the ruleset, or '' for none
    save: int  # fixed DST offset in seconds when 'rules' is ''
    format: str  # abbreviation format (e.g. P%sT, E%sT, GMT/BST, %z)
    until: Optional[UntilSpec]


class RuleLine(NamedTuple):
    """Represents the 'Rule' lines in a tz database file:

    # Rule  NAME    FROM    TO    TYPE IN   ON      AT      SAVE    LETTER
    Rule    US      2007    max   -    Mar  Sun>=8  2:00    1:00    D
    """
    name: str
    from_year: int
    to_year: int
    month: int  # 1-12
    on_day_of_week: int  # 1=Monday, 7=Sunday, 0={exact dayOfMonth match}
    on_day_of_month: int  # 1-31 "dow>=xx", -(1-31) "dow<=xx", 0={lastXxx}
    at_time: TimeSpec
    save: int  # DST offset in seconds
    letters: str  # '' when the LETTER field is '-'


class ZoneLine(NamedTuple):
    name: str
    info: ZoneInfo


class ContinuationLine(NamedTuple):
    info: ZoneInfo


class LinkLine(NamedTuple):
    target: str
    name: str


class Space(NamedTuple):
    """A line containing nothing but whitespace."""


Line = Union[Space, RuleLine, ZoneLine, ContinuationLine, LinkLine]


# -----------------------------------------------------------------------------
# Data types exposed by table/table.py.
# -----------------------------------------------------------------------------

class Timespan(NamedTuple):
    """Offsets and abbreviation in effect over a contiguous interval."""
    utc_offset: int
    dst_offset: int
    abbreviation: str

    @property
    def total_offset(self) -> int:
        return self.utc_offset + self.dst_offset

    @property
    def is_dst(self) -> bool:
        return self.dst_offset != 0


class Zoneset(NamedTuple):
    """The transition history of a zone. 'first' is in effect before the
    earliest transition; 'rest' is sorted by strictly increasing instants
    (seconds since the Unix epoch).
    """
    first: Timespan
    rest: List[Tuple[int, Timespan]]


class TimeZone(NamedTuple):
    """Child of a namespace Entry which is a zone (or link) leaf."""
    name: str


class Submodule(NamedTuple):
    """Child of a namespace Entry which is itself a namespace."""
    name: str


Child = Union[TimeZone, Submodule]


class Entry(NamedTuple):
    """A namespace (e.g. 'America/Argentina') and its direct children, whose
    names are single path components.
    """
    name: str
    children: List[Child]


# -----------------------------------------------------------------------------
# Serialized form of the Table, written by generator/jsongenerator.py.
# -----------------------------------------------------------------------------

class TimespanJson(TypedDict):
    utc_offset: int
    dst_offset: int
    offset: int
    is_dst: bool
    abbreviation: str


class HistoryJson(TypedDict):
    first: TimespanJson
    rest: List[Tuple[int, TimespanJson]]


class ZoneDatabaseJson(TypedDict):
    zones: List[str]
    links: Dict[str, str]  # linkName -> targetName
    histories: Dict[str, HistoryJson]
