# Copyright 2018 Brian T. Park
#
# MIT License

"""
Immutable runtime types of the generated zonedb package. Every generated
zoneset module imports these to define its ZONE object.
"""

from typing import NamedTuple
from typing import Tuple


class FixedTimespan(NamedTuple):
    offset: int  # total UTC offset in seconds, including the DST offset
    is_dst: bool
    name: str  # abbreviation, e.g. 'PST'


class FixedTimespanSet(NamedTuple):
    first: FixedTimespan
    rest: Tuple[Tuple[int, FixedTimespan], ...]


class StaticTimeZone(NamedTuple):
    name: str  # full, unsanitized zone name
    fixed_timespans: FixedTimespanSet
