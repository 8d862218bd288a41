# Copyright 2023 Brian T. Park
#
# MIT License
"""
Utils for turning zone names into Python identifiers and module paths, and for
rendering Timespan values as Python source.
"""

import datetime
import keyword
from dataclasses import dataclass
from typing import List

from tzpackager.data_types.tz_types import NAME_SEPARATOR
from tzpackager.data_types.tz_types import Timespan

WARNING_HEADER = """\
# ------
# This file is autogenerated!
# Any changes you make may be overwritten.
# ------
"""

ZONEINFO_HEADER = """\
from tzpackager.data_types.zone_types import FixedTimespan
from tzpackager.data_types.zone_types import FixedTimespanSet
from tzpackager.data_types.zone_types import StaticTimeZone
"""

MOD_HEADER = """\
from types import MappingProxyType
from typing import Mapping
from typing import Optional

from tzpackager.data_types.zone_types import StaticTimeZone
"""

UNIX_EPOCH = datetime.datetime(1970, 1, 1)


@dataclass(frozen=True)
class GeneratorConfig:
    """Fixed text blocks written into the generated files. The defaults
    produce a package which imports its runtime types from tzpackager.
    """
    warning_header: str = WARNING_HEADER
    zoneinfo_header: str = ZONEINFO_HEADER
    mod_header: str = MOD_HEADER


def sanitize_name(name: str) -> str:
    """Replace the characters of a zone name component which are invalid in a
    Python identifier: '-' becomes '_', and '+' becomes '_PLUS_' so that
    'Etc/GMT+5' and 'Etc/GMT-5' stay distinct.
    """
    return name.replace('-', '_').replace('+', '_PLUS_')


def sanitize_components(name: str) -> List[str]:
    """Split the zone name on '/' and sanitize each component."""
    return [sanitize_name(c) for c in name.split(NAME_SEPARATOR)]


def to_dotted_reference(name: str) -> str:
    """Convert 'America/Port-au-Prince' into 'America.Port_au_Prince', the
    attribute path of its ZONE object from the root package.
    """
    return '.'.join(sanitize_components(name))


def is_valid_identifier(identifier: str) -> bool:
    return identifier.isidentifier() and not keyword.iskeyword(identifier)


def iso_utc(instant: int) -> str:
    """Convert seconds since the Unix epoch into 'YYYY-MM-DDTHH:MM:SS'."""
    dt = UNIX_EPOCH + datetime.timedelta(seconds=instant)
    return dt.isoformat()


def render_timespan(timespan: Timespan, indent: str) -> str:
    """Render the fields of a FixedTimespan. Only the total offset is data;
    the UTC and DST offsets which were added together are kept in a comment.
    """
    return f"""\
{indent}offset={timespan.total_offset!r},  \
# UTC offset {timespan.utc_offset!r}, DST offset {timespan.dst_offset!r}
{indent}is_dst={timespan.is_dst!r},
{indent}name={timespan.abbreviation!r},
"""
