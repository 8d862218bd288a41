# Copyright 2018 Brian T. Park
#
# MIT License

"""
Accumulate the Rule, Zone, continuation and Link lines into a TableBuilder,
then finalize them into an immutable Table which exposes the namespace
structure of the zone names and the transition history of each zone or link.
"""

import logging
from typing import Dict
from typing import Iterator
from typing import List
from typing import Optional
from typing import Set
from typing import Tuple

from tzpackager.data_types.tz_types import Child
from tzpackager.data_types.tz_types import ContinuationLine
from tzpackager.data_types.tz_types import DEFAULT_UNTIL_YEAR
from tzpackager.data_types.tz_types import Entry
from tzpackager.data_types.tz_types import LinkLine
from tzpackager.data_types.tz_types import NAME_SEPARATOR
from tzpackager.data_types.tz_types import RuleLine
from tzpackager.data_types.tz_types import Submodule
from tzpackager.data_types.tz_types import TableError
from tzpackager.data_types.tz_types import TimeZone
from tzpackager.data_types.tz_types import ZoneInfo
from tzpackager.data_types.tz_types import ZoneLine
from tzpackager.data_types.tz_types import Zoneset
from tzpackager.table.transitions import RulesetsMap
from tzpackager.table.transitions import calc_zoneset

# Map of zoneName -> ZoneInfo[] (the Zone line followed by its continuations).
ZonesMap = Dict[str, List[ZoneInfo]]

# Map of linkName -> targetName.
LinksMap = Dict[str, str]


class TableBuilder:
    """Collects the lines of the TZ files in order. Each add_xxx_line() method
    raises a TableError if the line cannot follow the lines added before it.
    """

    def __init__(self) -> None:
        self.rulesets: RulesetsMap = {}
        self.zones: ZonesMap = {}
        self.links: LinksMap = {}

        # Name of the zone whose last line had an UNTIL field, and therefore
        # expects a continuation line.
        self.current_zone: Optional[str] = None

    def add_rule_line(self, line: RuleLine) -> None:
        self._check_no_pending_continuation()
        self.rulesets.setdefault(line.name, []).append(line)

    def add_zone_line(self, line: ZoneLine) -> None:
        self._check_no_pending_continuation()
        if line.name in self.zones:
            raise TableError(f'Duplicate zone "{line.name}"')
        if line.name in self.links:
            raise TableError(
                f'Zone "{line.name}" has the same name as a link')
        self.zones[line.name] = [line.info]
        if line.info.until is not None:
            self.current_zone = line.name

    def add_continuation_line(self, line: ContinuationLine) -> None:
        if self.current_zone is None:
            raise TableError(
                'Continuation line without a preceding zone line with an '
                'UNTIL field')
        self.zones[self.current_zone].append(line.info)
        if line.info.until is None:
            self.current_zone = None

    def add_link_line(self, line: LinkLine) -> None:
        self._check_no_pending_continuation()
        if line.name in self.links:
            raise TableError(f'Duplicate link "{line.name}"')
        if line.name in self.zones:
            raise TableError(
                f'Link "{line.name}" has the same name as a zone')
        self.links[line.name] = line.target

    def _check_no_pending_continuation(self) -> None:
        if self.current_zone is not None:
            zone_name = self.current_zone
            # Report the error once, then accept lines normally.
            self.current_zone = None
            raise TableError(
                f'Expected a continuation line for zone "{zone_name}"')

    def end_of_file(self) -> None:
        """Close the current file. A zone still expecting a continuation line
        is an error, and does not carry over into the next file.
        """
        self._check_no_pending_continuation()

    def has_ruleset(self, name: str) -> bool:
        return name in self.rulesets

    def resolve_link(self, name: str) -> Optional[str]:
        return resolve_link(name, self.zones, self.links)

    def build(self, until_year: int = DEFAULT_UNTIL_YEAR) -> 'Table':
        return Table(
            rulesets=self.rulesets,
            zones=self.zones,
            links=self.links,
            until_year=until_year,
        )


class Table:
    """The finalized, read-only collection of zones, links and rulesets.
    Transition histories are calculated on demand, and cached.
    """

    def __init__(
        self,
        rulesets: RulesetsMap,
        zones: ZonesMap,
        links: LinksMap,
        until_year: int = DEFAULT_UNTIL_YEAR,
    ):
        self.rulesets = rulesets
        self.zones = zones
        self._links = links
        self.until_year = until_year
        self._zonesets: Dict[str, Zoneset] = {}

    def zone_names(self) -> List[str]:
        return sorted(self.zones.keys())

    def alias_names(self) -> List[str]:
        return sorted(self._links.keys())

    def links(self) -> LinksMap:
        """Return a copy of the {linkName -> targetName} map."""
        return dict(self._links)

    def transition_history(self, name: str) -> Optional[Zoneset]:
        """Return the Zoneset of the zone or link 'name', following links to
        links. Returns None if the name is unknown, or if its links end in a
        missing zone or a cycle.
        """
        zone_name = resolve_link(name, self.zones, self._links)
        if zone_name is None:
            return None
        zoneset = self._zonesets.get(zone_name)
        if zoneset is None:
            zoneset = calc_zoneset(
                self.zones[zone_name], self.rulesets, self.until_year)
            self._zonesets[zone_name] = zoneset
        return zoneset

    def structure(self) -> Iterator[Entry]:
        """Generate an Entry for every namespace (every proper prefix of a
        zone or link name), in sorted order. Each call returns a new
        generator.
        """
        # TimeZone and Submodule compare equal as plain tuples, so the
        # children are keyed by (name, kind).
        children_map: Dict[str, Dict[Tuple[str, str], Child]] = {}
        for name in self.zones.keys() | self._links.keys():
            components = name.split(NAME_SEPARATOR)
            for i in range(1, len(components)):
                parent = NAME_SEPARATOR.join(components[:i])
                children = children_map.setdefault(parent, {})
                child: Child
                if i == len(components) - 1:
                    child = TimeZone(components[i])
                else:
                    child = Submodule(components[i])
                children[(child.name, type(child).__name__)] = child

        for parent, children in sorted(children_map.items()):
            yield Entry(
                name=parent,
                children=[children[key] for key in sorted(children)],
            )

    def print_summary(self) -> None:
        logging.info(
            'Summary: Zones: %d; Links: %d; Rulesets: %d',
            len(self.zones), len(self._links), len(self.rulesets),
        )


def resolve_link(
    name: str,
    zones: ZonesMap,
    links: LinksMap,
) -> Optional[str]:
    """Follow the links starting at 'name' until a zone is found. Returns None
    for an unknown name, a missing target, or a cycle of links.
    """
    visited: Set[str] = set()
    while name not in zones:
        target = links.get(name)
        if target is None or name in visited:
            return None
        visited.add(name)
        name = target
    return name
