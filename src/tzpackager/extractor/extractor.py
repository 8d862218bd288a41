# Copyright 2018 Brian T. Park
#
# MIT License

"""
Read the raw TZ Database files, parse each line, and feed the records into a
TableBuilder. Errors do not stop the scan: every failing line across all files
is collected, so that a single run reports all of them. A Table is produced
only if no errors were found.
"""

import logging
from typing import List
from typing import NamedTuple
from typing import Optional

from tzpackager.data_types.tz_types import CompileError
from tzpackager.data_types.tz_types import ContinuationLine
from tzpackager.data_types.tz_types import DEFAULT_UNTIL_YEAR
from tzpackager.data_types.tz_types import LineParseError
from tzpackager.data_types.tz_types import LinkLine
from tzpackager.data_types.tz_types import ParseFailure
from tzpackager.data_types.tz_types import RuleLine
from tzpackager.data_types.tz_types import Space
from tzpackager.data_types.tz_types import TableError
from tzpackager.data_types.tz_types import ZoneInfo
from tzpackager.data_types.tz_types import ZoneLine
from tzpackager.extractor.line import parse_line
from tzpackager.table.table import Table
from tzpackager.table.table import TableBuilder


class _Location(NamedTuple):
    """Position of a line which must be verified after all files are read."""
    file_index: int
    source_file: str
    line_number: int


class _RulesetReference(NamedTuple):
    location: _Location
    ruleset: str


class _LinkReference(NamedTuple):
    location: _Location
    name: str
    target: str


class Extractor:
    """Reads the TZ files given by 'input_files' in order.

    Usage:
        extractor = Extractor(input_files)
        extractor.parse()
        extractor.print_summary()
        table = extractor.get_table()  # raises CompileError
    """

    def __init__(self, input_files: List[str]):
        self.input_files = input_files
        self.builder = TableBuilder()
        self.failures: List[ParseFailure] = []
        self.line_count = 0
        self.record_count = 0

        self._failure_file_indexes: List[int] = []
        self._ruleset_references: List[_RulesetReference] = []
        self._link_references: List[_LinkReference] = []

        # Location of the latest Zone or continuation line, where a missing
        # continuation line is reported.
        self._last_zone_location: Optional[_Location] = None

    def parse(self) -> None:
        """Read every input file. An input file which cannot be opened raises
        OSError immediately.
        """
        for file_index, input_file in enumerate(self.input_files):
            logging.info('Processing %s', input_file)
            with open(input_file, 'r', encoding='utf-8') as f:
                for line_number, line in enumerate(f, start=1):
                    location = _Location(file_index, input_file, line_number)
                    self._process_line(location, line)
            self._end_file()
        self._check_references()

    def _process_line(self, location: _Location, line: str) -> None:
        self.line_count += 1
        line = strip_comment(line)
        if not line.strip():
            return

        try:
            record = parse_line(line)
        except LineParseError as e:
            self._add_failure(location, str(e))
            return

        try:
            if isinstance(record, Space):
                return
            elif isinstance(record, RuleLine):
                self.builder.add_rule_line(record)
            elif isinstance(record, ZoneLine):
                self.builder.add_zone_line(record)
                self._last_zone_location = location
                self._add_ruleset_reference(location, record.info)
            elif isinstance(record, ContinuationLine):
                self.builder.add_continuation_line(record)
                self._last_zone_location = location
                self._add_ruleset_reference(location, record.info)
            elif isinstance(record, LinkLine):
                self.builder.add_link_line(record)
                self._link_references.append(
                    _LinkReference(location, record.name, record.target))
        except TableError as e:
            self._add_failure(location, str(e))
            return
        self.record_count += 1

    def _end_file(self) -> None:
        location = self._last_zone_location
        if location is None:
            return
        try:
            self.builder.end_of_file()
        except TableError as e:
            self._add_failure(location, str(e))

    def _add_ruleset_reference(
        self, location: _Location, info: ZoneInfo,
    ) -> None:
        if info.rules:
            self._ruleset_references.append(
                _RulesetReference(location, info.rules))

    def _add_failure(self, location: _Location, message: str) -> None:
        self.failures.append(ParseFailure(
            source_file=location.source_file,
            line_number=location.line_number,
            message=message,
        ))
        self._failure_file_indexes.append(location.file_index)

    def _check_references(self) -> None:
        """Verify the references which can only be resolved after all files
        were read, then restore the file order and line order of failures.
        """
        for ref in self._ruleset_references:
            if not self.builder.has_ruleset(ref.ruleset):
                self._add_failure(
                    ref.location, f'Unknown rules "{ref.ruleset}"')
        for link in self._link_references:
            if self.builder.resolve_link(link.name) is None:
                self._add_failure(
                    link.location,
                    f'Link "{link.name}" does not resolve to a zone '
                    f'(target "{link.target}")',
                )

        # Python's sort is stable, so failures on the same line keep their
        # order of discovery.
        order = sorted(
            range(len(self.failures)),
            key=lambda i: (
                self._failure_file_indexes[i],
                self.failures[i].line_number,
            ),
        )
        self.failures = [self.failures[i] for i in order]
        self._failure_file_indexes = [
            self._failure_file_indexes[i] for i in order]

    def print_summary(self) -> None:
        logging.info(
            'Summary: Files: %d; Lines: %d; Records: %d; Errors: %d',
            len(self.input_files),
            self.line_count,
            self.record_count,
            len(self.failures),
        )

    def get_table(self, until_year: int = DEFAULT_UNTIL_YEAR) -> Table:
        """Return the finalized Table, or raise CompileError if any line
        failed.
        """
        if self.failures:
            raise CompileError(list(self.failures))
        return self.builder.build(until_year=until_year)


def strip_comment(line: str) -> str:
    """Remove the trailing newline and everything from the first '#' which is
    not inside a double-quoted field.
    """
    in_quote = False
    for index, c in enumerate(line):
        if c == '"':
            in_quote = not in_quote
        elif c == '#' and not in_quote:
            return line[:index]
    return line.rstrip('\n')
