# Copyright 2020 Brian T. Park
#
# MIT License

from typing import Dict
import os
import logging
import json

from tzpackager.data_types.tz_types import HistoryJson
from tzpackager.data_types.tz_types import Timespan
from tzpackager.data_types.tz_types import TimespanJson
from tzpackager.data_types.tz_types import ZoneDatabaseJson
from tzpackager.table.table import Table


def serialize_timespan(timespan: Timespan) -> TimespanJson:
    return {
        'utc_offset': timespan.utc_offset,
        'dst_offset': timespan.dst_offset,
        'offset': timespan.total_offset,
        'is_dst': timespan.is_dst,
        'abbreviation': timespan.abbreviation,
    }


class JsonGenerator:
    """Generate the JSON representation of the transition histories of every
    zone and link in the Table to the given 'json_file'.
    """
    def __init__(
        self,
        table: Table,
        json_file: str
    ):
        self.table = table
        self.json_file = json_file

    def generate_files(self, output_dir: str) -> None:
        """Serialize the Table to the specified file."""
        full_filename = os.path.join(output_dir, self.json_file)
        with open(full_filename, 'w', encoding='utf-8') as output_file:
            json.dump(self.create_document(), output_file, indent=2,
                      sort_keys=True)
            print(file=output_file)  # add terminating newline
        logging.info("Created %s", full_filename)

    def create_document(self) -> ZoneDatabaseJson:
        histories: Dict[str, HistoryJson] = {}
        for name in sorted(self.table.zone_names() + self.table.alias_names()):
            zoneset = self.table.transition_history(name)
            if zoneset is None:
                raise Exception(f'No transition history for "{name}"')
            histories[name] = {
                'first': serialize_timespan(zoneset.first),
                'rest': [
                    (instant, serialize_timespan(timespan))
                    for instant, timespan in zoneset.rest
                ],
            }

        return {
            'zones': self.table.zone_names(),
            'links': self.table.links(),
            'histories': histories,
        }
