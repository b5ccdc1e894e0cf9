#!/usr/bin/env python3
"""Example: drive an UpdateAdapter by hand with a mapping file and a printing observer."""

import logging
import sys
from pathlib import Path
from typing import Sequence

from dnp3_fmb import KeyMeasUpdate, ReadingMeasUpdate, UpdateAdapter, load_mapping
from dnp3_fmb.errors import MappingConfigError


class PrintObserver:
    def publish(self, reading_updates: Sequence[ReadingMeasUpdate], key_updates: Sequence[KeyMeasUpdate]) -> None:
        for r in reading_updates:
            print(f"reading {r.device_reading_id} = {r.value!r}")
        for k in key_updates:
            print(f"key     {k.device_key_id} = {k.value!r}")
        print("---")


def main() -> None:
    logging.basicConfig(level=logging.DEBUG if "-v" in sys.argv else logging.WARNING)
    mapping_path = Path(__file__).with_name("mapping.json")

    try:
        mapping = load_mapping(mapping_path)
    except MappingConfigError as e:
        print(f"Mapping error: {e}", file=sys.stderr)
        sys.exit(2)

    adapter = UpdateAdapter("battery-1", mapping, PrintObserver())

    # one scan: the protocol stack would make these calls from its callbacks
    with adapter.session():
        adapter.update_analog(0, 812.0)
        adapter.update_analog(1, 0.0)  # suppressed by drop_if
        adapter.update_status(0, True)
        adapter.update_status(1, False)
        adapter.update_counter(0, 123456)

    with adapter.session():
        adapter.update_control_status(0, True)
        adapter.update_setpoint_status(0, 50.0)
        adapter.update_analog(42, 1.0)  # unmapped


if __name__ == "__main__":
    main()
