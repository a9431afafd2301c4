#!/usr/bin/env python3
"""Example: Quickstart — nsbridge

Minimal working example: initialise the bridge, build an action, resolve a
date through calendar fields and collect handles in a native collection.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install nsbridge
"""
from __future__ import annotations

import nsbridge


def main() -> None:
    print(f"nsbridge version: {nsbridge.__version__}")

    # Step 1: Initialise the bridge once
    bridge = nsbridge.init_bridge()
    print(f"Runtime: {bridge.runtime_name}")

    with nsbridge.HandleScope(bridge.runtime) as scope:
        # Step 2: Build two actions
        open_action = scope.own(bridge.actions.new_action("open-action", "Open"))
        snooze_action = scope.own(bridge.actions.new_action("snooze-action", "Snooze"))
        print(
            f"Action: {bridge.actions.action_identifier(open_action)!r} "
            f"titled {bridge.actions.action_title(open_action)!r}"
        )

        # Step 3: Resolve a date in an explicit time zone
        calendar = nsbridge.Calendar(timezone="Europe/Berlin")
        fields = nsbridge.CalendarFields(day=24, month=12, year=2030, hour=18, minute=30, second=0)
        date = scope.own(bridge.dates.to_date(scope.own(bridge.dates.fields_to_native(fields)), calendar))
        print(f"Resolved date: {bridge.dates.datetime_from_date(date, calendar).isoformat()}")

        # Step 4: Collect handles in a native collection
        actions = nsbridge.HandleList.new([open_action, snooze_action], bridge.runtime)
        scope.own(actions.handle)
        actions.swap(0, 1)
        titles = [bridge.actions.action_title(action) for action in actions]
        print(f"Actions after swap: {titles}")

    nsbridge.shutdown_bridge()


if __name__ == "__main__":
    main()
