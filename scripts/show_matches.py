#!/usr/bin/env python3
"""
Print the match list for one event division.

Usage:
    python scripts/show_matches.py RE-VRC-23-1234 [--division ID] [--predict] [--json]

Options:
    --division  Division id (default: first division of the event)
    --predict   Show predicted scores where ratings allow it
    --json      Output as JSON instead of a table
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from roboscout.config import load_settings
from roboscout.data.event import load_event
from roboscout.data.robotevents_client import RobotEventsClient
from roboscout.matches.projection import format_score
from roboscout.matches.projector import MatchListSnapshot, MatchRowProjector

logger = logging.getLogger("show_matches")


def print_matches_table(snapshot: MatchListSnapshot):
    """Print the rows as a fixed-width table"""
    if snapshot.is_empty:
        print("No matches found.")
        return

    numbers = snapshot.team_numbers
    print(f"{'Match':<8} {'Time':>8}  {'Red':<15} {'':>4} - {'':<4} {'Blue':<15}")
    print("-" * 62)
    for row in snapshot.rows:
        red = " ".join(numbers.get(i, "?") for i in row.red_team_ids)
        blue = " ".join(numbers.get(i, "?") for i in row.blue_team_ids)
        red_score = format_score(row.red_score_display)
        blue_score = format_score(row.blue_score_display)
        marker = " *" if row.is_predicted else ""
        print(f"{row.display_name:<8} {row.time_label:>8}  {red:<15} {red_score:>4} - {blue_score:<4} {blue:<15}{marker}")

    if snapshot.predictions_enabled:
        print("\n* predicted score")


def main():
    parser = argparse.ArgumentParser(description="Print the match list for an event division")
    parser.add_argument("sku", help="Event SKU, e.g. RE-VRC-23-1234")
    parser.add_argument("--division", type=int, default=None, help="Division id")
    parser.add_argument("--predict", action="store_true", help="Show predicted scores")
    parser.add_argument("--json", action="store_true", help="Output as JSON")
    args = parser.parse_args()

    settings = load_settings(project_root / ".env")
    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")

    client = RobotEventsClient(settings=settings)
    try:
        event = load_event(client, args.sku)
        division = event.division(args.division) if args.division else event.divisions[0]
    except (LookupError, IndexError) as e:
        logger.error("Cannot show matches: %s", e)
        sys.exit(1)

    projector = MatchRowProjector(event, division, tz=settings.display_tz)
    projector.refresh(predict=args.predict)
    snapshot = projector.snapshot()

    if snapshot.last_error:
        logger.warning("%s", snapshot.last_error)

    if args.json:
        from roboscout.api.models import MatchList

        print(json.dumps(MatchList.from_snapshot(args.sku, snapshot).model_dump(), indent=2))
    else:
        print(f"{event.name} - {division.name}\n")
        print_matches_table(snapshot)


if __name__ == "__main__":
    main()
