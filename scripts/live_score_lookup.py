#!/usr/bin/env python3
"""Quick live check of the GBIF and Open-Meteo score lookups.

Run:
  poetry run python scripts/live_score_lookup.py                               # default location
  poetry run python scripts/live_score_lookup.py "Great Barrier Reef, Australia"
"""

import asyncio
import sys

from meadowlark.connectors.registry import ConnectorRegistry
from meadowlark.errors import PipelineError
from meadowlark.scoring import parse_conservation_payload, parse_economic_payload


async def _lookup(location: str) -> bool:
    ok = True
    try:
        text = await ConnectorRegistry.conservation_source().fetch(location)
        reading = parse_conservation_payload(text)
        print(
            f"  GBIF: score={reading.score} occurrences={reading.species_count:,} "
            f"threatened={reading.threatened_count:,}"
        )
    except PipelineError as e:
        ok = False
        print(f"  GBIF failed ({e.reason}): {e}")
    try:
        text = await ConnectorRegistry.economic_source().fetch(location)
        reading = parse_economic_payload(text)
        print(
            f"  Open-Meteo: score={reading.score} "
            f"temperature={reading.temperature}°C precipitation={reading.precipitation}mm"
        )
    except PipelineError as e:
        ok = False
        print(f"  Open-Meteo failed ({e.reason}): {e}")
    return ok


def main() -> None:
    location = sys.argv[1] if len(sys.argv) > 1 else "Amazon Rainforest, Brazil"
    print(f"Looking up scores for {location!r}...")
    if asyncio.run(_lookup(location)):
        print("\n✅ Both lookups succeeded.")
    else:
        print("\n⚠️ A lookup failed; the pipeline would use baseline scores for it.")


if __name__ == "__main__":
    main()
