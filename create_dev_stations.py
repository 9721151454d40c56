import asyncio
import sys
import os

# Add project root to path
sys.path.append(os.getcwd())

from src.config import settings
from src.infra.database import get_db

# Stations along one corridor, so a route between the ends passes near the middle ones
DEV_STATIONS = [
    ("hh-hbf", "Hamburg Hauptbahnhof", "Hamburg", 53.5530, 10.0069),
    ("hh-berliner-tor", "Berliner Tor", "Hamburg", 53.5510, 10.0240),
    ("hh-wandsbek", "Wandsbek Markt", "Hamburg", 53.5714, 10.0686),
    ("hh-rahlstedt", "Rahlstedt", "Hamburg", 53.6010, 10.1560),
]

async def main():
    db = get_db()
    await db.connect(
        dsn=settings.database.dsn,
        min_size=1,
        max_size=1,
    )

    print("Connected to DB")

    query = """
        INSERT INTO stations (id, name, city, lat, lng, active)
        VALUES ($1, $2, $3, $4, $5, true)
        ON CONFLICT (id) DO NOTHING
    """

    for station in DEV_STATIONS:
        await db.execute(query, *station)
        print(f"Station {station[0]} created")

    await db.disconnect()

if __name__ == "__main__":
    asyncio.run(main())
