"""
Runtime configuration

Values are read from the environment, with a .env file loaded first.
"""

import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
PORT = int(os.getenv("PORT", 8000))

# e.g. "drinks=bar,cocktails=bar,desserts=kitchen"
CATEGORY_STATION_MAPPING = os.getenv("CATEGORY_STATION_MAPPING", "")


def parse_station_mapping(raw: str) -> dict:
    """Parse a "category=station" comma list into a dict, skipping blanks."""
    mapping = {}
    for pair in raw.split(","):
        pair = pair.strip()
        if not pair:
            continue
        category_id, _, station = pair.partition("=")
        if not station.strip():
            raise ValueError(f"Invalid CATEGORY_STATION_MAPPING entry: {pair!r}")
        mapping[category_id.strip()] = station.strip().lower()
    return mapping
