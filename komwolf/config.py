"""Project configuration.

Keeps API request shapes, CLI defaults and presentation units centralized here.
"""
from __future__ import annotations

from dataclasses import dataclass

# --- API endpoints ---

STRAVA_API_BASE_URL = "https://www.strava.com/api/v3"
SEGMENTS_EXPLORE_URL = f"{STRAVA_API_BASE_URL}/segments/explore"
SEGMENT_LEADERBOARD_URL_TEMPLATE = f"{STRAVA_API_BASE_URL}/segments/{{segment_id}}/leaderboard"
SEGMENT_URL_PREFIX = "https://www.strava.com/segments"

# --- Leaderboard request shape ---

LEADERBOARD_PAGE = 1
LEADERBOARD_PER_PAGE = 1

# --- Defaults ---

# south, west, north, east
DEFAULT_BOUNDS = "29.856, -95.593, 29.949, -95.139"
DEFAULT_DEPTH = 0
DEFAULT_ACTIVITY_TYPE = "running"
ACTIVITY_TYPES = ("running", "riding")

# --- Access token ---

TOKEN_ENV_VAR = "STRAVA_TOKEN"
TOKEN_FILENAME = "STRAVA_TOKEN"

# --- HTTP ---

HTTP_TIMEOUT_SECONDS = 20

# --- Progress ---

PROGRESS_LOG_EVERY = 25


@dataclass(frozen=True)
class DistanceUnit:
    abbrev: str
    meters_factor: float

    def convert(self, meters: float) -> float:
        return meters * self.meters_factor


METRIC = DistanceUnit(abbrev="km", meters_factor=0.001)
IMPERIAL = DistanceUnit(abbrev="mi", meters_factor=0.000621371)


def distance_unit(metric: bool) -> DistanceUnit:
    return METRIC if metric else IMPERIAL
