"""Bounding boxes and quadrant subdivision."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple


class InvalidBoundingBoxError(ValueError):
    pass


@dataclass(frozen=True)
class BoundingBox:
    south: float
    west: float
    north: float
    east: float

    def validate(self) -> "BoundingBox":
        # Written as a positive check so NaN coordinates are rejected too.
        if not (self.south < self.north and self.west < self.east):
            raise InvalidBoundingBoxError(
                "Provided bounds do not make sense: expected south < north and west < east, "
                f"got {self.as_param()}"
            )
        return self

    def midpoints(self) -> Tuple[float, float]:
        lat_mid = self.south + (self.north - self.south) / 2.0
        # Measured from east toward west.
        lon_mid = self.east + (self.west - self.east) / 2.0
        return lat_mid, lon_mid

    def quadrants(self) -> Tuple["BoundingBox", "BoundingBox", "BoundingBox", "BoundingBox"]:
        """Split into NW, NE, SE, SW children at the midpoint of each axis."""
        lat_mid, lon_mid = self.midpoints()
        return (
            BoundingBox(lat_mid, self.west, self.north, lon_mid),
            BoundingBox(lat_mid, lon_mid, self.north, self.east),
            BoundingBox(self.south, lon_mid, lat_mid, self.east),
            BoundingBox(self.south, self.west, lat_mid, lon_mid),
        )

    def as_param(self) -> str:
        return f"{self.south},{self.west},{self.north},{self.east}"

    def __str__(self) -> str:
        return f"{self.south:.3f}, {self.west:.3f}, {self.north:.3f}, {self.east:.3f}"


def parse_bounds(text: str) -> BoundingBox:
    """Parse a comma-separated "south, west, north, east" string into a validated box."""
    parts = [p.strip() for p in (text or "").split(",")]
    if len(parts) != 4:
        raise InvalidBoundingBoxError(
            f"Expected 4 comma-separated values (south, west, north, east), got {len(parts)}"
        )
    try:
        south, west, north, east = (float(p) for p in parts)
    except ValueError as exc:
        raise InvalidBoundingBoxError(f"Bounds must be numbers: {text!r}") from exc
    if not all(math.isfinite(v) for v in (south, west, north, east)):
        raise InvalidBoundingBoxError(f"Bounds must be finite numbers: {text!r}")
    return BoundingBox(south, west, north, east).validate()


def quadtree_query_count(depth: int) -> int:
    """Number of explore queries issued for a given subdivision depth."""
    if depth < 0:
        raise ValueError("depth must be >= 0")
    return (4 ** (depth + 1) - 1) // 3
