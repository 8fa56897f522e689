"""Segment and leaderboard records returned by the Strava API adapter."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True, eq=False)
class Segment:
    id: int
    distance: float
    name: str
    extra: Dict[str, Any] = field(default_factory=dict)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Segment):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


@dataclass(frozen=True)
class LeaderboardRecord:
    segment_id: int
    elapsed_time: int
    athlete_name: Optional[str] = None
    moving_time: Optional[int] = None
    start_date: Optional[str] = None
    rank: Optional[int] = None
