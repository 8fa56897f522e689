"""Segment ranking by distance and by leader pace."""
from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Protocol

from .models import LeaderboardRecord, Segment
from .reporting import ProgressReporter
from .strava_client import LeaderboardError

logger = logging.getLogger(__name__)

KeyFunc = Callable[[Segment], float]


class LeaderboardSource(Protocol):
    def leaderboard_top1(self, segment_id: int) -> Optional[LeaderboardRecord]:
        ...


def sort_by_key(segments: List[Segment], key: KeyFunc) -> None:
    segments.sort(key=key)


def distance_key(segment: Segment) -> float:
    return segment.distance


def sort_by_distance(segments: List[Segment]) -> None:
    sort_by_key(segments, distance_key)


def collect_leaders(
    client: LeaderboardSource,
    segments: List[Segment],
    progress_reporter: Optional[ProgressReporter] = None,
) -> Dict[int, LeaderboardRecord]:
    leaders: Dict[int, LeaderboardRecord] = {}
    for segment in segments:
        try:
            record = client.leaderboard_top1(segment.id)
        except LeaderboardError as exc:
            logger.warning("Leaderboard lookup failed for segment %s: %s", segment.id, exc)
            record = None
        if record is not None:
            leaders[segment.id] = record
        if progress_reporter:
            progress_reporter.advance()
    return leaders


def pace_key(leaders: Dict[int, LeaderboardRecord]) -> KeyFunc:
    """Key ranking by leader seconds per meter, fastest first.

    Segments without a leader (or without a usable distance) fall back to their raw
    distance, which is on a different scale than the pace values they are sorted among.
    """

    def key(segment: Segment) -> float:
        record = leaders.get(segment.id)
        if record is not None and segment.distance > 0:
            return float(record.elapsed_time) / segment.distance
        return segment.distance

    return key


def sort_by_pace(segments: List[Segment], leaders: Dict[int, LeaderboardRecord]) -> None:
    sort_by_key(segments, pace_key(leaders))
