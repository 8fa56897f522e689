"""Progress logging and output formatting helpers."""
from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Optional, Protocol, Tuple

from . import config
from .config import DistanceUnit
from .models import LeaderboardRecord, Segment


class RequestCounters(Protocol):
    explore_count: int
    leaderboard_count: int


class ProgressReporter:
    def __init__(
        self,
        log_every: int = 25,
        logger: Optional[logging.Logger] = None,
        counters: Optional[RequestCounters] = None,
    ) -> None:
        self.log_every = max(1, int(log_every)) if log_every else 0
        self.logger = logger or logging.getLogger(__name__)
        self._counters = counters
        self.stage = "init"
        self.processed_count = 0
        self.total_estimate: Optional[int] = None
        self._next_log = self.log_every if self.log_every else 0

    def set_stage(self, stage: str, total_estimate: Optional[int] = None) -> None:
        self.stage = stage
        self.processed_count = 0
        self.total_estimate = total_estimate
        self._next_log = self.log_every if self.log_every else 0

    def advance(self, count: int = 1) -> None:
        if count <= 0:
            return
        self.processed_count += count
        due = self.log_every and self.processed_count >= self._next_log
        done = self.total_estimate is not None and self.processed_count >= self.total_estimate
        if not (due or done):
            return
        explore_requests, leaderboard_requests = self._get_counts()
        if self.total_estimate is None:
            self.logger.info(
                "Progress: stage=%s processed=%s explore_requests=%s leaderboard_requests=%s",
                self.stage,
                self.processed_count,
                explore_requests,
                leaderboard_requests,
            )
        else:
            self.logger.info(
                "Progress: stage=%s processed=%s/%s explore_requests=%s leaderboard_requests=%s",
                self.stage,
                self.processed_count,
                self.total_estimate,
                explore_requests,
                leaderboard_requests,
            )
        if self.log_every:
            while self._next_log <= self.processed_count:
                self._next_log += self.log_every

    def _get_counts(self) -> Tuple[int, int]:
        if self._counters is None:
            return (0, 0)
        return (
            int(getattr(self._counters, "explore_count", 0)),
            int(getattr(self._counters, "leaderboard_count", 0)),
        )


def segment_url(segment_id: int) -> str:
    return f"{config.SEGMENT_URL_PREFIX}/{segment_id}"


def format_segment(segment: Segment, unit: DistanceUnit) -> str:
    return (
        f"{segment_url(segment.id)} {unit.convert(segment.distance):.2f} "
        f"{unit.abbrev}: {segment.name}"
    )


def pace_per_unit(elapsed_time: int, distance_m: float, unit: DistanceUnit) -> Tuple[int, int]:
    """Split a leader's pace into whole minutes and seconds per distance unit.

    Seconds are rounded half-up; 60 rounded seconds carry into the minutes.
    """
    pace = (elapsed_time / 60.0) / unit.convert(distance_m)
    minutes = int(pace)
    seconds = int(math.floor((pace - minutes) * 60.0 + 0.5))
    if seconds >= 60:
        minutes += 1
        seconds -= 60
    return minutes, seconds


def format_leader(record: LeaderboardRecord, distance_m: float, unit: DistanceUnit) -> str:
    minutes, seconds = pace_per_unit(record.elapsed_time, distance_m, unit)
    return f"CR {minutes}:{seconds:02d} min/{unit.abbrev} ({record.elapsed_time} s)"


def render_results(
    segments: List[Segment],
    leaders: Dict[int, LeaderboardRecord],
    unit: DistanceUnit,
) -> List[str]:
    lines: List[str] = []
    for segment in segments:
        lines.append(format_segment(segment, unit))
        record = leaders.get(segment.id)
        if record is not None and segment.distance > 0:
            lines.append(format_leader(record, segment.distance, unit))
    return lines


def render_summary(summary: Dict[str, Any]) -> List[str]:
    lines = [
        f"Bounds: {summary.get('bounds')}",
        f"Activity type: {summary.get('activity_type')}",
        f"Depth: {summary.get('depth')}",
        f"Segments found (with duplicates): {summary.get('segments_found', 0)}",
        f"Unique segments: {summary.get('unique_segments', 0)}",
    ]
    if summary.get("with_leaders"):
        lines.append(f"Segments with leader: {summary.get('segments_with_leader', 0)}")
    requests = summary.get("requests") or {}
    lines.append(
        "Requests: explore={} (failed {}), leaderboard={} (failed {})".format(
            requests.get("explore_requests", 0),
            requests.get("explore_failures", 0),
            requests.get("leaderboard_requests", 0),
            requests.get("leaderboard_failures", 0),
        )
    )
    return lines
