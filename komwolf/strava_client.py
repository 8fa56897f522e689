"""Strava segments API client and response parsing."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from . import config
from .geo import BoundingBox
from .http import ApiRequestError, HttpClient, RequestMetrics
from .models import LeaderboardRecord, Segment

logger = logging.getLogger(__name__)

# Raised by the parsers when a 200 body does not have the expected shape.
MALFORMED_RESPONSE_ERRORS = (AttributeError, TypeError, ValueError, KeyError, IndexError)


class ExploreError(ApiRequestError):
    pass


class LeaderboardError(ApiRequestError):
    pass


class StravaClient:
    def __init__(
        self,
        http_client: HttpClient,
        metrics: Optional[RequestMetrics] = None,
    ) -> None:
        self.http = http_client
        self.metrics = metrics

    def set_metrics(self, metrics: RequestMetrics) -> None:
        self.metrics = metrics

    def explore(self, box: BoundingBox, activity_type: str) -> List[Segment]:
        params = build_explore_params(box, activity_type)
        self._count("explore")
        try:
            response = self.http.get_json(config.SEGMENTS_EXPLORE_URL, params=params)
        except ApiRequestError as exc:
            self._count_failure("explore")
            raise ExploreError(f"Explore failed for {box}: {exc}", exc.status_code) from exc
        try:
            return parse_explore_response(response)
        except MALFORMED_RESPONSE_ERRORS as exc:
            self._count_failure("explore")
            raise ExploreError(f"Malformed explore response for {box}: {exc!r}") from exc

    def leaderboard_top1(self, segment_id: int) -> Optional[LeaderboardRecord]:
        url = config.SEGMENT_LEADERBOARD_URL_TEMPLATE.format(segment_id=segment_id)
        params = {"page": config.LEADERBOARD_PAGE, "per_page": config.LEADERBOARD_PER_PAGE}
        self._count("leaderboard")
        try:
            response = self.http.get_json(url, params=params)
        except ApiRequestError as exc:
            self._count_failure("leaderboard")
            raise LeaderboardError(
                f"Leaderboard lookup failed for segment {segment_id}: {exc}", exc.status_code
            ) from exc
        try:
            return parse_leaderboard_response(segment_id, response)
        except MALFORMED_RESPONSE_ERRORS as exc:
            self._count_failure("leaderboard")
            raise LeaderboardError(
                f"Malformed leaderboard response for segment {segment_id}: {exc!r}"
            ) from exc

    def _count(self, kind: str) -> None:
        if self.metrics is not None:
            self.metrics.inc_network(kind)

    def _count_failure(self, kind: str) -> None:
        if self.metrics is not None:
            self.metrics.inc_failure(kind)


def build_explore_params(box: BoundingBox, activity_type: str) -> Dict[str, Any]:
    params: Dict[str, Any] = {"bounds": box.as_param()}
    if activity_type:
        params["activity_type"] = activity_type
    return params


# Adapter/mapper for Strava response fields

def parse_explore_response(response: Dict[str, Any]) -> List[Segment]:
    items = response.get("segments") or []
    parsed: List[Segment] = []
    for item in items:
        segment_id = item.get("id")
        if segment_id is None:
            continue
        extra = {k: v for k, v in item.items() if k not in ("id", "distance", "name")}
        parsed.append(
            Segment(
                id=int(segment_id),
                distance=float(item.get("distance") or 0.0),
                name=item.get("name") or "",
                extra=extra,
            )
        )
    return parsed


def parse_leaderboard_response(
    segment_id: int, response: Dict[str, Any]
) -> Optional[LeaderboardRecord]:
    entries = response.get("entries") or []
    entry_count = response.get("entry_count")
    if entry_count is None:
        entry_count = len(entries)
    if int(entry_count) <= 0 or not entries:
        return None
    top = entries[0]
    elapsed = top.get("elapsed_time")
    if elapsed is None:
        logger.debug("Leaderboard entry without elapsed_time for segment %s", segment_id)
        return None
    moving = top.get("moving_time")
    rank = top.get("rank")
    return LeaderboardRecord(
        segment_id=int(segment_id),
        elapsed_time=int(elapsed),
        athlete_name=top.get("athlete_name"),
        moving_time=int(moving) if moving is not None else None,
        start_date=top.get("start_date_local") or top.get("start_date"),
        rank=int(rank) if rank is not None else None,
    )
