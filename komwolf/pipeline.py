"""Pipeline orchestration."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from . import config
from .explore import deduplicate, explore_area
from .geo import BoundingBox, quadtree_query_count
from .http import HttpClient, RequestMetrics
from .models import LeaderboardRecord, Segment
from .ranking import collect_leaders, sort_by_distance, sort_by_pace
from .reporting import ProgressReporter
from .strava_client import StravaClient

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    segments: List[Segment]
    leaders: Dict[int, LeaderboardRecord]
    summary: Dict[str, Any]


def run(
    access_token: Optional[str],
    box: BoundingBox,
    activity_type: str = config.DEFAULT_ACTIVITY_TYPE,
    depth: int = config.DEFAULT_DEPTH,
    with_leaders: bool = False,
    client: Optional[StravaClient] = None,
    metrics: Optional[RequestMetrics] = None,
) -> PipelineResult:
    box.validate()
    if depth < 0:
        raise ValueError("depth must be >= 0")
    if activity_type not in config.ACTIVITY_TYPES:
        logger.warning(
            "Unrecognized activity type %r; passing it to the explore API as-is", activity_type
        )

    if client is None:
        if not access_token:
            raise ValueError("Access token is required when using the real Strava client")
        http_client = HttpClient(
            access_token,
            timeout=config.HTTP_TIMEOUT_SECONDS,
        )
        metrics = metrics if metrics is not None else RequestMetrics()
        client = StravaClient(http_client, metrics=metrics)
    else:
        # An injected client keeps the counters it already has.
        existing = getattr(client, "metrics", None)
        if existing is not None:
            if metrics is not None and metrics is not existing:
                raise ValueError(
                    "Injected client already has request metrics; pass one or the other"
                )
            metrics = existing
        else:
            metrics = metrics if metrics is not None else RequestMetrics()
            setter = getattr(client, "set_metrics", None)
            if callable(setter):
                setter(metrics)

    progress = ProgressReporter(
        log_every=config.PROGRESS_LOG_EVERY,
        logger=logger,
        counters=metrics,
    )

    logger.info("Stage 1: explore (%s, depth %d)", box, depth)
    progress.set_stage("explore", total_estimate=quadtree_query_count(depth))
    found = explore_area(client, box, activity_type, depth, progress_reporter=progress)

    logger.info("Stage 2: deduplicate")
    segments = deduplicate(found)
    logger.info("Found %d unique segments", len(segments))

    logger.info("Stage 3: sort by distance")
    sort_by_distance(segments)

    leaders: Dict[int, LeaderboardRecord] = {}
    if with_leaders:
        logger.info("Stage 4: collecting segment leaderboards")
        progress.set_stage("leaderboards", total_estimate=len(segments))
        leaders = collect_leaders(client, segments, progress_reporter=progress)
        sort_by_pace(segments, leaders)

    summary: Dict[str, Any] = {
        "bounds": str(box),
        "activity_type": activity_type,
        "depth": depth,
        "with_leaders": with_leaders,
        "segments_found": len(found),
        "unique_segments": len(segments),
        "segments_with_leader": len(leaders),
        "requests": metrics.as_dict(),
    }
    return PipelineResult(segments=segments, leaders=leaders, summary=summary)
