"""Segment discovery by recursive quadrant subdivision."""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Protocol

from .geo import BoundingBox
from .models import Segment
from .reporting import ProgressReporter
from .strava_client import ExploreError

logger = logging.getLogger(__name__)


class SegmentExplorer(Protocol):
    def explore(self, box: BoundingBox, activity_type: str) -> List[Segment]:
        ...


def explore_area(
    client: SegmentExplorer,
    box: BoundingBox,
    activity_type: str,
    depth: int,
    progress_reporter: Optional[ProgressReporter] = None,
) -> List[Segment]:
    """Collect segments in ``box`` by querying every node of a quadtree of ``depth`` levels.

    The explore endpoint caps its results per call, so each box is queried and then split
    into NW, NE, SE, SW quadrants until ``depth`` runs out. Parents are queried as well as
    leaves. The result keeps duplicates in depth-first order; pass it to ``deduplicate``.
    A failed query counts as an empty result for that node only.
    """
    if depth < 0:
        raise ValueError("depth must be >= 0")

    segments: List[Segment] = []

    def recur(node: BoundingBox, remaining: int) -> None:
        logger.debug("Exploring %s", node)
        try:
            found = client.explore(node, activity_type)
        except ExploreError as exc:
            logger.warning("Explore failed at depth %d: %s", remaining, exc)
            found = []
        segments.extend(found)
        if progress_reporter:
            progress_reporter.advance()
        if remaining > 0:
            for quadrant in node.quadrants():
                recur(quadrant, remaining - 1)

    recur(box, depth)
    return segments


def deduplicate(segments: Iterable[Segment]) -> List[Segment]:
    """Return one segment per id; the last instance seen for an id wins."""
    by_id: Dict[int, Segment] = {}
    for segment in segments:
        by_id[segment.id] = segment
    return list(by_id.values())
