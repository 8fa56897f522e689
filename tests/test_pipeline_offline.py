import pytest

from komwolf.geo import BoundingBox, InvalidBoundingBoxError
from komwolf.http import RequestMetrics
from komwolf.models import LeaderboardRecord, Segment
from komwolf.pipeline import run
from komwolf.strava_client import ExploreError, LeaderboardError

BOX = BoundingBox(29.856, -95.593, 29.949, -95.139)


class FakeStravaClient:
    """Parent and child boxes overlap, so every call returns the shared "Loop" segment."""

    def __init__(self, fail_explore_calls=(), leaders=None, failing_leaders=()):
        self.fail_explore_calls = set(fail_explore_calls)
        self.leaders = leaders or {}
        self.failing_leaders = set(failing_leaders)
        self.explore_calls = []
        self.leaderboard_calls = []
        self.metrics = None

    def set_metrics(self, metrics):
        self.metrics = metrics

    def explore(self, box, activity_type):
        index = len(self.explore_calls)
        self.explore_calls.append(box)
        if self.metrics is not None:
            self.metrics.inc_network("explore")
        if index in self.fail_explore_calls:
            if self.metrics is not None:
                self.metrics.inc_failure("explore")
            raise ExploreError("HTTP 502 from explore", 502)
        return [
            Segment(id=10, distance=1500.0, name="Loop"),
            Segment(id=100 + index, distance=400.0 * (index + 1), name=f"Hill {index}"),
        ]

    def leaderboard_top1(self, segment_id):
        self.leaderboard_calls.append(segment_id)
        if self.metrics is not None:
            self.metrics.inc_network("leaderboard")
        if segment_id in self.failing_leaders:
            if self.metrics is not None:
                self.metrics.inc_failure("leaderboard")
            raise LeaderboardError("HTTP 500 from leaderboard", 500)
        return self.leaders.get(segment_id)


def test_pipeline_without_leaders_sorts_by_distance():
    client = FakeStravaClient()
    result = run(access_token=None, box=BOX, depth=1, client=client)

    assert len(client.explore_calls) == 5
    assert client.leaderboard_calls == []
    assert result.leaders == {}
    ids = [s.id for s in result.segments]
    assert len(ids) == len(set(ids)) == 6
    distances = [s.distance for s in result.segments]
    assert distances == sorted(distances)
    assert result.summary["segments_found"] == 10
    assert result.summary["unique_segments"] == 6
    assert result.summary["requests"]["explore_requests"] == 5


def test_pipeline_with_leaders_ranks_by_pace_with_distance_fallback():
    leaders = {
        10: LeaderboardRecord(segment_id=10, elapsed_time=300),  # 0.2 s/m
        100: LeaderboardRecord(segment_id=100, elapsed_time=120),  # 0.3 s/m
    }
    client = FakeStravaClient(leaders=leaders, failing_leaders={101})
    result = run(access_token=None, box=BOX, depth=0, with_leaders=True, client=client)

    # depth 0: one explore call returning Loop (10) and Hill 0 (100)
    assert [s.id for s in result.segments] == [10, 100]
    assert set(result.leaders) == {10, 100}
    assert sorted(client.leaderboard_calls) == [10, 100]
    assert result.summary["segments_with_leader"] == 2


def test_pipeline_leader_failures_fall_back_to_distance():
    leaders = {10: LeaderboardRecord(segment_id=10, elapsed_time=300)}
    client = FakeStravaClient(leaders=leaders, failing_leaders={100, 101})
    metrics = RequestMetrics()
    result = run(
        access_token=None, box=BOX, depth=1, with_leaders=True, client=client, metrics=metrics
    )

    assert set(result.leaders) == {10}
    assert len(client.leaderboard_calls) == len(result.segments) == 6
    # Loop ranks by pace (0.2); everything else by raw distance in meters.
    assert result.segments[0].id == 10
    rest = [s.distance for s in result.segments[1:]]
    assert rest == sorted(rest)
    assert metrics.failures_leaderboard == 2
    assert set(result.leaders) <= {s.id for s in result.segments}


def test_pipeline_survives_failed_explore_nodes():
    client = FakeStravaClient(fail_explore_calls={0, 3})
    result = run(access_token=None, box=BOX, depth=1, client=client)

    ids = {s.id for s in result.segments}
    assert ids == {10, 101, 102, 104}
    assert result.summary["requests"]["explore_failures"] == 2


def test_pipeline_rejects_invalid_box_before_exploring():
    client = FakeStravaClient()
    with pytest.raises(InvalidBoundingBoxError):
        run(access_token=None, box=BoundingBox(30.0, -95.0, 29.0, -96.0), client=client)
    assert client.explore_calls == []


def test_pipeline_rejects_negative_depth():
    client = FakeStravaClient()
    with pytest.raises(ValueError):
        run(access_token=None, box=BOX, depth=-1, client=client)
    assert client.explore_calls == []


def test_pipeline_requires_token_for_real_client():
    with pytest.raises(ValueError):
        run(access_token=None, box=BOX)


def test_pipeline_passes_unknown_activity_type_through(caplog):
    client = FakeStravaClient()
    seen = []
    original = client.explore

    def explore(box, activity_type):
        seen.append(activity_type)
        return original(box, activity_type)

    client.explore = explore
    run(access_token=None, box=BOX, activity_type="hiking", client=client)

    assert seen == ["hiking"]
    assert any("hiking" in r.getMessage() for r in caplog.records)


def test_pipeline_keeps_metrics_of_injected_client():
    own = RequestMetrics()
    client = FakeStravaClient()
    client.set_metrics(own)

    result = run(access_token=None, box=BOX, depth=1, client=client)

    assert client.metrics is own
    assert own.network_explore == 5
    assert result.summary["requests"]["explore_requests"] == 5


def test_pipeline_rejects_conflicting_metrics():
    client = FakeStravaClient()
    client.set_metrics(RequestMetrics())
    with pytest.raises(ValueError):
        run(access_token=None, box=BOX, client=client, metrics=RequestMetrics())
    assert client.explore_calls == []
