"""HTTP client and request counters."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger(__name__)


class ApiRequestError(RuntimeError):
    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass
class RequestMetrics:
    network_explore: int = 0
    network_leaderboard: int = 0
    failures_explore: int = 0
    failures_leaderboard: int = 0

    @property
    def explore_count(self) -> int:
        return self.network_explore

    @property
    def leaderboard_count(self) -> int:
        return self.network_leaderboard

    def inc_network(self, kind: str) -> None:
        if kind == "explore":
            self.network_explore += 1
        elif kind == "leaderboard":
            self.network_leaderboard += 1
        else:
            raise ValueError(f"Unknown request kind: {kind}")

    def inc_failure(self, kind: str) -> None:
        if kind == "explore":
            self.failures_explore += 1
        elif kind == "leaderboard":
            self.failures_leaderboard += 1
        else:
            raise ValueError(f"Unknown request kind: {kind}")

    def as_dict(self) -> Dict[str, int]:
        return {
            "explore_requests": self.network_explore,
            "explore_failures": self.failures_explore,
            "leaderboard_requests": self.network_leaderboard,
            "leaderboard_failures": self.failures_leaderboard,
        }


class HttpClient:
    """Single-attempt GET client; every failure surfaces as ``ApiRequestError``."""

    def __init__(self, access_token: str, timeout: int = 20) -> None:
        self.access_token = access_token
        self.timeout = timeout
        self.session = requests.Session()

    def get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        headers = {
            "Authorization": f"Bearer {self.access_token}",
            "Accept": "application/json",
        }
        try:
            resp = self.session.get(url, params=params, headers=headers, timeout=self.timeout)
        except requests.RequestException as exc:
            raise ApiRequestError(f"Request to {url} failed: {exc}") from exc

        status = resp.status_code
        if status != 200:
            logger.error("HTTP %s from %s", status, url)
            raise ApiRequestError(f"HTTP {status} from {url}", status)
        try:
            return resp.json()
        except ValueError as exc:
            logger.error("Non-JSON response from %s", url)
            raise ApiRequestError(f"Non-JSON response from {url}", status) from exc
