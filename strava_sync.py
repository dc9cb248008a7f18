"""
Strava activity import.

Fetches the athlete's recent activities from the Strava API and writes runs
into the matching day of the plan:
- distance metres -> miles, elevation metres -> feet
- average speed (m/s) -> per-mile pace
- GAP from miles / pace / elevation
- a manual entry is never overwritten

The whole activity list is fetched and validated before the store is touched,
so a transport, auth or payload failure leaves the plan unchanged.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

import requests

from calendar_math import iso_date, parse_iso_date
from coach_config import get_config
from coach_errors import ProviderError
from paces import grade_adjusted_pace, speed_to_pace
from workout_store import LoggedResult, WorkoutStore

log = logging.getLogger(__name__)

PROVIDER = "strava"

METERS_TO_MILES = 0.000621371
METERS_TO_FEET = 3.28084


@dataclass
class StravaActivity:
    type: str
    distance_meters: float
    total_elevation_gain_meters: float
    average_speed_mps: float
    start_date_local: str
    name: str
    day: date = field(init=False)

    def __post_init__(self) -> None:
        # raises ValueError for a malformed start date
        self.day = parse_iso_date(self.start_date_local.split("T")[0])

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "StravaActivity":
        return cls(
            type=str(payload["type"]),
            distance_meters=float(payload.get("distance") or 0.0),
            total_elevation_gain_meters=float(payload.get("total_elevation_gain") or 0.0),
            average_speed_mps=float(payload.get("average_speed") or 0.0),
            start_date_local=str(payload["start_date_local"]),
            name=str(payload.get("name") or ""),
        )

    @property
    def local_date(self) -> str:
        return iso_date(self.day)

    @property
    def miles(self) -> float:
        return round(self.distance_meters * METERS_TO_MILES, 2)

    @property
    def elevation_feet(self) -> float:
        return float(math.floor(self.total_elevation_gain_meters * METERS_TO_FEET + 0.5))


@dataclass
class SyncReport:
    fetched: int = 0
    synced_ids: List[int] = field(default_factory=list)
    skipped: int = 0

    @property
    def synced(self) -> int:
        return len(self.synced_ids)


class StravaClient:
    """
    Client for the Strava v3 API.

    With client id, secret and refresh token configured a fresh access token is
    requested before each listing; otherwise a configured access token is used
    as-is.
    """

    def __init__(
        self,
        access_token: Optional[str] = None,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        refresh_token: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        config = get_config()
        self.access_token = access_token or config.get_strava_setting("access_token")
        self.client_id = client_id or config.get_strava_setting("client_id")
        self.client_secret = client_secret or config.get_strava_setting("client_secret")
        self.refresh_token = refresh_token or config.get_strava_setting("refresh_token")
        self.base_url = str(config.get_strava_setting("base_url")).rstrip("/")
        self.token_url = config.get_strava_setting("token_url")
        self.per_page = int(config.get_strava_setting("per_page") or 30)
        self.timeout = config.get_timeout()
        self.session = session or requests.Session()

    @property
    def can_refresh(self) -> bool:
        return bool(self.client_id and self.client_secret and self.refresh_token)

    def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
            resp.raise_for_status()
            return resp.json()
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else "?"
            if status in (401, 403):
                log.error("Strava rejected the credentials (HTTP %s)", status)
                raise ProviderError(PROVIDER, "authentication failed; the token has likely expired") from e
            log.error("Strava HTTP error %s: %s", status, e)
            raise ProviderError(PROVIDER, f"HTTP {status}") from e
        except requests.exceptions.RequestException as e:
            log.error("Strava request failed: %s", e)
            raise ProviderError(PROVIDER, str(e)) from e
        except ValueError as e:
            raise ProviderError(PROVIDER, f"invalid JSON: {e}") from e

    def refresh_access_token(self) -> str:
        payload = self._request(
            "POST",
            self.token_url,
            json={
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "grant_type": "refresh_token",
                "refresh_token": self.refresh_token,
            },
        )
        token = payload.get("access_token") if isinstance(payload, dict) else None
        if not token:
            raise ProviderError(PROVIDER, "token refresh returned no access_token")
        self.access_token = token
        log.info("Refreshed Strava access token")
        return token

    def list_activities(self) -> List[StravaActivity]:
        if self.can_refresh:
            self.refresh_access_token()
        if not self.access_token:
            raise ProviderError(PROVIDER, "no Strava credentials configured")
        payload = self._request(
            "GET",
            f"{self.base_url}/athlete/activities",
            params={"per_page": self.per_page},
            headers={"Authorization": f"Bearer {self.access_token}"},
        )
        if not isinstance(payload, list):
            raise ProviderError(PROVIDER, "activity list is not a JSON array")
        try:
            return [StravaActivity.from_api(item) for item in payload]
        except (KeyError, TypeError, ValueError) as e:
            raise ProviderError(PROVIDER, f"malformed activity: {e}") from e


# -----------------------------
# Import
# -----------------------------


def activity_result(activity: StravaActivity) -> Optional[LoggedResult]:
    """Logged-result fields for a run, or ``None`` for non-runs and zero-speed activities."""
    if activity.type != "Run" or activity.average_speed_mps <= 0:
        return None
    miles = activity.miles
    pace = speed_to_pace(activity.average_speed_mps)
    elevation = activity.elevation_feet
    return LoggedResult(
        miles=miles,
        pace=pace,
        elev=elevation,
        gap=grade_adjusted_pace(miles, pace, elevation),
        notes=f"Strava Sync: {activity.name}",
    )


def import_activities(store: WorkoutStore, activities: Iterable[StravaActivity]) -> SyncReport:
    report = SyncReport()
    for activity in activities:
        report.fetched += 1
        result = activity_result(activity)
        if result is None:
            report.skipped += 1
            continue
        record = store.find_by_date(activity.local_date)
        if record is None or not store.log_result_by_date(activity.local_date, result):
            report.skipped += 1
            continue
        report.synced_ids.append(record.id)
        log.debug("Synced %s into workout %s", activity.name, record.id)
    log.info("Strava sync: %d new runs, %d skipped", report.synced, report.skipped)
    return report


def sync_strava(store: WorkoutStore, client: Optional[StravaClient] = None) -> SyncReport:
    activities = (client or StravaClient()).list_activities()
    return import_activities(store, activities)


__all__ = [
    "StravaActivity",
    "StravaClient",
    "SyncReport",
    "activity_result",
    "import_activities",
    "sync_strava",
]
