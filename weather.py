"""
weather
-------
Open-Meteo forecast provider and the "best start time" search.

The forecast only reaches a week or two ahead; a date outside it simply has no
data (``None``), which is an expected condition rather than an error.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests

from calendar_math import DateLike, iso_date
from coach_config import get_config
from coach_errors import ProviderError
from workout_model import WorkoutRecord, WorkoutType

log = logging.getLogger(__name__)

PROVIDER = "open-meteo"

SUNNY, CLOUDY, RAINY = "☀️", "☁️", "🌧️"
RAIN_PROBABILITY_THRESHOLD = 50
CLOUD_WEATHER_CODE = 3

FIRST_START_HOUR = 6
LAST_START_HOUR = 18
IDEAL_TEMP_F = 50

MINUTES_PER_PLANNED_MILE = 8.5
CROSS_TRAIN_MINUTES = 60
DEFAULT_MINUTES = 45


@dataclass
class DailyWeather:
    temp_f: int
    icon: str


@dataclass
class HourlyWeather:
    time: str
    temp_f: int
    precip: Optional[float]

    @property
    def hour(self) -> int:
        return int(self.time.split(":")[0])


@dataclass
class WeatherForecast:
    daily: Dict[str, DailyWeather] = field(default_factory=dict)
    hourly: Dict[str, List[HourlyWeather]] = field(default_factory=dict)

    def daily_for(self, day: DateLike) -> Optional[DailyWeather]:
        return self.daily.get(iso_date(day))

    def hourly_for(self, day: DateLike) -> Optional[List[HourlyWeather]]:
        return self.hourly.get(iso_date(day))


@dataclass
class BestStartTime:
    hour: int
    temp_f: int
    precip: float
    score: float
    duration_minutes: int

    @property
    def display_hour(self) -> str:
        suffix = "PM" if self.hour >= 12 else "AM"
        return f"{self.hour % 12 or 12}:00 {suffix}"


def celsius_to_fahrenheit(celsius: float) -> int:
    return int(math.floor(celsius * 9 / 5 + 32 + 0.5))


def daily_icon(precip_max: Optional[float], weather_code: Optional[float]) -> str:
    if precip_max is not None and precip_max > RAIN_PROBABILITY_THRESHOLD:
        return RAINY
    if weather_code is not None and weather_code >= CLOUD_WEATHER_CODE:
        return CLOUDY
    return SUNNY


def parse_forecast(payload: Dict[str, Any]) -> WeatherForecast:
    """Open-Meteo JSON -> ``WeatherForecast``; raises ``ProviderError`` on a malformed payload."""
    forecast = WeatherForecast()
    try:
        daily = payload["daily"]
        for idx, day in enumerate(daily["time"]):
            forecast.daily[day] = DailyWeather(
                temp_f=celsius_to_fahrenheit(daily["temperature_2m_max"][idx]),
                icon=daily_icon(daily["precipitation_probability_max"][idx], daily["weathercode"][idx]),
            )
        hourly = payload["hourly"]
        for idx, stamp in enumerate(hourly["time"]):
            day, time = stamp.split("T")
            forecast.hourly.setdefault(day, []).append(
                HourlyWeather(
                    time=time,
                    temp_f=celsius_to_fahrenheit(hourly["temperature_2m"][idx]),
                    precip=hourly["precipitation_probability"][idx],
                )
            )
    except (KeyError, IndexError, TypeError, ValueError) as e:
        raise ProviderError(PROVIDER, f"malformed forecast payload: {e}") from e
    return forecast


class OpenMeteoClient:
    """
    Client for the Open-Meteo forecast API.

    API Documentation: https://open-meteo.com/en/docs
    """

    def __init__(
        self,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        timezone: Optional[str] = None,
        base_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        config = get_config()
        default_lat, default_lon = config.get_coordinates()
        self.latitude = default_lat if latitude is None else latitude
        self.longitude = default_lon if longitude is None else longitude
        self.timezone = timezone or config.get_timezone()
        self.base_url = base_url or config.get('weather.base_url')
        self.timeout = config.get_timeout()
        self.session = session or requests.Session()

    def fetch_forecast(self) -> WeatherForecast:
        params = {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "daily": "temperature_2m_max,precipitation_probability_max,weathercode",
            "hourly": "temperature_2m,precipitation_probability",
            "timezone": self.timezone,
        }
        try:
            resp = self.session.get(self.base_url, params=params, timeout=self.timeout)
            resp.raise_for_status()
            payload = resp.json()
        except requests.exceptions.RequestException as e:
            log.warning("Weather fetch failed: %s", e)
            raise ProviderError(PROVIDER, str(e)) from e
        except ValueError as e:
            raise ProviderError(PROVIDER, f"invalid JSON: {e}") from e
        forecast = parse_forecast(payload)
        log.info("Fetched forecast for %d days", len(forecast.daily))
        return forecast


# -----------------------------
# Run timing
# -----------------------------


def estimate_duration_minutes(record: WorkoutRecord) -> int:
    if record.planned_miles > 0:
        minutes = record.planned_miles * MINUTES_PER_PLANNED_MILE
    elif record.type is WorkoutType.CROSS_TRAIN:
        minutes = CROSS_TRAIN_MINUTES
    else:
        minutes = DEFAULT_MINUTES
    return int(math.floor(minutes + 0.5))


def hour_score(entry: HourlyWeather) -> float:
    return entry.precip * 2 + abs(entry.temp_f - IDEAL_TEMP_F)


def find_best_start_time(forecast: WeatherForecast, record: WorkoutRecord) -> Optional[BestStartTime]:
    """
    Lowest ``precip * 2 + |temp - 50|`` between 6:00 and 18:00 on the record's
    date; the earliest hour wins ties. ``None`` when the date is outside the
    forecast.
    """
    hours = forecast.hourly_for(record.date)
    if not hours:
        return None
    best: Optional[HourlyWeather] = None
    best_score = math.inf
    for entry in hours:
        if entry.precip is None or not FIRST_START_HOUR <= entry.hour <= LAST_START_HOUR:
            continue
        score = hour_score(entry)
        if score < best_score:
            best, best_score = entry, score
    if best is None:
        return None
    return BestStartTime(
        hour=best.hour,
        temp_f=best.temp_f,
        precip=best.precip,
        score=best_score,
        duration_minutes=estimate_duration_minutes(record),
    )


__all__ = [
    "BestStartTime",
    "DailyWeather",
    "HourlyWeather",
    "OpenMeteoClient",
    "WeatherForecast",
    "daily_icon",
    "estimate_duration_minutes",
    "find_best_start_time",
    "parse_forecast",
]
