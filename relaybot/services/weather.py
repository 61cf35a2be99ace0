"""
Weather lookups: city search, then weather by the first match's coordinates.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any

from relaybot.gateway import ErrorKind, GatewayError, RequestExecutor, RequestSpec

logger = logging.getLogger(__name__)

CITY_CACHE_TTL = 3600.0
WEATHER_CACHE_TTL = 600.0


@dataclass(frozen=True)
class City:
    name: str
    country: str
    lat: float | None
    lon: float | None
    state: str | None = None

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lon is not None


@dataclass(frozen=True)
class WeatherReport:
    query: str
    city: str = "Unknown"
    country: str = "Unknown"
    temperature: Any = "N/A"
    condition: Any = "N/A"
    humidity: Any = "N/A"
    wind_speed: Any = "N/A"
    pressure: Any = "N/A"
    visibility: Any = "N/A"
    forecast: list = field(default_factory=list)
    error: GatewayError | None = None

    @property
    def success(self) -> bool:
        return self.error is None


def _coordinate(value: Any, low: float, high: float) -> float | None:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if low <= number <= high else None


def parse_cities(data: Any) -> list[City]:
    items: list = []
    if isinstance(data, list):
        items = data
    elif isinstance(data, dict):
        for key in ("result", "cities"):
            if isinstance(data.get(key), list):
                items = data[key]
                break

    cities = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            continue
        cities.append(
            City(
                name=item.get("name") or item.get("city") or f"City {index + 1}",
                country=item.get("country") or "Unknown",
                state=item.get("state") or item.get("region"),
                lat=_coordinate(item.get("lat", item.get("latitude")), -90, 90),
                lon=_coordinate(item.get("lon", item.get("longitude")), -180, 180),
            )
        )
    return cities


class WeatherService:
    service = "weather"

    def __init__(self, executor: RequestExecutor, locale: str = "en") -> None:
        self._executor = executor
        self._locale = locale

    def _url(self, endpoint: str) -> str:
        return self._executor.registry.endpoint_url(self.service, endpoint)

    async def search_city(self, name: str) -> tuple[list[City], GatewayError | None]:
        name = (name or "").strip()
        if not name:
            return [], GatewayError(ErrorKind.VALIDATION, "City name cannot be empty")

        response = await self._executor.execute(
            RequestSpec(
                url=self._url("search_city"),
                service=self.service,
                params={"q": name, "locale": self._locale},
                cache=True,
                cache_ttl=CITY_CACHE_TTL,
            )
        )
        if not response.success:
            return [], response.error
        return parse_cities(response.data), None

    async def weather_by_coordinates(
        self, lat: float, lon: float, query: str = ""
    ) -> WeatherReport:
        if _coordinate(lat, -90, 90) is None or _coordinate(lon, -180, 180) is None:
            return WeatherReport(
                query=query,
                error=GatewayError(ErrorKind.VALIDATION, "Invalid coordinates provided"),
            )

        response = await self._executor.execute(
            RequestSpec(
                url=self._url("all_weather"),
                service=self.service,
                params={"lat": lat, "lon": lon, "locale": self._locale, "key": "weather"},
                cache=True,
                cache_ttl=WEATHER_CACHE_TTL,
            )
        )
        if not response.success:
            return WeatherReport(query=query, error=response.error)

        data = response.data
        if not isinstance(data, dict):
            return WeatherReport(
                query=query,
                error=GatewayError(ErrorKind.DECODE, "Invalid response from weather service"),
            )
        weather = data.get("result") or data.get("weather") or data
        if not isinstance(weather, dict):
            weather = data

        return WeatherReport(
            query=query,
            city=weather.get("city") or weather.get("location") or query or "Unknown",
            country=weather.get("country") or "Unknown",
            temperature=weather.get("temperature") or weather.get("temp") or "N/A",
            condition=weather.get("condition") or weather.get("weather") or "N/A",
            humidity=weather.get("humidity") or "N/A",
            wind_speed=weather.get("windSpeed") or weather.get("wind") or "N/A",
            pressure=weather.get("pressure") or "N/A",
            visibility=weather.get("visibility") or "N/A",
            forecast=weather.get("forecast") or [],
        )

    async def weather_by_city(self, name: str) -> WeatherReport:
        name = (name or "").strip()
        cities, error = await self.search_city(name)
        if error is not None:
            return WeatherReport(query=name, error=error)

        city = next((c for c in cities if c.has_coordinates), None)
        if city is None:
            return WeatherReport(
                query=name,
                error=GatewayError(ErrorKind.VALIDATION, f'City "{name}" not found'),
            )

        report = await self.weather_by_coordinates(city.lat, city.lon, query=name)
        if report.success and report.city in ("Unknown", name):
            # Weather payloads rarely name the city; keep the matched one.
            report = replace(report, city=city.name, country=city.country)
        return report
