"""Haversine distance and the radius filter used for nearby posts and users.

Callers own the radius policy (hooks default to 1000 m, users to 500 m); this
module only answers "is it within r metres". The filter takes a list and
returns a list so a spatial index can replace the linear scan without touching
callers.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Mapping, Optional, Protocol, Tuple, TypeVar

from hooki.domain.errors import ValidationError

EARTH_RADIUS_M = 6371e3

T = TypeVar("T")
Coordinates = Tuple[float, float]
Locator = Callable[[Any], Optional[Coordinates]]


@dataclass(slots=True, frozen=True)
class GeoPoint:
	latitude: float
	longitude: float

	def to_dict(self) -> dict:
		return {"latitude": self.latitude, "longitude": self.longitude}

	@classmethod
	def from_mapping(cls, raw: Mapping[str, Any] | None) -> Optional["GeoPoint"]:
		if not raw:
			return None
		coords = _coords_from_mapping(raw)
		if coords is None:
			return None
		return cls(latitude=coords[0], longitude=coords[1])


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
	"""Great-circle distance in metres on a sphere of radius 6371 km."""
	phi1 = lat1 * math.pi / 180
	phi2 = lat2 * math.pi / 180
	delta_phi = (lat2 - lat1) * math.pi / 180
	delta_lambda = (lon2 - lon1) * math.pi / 180

	a = (
		math.sin(delta_phi / 2) * math.sin(delta_phi / 2)
		+ math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) * math.sin(delta_lambda / 2)
	)
	c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
	return EARTH_RADIUS_M * c


def _as_coordinate(value: Any) -> Optional[float]:
	if isinstance(value, bool) or value is None:
		return None
	try:
		number = float(value)
	except (TypeError, ValueError):
		return None
	return number if math.isfinite(number) else None


def _coords_from_mapping(raw: Mapping[str, Any]) -> Optional[Coordinates]:
	lat = _as_coordinate(raw.get("latitude", raw.get("lat")))
	lon = _as_coordinate(raw.get("longitude", raw.get("lon")))
	if lat is None or lon is None:
		return None
	return lat, lon


def locate_default(item: Any) -> Optional[Coordinates]:
	"""Resolve an item's stored location, or None when it has none."""
	if isinstance(item, GeoPoint):
		return item.latitude, item.longitude
	location = item.get("location") if isinstance(item, Mapping) else getattr(item, "location", None)
	if location is None:
		return None
	if isinstance(location, GeoPoint):
		return location.latitude, location.longitude
	if isinstance(location, Mapping):
		return _coords_from_mapping(location)
	lat = _as_coordinate(getattr(location, "latitude", None))
	lon = _as_coordinate(getattr(location, "longitude", None))
	if lat is None or lon is None:
		return None
	return lat, lon


def filter_within_radius(
	items: Iterable[T],
	origin_lat: float,
	origin_lon: float,
	radius_m: float,
	*,
	locate: Locator = locate_default,
) -> List[T]:
	"""Keep items whose location is at most `radius_m` metres from the origin."""
	if radius_m is None or not math.isfinite(radius_m) or radius_m < 0:
		raise ValidationError("invalid_radius")
	kept: List[T] = []
	for item in items:
		coords = locate(item)
		if coords is None:
			continue
		if haversine_distance(origin_lat, origin_lon, coords[0], coords[1]) <= radius_m:
			kept.append(item)
	return kept


class GeoFilter(Protocol):
	def within(
		self,
		items: Iterable[T],
		origin_lat: float,
		origin_lon: float,
		radius_m: float,
		*,
		locate: Locator = locate_default,
	) -> List[T]:
		...


class LinearScanFilter:
	"""Default `GeoFilter`: a full scan, fine for hundreds to low thousands of items."""

	def within(
		self,
		items: Iterable[T],
		origin_lat: float,
		origin_lon: float,
		radius_m: float,
		*,
		locate: Locator = locate_default,
	) -> List[T]:
		return filter_within_radius(items, origin_lat, origin_lon, radius_m, locate=locate)
