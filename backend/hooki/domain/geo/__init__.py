"""Great-circle distance and radius filtering."""

from .distance import (
	EARTH_RADIUS_M,
	GeoFilter,
	GeoPoint,
	LinearScanFilter,
	filter_within_radius,
	haversine_distance,
	locate_default,
)

__all__ = [
	"EARTH_RADIUS_M",
	"GeoFilter",
	"GeoPoint",
	"LinearScanFilter",
	"filter_within_radius",
	"haversine_distance",
	"locate_default",
]
