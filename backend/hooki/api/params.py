"""Shared query parameters for proximity endpoints."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Query

from hooki.domain.errors import ValidationError


@dataclass(slots=True)
class Origin:
	lat: Optional[float]
	lon: Optional[float]
	radius: Optional[float]

	@property
	def present(self) -> bool:
		return self.lat is not None and self.lon is not None

	def require(self) -> "Origin":
		if not self.present:
			raise ValidationError("origin_required")
		return self


def origin_params(
	lat: Optional[float] = Query(default=None, ge=-90.0, le=90.0),
	lon: Optional[float] = Query(default=None, ge=-180.0, le=180.0),
	latitude: Optional[float] = Query(default=None, ge=-90.0, le=90.0, include_in_schema=False),
	longitude: Optional[float] = Query(default=None, ge=-180.0, le=180.0, include_in_schema=False),
	radius: Optional[float] = Query(default=None, ge=0.0),
) -> Origin:
	"""`latitude`/`longitude` are the older spelling still sent by mobile builds.

	A lone coordinate is rejected rather than silently ignored.
	"""
	origin = Origin(
		lat=lat if lat is not None else latitude,
		lon=lon if lon is not None else longitude,
		radius=radius,
	)
	if (origin.lat is None) != (origin.lon is None):
		raise ValidationError("origin_required")
	return origin
