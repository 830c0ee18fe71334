"""Shared pydantic base for the camelCase wire format used by the mobile client."""

from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
	"""Accepts both snake_case and camelCase input; serialises as camelCase."""

	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

	def to_wire(self) -> Dict[str, Any]:
		return self.model_dump(mode="json", by_alias=True)
