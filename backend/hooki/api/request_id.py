"""Request id lookup for endpoints and error handlers.

The observability middleware stores the id on `request.state` and binds it into
the logging context; either source is used, in that order.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Request

from hooki.obs import logging as obs_logging


def get_request_id(request: Optional[Request] = None, default: str = "unknown") -> str:
	if request is not None:
		rid = getattr(request.state, "request_id", None)
		if rid:
			return rid
	return obs_logging.current_request_id() or default
