"""Health check helpers for liveness and readiness probes."""

from __future__ import annotations

import asyncio
import logging
from time import perf_counter
from typing import Any, Dict, Tuple

from hooki.infra.store import DocumentStore
from hooki.obs import metrics
from hooki.settings import settings

LOGGER = logging.getLogger(__name__)


async def _store_status(store: DocumentStore, timeout: float = 0.3) -> Dict[str, Any]:
	start = perf_counter()
	try:
		ok = await asyncio.wait_for(store.ping(), timeout=timeout)
	except Exception as exc:  # pragma: no cover - depends on runtime
		metrics.mark_store(False)
		LOGGER.warning("Store readiness check failed", exc_info=True)
		return {"ok": False, "error": str(exc) or exc.__class__.__name__}
	latency = perf_counter() - start
	metrics.mark_store(bool(ok))
	return {"ok": bool(ok), "latency_ms": round(latency * 1000, 2)}


async def liveness() -> Dict[str, Any]:
	return {"status": "ok", "message": "Hooki API is running"}


async def readiness(store: DocumentStore) -> Tuple[int, Dict[str, Any]]:
	store_state = await _store_status(store)
	status_code = 200 if store_state.get("ok") else 503
	return (
		status_code,
		{
			"status": "ok" if status_code == 200 else "degraded",
			"backend": settings.store_backend,
			"store": store_state,
		},
	)
