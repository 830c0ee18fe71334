"""Domain-level exceptions shared by the realtime core."""

from __future__ import annotations


class HookiError(Exception):
	"""Base class for errors surfaced to REST and socket callers."""

	reason: str = "unknown"
	status_code: int = 400
	retryable: bool = False

	def __init__(self, reason: str | None = None) -> None:
		super().__init__(reason or self.reason)
		if reason:
			self.reason = reason


class NotFoundError(HookiError):
	reason = "not_found"
	status_code = 404


class AuthorizationError(HookiError):
	reason = "forbidden"
	status_code = 403


class ValidationError(HookiError):
	reason = "invalid"
	status_code = 422


class StoreUnavailableError(HookiError):
	"""The backing store rejected or could not complete a write or read."""

	reason = "store_unavailable"
	status_code = 503
	retryable = True


class TransientDeliveryError(HookiError):
	"""A push to a dead or closing connection failed. Never reaches the sender."""

	reason = "delivery_failed"
	status_code = 500

	def __init__(self, connection: str, event: str) -> None:
		super().__init__(self.reason)
		self.connection = connection
		self.event = event
