"""Central registry for Prometheus metrics used across the backend."""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram, Summary

REQUEST_COUNTER = Counter(
	"hooki_http_requests_total",
	"Total HTTP requests processed",
	["route", "method", "status"],
)

REQUEST_LATENCY = Histogram(
	"hooki_http_request_duration_seconds",
	"HTTP request latency in seconds",
	["route", "method"],
	buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0),
)

SOCKET_CLIENTS = Gauge(
	"hooki_socketio_clients",
	"Active Socket.IO clients per namespace",
	["namespace"],
)

SOCKET_ANNOUNCED_USERS = Gauge(
	"hooki_socketio_announced_users",
	"Distinct users with at least one announced connection",
)

SOCKET_EVENTS = Counter(
	"hooki_socketio_events_total",
	"Socket.IO events emitted per namespace",
	["namespace", "event"],
)

DELIVERY_FAILURES = Counter(
	"hooki_delivery_failures_total",
	"Realtime pushes dropped because the connection failed",
	["event"],
)

CHAT_SEND = Counter(
	"hooki_chat_send_total",
	"Chat messages accepted by the router",
)

CHAT_DUPLICATES = Counter(
	"hooki_chat_duplicate_total",
	"Chat sends resolved to an already stored message via client_msg_id",
)

CHAT_DELIVERED = Counter(
	"hooki_chat_delivered_total",
	"Chat message pushes delivered to live connections",
)

CHAT_READ_UPDATES = Counter(
	"hooki_chat_read_updates_total",
	"Messages flipped to read",
)

MATCHES_CREATED = Counter(
	"hooki_matches_created_total",
	"Matches created",
)

HOOKS_CREATED = Counter(
	"hooki_hooks_created_total",
	"Hooks (posts) created",
)

HOOK_LIKES = Counter(
	"hooki_hook_likes_total",
	"Hook like attempts",
	["result"],
)

HOOK_REPLIES = Counter(
	"hooki_hook_replies_total",
	"Hook replies appended",
)

PROXIMITY_QUERIES = Counter(
	"hooki_proximity_queries_total",
	"Radius filter queries",
	["kind"],
)

PROXIMITY_RESULTS = Summary(
	"hooki_proximity_results",
	"Radius filter result sizes",
)

STORE_UP = Gauge("hooki_store_up", "Document store availability (1=up,0=down)")
STORE_ERRORS = Counter(
	"hooki_store_errors_total",
	"Document store operations that failed",
	["op"],
)


def observe_request(route: str, method: str, status: int, elapsed_seconds: float) -> None:
	REQUEST_COUNTER.labels(route=route, method=method, status=str(status)).inc()
	REQUEST_LATENCY.labels(route=route, method=method).observe(elapsed_seconds)


def socket_connected(namespace: str) -> None:
	SOCKET_CLIENTS.labels(namespace=namespace).inc()


def socket_disconnected(namespace: str) -> None:
	SOCKET_CLIENTS.labels(namespace=namespace).dec()


def socket_event(namespace: str, event: str) -> None:
	SOCKET_EVENTS.labels(namespace=namespace, event=event).inc()


def set_announced_users(count: int) -> None:
	SOCKET_ANNOUNCED_USERS.set(float(count))


def inc_delivery_failure(event: str) -> None:
	DELIVERY_FAILURES.labels(event=event).inc()


def inc_chat_send() -> None:
	CHAT_SEND.inc()


def inc_chat_duplicate() -> None:
	CHAT_DUPLICATES.inc()


def inc_chat_delivered(count: int = 1) -> None:
	if count > 0:
		CHAT_DELIVERED.inc(count)


def inc_chat_read(count: int) -> None:
	if count > 0:
		CHAT_READ_UPDATES.inc(count)


def inc_match_created() -> None:
	MATCHES_CREATED.inc()


def inc_hook_created() -> None:
	HOOKS_CREATED.inc()


def inc_hook_like(result: str) -> None:
	HOOK_LIKES.labels(result=result).inc()


def inc_hook_reply() -> None:
	HOOK_REPLIES.inc()


def inc_proximity_query(kind: str, results: int) -> None:
	PROXIMITY_QUERIES.labels(kind=kind).inc()
	PROXIMITY_RESULTS.observe(results)


def mark_store(ok: bool) -> None:
	STORE_UP.set(1 if ok else 0)


def inc_store_error(op: str) -> None:
	STORE_ERRORS.labels(op=op).inc()
