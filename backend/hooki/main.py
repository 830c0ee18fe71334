"""FastAPI application entrypoint.

Serve with ``uvicorn hooki.main:socket_app``; the Socket.IO server wraps the
REST app so both share one port.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import socketio
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hooki.api import conversations, hooks, matches, ops, users
from hooki.api.errors import install_error_handlers
from hooki.container import get_container
from hooki.infra.redis import redis_client
from hooki.obs import init as obs_init
from hooki.realtime import dispatch
from hooki.realtime.sockets import HookiNamespace
from hooki.settings import settings

logger = logging.getLogger(__name__)

DEV_ORIGINS = [
	"http://localhost:3000",
	"http://127.0.0.1:3000",
	"http://localhost:8081",
	"http://127.0.0.1:8081",
	"http://localhost:19006",
]


@asynccontextmanager
async def lifespan(app: FastAPI):
	container = get_container()
	logger.info(
		"startup",
		extra={"backend": settings.store_backend, "environment": settings.environment, "commit": settings.git_commit},
	)
	try:
		yield
	finally:
		if settings.store_backend == "redis":
			await redis_client.aclose()
		logger.info("shutdown", extra={"open_connections": len(container.registry.open_connections())})


app = FastAPI(title="Hooki API", lifespan=lifespan)
install_error_handlers(app)

allow_origins = list(settings.cors_allow_origins)
if not allow_origins:
	allow_origins = DEV_ORIGINS if settings.is_dev() else []

# Starlette disallows wildcard '*' with allow_credentials=True.
if "*" in allow_origins:
	allow_origins = DEV_ORIGINS if settings.is_dev() else [origin for origin in allow_origins if origin != "*"]

app.add_middleware(
	CORSMiddleware,
	allow_origins=allow_origins,
	allow_credentials=True,
	allow_methods=["*"],
	allow_headers=["*"],
)
obs_init(app)

# Use the same allowed origins for Socket.IO as for the REST API
sio = socketio.AsyncServer(async_mode="asgi", cors_allowed_origins=allow_origins)
namespace = HookiNamespace(dispatch.NAMESPACE)
sio.register_namespace(namespace)
dispatch.set_namespace(namespace)
socket_app = socketio.ASGIApp(sio, other_asgi_app=app)

app.include_router(ops.router, tags=["ops"])
app.include_router(users.router, tags=["users"])
app.include_router(hooks.router, tags=["hooks"])
app.include_router(matches.router, tags=["matches"])
app.include_router(conversations.router, tags=["chat"])
