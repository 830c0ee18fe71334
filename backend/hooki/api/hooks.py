"""Hook (post) endpoints. Every mutation is broadcast to all open sockets."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, status

from hooki.api.params import Origin, origin_params
from hooki.container import Container, get_container
from hooki.domain.geo import GeoPoint
from hooki.domain.hooks.schemas import (
	HookCreateRequest,
	HookResponse,
	LikeRequest,
	ReplyRequest,
	ReplyResponse,
)

router = APIRouter(prefix="/posts", tags=["hooks"])


@router.post("", response_model=HookResponse, status_code=status.HTTP_201_CREATED)
async def create_post(payload: HookCreateRequest, container: Container = Depends(get_container)) -> HookResponse:
	location = None
	if payload.location is not None:
		location = GeoPoint(latitude=payload.location.latitude, longitude=payload.location.longitude)
	hook = await container.hooks.create_post(
		payload.user_id,
		payload.content,
		location=location,
		venue_name=payload.venue_name,
	)
	return HookResponse.from_model(hook)


@router.get("", response_model=List[HookResponse])
async def list_posts(
	origin: Origin = Depends(origin_params),
	container: Container = Depends(get_container),
) -> List[HookResponse]:
	if origin.present:
		hooks = await container.hooks.list_nearby(origin.lat, origin.lon, origin.radius)
	else:
		hooks = await container.hooks.list_nearby()
	authors = await container.hooks.authors_for(hooks)
	return [HookResponse.from_model(hook, author=authors.get(hook.user_id), enrich=True) for hook in hooks]


@router.get("/{post_id}", response_model=HookResponse)
async def get_post(post_id: str, container: Container = Depends(get_container)) -> HookResponse:
	hook = await container.hooks.get_post(post_id)
	authors = await container.hooks.authors_for([hook])
	return HookResponse.from_model(hook, author=authors.get(hook.user_id), enrich=True)


@router.post("/{post_id}/like", response_model=HookResponse)
async def like_post(
	post_id: str,
	payload: LikeRequest,
	container: Container = Depends(get_container),
) -> HookResponse:
	return HookResponse.from_model(await container.hooks.like(post_id, payload.user_id))


@router.post("/{post_id}/reply", response_model=ReplyResponse, status_code=status.HTTP_201_CREATED)
async def reply_to_post(
	post_id: str,
	payload: ReplyRequest,
	container: Container = Depends(get_container),
) -> ReplyResponse:
	reply = await container.hooks.reply(post_id, payload.user_id, payload.content)
	return ReplyResponse.from_model(reply)
