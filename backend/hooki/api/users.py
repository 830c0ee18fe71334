"""User profile, nearby-user and safety endpoints."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from hooki.api.params import Origin, origin_params
from hooki.container import Container, get_container
from hooki.domain.chat.schemas import ConversationSummary
from hooki.domain.users.schemas import (
	BlockRequest,
	ReportRequest,
	SuccessResponse,
	UserCreateRequest,
	UserResponse,
	UserUpdateRequest,
)

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(payload: UserCreateRequest, container: Container = Depends(get_container)) -> UserResponse:
	profile = await container.users.create_user(
		payload.id,
		email=payload.email,
		name=payload.name,
		avatar=payload.avatar,
	)
	return UserResponse.from_model(profile)


# Registered before /{user_id} so "nearby" is not taken for an id.
@router.get("/nearby", response_model=List[UserResponse])
async def nearby_users(
	origin: Origin = Depends(origin_params),
	user_id: Optional[str] = Query(default=None, alias="userId"),
	container: Container = Depends(get_container),
) -> List[UserResponse]:
	origin.require()
	profiles = await container.users.nearby_users(origin.lat, origin.lon, origin.radius, viewer_id=user_id)
	return [UserResponse.from_model(profile) for profile in profiles]


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: str, container: Container = Depends(get_container)) -> UserResponse:
	return UserResponse.from_model(await container.users.get_user(user_id))


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
	user_id: str,
	payload: UserUpdateRequest,
	container: Container = Depends(get_container),
) -> UserResponse:
	changes = payload.model_dump(exclude_unset=True)
	profile = await container.users.update_user(user_id, changes)
	return UserResponse.from_model(profile)


@router.post("/{user_id}/block", response_model=SuccessResponse)
async def block_user(
	user_id: str,
	payload: BlockRequest,
	container: Container = Depends(get_container),
) -> SuccessResponse:
	await container.users.block(user_id, payload.blocked_user_id)
	return SuccessResponse()


@router.post("/{user_id}/report", response_model=SuccessResponse)
async def report_user(
	user_id: str,
	payload: ReportRequest,
	container: Container = Depends(get_container),
) -> SuccessResponse:
	await container.users.report(user_id, payload.reported_user_id, payload.reason)
	return SuccessResponse()


@router.get("/{user_id}/conversations", response_model=List[ConversationSummary])
async def list_conversations(user_id: str, container: Container = Depends(get_container)) -> List[ConversationSummary]:
	conversations = await container.conversations.conversations_for(user_id)
	return [ConversationSummary.from_model(item, viewer_id=user_id) for item in conversations]
