"""Match endpoints. A match opens the conversation between its two users."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Response, status

from hooki.container import Container, get_container
from hooki.domain.chat.schemas import MatchCreateRequest, MatchResponse

router = APIRouter(prefix="/matches", tags=["matches"])


@router.post("", response_model=MatchResponse, status_code=status.HTTP_201_CREATED)
async def create_match(
	payload: MatchCreateRequest,
	response: Response,
	container: Container = Depends(get_container),
) -> MatchResponse:
	match, created = await container.matches.create_match(payload.user_id1, payload.user_id2)
	if not created:
		response.status_code = status.HTTP_200_OK
	return MatchResponse.from_model(match)


@router.get("/{user_id}", response_model=List[MatchResponse])
async def list_matches(user_id: str, container: Container = Depends(get_container)) -> List[MatchResponse]:
	return [MatchResponse.from_model(match) for match in await container.matches.matches_for(user_id)]
