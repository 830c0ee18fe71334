"""Conversation history, REST send and read receipts."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from hooki.container import Container, get_container
from hooki.domain.chat.schemas import (
	MarkReadRequest,
	MarkReadResponse,
	MessageListResponse,
	MessageResponse,
	SendMessageRequest,
)
from hooki.domain.chat.router import MESSAGES_READ_EVENT

router = APIRouter(prefix="/conversations", tags=["chat"])


@router.get("/{conversation_id}/messages", response_model=MessageListResponse)
async def list_messages(conversation_id: str, container: Container = Depends(get_container)) -> MessageListResponse:
	messages = await container.conversations.list(conversation_id)
	return MessageListResponse(
		conversation_id=conversation_id,
		items=[MessageResponse.from_model(message) for message in messages],
	)


@router.post("/{conversation_id}/messages", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def send_message(
	conversation_id: str,
	payload: SendMessageRequest,
	container: Container = Depends(get_container),
) -> MessageResponse:
	# Same path as the socket event: live recipients get `new_message` too.
	message = await container.router.route(
		conversation_id,
		payload.sender_id,
		payload.content,
		client_msg_id=payload.client_msg_id,
	)
	return MessageResponse.from_model(message)


@router.post("/{conversation_id}/read", response_model=MarkReadResponse)
async def mark_read(
	conversation_id: str,
	payload: MarkReadRequest,
	container: Container = Depends(get_container),
) -> MarkReadResponse:
	updated = await container.conversations.mark_read(conversation_id, payload.reader_id)
	result = MarkReadResponse(conversation_id=conversation_id, reader_id=payload.reader_id, updated=updated)
	if updated:
		participants = await container.conversations.participants(conversation_id)
		await container.dispatcher.to_users(participants, MESSAGES_READ_EVENT, result.to_wire())
	return result
