"""Match creation and lookup. A match is the conversation between two users."""

from __future__ import annotations

import logging
from typing import List, Tuple

from hooki.infra.locks import KeyedLock
from hooki.infra.store import DocumentStore
from hooki.obs import metrics as obs_metrics
from hooki.realtime.dispatch import Dispatcher

from .models import ConversationKey, Match
from .schemas import MatchResponse
from .store import ConversationStore

logger = logging.getLogger(__name__)

MATCHES = "matches"
NEW_MATCH_EVENT = "new_match"


class MatchService:
	def __init__(self, store: DocumentStore, conversations: ConversationStore, dispatcher: Dispatcher) -> None:
		self._store = store
		self._conversations = conversations
		self._dispatcher = dispatcher
		self._locks = KeyedLock()

	async def create_match(self, user_one: str, user_two: str) -> Tuple[Match, bool]:
		"""Return the match for the pair and whether this call created it.

		`new_match` is pushed to both users only on creation.
		"""
		key = ConversationKey.from_participants(user_one, user_two)
		async with self._locks(key.conversation_id):
			raw = await self._store.get(MATCHES, key.conversation_id)
			if raw:
				return Match.from_dict(raw), False
			await self._conversations.ensure(key)
			match = Match(id=key.conversation_id, user_ids=(str(user_one).strip(), str(user_two).strip()))
			await self._store.put(MATCHES, match.id, match.to_dict())
		obs_metrics.inc_match_created()
		logger.info("match_created", extra={"match_id": match.id})
		await self._dispatcher.to_users(key.participants(), NEW_MATCH_EVENT, MatchResponse.from_model(match).to_wire())
		return match, True

	async def matches_for(self, user_id: str) -> List[Match]:
		matches = [Match.from_dict(row) for row in await self._store.query(MATCHES)]
		matches = [match for match in matches if match.involves(user_id)]
		matches.sort(key=lambda item: (item.created_at, item.id))
		return matches
