"""Chat domain exports."""

from .matches import MatchService
from .models import Conversation, ConversationKey, Match, Message, conversation_id_for
from .router import MessageRouter
from .store import ConversationStore

__all__ = [
	"Conversation",
	"ConversationKey",
	"ConversationStore",
	"Match",
	"MatchService",
	"Message",
	"MessageRouter",
	"conversation_id_for",
]
