# roster_dashboard/core/chat.py
import itertools
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Union
import logging

from roster_dashboard.api.models import ChatMessage, ChatRole, SuggestedAction
from roster_dashboard.core.notifications import NotificationCenter
from roster_dashboard.core.tracking import RequestTracker, run_blocking
from roster_dashboard.data.client import FetchError, RosterServiceClient
from roster_dashboard.utils.constants import CHAT_FALLBACK_REPLY, CHAT_SEED_GREETING, ERROR_MESSAGES

logger = logging.getLogger(__name__)


ACTION_PREFILLS = {
    SuggestedAction.ANALYZE_DISRUPTION: "Please analyze the current disruption situation and provide recommendations.",
    SuggestedAction.VIEW_ROSTER: "Show me the current roster status and any conflicts.",
    SuggestedAction.CHECK_COMPLIANCE: "Check DGCA compliance for the current roster assignments.",
}

SEED_ACTIONS = [
    SuggestedAction.ANALYZE_DISRUPTION,
    SuggestedAction.VIEW_ROSTER,
    SuggestedAction.CHECK_COMPLIANCE,
]


class UnknownActionError(ValueError):
    def __init__(self, action: str):
        self.action = action
        super().__init__(f"Unknown suggested action: {action}")


def parse_suggested_action(action: Union[str, SuggestedAction]) -> SuggestedAction:
    try:
        return SuggestedAction(action)
    except ValueError:
        raise UnknownActionError(str(action)) from None


def parse_suggested_actions(raw_actions: Iterable[str]) -> List[SuggestedAction]:
    """Keep the actions the dashboard knows how to prefill, drop the rest"""
    actions = []
    for raw in raw_actions:
        try:
            actions.append(parse_suggested_action(raw))
        except UnknownActionError:
            logger.warning(f"Dropping unknown suggested action from server: {raw!r}")
    return actions


class DisruptionChat:
    """
    Conversation with the disruption assistant.

    Messages are append-only. At most one request is outstanding: while
    ``pending`` is set further submissions are ignored. Clearing the chat
    starts a new conversation and any reply still in flight for the old
    one is dropped.
    """

    def __init__(
        self,
        client: RosterServiceClient,
        notifications: Optional[NotificationCenter] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.client = client
        self.notifications = notifications or NotificationCenter()
        self._clock = clock
        self._conversation = RequestTracker("chat")
        self._ids = itertools.count(1)
        self.messages: List[ChatMessage] = []
        self.pending = False
        self.draft = ""
        self.reset()

    def _message(self, role: ChatRole, content: str, actions: Iterable[SuggestedAction] = ()) -> ChatMessage:
        return ChatMessage(
            id=str(next(self._ids)),
            role=role,
            content=content,
            timestamp=self._clock(),
            suggested_actions=list(actions),
        )

    def reset(self):
        """Back to the single seed greeting"""
        self._conversation.invalidate()
        self._ids = itertools.count(1)
        self.pending = False
        self.messages = [self._message(ChatRole.ASSISTANT, CHAT_SEED_GREETING, SEED_ACTIONS)]

    async def submit(self, text: Optional[str] = None) -> bool:
        """
        Send a user turn; ``text`` defaults to the staged draft.
        Returns False when the submission was ignored.
        """
        if text is None:
            text = self.draft
        if not text or not text.strip() or self.pending:
            return False

        self.messages.append(self._message(ChatRole.USER, text))
        self.draft = ""
        self.pending = True
        conversation = self._conversation.generation

        try:
            reply = await run_blocking(self.client.disruption_chat, text, {})
        except FetchError as e:
            logger.error(f"Error sending chat message: {e}")
            if not self._conversation.is_current(conversation):
                return True
            self.notifications.error(ERROR_MESSAGES["CHAT_ERROR"])
            self.messages.append(self._message(ChatRole.ASSISTANT, CHAT_FALLBACK_REPLY))
            self.pending = False
            return True

        if not self._conversation.is_current(conversation):
            return True

        actions = parse_suggested_actions(reply.suggested_actions)
        self.messages.append(self._message(ChatRole.ASSISTANT, reply.response, actions))
        self.pending = False
        return True

    def select_suggested_action(self, action: Union[str, SuggestedAction]) -> str:
        """Stage the canned query for an action in the input box, without sending it"""
        self.draft = ACTION_PREFILLS[parse_suggested_action(action)]
        return self.draft

    def snapshot(self) -> Dict[str, Any]:
        return {
            "messages": [message.model_dump(mode="json") for message in self.messages],
            "pending": self.pending,
            "draft": self.draft,
        }
