"""Strategy Types - Transcript.

Ordered, append-only log of the messages exchanged in a session.
Only the conversation engine appends; rendering code observes.

Invariant: at most the most recently appended assistant message carries
pending actions. Appending an assistant message retires older ones, and
``clear_actions()`` drops every pending choice once the user acts, so
stale buttons become unselectable.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Iterator, Optional

from .enums import ActionStyle, MessageKind, Speaker

logger = logging.getLogger(__name__)

MessageListener = Callable[["Message"], None]


@dataclass(frozen=True)
class Action:
    """A selectable decision offered to the user.

    Attributes:
        label: Button text
        value: Value passed back to ``submit_choice``
        style: Visual weight hint
        rationale: Optional "why this" explanation
    """
    label: str
    value: str
    style: ActionStyle = ActionStyle.PRIMARY
    rationale: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "label": self.label,
            "value": self.value,
            "style": self.style.value,
            "rationale": self.rationale,
        }


@dataclass
class Message:
    """One transcript entry.

    Attributes:
        id: Unique, increasing in creation order
        speaker: Who produced the message
        kind: Payload kind
        text: Display text (always present)
        payload: Structured result for non-text kinds
        pending_actions: Choices awaiting the user
        timestamp: When the message was created
    """
    id: int
    speaker: Speaker
    kind: MessageKind
    text: str
    payload: Optional[Any] = None
    pending_actions: list[Action] = field(default_factory=list)
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def is_awaiting_choice(self) -> bool:
        return bool(self.pending_actions)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        payload = self.payload
        if isinstance(payload, list):
            payload = [item.to_dict() if hasattr(item, "to_dict") else item for item in payload]
        elif hasattr(payload, "to_dict"):
            payload = payload.to_dict()
        return {
            "id": self.id,
            "speaker": self.speaker.value,
            "kind": self.kind.value,
            "text": self.text,
            "payload": payload,
            "pending_actions": [action.to_dict() for action in self.pending_actions],
            "timestamp": self.timestamp.isoformat(),
        }


class TranscriptLog:
    """Append-only message log with listener support."""

    def __init__(self) -> None:
        self._messages: list[Message] = []
        self._ids = itertools.count(1)
        self._listeners: list[MessageListener] = []

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(list(self._messages))

    def __getitem__(self, index: int) -> Message:
        return self._messages[index]

    @property
    def messages(self) -> tuple[Message, ...]:
        """Read-only view of all messages."""
        return tuple(self._messages)

    @property
    def last(self) -> Optional[Message]:
        return self._messages[-1] if self._messages else None

    def subscribe(self, listener: MessageListener) -> Callable[[], None]:
        """Register a callback for every appended message.

        Returns:
            A function that removes the listener again.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def append(
        self,
        speaker: Speaker,
        text: str,
        kind: MessageKind = MessageKind.PLAIN_TEXT,
        payload: Optional[Any] = None,
        actions: Optional[list[Action]] = None,
    ) -> Message:
        """Append a message; any assistant message retires older actions."""
        if actions and speaker is not Speaker.ASSISTANT:
            raise ValueError("only assistant messages can offer actions")
        if speaker is Speaker.ASSISTANT:
            self.clear_actions()

        message = Message(
            id=next(self._ids),
            speaker=speaker,
            kind=kind,
            text=text,
            payload=payload,
            pending_actions=list(actions or []),
        )
        self._messages.append(message)
        logger.debug(f"Transcript +{message.id} {speaker.value}/{kind.value}")

        for listener in list(self._listeners):
            listener(message)
        return message

    def pending_actions(self) -> list[Action]:
        """Actions currently offered (empty if none)."""
        for message in reversed(self._messages):
            if message.pending_actions:
                return list(message.pending_actions)
        return []

    def clear_actions(self) -> list[Action]:
        """Clear pending actions on every message.

        Returns:
            The actions that were pending, so a failed turn can re-offer them.
        """
        cleared = self.pending_actions()
        for message in self._messages:
            message.pending_actions = []
        return cleared

    def to_list(self) -> list[dict]:
        return [message.to_dict() for message in self._messages]


__all__ = ["Action", "Message", "MessageListener", "TranscriptLog"]
