"""
Conversation timeline with optimistic-send reconciliation.

Local sends are shown immediately as temporary entries. When the server echoes
a message back from the local user it is matched against pending temporaries by
content, not by position: the server may interleave other participants'
messages, so echo order need not match send order. The earliest pending entry
with equal content wins. Two identical pending messages are therefore confirmed
FIFO; a client-generated correlation id would remove that ambiguity but the
wire protocol has none.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from wschat.models.entry import ChatEntry


def _new_id() -> str:
    return uuid.uuid4().hex


class MessageReconciler:
    def __init__(self) -> None:
        self._entries: list[ChatEntry] = []
        self._has_welcome_message = True

    @property
    def entries(self) -> tuple[ChatEntry, ...]:
        return tuple(self._entries)

    @property
    def pending(self) -> list[ChatEntry]:
        return [e for e in self._entries if e.temporary]

    @property
    def has_welcome_message(self) -> bool:
        """True until the first entry lands in an empty conversation."""
        return self._has_welcome_message

    def __len__(self) -> int:
        return len(self._entries)

    def _append(self, entry: ChatEntry) -> ChatEntry:
        self._entries.append(entry)
        self._has_welcome_message = False
        return entry

    def append_optimistic(self, username: str, content: str) -> str:
        entry = self._append(ChatEntry(
            id=_new_id(), kind="message", username=username,
            content=content, own=True, temporary=True,
        ))
        return entry.id

    def _find_pending(self, content: str) -> Optional[int]:
        for i, entry in enumerate(self._entries):
            if entry.temporary and entry.content == content:
                return i
        return None

    def reconcile_or_append(self, username: str, content: str, is_self: bool) -> ChatEntry:
        """Confirm a pending own entry in place, or append a new one."""
        if is_self:
            index = self._find_pending(content)
            if index is not None:
                confirmed = self._entries[index].model_copy(update={
                    "username": username,
                    "timestamp": datetime.now(timezone.utc),
                    "temporary": False,
                })
                self._entries[index] = confirmed
                return confirmed
        return self._append(ChatEntry(
            id=_new_id(), kind="message", username=username,
            content=content, own=is_self,
        ))

    def append_system(self, text: str) -> ChatEntry:
        return self._append(ChatEntry(id=_new_id(), kind="system", content=text))

    def reset(self) -> None:
        self._entries = []
        self._has_welcome_message = True
