"""
Presence tracking for the joined channel.

Two inputs feed the set:
- Snapshots (`user_list` frames) replace it wholesale.
- System notices are scanned for "joined"/"left"; the first whitespace-delimited
  token is taken as the acting username. This is a heuristic: usernames with
  spaces or differently phrased notices are not handled.
"""

import logging
from typing import Iterable, Iterator, Optional

logger = logging.getLogger(__name__)

JOINED = "joined"
LEFT = "left"


def parse_notice(text: str) -> Optional[tuple[str, str]]:
    """Return ("joined"|"left", username) for a join/leave notice, else None."""
    if JOINED in text:
        action = JOINED
    elif LEFT in text:
        action = LEFT
    else:
        return None
    tokens = text.split()
    if not tokens:
        return None
    return action, tokens[0]


class PresenceTracker:
    def __init__(self) -> None:
        self._members: set[str] = set()

    @property
    def members(self) -> frozenset[str]:
        return frozenset(self._members)

    def __contains__(self, name: object) -> bool:
        return name in self._members

    def __len__(self) -> int:
        return len(self._members)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._members))

    def apply_snapshot(self, names: Iterable[str]) -> None:
        self._members = set(names)

    def apply_join(self, name: str) -> None:
        self._members.add(name)

    def apply_leave(self, name: str) -> None:
        self._members.discard(name)

    def apply_notice(self, text: str) -> Optional[tuple[str, str]]:
        """Update the set from a free-text system notice.

        Returns the detected (action, username), or None if the notice is not
        a join/leave announcement.
        """
        parsed = parse_notice(text)
        if parsed is None:
            return None
        action, name = parsed
        if action == JOINED:
            self.apply_join(name)
        else:
            self.apply_leave(name)
        logger.debug("Presence %s: %s", action, name)
        return parsed

    def reset(self) -> None:
        self._members = set()
