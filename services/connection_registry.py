"""
In-memory registry of live realtime connections.

One instance is owned by the app host and handed to the notifier and the
realtime gateway. State is lost on restart; clients re-authenticate.
"""

from typing import Dict, Iterator, List, Optional

from core.logging import get_logger
from core.security import Identity

logger = get_logger(__name__)


class ConnectionRegistry:
    """Maps Socket.IO session ids to the identity they authenticated as.

    A sid present with ``None`` is connected but not yet authenticated; only
    sids carrying an identity are visible to ``find_*`` lookups.
    """

    def __init__(self) -> None:
        # dicts keep insertion order, which is connection order
        self._connections: Dict[str, Optional[Identity]] = {}

    def open(self, sid: str) -> None:
        self._connections.setdefault(sid, None)

    def attach(self, sid: str, identity: Identity) -> bool:
        """Attach ``identity`` to an open connection.

        Returns False when ``sid`` is not open, e.g. it disconnected while an
        authenticate message was still queued.
        """
        if sid not in self._connections:
            return False
        previous = self._connections[sid]
        self._connections[sid] = identity
        if previous is not None and previous != identity:
            logger.info("Connection re-authenticated", sid=sid, previous_user_id=previous.user_id, user_id=identity.user_id)
        return True

    def identity_of(self, sid: str) -> Optional[Identity]:
        return self._connections.get(sid)

    def find_by_user_id(self, user_id: int) -> Optional[str]:
        """First live connection of ``user_id``, in connection order."""
        for sid, identity in self._connections.items():
            if identity is not None and identity.user_id == user_id:
                return sid
        return None

    def find_all_by_user_id(self, user_id: int) -> List[str]:
        return [
            sid for sid, identity in self._connections.items()
            if identity is not None and identity.user_id == user_id
        ]

    def remove(self, sid: str) -> Optional[Identity]:
        return self._connections.pop(sid, None)

    def authenticated(self) -> Iterator[str]:
        return (sid for sid, identity in self._connections.items() if identity is not None)

    def __contains__(self, sid: str) -> bool:
        return sid in self._connections

    def __len__(self) -> int:
        return len(self._connections)
