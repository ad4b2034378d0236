"""
Governance events.

The engine appends one event per successful mutation to an EventLog.
Indexers and UIs read the log by position or subscribe to new entries.
"""

import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Union

from ..logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProposalCreated:
    """Emitted when a proposal is appended to the store."""
    proposal_id: int
    proposer: str
    title: str
    timestamp: int = 0

    name = "ProposalCreated"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": self.name,
            "id": self.proposal_id,
            "proposer": self.proposer,
            "title": self.title,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class VoteCast:
    """Emitted for every accepted vote, zero-weight votes included."""
    proposal_id: int
    voter: str
    support: bool
    weight: int
    timestamp: int = 0

    name = "VoteCast"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": self.name,
            "proposalId": self.proposal_id,
            "voter": self.voter,
            "support": self.support,
            "weight": self.weight,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class ProposalExecuted:
    """Emitted once per proposal, after the execution effect succeeded."""
    proposal_id: int
    timestamp: int = 0

    name = "ProposalExecuted"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": self.name,
            "proposalId": self.proposal_id,
            "timestamp": self.timestamp,
        }


GovernanceEvent = Union[ProposalCreated, VoteCast, ProposalExecuted]
EventListener = Callable[[GovernanceEvent], None]


class EventLog:
    """Append-only, in-order record of governance events."""

    def __init__(self):
        self._events: List[GovernanceEvent] = []
        self._listeners: List[EventListener] = []
        self._lock = threading.Lock()

    def emit(self, event: GovernanceEvent) -> None:
        with self._lock:
            self._events.append(event)
            listeners = list(self._listeners)
        logger.debug(f"Event {event.name}: {event.to_dict()}")
        for listener in listeners:
            try:
                listener(event)
            except Exception:
                # State is already committed
                logger.exception(f"Event listener failed on {event.name}")

    def subscribe(self, listener: EventListener) -> Callable[[], None]:
        """Register *listener*; returns a callable that unsubscribes it."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def since(self, index: int = 0, name: Optional[str] = None) -> List[GovernanceEvent]:
        """Events at positions >= *index*, optionally filtered by event name."""
        with self._lock:
            events = self._events[max(index, 0):]
        if name is not None:
            events = [e for e in events if e.name == name]
        return events

    def last(self) -> Optional[GovernanceEvent]:
        with self._lock:
            return self._events[-1] if self._events else None

    def __len__(self) -> int:
        return len(self._events)

    def __repr__(self) -> str:
        return f"<EventLog events={len(self._events)} listeners={len(self._listeners)}>"
