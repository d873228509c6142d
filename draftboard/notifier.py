"""Per-draft broadcast of live draft events.

A DraftNotifier is created once per process. Viewers subscribe to a draft
and receive events through a bounded mailbox; delivery is best effort, so a
full mailbox drops the event for that subscriber instead of blocking the
publisher.

Each draft gets its own channel with its own lock. The registry lock only
covers creating and removing channels, so unrelated drafts never wait on
each other while events are delivered.
"""

import logging
import queue
import threading
from dataclasses import dataclass, field
from typing import Any, Optional

from .constants import DEFAULT_MAILBOX_SIZE

logger = logging.getLogger('draftboard.notifier')


@dataclass(frozen=True)
class DraftEvent:
    """Event pushed to viewers of a draft."""
    type: str
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {'type': self.type, 'data': dict(self.data)}


class Subscription:
    """A viewer's registration on one draft's channel."""

    def __init__(self, notifier: 'DraftNotifier', draft_id: int, mailbox_size: int):
        self.draft_id = draft_id
        self._notifier = notifier
        self._mailbox: queue.Queue[DraftEvent] = queue.Queue(maxsize=mailbox_size)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def offer(self, event: DraftEvent) -> bool:
        """Put an event in the mailbox without blocking. Returns False if dropped."""
        if self._closed:
            return False
        try:
            self._mailbox.put_nowait(event)
        except queue.Full:
            return False
        return True

    def get(self, timeout: Optional[float] = None) -> Optional[DraftEvent]:
        """
        Wait for the next event.

        Args:
            timeout: Seconds to wait (None waits forever, 0 polls)

        Returns:
            The next event, or None on timeout
        """
        try:
            if timeout == 0:
                return self._mailbox.get_nowait()
            return self._mailbox.get(timeout=timeout)
        except queue.Empty:
            return None

    def drain(self) -> list[DraftEvent]:
        """Remove and return every event currently queued."""
        events = []
        while True:
            try:
                events.append(self._mailbox.get_nowait())
            except queue.Empty:
                return events

    def pending(self) -> int:
        return self._mailbox.qsize()

    def close(self) -> None:
        """Deregister from the notifier and release the mailbox."""
        self._notifier.unsubscribe(self)

    def __enter__(self) -> 'Subscription':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class _DraftChannel:
    """Subscribers of a single draft."""

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.subscribers: set[Subscription] = set()


class DraftNotifier:
    """Registry of per-draft broadcast channels."""

    def __init__(self, mailbox_size: int = DEFAULT_MAILBOX_SIZE):
        if mailbox_size < 1:
            raise ValueError(f'mailbox_size must be at least 1, got {mailbox_size}')
        self.mailbox_size = mailbox_size
        self._channels: dict[int, _DraftChannel] = {}
        self._registry_lock = threading.Lock()

    def subscribe(self, draft_id: int) -> Subscription:
        """Register a new viewer of a draft, creating its channel if needed."""
        subscription = Subscription(self, draft_id, self.mailbox_size)
        with self._registry_lock:
            channel = self._channels.get(draft_id)
            if channel is None:
                channel = _DraftChannel()
                self._channels[draft_id] = channel
            with channel.lock:
                channel.subscribers.add(subscription)
                count = len(channel.subscribers)
        logger.debug(f'Subscriber added to draft {draft_id} ({count} total)')
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        """Deregister a viewer; the channel is torn down when it empties."""
        if subscription.closed:
            return
        draft_id = subscription.draft_id
        with self._registry_lock:
            channel = self._channels.get(draft_id)
            if channel is not None:
                with channel.lock:
                    channel.subscribers.discard(subscription)
                    empty = not channel.subscribers
                if empty:
                    del self._channels[draft_id]
                    logger.debug(f'Channel for draft {draft_id} closed')
        subscription._closed = True
        subscription.drain()

    def publish(self, draft_id: int, event: DraftEvent) -> int:
        """
        Deliver an event to every current subscriber of a draft.

        Never blocks: a subscriber whose mailbox is full misses the event.

        Returns:
            Number of subscribers the event was delivered to
        """
        with self._registry_lock:
            channel = self._channels.get(draft_id)
        if channel is None:
            return 0

        with channel.lock:
            subscribers = list(channel.subscribers)

        delivered = 0
        for subscription in subscribers:
            if subscription.offer(event):
                delivered += 1
            else:
                logger.debug(f'Dropped {event.type} for a slow subscriber of draft {draft_id}')
        return delivered

    def subscriber_count(self, draft_id: int) -> int:
        with self._registry_lock:
            channel = self._channels.get(draft_id)
        if channel is None:
            return 0
        with channel.lock:
            return len(channel.subscribers)

    def active_drafts(self) -> list[int]:
        """Draft ids that currently have at least one subscriber."""
        with self._registry_lock:
            return sorted(self._channels)

    def close_draft(self, draft_id: int) -> None:
        """Drop every subscriber of a draft (e.g. when the draft is deleted)."""
        with self._registry_lock:
            channel = self._channels.pop(draft_id, None)
        if channel is None:
            return
        with channel.lock:
            subscribers = list(channel.subscribers)
            channel.subscribers.clear()
        for subscription in subscribers:
            subscription._closed = True
            subscription.drain()
