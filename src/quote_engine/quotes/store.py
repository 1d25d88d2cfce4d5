"""
Quote Store - thread-safe in-process persistence for quotes.

Snapshots are deep-copied on the way in and out, so callers never share
mutable state with the store. Transitions go through update_if_status(),
which applies a change only when the stored status still matches.
"""
import logging
import threading
from copy import deepcopy
from datetime import datetime
from typing import Callable, Iterable, Optional

from .models import Quote, QuoteStatus

logger = logging.getLogger(__name__)


class QuoteStore:
    """In-memory quote repository keyed by quote number."""

    def __init__(self):
        self._quotes: dict[str, Quote] = {}
        self._sequence = 0
        self._lock = threading.Lock()

    def next_sequence(self) -> int:
        """Reserve the next quote sequence number."""
        with self._lock:
            self._sequence += 1
            return self._sequence

    def add(self, quote: Quote) -> Quote:
        with self._lock:
            if quote.quote_number in self._quotes:
                raise ValueError(f"Quote '{quote.quote_number}' already exists")
            self._quotes[quote.quote_number] = deepcopy(quote)
        logger.info("Stored quote %s for client %s", quote.quote_number, quote.client_id)
        return deepcopy(quote)

    def get(self, quote_number: str, client_id: Optional[str] = None) -> Optional[Quote]:
        """Load a quote; with client_id, only if that client owns it."""
        with self._lock:
            quote = self._quotes.get(quote_number)
            if quote is None or (client_id is not None and quote.client_id != client_id):
                return None
            return deepcopy(quote)

    def list_for_client(self, client_id: str) -> list[Quote]:
        """Quotes owned by a client, newest first."""
        with self._lock:
            quotes = [deepcopy(q) for q in self._quotes.values() if q.client_id == client_id]
        return sorted(quotes, key=lambda q: q.created_at, reverse=True)

    def update_if_status(
        self,
        quote_number: str,
        client_id: Optional[str],
        expected: Iterable[QuoteStatus],
        apply: Callable[[Quote], None],
        valid_at: Optional[datetime] = None
    ) -> Optional[Quote]:
        """
        Atomically apply `apply` to a stored quote.

        The change lands only if the quote exists, belongs to client_id
        (when given), has a stored status in `expected` and, when valid_at
        is given, has not passed valid_until. Returns the updated quote or None.
        """
        expected = frozenset(expected)
        with self._lock:
            stored = self._quotes.get(quote_number)
            if stored is None:
                return None
            if client_id is not None and stored.client_id != client_id:
                return None
            if stored.status not in expected:
                return None
            if valid_at is not None and stored.is_expired(valid_at):
                return None
            updated = deepcopy(stored)
            apply(updated)
            self._quotes[quote_number] = updated
            return deepcopy(updated)

    def __len__(self) -> int:
        with self._lock:
            return len(self._quotes)
