"""
Processed-message registry for webhook idempotency.

WhatsApp retries deliveries it thinks failed, so the same message id can
arrive more than once. We remember recently seen (provider, message_id) pairs
in a bounded in-memory LRU; the oldest ids are forgotten first.
"""

from collections import OrderedDict
from datetime import UTC, datetime


class ProcessedMessageCache:
    def __init__(self, max_size: int = 1000):
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.max_size = max_size
        self._seen: OrderedDict[tuple[str, str], datetime] = OrderedDict()

    def mark_processed(self, provider: str, message_id: str) -> datetime | None:
        """
        Record a message id.

        Returns:
            None if the id is new, otherwise when it was first processed
        """
        key = (provider, message_id)
        existing = self._seen.get(key)
        if existing is not None:
            self._seen.move_to_end(key)
            return existing

        self._seen[key] = datetime.now(UTC)
        while len(self._seen) > self.max_size:
            self._seen.popitem(last=False)
        return None

    def __contains__(self, key: object) -> bool:
        return key in self._seen

    def __len__(self) -> int:
        return len(self._seen)
