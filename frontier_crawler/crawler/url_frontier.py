"""
URL Frontier implementation shared by all crawl workers.
Holds the pending work queue and the set of visited addresses.
"""

import asyncio
import logging
import random
from collections import Counter, deque
from enum import Enum
from typing import Deque, Dict, FrozenSet, Iterable, Optional, Set


class PopPolicy(Enum):
    """Which end of the pending queue the next address is taken from."""
    FRONT = 'front'
    BACK = 'back'
    RANDOM = 'random'


class URLFrontier:
    """
    Manages addresses waiting to be crawled and those already fetched.

    Every mutation happens under a single lock that is held only for the
    duration of that mutation, so fetches from different workers proceed
    in parallel. An address in ``visited`` is never put back on the queue.
    """

    def __init__(self, pop_policy: PopPolicy = PopPolicy.RANDOM,
                 dedupe_pending: bool = True, rng: Optional[random.Random] = None):
        self.pop_policy = pop_policy
        self.dedupe_pending = dedupe_pending
        self.logger = logging.getLogger(__name__)

        self._rng = rng or random.Random()
        self._lock = asyncio.Lock()
        self._closed = False

        self.pending: Deque[str] = deque()
        self.visited: Set[str] = set()
        # Everything ever queued or visited
        self.seen: Set[str] = set()
        # Taken but not yet marked visited
        self.in_flight: Counter = Counter()

    async def seed(self, url: str):
        """Put the starting address on the queue."""
        async with self._lock:
            self.pending.append(url)
            self.seen.add(url)
        self.logger.info(f"Seeded frontier with {url}")

    async def try_take_next(self) -> Optional[str]:
        """
        Remove and return one pending address according to the pop policy.
        Returns None if the queue is empty; never waits for work.
        """
        async with self._lock:
            if not self.pending:
                return None

            if self.pop_policy is PopPolicy.FRONT:
                url = self.pending.popleft()
            elif self.pop_policy is PopPolicy.BACK:
                url = self.pending.pop()
            elif self._rng.random() < 0.5:
                url = self.pending.popleft()
            else:
                url = self.pending.pop()

            self.in_flight[url] += 1

        self.logger.debug(f"Retrieved URL from frontier: {url}")
        return url

    def _offer_locked(self, url: str) -> bool:
        if url in self.visited:
            return False
        if self.dedupe_pending and url in self.seen:
            return False
        self.pending.append(url)
        self.seen.add(url)
        return True

    async def offer(self, url: str) -> bool:
        """
        Queue a discovered address unless it was already visited (or, with
        dedupe_pending, already queued). Returns True if it was queued.
        """
        async with self._lock:
            added = self._offer_locked(url)
        if added:
            self.logger.debug(f"Added URL to frontier: {url}")
        return added

    async def offer_many(self, urls: Iterable[str]) -> int:
        """Offer several addresses in one step. Returns count of queued URLs."""
        added_count = 0
        async with self._lock:
            for url in urls:
                if self._offer_locked(url):
                    added_count += 1
        return added_count

    async def mark_visited(self, url: str):
        """Record that an address has been fetched. Idempotent."""
        async with self._lock:
            self.visited.add(url)
            self.seen.add(url)
            if self.in_flight[url] > 0:
                self.in_flight[url] -= 1
            if self.in_flight[url] == 0:
                del self.in_flight[url]
        self.logger.debug(f"Marked URL as visited: {url}")

    def size_visited(self) -> int:
        return len(self.visited)

    def size_pending(self) -> int:
        return len(self.pending)

    def is_exhausted(self) -> bool:
        """True when nothing is queued and no worker holds an address."""
        return not self.pending and not self.in_flight

    def should_stop(self, max_links: int) -> bool:
        """The condition every worker and the status reporter stop on."""
        return self._closed or self.size_visited() > max_links or self.is_exhausted()

    def close(self):
        """Ask all workers to stop at their next poll."""
        if not self._closed:
            self._closed = True
            self.logger.info("Frontier closed")

    def visited_snapshot(self) -> FrozenSet[str]:
        """Immutable copy of the visited set, the result of a crawl run."""
        return frozenset(self.visited)

    def get_stats(self) -> Dict[str, int]:
        """Get frontier statistics."""
        return {
            'total_queued': len(self.pending),
            'total_visited': len(self.visited),
            'total_seen': len(self.seen),
            'in_flight': sum(self.in_flight.values()),
        }
