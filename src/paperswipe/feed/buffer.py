"""Client-side card buffer with low-watermark prefetching.

The buffer is driven from a single thread. ``BufferState.fetching`` is the only
guard: it is raised before the fetcher is called and dropped in ``finally``, so
any trigger arriving while a fetch runs is ignored rather than queued.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

from ..models import Paper, RecommendationContext, SwipeDirection

logger = logging.getLogger(__name__)

PREFETCH_THRESHOLD = 4

Fetcher = Callable[[RecommendationContext, int], list[Paper]]


@dataclass
class BufferState:
    papers: list[Paper] = field(default_factory=list)
    liked: list[Paper] = field(default_factory=list)
    cursor: int = 0
    fetching: bool = False
    loading: bool = False
    dismissed_ids: set[str] = field(default_factory=set)

    def known_ids(self) -> set[str]:
        ids = {p.paper_id for p in self.papers}
        ids.update(p.paper_id for p in self.liked)
        ids.update(self.dismissed_ids)
        return ids


class FeedBuffer:
    def __init__(
        self,
        fetch: Fetcher,
        watermark: int = PREFETCH_THRESHOLD,
        focus: str = "AI Agents",
        state: BufferState | None = None,
    ):
        self.fetch = fetch
        self.watermark = watermark
        self.focus = focus
        self.state = state or BufferState()

    @property
    def current(self) -> Paper | None:
        return self.state.papers[0] if self.state.papers else None

    @property
    def exhausted(self) -> bool:
        return not self.state.papers and not self.state.fetching

    def context(self, liked: list[Paper] | None = None) -> RecommendationContext:
        liked = self.state.liked if liked is None else liked
        return RecommendationContext(
            liked_titles=[p.title for p in liked],
            disliked_titles=[],
            current_focus=self.focus,
        )

    def start(self) -> int:
        added = self.load_more([], initial=True)
        return added + self.check_watermark()

    def load_more(self, liked: list[Paper], initial: bool = False) -> int:
        """Fetch one batch and append the unseen papers. Returns how many were added."""
        state = self.state
        if state.fetching:
            logger.debug("[feed] Fetch already in flight, skipping")
            return 0

        state.fetching = True
        if initial:
            state.loading = True

        try:
            logger.info(f"[feed] Fetching more papers... start index: {state.cursor}")
            batch = self.fetch(self.context(liked), state.cursor)
            if not batch:
                return 0

            state.cursor += len(batch)

            known = state.known_ids()
            known.update(p.paper_id for p in liked)
            added = []
            for paper in batch:
                if paper.paper_id in known:
                    continue
                known.add(paper.paper_id)
                added.append(paper)

            if not added:
                logger.info("[feed] No unique papers in this batch, waiting for the next trigger")
            state.papers.extend(added)
            return len(added)
        except Exception:
            logger.exception("[feed] Fetch failed")
            return 0
        finally:
            state.loading = False
            state.fetching = False

    def check_watermark(self) -> int:
        """Top the buffer up while it sits under the watermark.

        Keeps going only while fetches actually grow the buffer; a batch that
        dedups to nothing ends the cycle and the next swipe retries.
        """
        state = self.state
        total = 0
        while 0 < len(state.papers) < self.watermark and not state.fetching:
            logger.info(f"[feed] Buffer low ({len(state.papers)}), prefetching...")
            added = self.load_more(list(state.liked))
            if not added:
                break
            total += added
        return total

    def swipe(self, direction: SwipeDirection) -> Paper | None:
        state = self.state
        if not state.papers:
            return None

        paper = state.papers.pop(0)
        if direction == SwipeDirection.RIGHT:
            state.liked.append(paper)
        else:
            state.dismissed_ids.add(paper.paper_id)

        self.check_watermark()
        return paper

    def reload(self) -> int:
        state = self.state
        if state.papers or state.fetching:
            return 0
        added = self.load_more(list(state.liked), initial=True)
        return added + self.check_watermark()
