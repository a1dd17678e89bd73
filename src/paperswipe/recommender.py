"""Fetch-then-enrich pipeline: the one entry point the feed buffer talks to."""

from __future__ import annotations

import logging

from .llm.processor import LLMConfig, enrich_papers, merge_enrichment
from .models import Paper, RecommendationContext
from .search.searcher import SearchConfig, fetch_raw_papers

logger = logging.getLogger(__name__)


def fetch_recommendations(
    context: RecommendationContext,
    cursor: int = 0,
    search_config: SearchConfig | None = None,
    llm_config: LLMConfig | None = None,
    rng=None,
    enrich: bool = True,
) -> list[Paper]:
    raw_papers = fetch_raw_papers(cursor, context, search_config, rng=rng)
    if not raw_papers:
        return []

    if enrich:
        return enrich_papers(raw_papers, llm_config)

    logger.info("[LLM] Skipped (--no-llm)")
    return merge_enrichment(raw_papers, [])


class Recommender:
    """Binds configuration so the feed only has to pass context and cursor."""

    def __init__(
        self,
        search_config: SearchConfig | None = None,
        llm_config: LLMConfig | None = None,
        rng=None,
        enrich: bool = True,
    ):
        self.search_config = search_config or SearchConfig()
        self.llm_config = llm_config or LLMConfig()
        self.rng = rng
        self.enrich = enrich

    def __call__(self, context: RecommendationContext, cursor: int) -> list[Paper]:
        return fetch_recommendations(
            context,
            cursor,
            search_config=self.search_config,
            llm_config=self.llm_config,
            rng=self.rng,
            enrich=self.enrich,
        )
