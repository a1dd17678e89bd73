"""Paper search via the arXiv API, reached through relay transports."""

from __future__ import annotations

import logging
import random
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from urllib.parse import quote, urlencode

from ..models import RawPaper, RecommendationContext
from .keywords import extract_keywords
from .transport import DEFAULT_PROXIES, TransportChain, build_transports

logger = logging.getLogger(__name__)

ARXIV_API = "https://export.arxiv.org/api/query"
NS = {"atom": "http://www.w3.org/2005/Atom", "arxiv": "http://arxiv.org/schemas/atom"}

RECENCY = "recency"
RELEVANCE = "relevance"

RECENCY_QUERY = 'all:"autonomous agent" OR all:"large language model" OR all:"multi-agent"'
RELEVANCE_BASE_QUERY = 'all:"autonomous agent" OR all:"large language model"'

_VERSION_RE = re.compile(r"v\d+$")


@dataclass
class SearchConfig:
    base_url: str = ARXIV_API
    page_size: int = 5
    relevance_window: int = 50
    recency_query: str = RECENCY_QUERY
    relevance_base_query: str = RELEVANCE_BASE_QUERY
    proxies: list[str] = field(default_factory=lambda: list(DEFAULT_PROXIES))
    direct: bool = False
    timeout: int = 30


def choose_strategy(context: RecommendationContext, rng=None) -> str:
    if not context.liked_titles:
        return RECENCY
    rng = rng or random
    return RELEVANCE if rng.random() > 0.5 else RECENCY


def build_params(strategy: str, cursor: int, context: RecommendationContext, cfg: SearchConfig) -> dict:
    keywords = extract_keywords(context.liked_titles) if strategy == RELEVANCE else ""

    if keywords:
        query = f"({cfg.relevance_base_query}) AND ({keywords})"
        sort_by = "relevance"
        # stay inside the top matches so repeated calls keep cycling through them
        start = cursor % cfg.relevance_window
    else:
        if strategy == RELEVANCE:
            logger.info("[arxiv] No usable keywords in liked titles, using recency query")
        query = cfg.recency_query
        sort_by = "submittedDate"
        start = cursor

    return {
        "search_query": query,
        "start": start,
        "max_results": cfg.page_size,
        "sortBy": sort_by,
        "sortOrder": "descending",
    }


def build_url(cfg: SearchConfig, params: dict) -> str:
    return f"{cfg.base_url}?{urlencode(params, quote_via=quote)}"


def _clean(text: str | None) -> str:
    return (text or "").replace("\n", " ").strip()


def _paper_id(id_url: str) -> str:
    # http://arxiv.org/abs/2301.00001v2 -> 2301.00001
    parts = id_url.strip().split("/abs/")
    raw_id = parts[1] if len(parts) > 1 else parts[0]
    return _VERSION_RE.sub("", raw_id)


def parse_feed(xml_text: str) -> list[RawPaper]:
    root = ET.fromstring(xml_text)
    papers: list[RawPaper] = []

    for entry in root.iter(f"{{{NS['atom']}}}entry"):
        published = entry.findtext("atom:published", "", NS) or ""
        authors = [
            (a.findtext("atom:name", "", NS) or "").strip() for a in entry.findall("atom:author", NS)
        ]
        papers.append(
            RawPaper(
                paper_id=_paper_id(entry.findtext("atom:id", "", NS) or ""),
                title=_clean(entry.findtext("atom:title", "", NS)),
                authors=authors,
                published=published.split("T")[0].strip(),
                summary=_clean(entry.findtext("atom:summary", "", NS)),
            )
        )

    return papers


def fetch_raw_papers(
    cursor: int,
    context: RecommendationContext,
    cfg: SearchConfig | None = None,
    rng=None,
    chain: TransportChain | None = None,
) -> list[RawPaper]:
    """Fetch one page of raw papers. Never raises; failures give an empty list."""
    cfg = cfg or SearchConfig()
    chain = chain or TransportChain(build_transports(cfg.proxies, cfg.timeout, cfg.direct))

    strategy = choose_strategy(context, rng)
    params = build_params(strategy, cursor, context, cfg)
    logger.info(
        f"[arxiv] Fetching strategy={strategy} start={params['start']} sortBy={params['sortBy']}"
    )

    text = chain.fetch(build_url(cfg, params))
    if text is None:
        return []

    try:
        papers = parse_feed(text)
    except ET.ParseError as e:
        logger.error(f"[arxiv] Could not parse feed: {e}")
        return []

    logger.info(f"[arxiv] Got {len(papers)} raw papers")
    return papers
