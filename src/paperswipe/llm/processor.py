"""Batched LLM enrichment via Ollama: Chinese abstract, TL;DR and tags."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from json import JSONDecodeError
from typing import Any

import ollama as ollama_client

from ..models import Paper, RawPaper

logger = logging.getLogger(__name__)

SYSTEM_MSG = (
    "You are an expert academic translator for AI researchers. "
    "Respond ONLY with valid JSON. Do not use Markdown formatting."
)

ENRICH_PROMPT = """I will provide a list of papers (id, title, abstract).

Your task for EACH paper:
1. Translate the abstract into professional, fluent Chinese (Mainland China academic style).
2. Write a "TL;DR": one punchy English sentence summarizing the core innovation.
3. Generate 3 short tags (e.g. "LLM", "RL", "Vision", "Planning").

Input data (JSON):
{payload}

Return a pure JSON array with one object per paper, keeping the input id:
[
  {{
    "id": "match_input_id",
    "abstract_zh": "中文翻译...",
    "tldr": "English summary...",
    "tags": ["Tag1", "Tag2", "Tag3"]
  }}
]"""

PENDING_ABSTRACT_ZH = "翻译生成中... (Translating...)"
PENDING_TAGS = ["New Paper"]

BUSY_ABSTRACT_ZH = "暂无翻译 (AI服务繁忙)"
BUSY_TLDR = "New ArXiv Paper"
BUSY_TAGS = ["ArXiv"]

MAX_ABSTRACT_CHARS = 3000

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$")


@dataclass
class LLMConfig:
    model: str = "qwen2.5:7b"
    base_url: str = "http://localhost:11434"
    timeout: int = 180
    temperature: float = 0.3


def _truncate_abstract(abstract: str) -> str:
    if len(abstract) <= MAX_ABSTRACT_CHARS:
        return abstract
    return abstract[:MAX_ABSTRACT_CHARS] + "..."


def build_prompt(raw_papers: list[RawPaper]) -> str:
    payload = [
        {"id": p.paper_id, "title": p.title, "summary": _truncate_abstract(p.summary)}
        for p in raw_papers
    ]
    return ENRICH_PROMPT.format(payload=json.dumps(payload, ensure_ascii=False))


def _call_llm(config: LLMConfig, prompt: str) -> str:
    client = ollama_client.Client(host=config.base_url, timeout=config.timeout)
    response = client.chat(
        model=config.model,
        messages=[
            {"role": "system", "content": SYSTEM_MSG},
            {"role": "user", "content": prompt},
        ],
        format="json",
        options={"temperature": config.temperature},
    )
    return (response["message"]["content"] or "").strip()


def _extract_first_json_array(content: str) -> list[Any] | None:
    decoder = json.JSONDecoder()
    for index, char in enumerate(content):
        if char != "[":
            continue
        try:
            candidate, _ = decoder.raw_decode(content[index:])
        except JSONDecodeError:
            continue
        if isinstance(candidate, list):
            return candidate
    return None


def parse_enrichment(content: str) -> list[dict]:
    """Pull the list of enrichment entries out of model output.

    Accepts a bare array, an object wrapping one (``{"papers": [...]}``) or an
    array buried in prose. Returns [] when nothing usable is found.
    """
    text = _FENCE_RE.sub("", content.strip())
    try:
        parsed: Any = json.loads(text)
    except JSONDecodeError:
        parsed = _extract_first_json_array(text)

    if isinstance(parsed, dict):
        if "id" in parsed:
            parsed = [parsed]
        else:
            parsed = next((v for v in parsed.values() if isinstance(v, list)), None)

    if not isinstance(parsed, list):
        logger.warning("[LLM] Could not parse enrichment JSON, using fallbacks")
        return []

    return [e for e in parsed if isinstance(e, dict)]


def _as_tags(value: Any) -> list[str] | None:
    if not isinstance(value, list):
        return None
    tags = [str(t).strip() for t in value if isinstance(t, (str, int, float)) and str(t).strip()]
    return tags or None


def _as_text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def merge_enrichment(raw_papers: list[RawPaper], entries: list[dict]) -> list[Paper]:
    by_id: dict[str, dict] = {}
    for entry in entries:
        key = str(entry.get("id", "")).strip()
        if key and key not in by_id:
            by_id[key] = entry

    merged = []
    for raw in raw_papers:
        enriched = by_id.get(raw.paper_id, {})
        merged.append(
            Paper(
                paper_id=raw.paper_id,
                title=raw.title,
                authors=list(raw.authors),
                year=raw.published,
                abstract_en=raw.summary,
                abstract_zh=_as_text(enriched.get("abstract_zh")) or PENDING_ABSTRACT_ZH,
                tldr=_as_text(enriched.get("tldr")) or raw.title,
                tags=_as_tags(enriched.get("tags")) or list(PENDING_TAGS),
            )
        )

    missing = sum(1 for raw in raw_papers if raw.paper_id not in by_id)
    if missing:
        logger.warning(f"[LLM] {missing}/{len(raw_papers)} papers missing from enrichment output")
    return merged


def busy_fallback(raw_papers: list[RawPaper]) -> list[Paper]:
    return [
        Paper(
            paper_id=raw.paper_id,
            title=raw.title,
            authors=list(raw.authors),
            year=raw.published,
            abstract_en=raw.summary,
            abstract_zh=BUSY_ABSTRACT_ZH,
            tldr=BUSY_TLDR,
            tags=list(BUSY_TAGS),
        )
        for raw in raw_papers
    ]


def enrich_papers(raw_papers: list[RawPaper], config: LLMConfig | None = None) -> list[Paper]:
    """Translate and tag a batch. Always returns one Paper per raw paper, in order."""
    if not raw_papers:
        return []

    config = config or LLMConfig()
    logger.info(f"[LLM] Enriching {len(raw_papers)} papers with {config.model}")

    try:
        content = _call_llm(config, build_prompt(raw_papers))
    except Exception as e:
        logger.error(f"[LLM] Enrichment error: {e}")
        return busy_fallback(raw_papers)

    return merge_enrichment(raw_papers, parse_enrichment(content))
