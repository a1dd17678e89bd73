from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path

import yaml

from .feed.buffer import PREFETCH_THRESHOLD
from .llm.processor import LLMConfig
from .search.searcher import SearchConfig

DEFAULT_CONFIG_PATH = "config.yaml"


@dataclass
class FeedConfig:
    watermark: int = PREFETCH_THRESHOLD
    focus: str = "AI Agents"


def load_config(path: str = DEFAULT_CONFIG_PATH) -> dict:
    """Read the YAML config. The default path is optional; an explicit one is not."""
    if path == DEFAULT_CONFIG_PATH and not Path(path).exists():
        return {}
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _pick(cls, section: dict | None) -> dict:
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in (section or {}).items() if k in names}


def search_config(cfg: dict) -> SearchConfig:
    return SearchConfig(**_pick(SearchConfig, cfg.get("search")))


def llm_config(cfg: dict) -> LLMConfig:
    llm = LLMConfig(**_pick(LLMConfig, cfg.get("llm")))
    base_url = os.environ.get("OLLAMA_BASE_URL")
    if base_url:
        llm.base_url = base_url
    return llm


def feed_config(cfg: dict) -> FeedConfig:
    return FeedConfig(**_pick(FeedConfig, cfg.get("feed")))
